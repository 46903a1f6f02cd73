"""Pytest fixtures for testing"""

import random
import pytest
from datetime import date, timedelta
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from boleto_gateway.api.dependencies import get_bank_gateway
from boleto_gateway.api.main import create_app
from boleto_gateway.config import Settings
from boleto_gateway.infrastructure.clients.bank import BankGateway
from boleto_gateway.infrastructure.clients.simulator import SimulatedTransport
from boleto_gateway.infrastructure.database.models import Base, BillingConfiguration, Payer
from boleto_gateway.infrastructure.database.repositories import BillingConfigurationRepository, PayerRepository
from boleto_gateway.infrastructure.database.session import get_db
from boleto_gateway.services.lifecycle import BoletoLifecycleService


# Test database
TEST_DATABASE_URL = "sqlite:///./test_boleto_gateway.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def other_session(db: Session) -> Generator[Session, None, None]:
    """Second connection to the same database, acting as a concurrent request"""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def billing_config(db: Session) -> BillingConfiguration:
    """Seeded active billing configuration"""
    return BillingConfigurationRepository(db).seed_default(Settings())


@pytest.fixture
def payer(db: Session) -> Payer:
    """CPF payer with a full address"""
    payer = PayerRepository(db).create(
        nome="Maria Oliveira",
        documento="12345678909",
        tipo_documento="1",
        email="maria@example.com",
        logradouro="Rua das Flores",
        numero="100",
        complemento="Apto 12",
        bairro="Centro",
        cidade="São Paulo",
        uf="SP",
        cep="01310100",
    )
    db.commit()
    return payer


@pytest.fixture
def gateway() -> BankGateway:
    """Gateway over the simulator with a fixed seed"""
    return BankGateway(SimulatedTransport(random.Random(42)))


@pytest.fixture
def service(db: Session, gateway: BankGateway, billing_config: BillingConfiguration) -> BoletoLifecycleService:
    return BoletoLifecycleService(db, gateway, request_id="test-request")


@pytest.fixture
def due_date() -> date:
    return date.today() + timedelta(days=10)


@pytest.fixture
def client(db: Session, gateway: BankGateway) -> TestClient:
    """Create FastAPI test client with test database and simulated bank"""
    app = create_app(run_startup=False)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_bank_gateway] = lambda: gateway
    return TestClient(app)
