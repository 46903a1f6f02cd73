"""Database engine, request-scoped sessions and startup seeding"""

import logging
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from boleto_gateway.config import Settings, settings
from boleto_gateway.infrastructure.database.models import Base, BillingConfiguration
from boleto_gateway.infrastructure.database.repositories import BillingConfigurationRepository

# Pooled engine shared by every request; connections recycled hourly
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    pool_size=10,
    max_overflow=10,
    pool_recycle=3600,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(
    bind: Engine | None = None,
    session_factory: sessionmaker | None = None,
    app_settings: Settings | None = None,
) -> BillingConfiguration:
    """
    Create missing tables and make sure the billing configuration exists.

    Called once at process start; returns the active configuration.
    """
    bind = bind or engine
    session_factory = session_factory or SessionLocal
    app_settings = app_settings or settings

    Base.metadata.create_all(bind=bind)
    db = session_factory()
    try:
        config = BillingConfigurationRepository(db).seed_default(app_settings)
        logging.info(
            "Billing configuration ready",
            extra={"configuracao_id": str(config.id), "carteira": config.carteira},
        )
        return config
    finally:
        db.close()
