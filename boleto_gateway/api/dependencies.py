"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from boleto_gateway.config import Settings, settings
from boleto_gateway.infrastructure.clients.bank import BankGateway, BankTransport, RemoteTransport
from boleto_gateway.infrastructure.clients.simulator import SimulatedTransport
from boleto_gateway.infrastructure.database.session import get_db
from boleto_gateway.services.lifecycle import BoletoLifecycleService
from boleto_gateway.services.notifications import NotificationSink


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def build_transport(app_settings: Settings) -> BankTransport:
    """Pick real or simulated bank access once, from MOCK_BRADESCO"""
    if app_settings.mock_bradesco:
        return SimulatedTransport(agencia=app_settings.billing_agencia, conta=app_settings.billing_conta)
    return RemoteTransport(
        base_url=app_settings.bradesco_api_base,
        token=app_settings.bradesco_token,
        timeout=app_settings.http_timeout_seconds,
    )


@lru_cache
def get_bank_gateway() -> BankGateway:
    """Provide the process-wide Bradesco gateway"""
    return BankGateway(build_transport(settings))


def get_lifecycle_service(
    request: Request,
    db: Session = Depends(get_db),
    gateway: BankGateway = Depends(get_bank_gateway),
) -> BoletoLifecycleService:
    """Provide a request-scoped lifecycle service"""
    return BoletoLifecycleService(db, gateway, request_id=get_request_id(request))


def get_notification_sink(
    db: Session = Depends(get_db),
    lifecycle: BoletoLifecycleService = Depends(get_lifecycle_service),
) -> NotificationSink:
    """Provide the inbound notification sink"""
    return NotificationSink(db, lifecycle)
