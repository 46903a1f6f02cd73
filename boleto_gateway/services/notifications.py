"""Inbound bank notifications (webhooks)"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from boleto_gateway.domain.exceptions import DomainException
from boleto_gateway.domain.lifecycle import BoletoStatus
from boleto_gateway.infrastructure.database.models import InboundNotification
from boleto_gateway.infrastructure.database.repositories import BoletoRepository, NotificationRepository
from boleto_gateway.services.lifecycle import SETTLEMENT_EVENT, BoletoLifecycleService

UNKNOWN_EVENT = "desconhecido"


def _amount(value: Any) -> Optional[Decimal]:
    if value in (None, ""):
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


class NotificationSink:
    """Records bank events and forwards liquidations to the lifecycle service"""

    def __init__(self, db: Session, lifecycle: Optional[BoletoLifecycleService] = None):
        self.db = db
        self.lifecycle = lifecycle
        self.notifications = NotificationRepository(db)
        self.boletos = BoletoRepository(db)

    def receive(self, payload: Dict[str, Any]) -> InboundNotification:
        """
        Append an inbound event to the log.

        Events for unknown boletos are kept with no boleto reference. A
        liquidation for a PENDING boleto also settles it.
        """
        tipo_evento = str(payload.get("tipoEvento") or UNKNOWN_EVENT)
        nosso_numero = payload.get("nossoNumero")
        nosso_numero = str(nosso_numero) if nosso_numero not in (None, "") else None

        boleto = self.boletos.get_by_nosso_numero(nosso_numero) if nosso_numero else None
        if nosso_numero and not boleto:
            logging.warning(
                "Notification for unknown boleto",
                extra={"nosso_numero": nosso_numero, "tipo_evento": tipo_evento},
            )

        notification = self.notifications.append(tipo_evento, nosso_numero if boleto else None, payload)
        self.db.commit()
        self.db.refresh(notification)

        if (
            tipo_evento == SETTLEMENT_EVENT
            and boleto
            and self.lifecycle
            and boleto.status_codigo == BoletoStatus.PENDING.value
        ):
            try:
                self.lifecycle.apply_settlement_notification(
                    boleto.nosso_numero,
                    valor_pago=_amount(payload.get("valorPago")),
                    data_pagamento=_timestamp(payload.get("dataPagamento") or payload.get("data")),
                )
            except DomainException as e:
                # the event stays logged; the bank will report the final status on inquiry
                logging.error(
                    f"Could not apply liquidation: {e}",
                    extra={"nosso_numero": boleto.nosso_numero},
                )

        return notification

    def recent(self, limit: int = 50) -> List[InboundNotification]:
        return self.notifications.list_recent(limit)
