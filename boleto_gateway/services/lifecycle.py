"""Boleto lifecycle orchestration: issue, inquire, amend, write off, settle"""

import logging
import time
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from boleto_gateway.domain.exceptions import (
    ConcurrentModificationError,
    DomainException,
    InvalidRequestError,
    NotFoundError,
    PersistenceError,
)
from boleto_gateway.domain.lifecycle import BoletoStatus, ensure_transition
from boleto_gateway.domain.models import Acknowledgement, InquiryResult, IssuedBoleto
from boleto_gateway.domain.money import quantize_major
from boleto_gateway.domain.payloads import (
    DEFAULT_ESPECIE,
    build_amendment_payload,
    build_inquiry_payload,
    build_registration_payload,
    build_write_off_payload,
)
from boleto_gateway.infrastructure.clients.bank import BankGateway
from boleto_gateway.infrastructure.database.models import Boleto
from boleto_gateway.infrastructure.database.repositories import (
    BillingConfigurationRepository,
    BoletoRepository,
    NotificationRepository,
    PayerRepository,
)
from boleto_gateway.infrastructure.observability.logging import log_lifecycle_event
from boleto_gateway.infrastructure.observability.metrics import record_lifecycle

SETTLEMENT_EVENT = "liquidacao"
BENEFICIARY_REQUEST = "20"


class BoletoLifecycleService:
    """
    Applies lifecycle intents to boletos.

    Every mutating operation runs read -> validate -> bank call -> commit.
    The commit is a compare-and-swap on the boleto's version and status, so a
    boleto changed by a concurrent request is rejected instead of overwritten.
    Nothing is written when the bank call fails, and nothing is retried.
    """

    def __init__(self, db: Session, gateway: BankGateway, request_id: Optional[str] = None):
        self.db = db
        self.gateway = gateway
        self.request_id = request_id
        self.configs = BillingConfigurationRepository(db)
        self.payers = PayerRepository(db)
        self.boletos = BoletoRepository(db)
        self.notifications = NotificationRepository(db)

    def _finish(self, operation: str, nosso_numero: Optional[str], outcome: str, start: float) -> None:
        record_lifecycle(operation, outcome)
        log_lifecycle_event(
            operation,
            nosso_numero,
            outcome,
            (time.time() - start) * 1000,
            request_id=self.request_id,
        )

    def _fail(self, operation: str, nosso_numero: Optional[str], error: DomainException, start: float) -> None:
        self.db.rollback()
        logging.warning(
            f"Boleto {operation} failed: {error}",
            extra={"request_id": self.request_id, "nosso_numero": nosso_numero},
        )
        self._finish(operation, nosso_numero, type(error).__name__, start)

    def _load(self, nosso_numero: str) -> Boleto:
        boleto = self.boletos.get_by_nosso_numero(nosso_numero)
        if not boleto:
            raise NotFoundError(f"Boleto {nosso_numero} not found")
        return boleto

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise PersistenceError(f"Registry rejected write: {e.orig}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Registry write failed: {e}") from e

    def _transition(self, boleto: Boleto, target: BoletoStatus, **values) -> None:
        """Compare-and-swap `boleto` into `target`, then commit"""
        current = ensure_transition(boleto.status_codigo, target)
        swapped = self.boletos.apply_transition(
            boleto.nosso_numero,
            expected_version=boleto.version,
            expected_status=current,
            status_codigo=target.value,
            status_descricao=target.descricao,
            **values,
        )
        if not swapped:
            self.db.rollback()
            raise ConcurrentModificationError(
                f"Boleto {boleto.nosso_numero} was modified by another request"
            )
        self._commit()
        self.db.refresh(boleto)

    async def issue(
        self,
        cliente_id: uuid.UUID,
        seu_numero: str,
        valor: Decimal,
        data_vencimento: date,
        especie: Optional[str] = None,
        today: Optional[date] = None,
    ) -> IssuedBoleto:
        """
        Register a boleto at the bank and persist it as PENDING.

        Raises:
            InvalidRequestError: No active billing configuration, unknown payer or a face value the barcode cannot carry
            GatewayError: Bank call failed (nothing persisted)
            PersistenceError: Registry rejected the new boleto
        """
        start = time.time()
        today = today or date.today()
        try:
            config = self.configs.get_active()
            if not config:
                raise InvalidRequestError("Billing configuration not found")

            payer = self.payers.get(cliente_id)
            if not payer:
                raise InvalidRequestError(f"Payer {cliente_id} not found")

            especie = especie or DEFAULT_ESPECIE
            payload = build_registration_payload(
                config, payer, seu_numero, valor, data_vencimento, especie=especie, today=today
            )
            registration = await self.gateway.register(payload)

            try:
                boleto = self.boletos.create(
                    configuracao_id=config.id,
                    cliente_id=payer.id,
                    nosso_numero=registration.nosso_numero,
                    seu_numero=seu_numero,
                    valor_nominal=quantize_major(valor),
                    data_emissao=today,
                    data_vencimento=data_vencimento,
                    especie_documento=especie,
                    linha_digitavel=registration.linha_digitavel,
                    codigo_barras=registration.codigo_barras,
                )
            except IntegrityError as e:
                self.db.rollback()
                raise PersistenceError(
                    f"Registry rejected boleto {registration.nosso_numero}: {e.orig}"
                ) from e
            self._commit()
            self.db.refresh(boleto)

        except DomainException as e:
            self._fail("issue", None, e, start)
            raise

        self._finish("issue", boleto.nosso_numero, "success", start)
        return IssuedBoleto(boleto=boleto, registration=registration)

    async def inquire(self, nosso_numero: str) -> InquiryResult:
        """
        Ask the bank for the boleto's current status.

        The answer is advisory: local state is not modified.
        """
        start = time.time()
        try:
            boleto = self._load(nosso_numero)
            payload = build_inquiry_payload(boleto.configuracao, boleto.nosso_numero)
            result = await self.gateway.inquire(payload)
        except DomainException as e:
            self._fail("inquire", nosso_numero, e, start)
            raise

        self._finish("inquire", nosso_numero, "success", start)
        return result

    async def amend(self, nosso_numero: str, data_vencimento: Optional[date] = None) -> Acknowledgement:
        """
        Send a maintenance request to the bank, optionally moving the due date.

        On success the new due date is also stored locally.
        """
        start = time.time()
        try:
            boleto = self._load(nosso_numero)
            ensure_transition(boleto.status_codigo, BoletoStatus.PENDING)

            payload = build_amendment_payload(boleto.configuracao, boleto.cliente, boleto, data_vencimento)
            ack = await self.gateway.amend(payload)

            changes = {"data_vencimento": data_vencimento} if data_vencimento else {}
            self._transition(boleto, BoletoStatus.PENDING, **changes)
        except DomainException as e:
            self._fail("amend", nosso_numero, e, start)
            raise

        self._finish("amend", nosso_numero, "success", start)
        return ack

    async def write_off(self, nosso_numero: str, reason_code: str = BENEFICIARY_REQUEST) -> Acknowledgement:
        """Request the bank write-off (baixa) and mark the boleto WRITTEN_OFF"""
        start = time.time()
        try:
            boleto = self._load(nosso_numero)
            ensure_transition(boleto.status_codigo, BoletoStatus.WRITTEN_OFF)

            payload = build_write_off_payload(boleto.configuracao, boleto.nosso_numero, reason_code)
            ack = await self.gateway.write_off(payload)

            self._transition(boleto, BoletoStatus.WRITTEN_OFF, baixado=True)
        except DomainException as e:
            self._fail("write_off", nosso_numero, e, start)
            raise

        self._finish("write_off", nosso_numero, "success", start)
        return ack

    def simulate_settlement(self, nosso_numero: str) -> Boleto:
        """
        Mark a boleto PAID locally and log a synthetic liquidation event.

        Never calls the bank. The paid amount and the baixado flag are left as
        they are; the notification is written in the same transaction.
        """
        start = time.time()
        try:
            boleto = self._load(nosso_numero)
            ensure_transition(boleto.status_codigo, BoletoStatus.PAID)
            now = datetime.now(timezone.utc)
            self.notifications.append(
                SETTLEMENT_EVENT,
                nosso_numero,
                {
                    "nossoNumero": nosso_numero,
                    "valorPago": str(boleto.valor_nominal),
                    "data": now.isoformat(),
                    "simulado": True,
                },
            )
            self._transition(boleto, BoletoStatus.PAID, data_pagamento=now)
        except DomainException as e:
            self._fail("settle", nosso_numero, e, start)
            raise

        self._finish("settle", nosso_numero, "success", start)
        return boleto

    def apply_settlement_notification(
        self,
        nosso_numero: str,
        valor_pago: Optional[Decimal] = None,
        data_pagamento: Optional[datetime] = None,
    ) -> Boleto:
        """Settle a boleto from a bank liquidation notice: PAID, baixado, amount recorded"""
        start = time.time()
        try:
            boleto = self._load(nosso_numero)
            amount = quantize_major(valor_pago) if valor_pago is not None else boleto.valor_nominal
            self._transition(
                boleto,
                BoletoStatus.PAID,
                baixado=True,
                valor_pago=amount,
                data_pagamento=data_pagamento or datetime.now(timezone.utc),
            )
        except DomainException as e:
            self._fail("settle_notification", nosso_numero, e, start)
            raise

        self._finish("settle_notification", nosso_numero, "success", start)
        return boleto

    def get(self, nosso_numero: str) -> Boleto:
        """Load a boleto with its payer and configuration"""
        return self._load(nosso_numero)

    def list_pending(self, today: Optional[date] = None) -> List[Boleto]:
        """Open boletos due today or later, earliest first"""
        return self.boletos.list_pending(today or date.today())

    def list_overdue(self, today: Optional[date] = None) -> List[Boleto]:
        """Open boletos whose due date has passed"""
        return self.boletos.list_overdue(today or date.today())
