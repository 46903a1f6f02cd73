"""Data access layer for billing configuration, payers, boletos and notifications"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import func, update
from sqlalchemy.orm import Session, joinedload

from boleto_gateway.config import Settings
from boleto_gateway.domain.lifecycle import BoletoStatus, INITIAL_STATUS
from boleto_gateway.infrastructure.database.models import BillingConfiguration, Payer, Boleto, InboundNotification


class BillingConfigurationRepository:
    """Repository for the single active billing configuration"""

    def __init__(self, db: Session):
        self.db = db

    def get_active(self) -> Optional[BillingConfiguration]:
        return (
            self.db.query(BillingConfiguration)
            .filter(BillingConfiguration.ativo.is_(True))
            .order_by(BillingConfiguration.created_at)
            .first()
        )

    def seed_default(self, settings: Settings) -> BillingConfiguration:
        """Create the default configuration from settings when none exists"""
        existing = self.get_active()
        if existing:
            return existing

        config = BillingConfiguration(
            descricao=settings.billing_descricao,
            cnpj_raiz=settings.billing_cnpj_raiz,
            filial=settings.billing_filial,
            controle=settings.billing_controle,
            carteira=settings.billing_carteira,
            negociacao=settings.billing_negociacao,
            agencia=settings.billing_agencia,
            conta=settings.billing_conta,
            ativo=True,
        )
        self.db.add(config)
        self.db.commit()
        self.db.refresh(config)
        return config


class PayerRepository:
    """Repository for payers (sacados)"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, **fields: Any) -> Payer:
        payer = Payer(**fields)
        self.db.add(payer)
        self.db.flush()
        return payer

    def get(self, payer_id: uuid.UUID) -> Optional[Payer]:
        return self.db.query(Payer).filter(Payer.id == payer_id).first()

    def get_by_documento(self, documento: str) -> Optional[Payer]:
        return self.db.query(Payer).filter(Payer.documento == documento).first()

    def list_with_counts(self) -> List[Tuple[Payer, int]]:
        """All payers with the number of boletos each one owns"""
        return (
            self.db.query(Payer, func.count(Boleto.id))
            .outerjoin(Boleto, Boleto.cliente_id == Payer.id)
            .group_by(Payer.id)
            .order_by(Payer.nome)
            .all()
        )

    def delete(self, payer: Payer) -> None:
        """Delete payer; the ORM cascade removes its boletos and their notifications in the same flush"""
        self.db.delete(payer)
        self.db.flush()


class BoletoRepository:
    """Repository for boletos"""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        configuracao_id: uuid.UUID,
        cliente_id: uuid.UUID,
        nosso_numero: str,
        seu_numero: str,
        valor_nominal: Decimal,
        data_emissao: date,
        data_vencimento: date,
        especie_documento: str,
        linha_digitavel: str,
        codigo_barras: str,
    ) -> Boleto:
        """Persist a freshly registered boleto in the initial status"""
        boleto = Boleto(
            configuracao_id=configuracao_id,
            cliente_id=cliente_id,
            nosso_numero=nosso_numero,
            seu_numero=seu_numero,
            valor_nominal=valor_nominal,
            data_emissao=data_emissao,
            data_vencimento=data_vencimento,
            especie_documento=especie_documento,
            linha_digitavel=linha_digitavel,
            codigo_barras=codigo_barras,
            status_codigo=INITIAL_STATUS.value,
            status_descricao=INITIAL_STATUS.descricao,
            baixado=False,
            notificado_emissao=True,
            version=1,
        )
        self.db.add(boleto)
        self.db.flush()
        return boleto

    def get_by_nosso_numero(self, nosso_numero: str) -> Optional[Boleto]:
        return (
            self.db.query(Boleto)
            .options(joinedload(Boleto.cliente), joinedload(Boleto.configuracao))
            .filter(Boleto.nosso_numero == nosso_numero)
            .first()
        )

    def list_pending(self, today: date) -> List[Boleto]:
        """Open boletos not yet due, earliest due date first"""
        return (
            self.db.query(Boleto)
            .options(joinedload(Boleto.cliente))
            .filter(
                Boleto.status_codigo == BoletoStatus.PENDING.value,
                Boleto.baixado.is_(False),
                Boleto.data_vencimento >= today,
            )
            .order_by(Boleto.data_vencimento.asc())
            .all()
        )

    def list_overdue(self, today: date) -> List[Boleto]:
        """Open boletos past their due date"""
        return (
            self.db.query(Boleto)
            .options(joinedload(Boleto.cliente))
            .filter(
                Boleto.status_codigo == BoletoStatus.PENDING.value,
                Boleto.baixado.is_(False),
                Boleto.data_vencimento < today,
            )
            .order_by(Boleto.data_vencimento.asc())
            .all()
        )

    def apply_transition(
        self,
        nosso_numero: str,
        expected_version: int,
        expected_status: BoletoStatus,
        **values: Any,
    ) -> bool:
        """
        Compare-and-swap update of a boleto.

        Only touches the row if it still has `expected_version` and
        `expected_status`; bumps the version on success.

        Returns:
            True if exactly one row was updated
        """
        result = self.db.execute(
            update(Boleto)
            .where(
                Boleto.nosso_numero == nosso_numero,
                Boleto.version == expected_version,
                Boleto.status_codigo == expected_status.value,
            )
            .values(version=Boleto.version + 1, **values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class NotificationRepository:
    """Repository for the append-only inbound notification log"""

    def __init__(self, db: Session):
        self.db = db

    def append(self, tipo_evento: str, nosso_numero: Optional[str], payload: Dict[str, Any]) -> InboundNotification:
        notification = InboundNotification(
            tipo_evento=tipo_evento,
            nosso_numero=nosso_numero,
            payload=payload,
        )
        self.db.add(notification)
        self.db.flush()
        return notification

    def list_recent(self, limit: int = 50) -> List[InboundNotification]:
        return (
            self.db.query(InboundNotification)
            .order_by(InboundNotification.created_at.desc())
            .limit(limit)
            .all()
        )

    def list_for(self, nosso_numero: str, tipo_evento: Optional[str] = None) -> List[InboundNotification]:
        query = self.db.query(InboundNotification).filter(InboundNotification.nosso_numero == nosso_numero)
        if tipo_evento:
            query = query.filter(InboundNotification.tipo_evento == tipo_evento)
        return query.all()
