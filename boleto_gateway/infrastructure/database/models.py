"""SQLAlchemy ORM models for the boleto registry"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Date, Integer, Numeric, ForeignKey, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from boleto_gateway.domain.lifecycle import INITIAL_STATUS

Base = declarative_base()


class BillingConfiguration(Base):
    """Issuer identity sent with every bank call; a single active row is expected"""

    __tablename__ = "configuracao_cobranca"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    descricao = Column(Text, nullable=False)
    cnpj_raiz = Column(String(9), nullable=False)
    filial = Column(String(4), nullable=False)
    controle = Column(String(2), nullable=False)
    carteira = Column(String(3), nullable=False, default="09")
    negociacao = Column(String(20), nullable=False, default="0")
    agencia = Column(String(10), nullable=True)
    conta = Column(String(20), nullable=True)
    ativo = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    boletos = relationship("Boleto", back_populates="configuracao")


class Payer(Base):
    """Billed counterparty (sacado)"""

    __tablename__ = "cliente_pagador"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    nome = Column(Text, nullable=False)
    documento = Column(String(14), nullable=False, unique=True)
    tipo_documento = Column(String(1), nullable=False)  # 1=CPF, 2=CNPJ
    email = Column(Text, nullable=True)
    telefone = Column(Text, nullable=True)
    logradouro = Column(Text, nullable=False)
    numero = Column(Text, nullable=False)
    complemento = Column(Text, nullable=True)
    bairro = Column(Text, nullable=False)
    cidade = Column(Text, nullable=False)
    uf = Column(String(2), nullable=False)
    cep = Column(String(8), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    boletos = relationship("Boleto", back_populates="cliente", cascade="all, delete-orphan")


class Boleto(Base):
    """Registered payment slip and its local lifecycle state"""

    __tablename__ = "boleto"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    configuracao_id = Column(Uuid(as_uuid=True), ForeignKey("configuracao_cobranca.id"), nullable=False)
    cliente_id = Column(Uuid(as_uuid=True), ForeignKey("cliente_pagador.id", ondelete="CASCADE"), nullable=False, index=True)
    nosso_numero = Column(String(20), nullable=False, unique=True)
    seu_numero = Column(Text, nullable=False, index=True)
    valor_nominal = Column(Numeric(12, 2), nullable=False)
    data_emissao = Column(Date, nullable=False)
    data_vencimento = Column(Date, nullable=False, index=True)
    especie_documento = Column(String(2), nullable=False, default="02")
    linha_digitavel = Column(Text, nullable=False)
    codigo_barras = Column(Text, nullable=False)
    status_codigo = Column(String(2), nullable=False, default=INITIAL_STATUS.value)
    status_descricao = Column(Text, nullable=False, default=INITIAL_STATUS.descricao)
    baixado = Column(Boolean, nullable=False, default=False)
    data_pagamento = Column(DateTime(timezone=True), nullable=True)
    valor_pago = Column(Numeric(12, 2), nullable=True)
    notificado_emissao = Column(Boolean, nullable=False, default=False)
    version = Column(Integer, nullable=False, default=1)  # bumped on every lifecycle transition
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    configuracao = relationship("BillingConfiguration", back_populates="boletos")
    cliente = relationship("Payer", back_populates="boletos")
    notificacoes = relationship("InboundNotification", back_populates="boleto", cascade="all, delete-orphan")


class InboundNotification(Base):
    """Append-only log of asynchronous bank events (webhooks and simulated liquidations)"""

    __tablename__ = "webhook_recebido"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tipo_evento = Column(Text, nullable=False)
    nosso_numero = Column(String(20), ForeignKey("boleto.nosso_numero", ondelete="CASCADE"), nullable=True, index=True)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    boleto = relationship("Boleto", back_populates="notificacoes")
