"""Pydantic schemas for API request/response validation"""

import re
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PayerCreateRequest(BaseModel):
    """Request body for POST /clientes"""

    nome: str = Field(..., min_length=1)
    documento: str = Field(..., description="CPF (11 digits) or CNPJ (14 digits), punctuation allowed")
    email: Optional[str] = None
    telefone: Optional[str] = None
    logradouro: str = Field(..., min_length=1)
    numero: str = Field(..., min_length=1)
    complemento: Optional[str] = None
    bairro: str = Field(..., min_length=1)
    cidade: str = Field(..., min_length=1)
    uf: str = Field(..., min_length=2, max_length=2)
    cep: str = Field(..., description="8-digit postal code, punctuation allowed")

    @field_validator("documento")
    @classmethod
    def normalize_documento(cls, value: str) -> str:
        digits = re.sub(r"\D", "", value)
        if len(digits) not in (11, 14):
            raise ValueError("documento must have 11 (CPF) or 14 (CNPJ) digits")
        return digits

    @field_validator("cep")
    @classmethod
    def normalize_cep(cls, value: str) -> str:
        digits = re.sub(r"\D", "", value)
        if len(digits) != 8:
            raise ValueError("cep must have 8 digits")
        return digits

    @field_validator("uf")
    @classmethod
    def upper_uf(cls, value: str) -> str:
        return value.upper()


class PayerSchema(BaseModel):
    """Payer as returned by the API"""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    nome: str
    documento: str
    tipo_documento: str
    email: Optional[str] = None
    telefone: Optional[str] = None
    logradouro: str
    numero: str
    complemento: Optional[str] = None
    bairro: str
    cidade: str
    uf: str
    cep: str


class PayerSummary(PayerSchema):
    """Payer in GET /clientes with its boleto count"""

    total_boletos: int = 0


class BoletoSchema(BaseModel):
    """Boleto as stored in the registry"""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    nosso_numero: str
    seu_numero: str
    valor_nominal: Decimal
    data_emissao: date
    data_vencimento: date
    especie_documento: str
    linha_digitavel: str
    codigo_barras: str
    status_codigo: str
    status_descricao: str
    baixado: bool
    data_pagamento: Optional[datetime] = None
    valor_pago: Optional[Decimal] = None
    notificado_emissao: bool
    cliente_id: uuid.UUID
    cliente_nome: Optional[str] = None

    @classmethod
    def from_boleto(cls, boleto) -> "BoletoSchema":
        schema = cls.model_validate(boleto)
        schema.cliente_nome = boleto.cliente.nome if boleto.cliente else None
        return schema


class PayerDetail(PayerSchema):
    """Payer in GET /clientes/{id} with its boletos"""

    boletos: List[BoletoSchema] = []


class BoletoCreateRequest(BaseModel):
    """Request body for POST /boletos; historical camelCase names are accepted too"""

    model_config = ConfigDict(populate_by_name=True)

    cliente_id: uuid.UUID = Field(..., alias="clienteId")
    seu_numero: str = Field(..., alias="seuNumero", min_length=1)
    valor: Decimal = Field(..., gt=0)
    data_vencimento: date = Field(..., alias="dataVencimento", description="YYYY-MM-DD")
    especie: Optional[str] = Field(None, pattern=r"^\d{2}$", description="02=DM, 12=NP")

    @field_validator("data_vencimento", mode="before")
    @classmethod
    def accept_iso_datetime(cls, value: Any) -> Any:
        # older callers send a full ISO timestamp
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value


class IssuedBoletoView(BaseModel):
    """Normalized summary of an issued boleto"""

    id: uuid.UUID
    nosso_numero: str
    seu_numero: str
    linha_digitavel: str
    codigo_barras: str
    valor: Decimal
    vencimento: date
    cliente: str
    status_codigo: str
    status_descricao: str


class BankRegistrationView(BaseModel):
    """Bank-native field names of the registration answer, kept for existing integrations"""

    model_config = ConfigDict(populate_by_name=True)

    nu_titulo_gerado: str = Field(..., alias="nuTituloGerado")
    linha_digitavel: str = Field(..., alias="linhaDigitavel")
    cd_barras: str = Field(..., alias="cdBarras")


class BoletoIssueResponse(BaseModel):
    """
    Response for POST /boletos.

    `boleto` is the normalized contract; `retorno_banco` repeats the bank's
    own names (nuTituloGerado, linhaDigitavel, cdBarras) for callers written
    against the raw registration answer.
    """

    sucesso: bool = True
    boleto: IssuedBoletoView
    retorno_banco: BankRegistrationView


class AmendRequest(BaseModel):
    """Request body for POST /boletos/{id}/alterar"""

    model_config = ConfigDict(populate_by_name=True)

    data_vencimento: Optional[date] = Field(None, alias="vencimento")

    @field_validator("data_vencimento", mode="before")
    @classmethod
    def accept_iso_datetime(cls, value: Any) -> Any:
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value


class WriteOffRequest(BaseModel):
    """Optional body for POST /boletos/{id}/cancelar"""

    motivo: str = Field("20", pattern=r"^\d{2}$", description="20 = requested by the beneficiary")


class AcknowledgementResponse(BaseModel):
    """Bank acknowledgement for amend / write-off"""

    status: int
    mensagem: str
    transacao: Optional[str] = None
    retorno_banco: Dict[str, Any] = {}


class InquiryResponse(BaseModel):
    """Normalized status snapshot from the bank"""

    nosso_numero: str
    status: str
    status_code: Optional[int] = None
    data_vencimento: Optional[date] = None
    valor_pago: Optional[Decimal] = None
    data_pagamento: Optional[date] = None
    retorno_banco: Dict[str, Any] = {}


class SettlementResponse(BaseModel):
    """Response for POST /boletos/{id}/pagar"""

    mensagem: str
    boleto: BoletoSchema


class NotificationSchema(BaseModel):
    """Inbound notification log entry"""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    tipo_evento: str
    nosso_numero: Optional[str] = None
    payload: Dict[str, Any]
    created_at: datetime


class WebhookAck(BaseModel):
    recebido: bool = True
    id: uuid.UUID
