"""
Typed request payloads for the Bradesco registration API.

Each operation has its own model. Optional protocol fields carry their zero
defaults, and fixed-width limits are checked once when the model is built.
Builders take the ORM aggregate (configuration, payer, boleto) and apply the
protocol's truncation rules before construction.
"""

import functools
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from boleto_gateway.domain.barcode import BRADESCO_BANK_CODE, VALUE_FIELD_MAX_CENTS, only_digits
from boleto_gateway.domain.exceptions import InvalidRequestError
from boleto_gateway.domain.money import major_to_cents

DEFAULT_ESPECIE = "02"  # DM - duplicata mercantil
DEFAULT_CARTEIRA = "09"
BRADESCO_PRODUCT_CODE = 1730

# Reason code -> bank status requested for the write-off
WRITE_OFF_REASONS: Dict[str, int] = {
    "20": 57,  # baixa solicitada pelo beneficiário
}
WRITE_OFF_PRIOR_STATUS = 1  # a vencer / vencido


class ProtocolModel(BaseModel):
    """Base for wire payloads: python names in code, bank names on the wire"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class TaxId(ProtocolModel):
    """CPF/CNPJ split into root, branch and check digits"""

    cpf_cnpj: int = Field(0, alias="cpfCnpj", ge=0)
    filial: int = Field(0, ge=0)
    controle: int = Field(0, ge=0)


class RegistrationPayload(ProtocolModel):
    """Body of registrar-boleto"""

    registra_titulo: int = Field(1, alias="registraTitulo")
    nu_cpf_cnpj: int = Field(..., alias="nuCPFCNPJ", ge=0)
    filial_cpf_cnpj: int = Field(..., alias="filialCPFCNPJ", ge=0)
    ctrl_cpf_cnpj: int = Field(..., alias="ctrlCPFCNPJ", ge=0)
    cd_tipo_acesso: int = Field(2, alias="cdTipoAcesso")
    club_banco: int = Field(0, alias="clubBanco")
    cd_tipo_contrato: int = Field(0, alias="cdTipoContrato")
    nu_sequencia_contrato: int = Field(0, alias="nuSequenciaContrato")
    id_produto: int = Field(..., alias="idProduto")
    nu_negociacao: int = Field(..., alias="nuNegociacao")
    cd_banco: int = Field(int(BRADESCO_BANK_CODE), alias="cdBanco")
    nu_sequencia_contrato2: int = Field(0, alias="nuSequenciaContrato2")
    tp_registro: int = Field(1, alias="tpRegistro")
    cd_produto: int = Field(BRADESCO_PRODUCT_CODE, alias="cdProduto")
    nu_titulo: int = Field(0, alias="nuTitulo")  # 0 asks the bank to assign one
    nu_cliente: str = Field(..., alias="nuCliente", min_length=1)
    dt_emissao_titulo: str = Field(..., alias="dtEmissaoTitulo", pattern=r"^\d{2}\.\d{2}\.\d{4}$")
    dt_vencimento_titulo: str = Field(..., alias="dtVencimentoTitulo", pattern=r"^\d{2}\.\d{2}\.\d{4}$")
    tp_vencimento: int = Field(0, alias="tpVencimento")
    vl_nominal_titulo: int = Field(..., alias="vlNominalTitulo", gt=0, le=VALUE_FIELD_MAX_CENTS)
    cd_especie_titulo: int = Field(..., alias="cdEspecieTitulo", ge=0)
    tp_protesto_automatico_negativacao: int = Field(0, alias="tpProtestoAutomaticoNegativacao")
    prazo_protesto_automatico_negativacao: int = Field(0, alias="prazoProtestoAutomaticoNegativacao")
    controle_participante: str = Field("", alias="controleParticipante")
    cd_pagamento_parcial: str = Field("", alias="cdPagamentoParcial")
    qtde_pagamento_parcial: int = Field(0, alias="qtdePagamentoParcial")
    percentual_juros: int = Field(0, alias="percentualJuros")
    vl_juros: int = Field(0, alias="vlJuros")
    qtde_dias_juros: int = Field(0, alias="qtdeDiasJuros")
    percentual_multa: int = Field(0, alias="percentualMulta")
    vl_multa: int = Field(0, alias="vlMulta")
    qtde_dias_multa: int = Field(0, alias="qtdeDiasMulta")
    percentual_desconto1: int = Field(0, alias="percentualDesconto1")
    vl_desconto1: int = Field(0, alias="vlDesconto1")
    data_limite_desconto1: str = Field("", alias="dataLimiteDesconto1")
    percentual_desconto2: int = Field(0, alias="percentualDesconto2")
    vl_desconto2: int = Field(0, alias="vlDesconto2")
    data_limite_desconto2: str = Field("", alias="dataLimiteDesconto2")
    percentual_desconto3: int = Field(0, alias="percentualDesconto3")
    vl_desconto3: int = Field(0, alias="vlDesconto3")
    data_limite_desconto3: str = Field("", alias="dataLimiteDesconto3")
    prazo_bonificacao: int = Field(0, alias="prazoBonificacao")
    percentual_bonificacao: int = Field(0, alias="percentualBonificacao")
    vl_bonificacao: int = Field(0, alias="vlBonificacao")
    dt_limite_bonificacao: str = Field("", alias="dtLimiteBonificacao")
    vl_abatimento: int = Field(0, alias="vlAbatimento")
    vl_iof: int = Field(0, alias="vlIOF")
    nome_pagador: str = Field(..., alias="nomePagador", min_length=1, max_length=70)
    logradouro_pagador: str = Field(..., alias="logradouroPagador", max_length=40)
    nu_logradouro_pagador: str = Field(..., alias="nuLogradouroPagador", max_length=10)
    complemento_logradouro_pagador: str = Field("", alias="complementoLogradouroPagador", max_length=15)
    cep_pagador: int = Field(..., alias="cepPagador", ge=0, le=99999)
    complemento_cep_pagador: int = Field(0, alias="complementoCepPagador", ge=0, le=999)
    bairro_pagador: str = Field(..., alias="bairroPagador", max_length=40)
    municipio_pagador: str = Field(..., alias="municipioPagador", max_length=30)
    uf_pagador: str = Field(..., alias="ufPagador", min_length=2, max_length=2)
    cd_ind_cpfcnpj_pagador: Literal[1, 2] = Field(..., alias="cdIndCpfcnpjPagador")
    nu_cpfcnpj_pagador: int = Field(..., alias="nuCpfcnpjPagador", gt=0)
    end_eletronico_pagador: str = Field("", alias="endEletronicoPagador")
    nome_sacador_avalista: str = Field("", alias="nomeSacadorAvalista")
    logradouro_sacador_avalista: str = Field("", alias="logradouroSacadorAvalista")
    nu_logradouro_sacador_avalista: str = Field("", alias="nuLogradouroSacadorAvalista")
    complemento_logradouro_sacador_avalista: str = Field("", alias="complementoLogradouroSacadorAvalista")
    cep_sacador_avalista: int = Field(0, alias="cepSacadorAvalista")
    complemento_cep_sacador_avalista: int = Field(0, alias="complementoCepSacadorAvalista")
    bairro_sacador_avalista: str = Field("", alias="bairroSacadorAvalista")
    municipio_sacador_avalista: str = Field("", alias="municipioSacadorAvalista")
    uf_sacador_avalista: str = Field("", alias="ufSacadorAvalista")
    cd_ind_cpfcnpj_sacador_avalista: int = Field(0, alias="cdIndCpfcnpjSacadorAvalista")
    nu_cpfcnpj_sacador_avalista: int = Field(0, alias="nuCpfcnpjSacadorAvalista")
    endereco_sacador_avalista: str = Field("", alias="enderecoSacadorAvalista")


class InquiryPayload(ProtocolModel):
    """Body of titulo-consultar"""

    cpf_cnpj: TaxId = Field(..., alias="cpfCnpj")
    produto: int
    negociacao: int
    nosso_numero: int = Field(..., alias="nossoNumero", gt=0)
    sequencia: int = 0
    status: int = 0


class DueDateBlock(ProtocolModel):
    data_vencimento: int = Field(..., alias="dataVencimento")
    tipo_vencimento: int = Field(0, alias="tipoVencimento")


class ProtestBlock(ProtocolModel):
    cod_instrucao_protesto: int = Field(0, alias="codInstrucaoProtesto")
    qtde_dias_protesto: int = Field(0, alias="qtdeDiasProtesto")


class LapseBlock(ProtocolModel):
    cod_decurso_prazo: int = Field(0, alias="codDecursoPrazo")
    dias_decurso_prazo: int = Field(0, alias="diasDecursoPrazo")


class RebateBlock(ProtocolModel):
    tipo_abatimento: int = Field(0, alias="tipoAbatimento")
    valor_abatimento: int = Field(0, alias="valorAbatimento")


class PermanenceFeeBlock(ProtocolModel):
    dias_comissao_permanencia: int = Field(0, alias="diasComissaoPermanencia")
    valor_comissao_permanencia: int = Field(0, alias="valorComissaoPermanencia")
    codigo_comissao_permanencia: int = Field(0, alias="codigoComissaoPermanencia")


class AmendmentPayer(ProtocolModel):
    """dadosPagador block of titulo-alterar"""

    sacado: str = Field(..., min_length=1, max_length=40)
    cpf_cnpj_sacado: TaxId = Field(..., alias="cpfCnpjSacado")
    endereco: str = Field(..., max_length=40)
    cep: int = Field(..., ge=0, le=99999)
    sufixo: int = Field(0, ge=0, le=999)
    nome_sacador: str = Field("", alias="nomeSacador")
    aceite: str = "S"
    cpf_cnpj_sacador: TaxId = Field(default_factory=TaxId, alias="cpfCnpjSacador")
    email_sacado: str = Field("", alias="emailSacado")


class AmendmentTitle(ProtocolModel):
    """dadosTitulo block of titulo-alterar"""

    seu_numero: str = Field(..., alias="seuNumero")
    data_emissao: int = Field(..., alias="dataEmissao")
    especie: str
    vencimento: DueDateBlock
    protesto: ProtestBlock = Field(default_factory=ProtestBlock)
    decurso: LapseBlock = Field(default_factory=LapseBlock)
    abatimento: RebateBlock = Field(default_factory=RebateBlock)
    data_desc1: int = Field(0, alias="dataDesc1")
    val_desc1: int = Field(0, alias="valDesc1")
    cod_val_de1: int = Field(0, alias="codValDe1")
    tipo_desc1: int = Field(0, alias="tipoDesc1")
    codigo_controle_participante: str = Field("", alias="codigoControleParticipante")
    indicador_aviso_sacado: str = Field("", alias="indicadorAvisoSacado")
    comissao_permanencia: PermanenceFeeBlock = Field(default_factory=PermanenceFeeBlock, alias="comissaoPermanencia")
    codigo_multa: int = Field(0, alias="codigoMulta")
    dias_multa: int = Field(0, alias="diasMulta")
    valor_multa: int = Field(0, alias="valorMulta")
    codigo_negativacao: int = Field(0, alias="codigoNegativacao")
    dias_negativacao: int = Field(0, alias="diasNegativacao")
    pagamento_parcial: str = Field("", alias="pagamentoParcial")
    qtde_pagamento_parcial: int = Field(0, alias="qtdePagamentoParcial")


class AmendmentPayload(ProtocolModel):
    """Body of titulo-alterar"""

    cpf_cnpj: TaxId = Field(..., alias="cpfCnpj")
    produto: int
    negociacao: int
    nosso_numero: int = Field(..., alias="nossoNumero", gt=0)
    dados_pagador: AmendmentPayer = Field(..., alias="dadosPagador")
    dados_titulo: AmendmentTitle = Field(..., alias="dadosTitulo")


class WriteOffPayload(ProtocolModel):
    """Body of titulo-estorno"""

    cpf_cnpj: TaxId = Field(..., alias="cpfCnpj")
    produto: int
    negociacao: int
    nosso_numero: int = Field(..., alias="nossoNumero", gt=0)
    sequencia: int = 0
    hora_solicitacao: str = Field(
        ..., alias="horaSolicitacao", pattern=r"^\d{4}-\d{2}-\d{2}-\d{2}\.\d{2}\.\d{2}\.\d{6}$"
    )
    status: int
    status_anterior: int = Field(WRITE_OFF_PRIOR_STATUS, alias="statusAnterior")


def _caller_input(builder):
    """Report payload field violations as InvalidRequestError"""

    @functools.wraps(builder)
    def wrapper(*args, **kwargs):
        try:
            return builder(*args, **kwargs)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise InvalidRequestError(f"Invalid bank payload field(s): {fields}") from e

    return wrapper


def _to_int(value: Optional[str], default: int = 0) -> int:
    digits = only_digits(value or "")
    return int(digits) if digits else default


def _cut(value: Optional[str], limit: int) -> str:
    return (value or "")[:limit]


def split_cep(cep: str) -> tuple[int, int]:
    """Split a postal code into its 5-digit prefix and 3-digit suffix"""
    digits = only_digits(cep).ljust(8, "0")[:8]
    return int(digits[:5]), int(digits[5:8])


def split_tax_id(documento: str) -> TaxId:
    """CNPJ -> root(8)/branch(4)/check(2); CPF -> root(9)/0/check(2)"""
    digits = only_digits(documento)
    if len(digits) == 14:
        return TaxId(cpf_cnpj=int(digits[:8]), filial=int(digits[8:12]), controle=int(digits[12:]))
    if len(digits) == 11:
        return TaxId(cpf_cnpj=int(digits[:9]), filial=0, controle=int(digits[9:]))
    raise InvalidRequestError(f"Document must have 11 (CPF) or 14 (CNPJ) digits, got {len(digits)}")


def issuer_tax_id(config) -> TaxId:
    return TaxId(
        cpf_cnpj=_to_int(config.cnpj_raiz),
        filial=_to_int(config.filial),
        controle=_to_int(config.controle),
    )


def document_indicator(documento: str) -> int:
    """1 for CPF, 2 for CNPJ"""
    return 1 if len(only_digits(documento)) == 11 else 2


@_caller_input
def build_registration_payload(
    config,
    payer,
    seu_numero: str,
    valor: Decimal,
    data_vencimento: date,
    especie: Optional[str] = None,
    today: Optional[date] = None,
) -> RegistrationPayload:
    """Build registrar-boleto body from configuration, payer and request fields"""
    today = today or date.today()
    cep_prefix, cep_suffix = split_cep(payer.cep)
    tax_id = issuer_tax_id(config)

    return RegistrationPayload(
        nu_cpf_cnpj=tax_id.cpf_cnpj,
        filial_cpf_cnpj=tax_id.filial,
        ctrl_cpf_cnpj=tax_id.controle,
        id_produto=_to_int(config.carteira, int(DEFAULT_CARTEIRA)),
        nu_negociacao=_to_int(config.negociacao),
        nu_cliente=seu_numero or "WEBSERVICE",
        dt_emissao_titulo=today.strftime("%d.%m.%Y"),
        dt_vencimento_titulo=data_vencimento.strftime("%d.%m.%Y"),
        vl_nominal_titulo=major_to_cents(valor),
        cd_especie_titulo=_to_int(especie or DEFAULT_ESPECIE),
        nome_pagador=_cut(payer.nome, 70),
        logradouro_pagador=_cut(payer.logradouro, 40),
        nu_logradouro_pagador=_cut(payer.numero, 10),
        complemento_logradouro_pagador=_cut(payer.complemento, 15),
        cep_pagador=cep_prefix,
        complemento_cep_pagador=cep_suffix,
        bairro_pagador=_cut(payer.bairro, 40),
        municipio_pagador=_cut(payer.cidade, 30),
        uf_pagador=_cut(payer.uf, 2).upper(),
        cd_ind_cpfcnpj_pagador=document_indicator(payer.documento),
        nu_cpfcnpj_pagador=_to_int(payer.documento),
        end_eletronico_pagador=payer.email or "",
    )


@_caller_input
def build_inquiry_payload(config, nosso_numero: str) -> InquiryPayload:
    return InquiryPayload(
        cpf_cnpj=issuer_tax_id(config),
        produto=_to_int(config.carteira, int(DEFAULT_CARTEIRA)),
        negociacao=_to_int(config.negociacao),
        nosso_numero=_to_int(nosso_numero),
    )


@_caller_input
def build_amendment_payload(config, payer, boleto, new_due_date: Optional[date] = None) -> AmendmentPayload:
    """Build titulo-alterar body; `new_due_date` overrides the stored due date"""
    cep_prefix, cep_suffix = split_cep(payer.cep)
    due = new_due_date or boleto.data_vencimento

    return AmendmentPayload(
        cpf_cnpj=issuer_tax_id(config),
        produto=_to_int(config.carteira, int(DEFAULT_CARTEIRA)),
        negociacao=_to_int(config.negociacao),
        nosso_numero=_to_int(boleto.nosso_numero),
        dados_pagador=AmendmentPayer(
            sacado=_cut(payer.nome, 40),
            cpf_cnpj_sacado=split_tax_id(payer.documento),
            endereco=_cut(payer.logradouro, 40),
            cep=cep_prefix,
            sufixo=cep_suffix,
            email_sacado=payer.email or "",
        ),
        dados_titulo=AmendmentTitle(
            seu_numero=boleto.seu_numero,
            data_emissao=int(boleto.data_emissao.strftime("%d%m%Y")),
            especie=boleto.especie_documento,
            vencimento=DueDateBlock(data_vencimento=int(due.strftime("%d%m%Y"))),
        ),
    )


@_caller_input
def build_write_off_payload(config, nosso_numero: str, reason_code: str, now: Optional[datetime] = None) -> WriteOffPayload:
    """Build titulo-estorno body stamped with a microsecond request time"""
    if reason_code not in WRITE_OFF_REASONS:
        raise InvalidRequestError(f"Unsupported write-off reason code {reason_code!r}")
    now = now or datetime.now()

    return WriteOffPayload(
        cpf_cnpj=issuer_tax_id(config),
        produto=_to_int(config.carteira, int(DEFAULT_CARTEIRA)),
        negociacao=_to_int(config.negociacao),
        nosso_numero=_to_int(nosso_numero),
        hora_solicitacao=now.strftime("%Y-%m-%d-%H.%M.%S.%f"),
        status=WRITE_OFF_REASONS[reason_code],
    )
