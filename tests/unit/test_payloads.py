"""Unit tests for Bradesco request payload builders"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace
from boleto_gateway.domain.exceptions import InvalidRequestError
from boleto_gateway.domain.payloads import (
    build_amendment_payload,
    build_inquiry_payload,
    build_registration_payload,
    build_write_off_payload,
    split_cep,
    split_tax_id,
)


@pytest.fixture
def config():
    return SimpleNamespace(
        cnpj_raiz="123456789",
        filial="0001",
        controle="95",
        carteira="09",
        negociacao="386100000000041000",
    )


@pytest.fixture
def cnpj_payer():
    return SimpleNamespace(
        nome="Comercial Andrade Ltda",
        documento="11222333000181",
        email=None,
        logradouro="Avenida Paulista",
        numero="1578",
        complemento=None,
        bairro="Bela Vista",
        cidade="São Paulo",
        uf="sp",
        cep="01310200",
    )


def test_split_cep():
    assert split_cep("01310-200") == (1310, 200)
    assert split_cep("70040010") == (70040, 10)


def test_split_tax_id_cnpj():
    tax_id = split_tax_id("11.222.333/0001-81")
    assert (tax_id.cpf_cnpj, tax_id.filial, tax_id.controle) == (11222333, 1, 81)


def test_split_tax_id_cpf():
    tax_id = split_tax_id("123.456.789-09")
    assert (tax_id.cpf_cnpj, tax_id.filial, tax_id.controle) == (123456789, 0, 9)


def test_split_tax_id_rejects_other_lengths():
    with pytest.raises(InvalidRequestError):
        split_tax_id("1234")


def test_registration_payload_wire_fields(config, cnpj_payer):
    payload = build_registration_payload(
        config,
        cnpj_payer,
        seu_numero="PED-0001",
        valor=Decimal("150.50"),
        data_vencimento=date(2026, 3, 5),
        today=date(2026, 2, 1),
    )
    wire = payload.to_wire()

    assert wire["nuCPFCNPJ"] == 123456789
    assert wire["filialCPFCNPJ"] == 1
    assert wire["ctrlCPFCNPJ"] == 95
    assert wire["idProduto"] == 9
    assert wire["nuNegociacao"] == 386100000000041000
    assert wire["nuCliente"] == "PED-0001"
    assert wire["dtEmissaoTitulo"] == "01.02.2026"
    assert wire["dtVencimentoTitulo"] == "05.03.2026"
    assert wire["vlNominalTitulo"] == 15050
    assert wire["cdEspecieTitulo"] == 2
    assert wire["cepPagador"] == 1310
    assert wire["complementoCepPagador"] == 200
    assert wire["ufPagador"] == "SP"
    assert wire["cdIndCpfcnpjPagador"] == 2
    assert wire["nuCpfcnpjPagador"] == 11222333000181
    assert wire["nuTitulo"] == 0
    assert wire["complementoLogradouroPagador"] == ""


def test_registration_payload_truncates_long_fields(config, cnpj_payer):
    cnpj_payer.nome = "N" * 90
    cnpj_payer.logradouro = "L" * 60
    cnpj_payer.cidade = "C" * 45

    wire = build_registration_payload(
        config, cnpj_payer, "S1", Decimal("10"), date(2026, 3, 5), especie="12"
    ).to_wire()

    assert len(wire["nomePagador"]) == 70
    assert len(wire["logradouroPagador"]) == 40
    assert len(wire["municipioPagador"]) == 30
    assert wire["cdEspecieTitulo"] == 12


def test_registration_payload_requires_positive_value(config, cnpj_payer):
    with pytest.raises(InvalidRequestError, match="vlNominalTitulo"):
        build_registration_payload(config, cnpj_payer, "S1", Decimal("0"), date(2026, 3, 5))


def test_registration_payload_sub_cent_value_rounds_to_zero(config, cnpj_payer):
    with pytest.raises(InvalidRequestError):
        build_registration_payload(config, cnpj_payer, "S1", Decimal("0.004"), date(2026, 3, 5))


def test_registration_payload_value_must_fit_barcode(config, cnpj_payer):
    wire = build_registration_payload(
        config, cnpj_payer, "S1", Decimal("99999999.99"), date(2026, 3, 5)
    ).to_wire()
    assert wire["vlNominalTitulo"] == 9999999999

    with pytest.raises(InvalidRequestError):
        build_registration_payload(config, cnpj_payer, "S1", Decimal("100000000.00"), date(2026, 3, 5))


def test_registration_payload_name_required(config, cnpj_payer):
    cnpj_payer.nome = ""

    with pytest.raises(InvalidRequestError, match="nomePagador"):
        build_registration_payload(config, cnpj_payer, "S1", Decimal("10"), date(2026, 3, 5))


def test_inquiry_payload(config):
    wire = build_inquiry_payload(config, "1234567890").to_wire()

    assert wire["cpfCnpj"] == {"cpfCnpj": 123456789, "filial": 1, "controle": 95}
    assert wire["produto"] == 9
    assert wire["nossoNumero"] == 1234567890
    assert wire["sequencia"] == 0
    assert wire["status"] == 0


def test_amendment_payload_uses_new_due_date(config, cnpj_payer):
    boleto = SimpleNamespace(
        nosso_numero="1234567890",
        seu_numero="PED-0001",
        data_emissao=date(2026, 2, 1),
        data_vencimento=date(2026, 3, 5),
        especie_documento="02",
    )

    wire = build_amendment_payload(config, cnpj_payer, boleto, new_due_date=date(2026, 4, 10)).to_wire()

    assert wire["dadosTitulo"]["vencimento"]["dataVencimento"] == 10042026
    assert wire["dadosTitulo"]["dataEmissao"] == 1022026
    assert wire["dadosTitulo"]["especie"] == "02"
    assert wire["dadosPagador"]["cpfCnpjSacado"] == {"cpfCnpj": 11222333, "filial": 1, "controle": 81}
    assert wire["dadosPagador"]["cep"] == 1310
    assert wire["dadosPagador"]["sufixo"] == 200
    assert wire["dadosPagador"]["aceite"] == "S"


def test_amendment_payload_keeps_stored_due_date(config, cnpj_payer):
    boleto = SimpleNamespace(
        nosso_numero="1234567890",
        seu_numero="PED-0001",
        data_emissao=date(2026, 2, 1),
        data_vencimento=date(2026, 3, 5),
        especie_documento="02",
    )

    wire = build_amendment_payload(config, cnpj_payer, boleto).to_wire()

    assert wire["dadosTitulo"]["vencimento"]["dataVencimento"] == 5032026


def test_write_off_payload(config):
    now = datetime(2026, 2, 1, 14, 30, 5, 123456)
    wire = build_write_off_payload(config, "1234567890", "20", now=now).to_wire()

    assert wire["horaSolicitacao"] == "2026-02-01-14.30.05.123456"
    assert wire["status"] == 57
    assert wire["statusAnterior"] == 1
    assert wire["nossoNumero"] == 1234567890


def test_write_off_payload_unknown_reason(config):
    with pytest.raises(InvalidRequestError):
        build_write_off_payload(config, "1234567890", "99")
