"""Unit tests for the Bradesco gateway: HTTP transport error mapping and response normalization"""

import random
import httpx
import pytest
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace
from boleto_gateway.domain.exceptions import GatewayError, GatewayUnavailableError
from boleto_gateway.domain.payloads import (
    build_inquiry_payload,
    build_registration_payload,
    build_write_off_payload,
)
from boleto_gateway.infrastructure.clients.bank import BankGateway, ENDPOINTS, INQUIRE, REGISTER, RemoteTransport
from boleto_gateway.infrastructure.clients.simulator import SimulatedTransport

CONFIG = SimpleNamespace(cnpj_raiz="123456789", filial="0001", controle="95", carteira="09", negociacao="0")
PAYER = SimpleNamespace(
    nome="Maria Oliveira",
    documento="12345678909",
    email="maria@example.com",
    logradouro="Rua das Flores",
    numero="100",
    complemento=None,
    bairro="Centro",
    cidade="São Paulo",
    uf="SP",
    cep="01310100",
)


def make_gateway(handler) -> BankGateway:
    transport = RemoteTransport(
        base_url="https://bank.test",
        token="secret-token",
        timeout=1.0,
        http_transport=httpx.MockTransport(handler),
    )
    return BankGateway(transport)


def registration_payload():
    return build_registration_payload(CONFIG, PAYER, "PED-1", Decimal("150.50"), date(2026, 3, 5))


async def test_register_posts_to_registration_endpoint():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(
            200,
            json={
                "nuTituloGerado": 1234567890,
                "linhaDigitavel": "23790.00000 00000.000000 00000.000000 1 00000000015050",
                "cdBarras": "2" * 44,
                "cdRetorno": 0,
            },
        )

    result = await make_gateway(handler).register(registration_payload())

    assert seen["path"] == ENDPOINTS[REGISTER]
    assert seen["auth"] == "Bearer secret-token"
    assert result.nosso_numero == "1234567890"
    assert result.codigo_barras == "2" * 44
    assert result.raw["cdRetorno"] == 0


async def test_register_without_nosso_numero_is_an_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"cdRetorno": 0, "linhaDigitavel": "x"})

    with pytest.raises(GatewayError):
        await make_gateway(handler).register(registration_payload())


async def test_http_error_carries_bank_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"mensagem": "CPF/CNPJ do pagador invalido"})

    with pytest.raises(GatewayError) as exc_info:
        await make_gateway(handler).register(registration_payload())

    assert not isinstance(exc_info.value, GatewayUnavailableError)
    assert exc_info.value.remote_message == "CPF/CNPJ do pagador invalido"
    assert exc_info.value.operation == REGISTER


async def test_http_error_without_body_gets_generic_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="Internal Server Error")

    with pytest.raises(GatewayError) as exc_info:
        await make_gateway(handler).register(registration_payload())

    assert exc_info.value.remote_message is None
    assert "HTTP 500" in str(exc_info.value)


async def test_timeout_maps_to_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(GatewayUnavailableError):
        await make_gateway(handler).register(registration_payload())


async def test_connection_failure_maps_to_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GatewayUnavailableError):
        await make_gateway(handler).inquire(build_inquiry_payload(CONFIG, "1234567890"))


async def test_non_json_body_is_an_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(GatewayError):
        await make_gateway(handler).register(registration_payload())


async def test_declared_error_inside_200_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"cdRetorno": 3, "dsRetorno": "TITULO JA CADASTRADO"})

    with pytest.raises(GatewayError) as exc_info:
        await make_gateway(handler).register(registration_payload())

    assert exc_info.value.remote_message == "TITULO JA CADASTRADO"


async def test_inquiry_normalization():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == ENDPOINTS[INQUIRE]
        return httpx.Response(
            200,
            json={
                "status": 200,
                "titulo": {
                    "codStatus": 61,
                    "status": "PAGO",
                    "dataVencto": 5032026,
                    "vlrPagto": "150.50",
                    "dtPagto": "04/03/2026",
                },
            },
        )

    result = await make_gateway(handler).inquire(build_inquiry_payload(CONFIG, "1234567890"))

    assert result.status == "PAGO"
    assert result.status_code == 61
    assert result.due_date == date(2026, 3, 5)
    assert result.paid_amount == Decimal("150.50")
    assert result.paid_date == date(2026, 3, 4)


async def test_inquiry_with_empty_dates():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"titulo": {"codStatus": 1, "status": "A VENCER", "dtPagto": 0}})

    result = await make_gateway(handler).inquire(build_inquiry_payload(CONFIG, "1234567890"))

    assert result.status_code == 1
    assert result.due_date is None
    assert result.paid_date is None


async def test_inquiry_unpaid_zero_amount_is_absent():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"titulo": {"codStatus": 1, "vlrPagto": 0, "dtPagto": 0}})

    result = await make_gateway(handler).inquire(build_inquiry_payload(CONFIG, "1234567890"))

    assert result.paid_amount is None
    assert result.paid_date is None


async def test_register_value_rejected_by_simulator():
    gateway = BankGateway(SimulatedTransport(random.Random(1)))
    payload = registration_payload().model_copy(update={"vl_nominal_titulo": 10_000_000_000})

    with pytest.raises(GatewayError, match="VALOR DO TITULO INVALIDO"):
        await gateway.register(payload)


async def test_write_off_acknowledgement():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": 200, "transacao": "CBTTIAGR", "mensagem": "OK"})

    payload = build_write_off_payload(CONFIG, "1234567890", "20", now=datetime(2026, 2, 1, 10, 0, 0))
    ack = await make_gateway(handler).write_off(payload)

    assert ack.status == 200
    assert ack.transacao == "CBTTIAGR"
    assert ack.mensagem == "OK"


async def test_write_off_declared_failure_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": 422, "mensagem": "TITULO JA BAIXADO"})

    payload = build_write_off_payload(CONFIG, "1234567890", "20", now=datetime(2026, 2, 1, 10, 0, 0))
    with pytest.raises(GatewayError, match="TITULO JA BAIXADO"):
        await make_gateway(handler).write_off(payload)
