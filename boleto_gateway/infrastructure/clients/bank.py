"""Bradesco registration API adapter: transports and response normalization"""

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import httpx

from boleto_gateway.config import settings
from boleto_gateway.domain.exceptions import GatewayError, GatewayUnavailableError
from boleto_gateway.domain.models import Acknowledgement, InquiryResult, RegistrationResult
from boleto_gateway.domain.payloads import AmendmentPayload, InquiryPayload, RegistrationPayload, WriteOffPayload
from boleto_gateway.infrastructure.observability.metrics import gateway_latency_histogram, record_gateway_failure

REGISTER = "register"
INQUIRE = "inquire"
AMEND = "amend"
WRITE_OFF = "write_off"

ENDPOINTS: Dict[str, str] = {
    REGISTER: "/v1/boleto-hibrido/registrar-boleto",
    INQUIRE: "/v1/boleto/titulo-consultar",
    AMEND: "/v1/boleto/titulo-alterar",
    WRITE_OFF: "/v1/boleto/titulo-estorno",
}

GENERIC_FAILURE = "Bradesco API request failed"


class BankTransport(ABC):
    """Strategy for reaching the bank: real HTTP or in-process simulator"""

    @abstractmethod
    async def register(self, body: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def inquire(self, body: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def amend(self, body: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def write_off(self, body: Dict[str, Any]) -> Dict[str, Any]:
        ...


def _remote_message(response: httpx.Response) -> Optional[str]:
    """Pull the bank's own error text out of an error response, if any"""
    try:
        data = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    for key in ("message", "mensagem", "dsRetorno", "detail"):
        if data.get(key):
            return str(data[key])
    return None


class RemoteTransport(BankTransport):
    """Transport that POSTs JSON bodies to the Bradesco Open API"""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.bradesco_api_base).rstrip("/")
        self.token = token or settings.bradesco_token
        self.timeout = timeout or settings.http_timeout_seconds
        self.http_transport = http_transport

    def _headers(self) -> Dict[str, str]:
        # TODO: replace the static bearer token with the bank's JWT client-credentials flow
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
        }

    async def _post(self, operation: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a payload to the endpoint of `operation`.

        Raises:
            GatewayUnavailableError: On timeout or connection failure
            GatewayError: On HTTP error status or a non-JSON body
        """
        url = f"{self.base_url}{ENDPOINTS[operation]}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.http_transport) as client:
            try:
                response = await client.post(url, json=body, headers=self._headers())
                response.raise_for_status()
                data = response.json()

            except httpx.TimeoutException as e:
                raise GatewayUnavailableError(
                    f"Bradesco API timeout after {self.timeout}s", operation=operation
                ) from e
            except httpx.HTTPStatusError as e:
                remote = _remote_message(e.response)
                raise GatewayError(
                    remote or f"{GENERIC_FAILURE}: HTTP {e.response.status_code}",
                    operation=operation,
                    remote_message=remote,
                ) from e
            except httpx.RequestError as e:
                raise GatewayUnavailableError(f"{GENERIC_FAILURE}: {e}", operation=operation) from e
            except ValueError as e:
                raise GatewayError(f"Invalid JSON from Bradesco API: {e}", operation=operation) from e

        if not isinstance(data, dict):
            raise GatewayError("Unexpected response shape from Bradesco API", operation=operation)
        return data

    async def register(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post(REGISTER, body)

    async def inquire(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post(INQUIRE, body)

    async def amend(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post(AMEND, body)

    async def write_off(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post(WRITE_OFF, body)


def _parse_bank_date(value: Any) -> Optional[date]:
    """Bank dates come as 'dd/mm/yyyy', 'ddmmyyyy' strings or ints, 0/'' meaning absent"""
    if value in (None, "", 0, "0"):
        return None
    text = str(value).strip()
    if text.isdigit():
        text = text.zfill(8)  # ints lose the leading zero of the day
    for fmt in ("%d/%m/%Y", "%d%m%Y", "%d.%m.%Y", "%Y-%m-%d"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _parse_amount(value: Any) -> Optional[Decimal]:
    if value in (None, ""):
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _declared_error(data: Dict[str, Any]) -> Optional[str]:
    """Business errors the bank reports inside a 200 response"""
    status = data.get("status")
    if isinstance(status, int) and status >= 400:
        return str(data.get("mensagem") or data.get("message") or f"status {status}")
    cd_retorno = data.get("cdRetorno")
    if cd_retorno not in (None, 0, "0"):
        return str(data.get("dsRetorno") or f"cdRetorno {cd_retorno}")
    return None


class BankGateway:
    """
    Sole component that knows the Bradesco request/response shapes.

    Takes fully formed payloads, calls the configured transport and maps the
    answer to normalized results. Never touches local state.
    """

    def __init__(self, transport: BankTransport):
        self.transport = transport

    async def _call(self, operation: str, body: Dict[str, Any]) -> Dict[str, Any]:
        call = getattr(self.transport, operation)
        try:
            with gateway_latency_histogram.labels(operation=operation).time():
                data = await call(body)
        except GatewayUnavailableError:
            record_gateway_failure(operation, "unavailable")
            raise
        except GatewayError:
            record_gateway_failure(operation, "rejected")
            raise

        declared = _declared_error(data)
        if declared:
            record_gateway_failure(operation, "rejected")
            raise GatewayError(declared, operation=operation, remote_message=declared)
        return data

    async def register(self, payload: RegistrationPayload) -> RegistrationResult:
        """
        Register a new boleto with the bank.

        Raises:
            GatewayError: On transport failure, declared error or missing nuTituloGerado
        """
        data = await self._call(REGISTER, payload.to_wire())

        nosso_numero = data.get("nuTituloGerado")
        if nosso_numero in (None, "", 0):
            record_gateway_failure(REGISTER, "invalid_response")
            raise GatewayError("Bradesco registration response has no nuTituloGerado", operation=REGISTER)

        linha = data.get("linhaDigitavel") or data.get("linhaDig") or ""
        barras = data.get("cdBarras") or data.get("codigoBarras") or ""
        logging.info("Boleto registered at bank", extra={"nosso_numero": str(nosso_numero)})
        return RegistrationResult(
            nosso_numero=str(nosso_numero),
            linha_digitavel=str(linha),
            codigo_barras=str(barras),
            raw=data,
        )

    async def inquire(self, payload: InquiryPayload) -> InquiryResult:
        data = await self._call(INQUIRE, payload.to_wire())

        titulo = data.get("titulo") if isinstance(data.get("titulo"), dict) else data
        code = str(titulo.get("codStatus", ""))
        paid_date = _parse_bank_date(titulo.get("dtPagto") or titulo.get("dataPagamento"))
        paid_amount = _parse_amount(titulo.get("vlrPagto", titulo.get("valorPagamento")))
        # unpaid titles come back as vlrPagto 0 with dtPagto 0
        if paid_date is None and paid_amount == 0:
            paid_amount = None
        return InquiryResult(
            status=str(titulo.get("status") or ""),
            status_code=int(code) if code.isdigit() else None,
            due_date=_parse_bank_date(titulo.get("dataVencto") or titulo.get("dataVencimento")),
            paid_amount=paid_amount,
            paid_date=paid_date,
            raw=data,
        )

    async def amend(self, payload: AmendmentPayload) -> Acknowledgement:
        data = await self._call(AMEND, payload.to_wire())
        return self._acknowledgement(data)

    async def write_off(self, payload: WriteOffPayload) -> Acknowledgement:
        data = await self._call(WRITE_OFF, payload.to_wire())
        return self._acknowledgement(data)

    @staticmethod
    def _acknowledgement(data: Dict[str, Any]) -> Acknowledgement:
        status = data.get("status", 200)
        return Acknowledgement(
            status=int(status) if isinstance(status, int) else 200,
            mensagem=str(data.get("mensagem") or data.get("message") or ""),
            transacao=data.get("transacao"),
            raw=data,
        )
