"""Boleto lifecycle endpoints under /boletos"""

from typing import List, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import HTMLResponse

from boleto_gateway.api.dependencies import get_lifecycle_service
from boleto_gateway.api.routes.schemas import (
    AcknowledgementResponse,
    AmendRequest,
    BankRegistrationView,
    BoletoCreateRequest,
    BoletoIssueResponse,
    BoletoSchema,
    InquiryResponse,
    IssuedBoletoView,
    SettlementResponse,
    WriteOffRequest,
)
from boleto_gateway.domain.models import Acknowledgement
from boleto_gateway.services.document import render_boleto_html
from boleto_gateway.services.lifecycle import BoletoLifecycleService

router = APIRouter()


def _ack_response(ack: Acknowledgement) -> AcknowledgementResponse:
    return AcknowledgementResponse(
        status=ack.status,
        mensagem=ack.mensagem,
        transacao=ack.transacao,
        retorno_banco=ack.raw,
    )


@router.post("/boletos", response_model=BoletoIssueResponse)
async def issue_boleto(
    request_body: BoletoCreateRequest,
    service: BoletoLifecycleService = Depends(get_lifecycle_service),
):
    """
    Issue a new boleto.

    Flow:
    1. Load billing configuration and payer (400 if missing)
    2. Register at the bank (502/503 on bank failure, nothing stored)
    3. Persist as PENDING and return both normalized and bank-native fields
    """
    issued = await service.issue(
        cliente_id=request_body.cliente_id,
        seu_numero=request_body.seu_numero,
        valor=request_body.valor,
        data_vencimento=request_body.data_vencimento,
        especie=request_body.especie,
    )
    boleto = issued.boleto

    return BoletoIssueResponse(
        boleto=IssuedBoletoView(
            id=boleto.id,
            nosso_numero=boleto.nosso_numero,
            seu_numero=boleto.seu_numero,
            linha_digitavel=boleto.linha_digitavel,
            codigo_barras=boleto.codigo_barras,
            valor=boleto.valor_nominal,
            vencimento=boleto.data_vencimento,
            cliente=boleto.cliente.nome,
            status_codigo=boleto.status_codigo,
            status_descricao=boleto.status_descricao,
        ),
        retorno_banco=BankRegistrationView(
            nu_titulo_gerado=issued.registration.nosso_numero,
            linha_digitavel=issued.registration.linha_digitavel,
            cd_barras=issued.registration.codigo_barras,
        ),
    )


@router.get("/boletos/pendentes", response_model=List[BoletoSchema])
def list_pending(service: BoletoLifecycleService = Depends(get_lifecycle_service)):
    """Open boletos not yet due, earliest due date first"""
    return [BoletoSchema.from_boleto(b) for b in service.list_pending()]


@router.get("/boletos/atrasados", response_model=List[BoletoSchema])
def list_overdue(service: BoletoLifecycleService = Depends(get_lifecycle_service)):
    """Open boletos past their due date"""
    return [BoletoSchema.from_boleto(b) for b in service.list_overdue()]


@router.post("/boletos/{nosso_numero}/pagar", response_model=SettlementResponse)
def simulate_payment(nosso_numero: str, service: BoletoLifecycleService = Depends(get_lifecycle_service)):
    """[SIMULATION] Mark the boleto as paid and log a liquidation event"""
    boleto = service.simulate_settlement(nosso_numero)
    return SettlementResponse(
        mensagem="Pagamento simulado com sucesso",
        boleto=BoletoSchema.from_boleto(boleto),
    )


@router.get("/boletos/{nosso_numero}/pdf", response_class=HTMLResponse)
def render_document(nosso_numero: str, service: BoletoLifecycleService = Depends(get_lifecycle_service)):
    """Printable HTML version of the boleto"""
    boleto = service.get(nosso_numero)
    return HTMLResponse(content=render_boleto_html(boleto))


@router.get("/boletos/{nosso_numero}/status", response_model=InquiryResponse)
async def inquire_boleto(nosso_numero: str, service: BoletoLifecycleService = Depends(get_lifecycle_service)):
    """Ask the bank for the boleto's current status (local record untouched)"""
    result = await service.inquire(nosso_numero)
    return InquiryResponse(
        nosso_numero=nosso_numero,
        status=result.status,
        status_code=result.status_code,
        data_vencimento=result.due_date,
        valor_pago=result.paid_amount,
        data_pagamento=result.paid_date,
        retorno_banco=result.raw,
    )


@router.post("/boletos/{nosso_numero}/alterar", response_model=AcknowledgementResponse)
async def amend_boleto(
    nosso_numero: str,
    request_body: Optional[AmendRequest] = Body(None),
    service: BoletoLifecycleService = Depends(get_lifecycle_service),
):
    """Maintenance request; currently supports moving the due date"""
    new_due = request_body.data_vencimento if request_body else None
    ack = await service.amend(nosso_numero, data_vencimento=new_due)
    return _ack_response(ack)


@router.post("/boletos/{nosso_numero}/cancelar", response_model=AcknowledgementResponse)
async def write_off_boleto(
    nosso_numero: str,
    request_body: Optional[WriteOffRequest] = Body(None),
    service: BoletoLifecycleService = Depends(get_lifecycle_service),
):
    """Write off (baixa) the boleto at the bank; reason 20 unless told otherwise"""
    reason = request_body.motivo if request_body else "20"
    ack = await service.write_off(nosso_numero, reason_code=reason)
    return _ack_response(ack)
