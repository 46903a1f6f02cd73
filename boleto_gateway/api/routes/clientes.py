"""Payer (cliente pagador) registration endpoints"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from boleto_gateway.api.routes.schemas import PayerCreateRequest, PayerDetail, PayerSchema, PayerSummary
from boleto_gateway.infrastructure.database.repositories import PayerRepository
from boleto_gateway.infrastructure.database.session import get_db

router = APIRouter()


def _parse_id(payer_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(payer_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payer ID format")


@router.post("/clientes", response_model=PayerSchema, status_code=201)
def create_payer(request_body: PayerCreateRequest, db: Session = Depends(get_db)):
    """Register a new payer; documento and cep are stored digits-only"""
    repo = PayerRepository(db)
    if repo.get_by_documento(request_body.documento):
        raise HTTPException(status_code=409, detail="Payer with this document already exists")

    try:
        payer = repo.create(
            **request_body.model_dump(),
            tipo_documento="1" if len(request_body.documento) == 11 else "2",
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Payer with this document already exists")

    db.refresh(payer)
    logging.info("Payer registered", extra={"cliente_id": str(payer.id)})
    return payer


@router.get("/clientes", response_model=List[PayerSummary])
def list_payers(db: Session = Depends(get_db)):
    """All payers with their boleto counts"""
    return [
        PayerSummary.model_validate(payer).model_copy(update={"total_boletos": count})
        for payer, count in PayerRepository(db).list_with_counts()
    ]


@router.get("/clientes/{payer_id}", response_model=PayerDetail)
def get_payer(payer_id: str, db: Session = Depends(get_db)):
    """Payer with all of its boletos"""
    payer = PayerRepository(db).get(_parse_id(payer_id))
    if not payer:
        raise HTTPException(status_code=404, detail="Payer not found")
    return payer


@router.delete("/clientes/{payer_id}", status_code=204)
def delete_payer(payer_id: str, db: Session = Depends(get_db)):
    """
    Delete a payer together with its boletos and their notifications.

    All three deletes run in one transaction; a failure leaves everything in place.
    """
    repo = PayerRepository(db)
    payer = repo.get(_parse_id(payer_id))
    if not payer:
        raise HTTPException(status_code=404, detail="Payer not found")

    try:
        repo.delete(payer)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logging.error(f"Payer delete failed: {e}", extra={"cliente_id": payer_id})
        raise HTTPException(status_code=500, detail="Could not delete payer")

    logging.info("Payer deleted", extra={"cliente_id": payer_id})
