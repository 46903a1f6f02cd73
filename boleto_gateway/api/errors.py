"""Mapping of domain exceptions to HTTP responses"""

import logging
from typing import Dict, Type

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from boleto_gateway.api.dependencies import get_request_id
from boleto_gateway.domain.exceptions import (
    ConcurrentModificationError,
    DomainException,
    GatewayError,
    GatewayUnavailableError,
    InvalidRequestError,
    InvalidStateTransitionError,
    NotFoundError,
    PersistenceError,
)

# Most specific first: GatewayUnavailableError before GatewayError
STATUS_CODES: Dict[Type[DomainException], int] = {
    InvalidRequestError: 400,
    NotFoundError: 404,
    InvalidStateTransitionError: 409,
    ConcurrentModificationError: 409,
    GatewayUnavailableError: 503,
    GatewayError: 502,
    PersistenceError: 500,
}


def status_for(exc: DomainException) -> int:
    for exc_type, status in STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status
    return 500


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Render a domain failure as {"detail": message} with the mapped status"""
    status = status_for(exc)
    log = logging.error if status >= 500 else logging.warning
    log(
        f"{type(exc).__name__}: {exc}",
        extra={"request_id": get_request_id(request), "path": request.url.path, "status": status},
    )
    return JSONResponse(status_code=status, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
