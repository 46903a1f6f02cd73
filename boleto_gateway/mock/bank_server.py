"""Stand-alone mock of the Bradesco cobrança API for local runs and integration tests"""

from typing import Any, Dict

from fastapi import Body, FastAPI, Header, HTTPException

from boleto_gateway.infrastructure.clients.bank import AMEND, ENDPOINTS, INQUIRE, REGISTER, WRITE_OFF
from boleto_gateway.infrastructure.clients.simulator import SimulatedTransport

app = FastAPI(title="Mock Bradesco Server", version="1.0.0")
transport = SimulatedTransport()


def _authorize(authorization: str | None) -> None:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Token de acesso ausente")


@app.get("/health")
def health(): return {"status": "ok"}


@app.post(ENDPOINTS[REGISTER])
async def register(body: Dict[str, Any] = Body(...), authorization: str | None = Header(None)):
    _authorize(authorization)
    if not body.get("vlNominalTitulo"):
        raise HTTPException(status_code=422, detail="vlNominalTitulo obrigatorio")
    return await transport.register(body)


@app.post(ENDPOINTS[INQUIRE])
async def inquire(body: Dict[str, Any] = Body(...), authorization: str | None = Header(None)):
    _authorize(authorization)
    return await transport.inquire(body)


@app.post(ENDPOINTS[AMEND])
async def amend(body: Dict[str, Any] = Body(...), authorization: str | None = Header(None)):
    _authorize(authorization)
    return await transport.amend(body)


@app.post(ENDPOINTS[WRITE_OFF])
async def write_off(body: Dict[str, Any] = Body(...), authorization: str | None = Header(None)):
    _authorize(authorization)
    return await transport.write_off(body)
