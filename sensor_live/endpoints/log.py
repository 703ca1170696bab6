"""Endpoint de escritura directa al store (POST /api/log).

Mismo contrato que usa el dashboard para registrar lecturas sueltas:
400 si el payload no es válido, 500 si el servidor no tiene BD o el
insert falla.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ..core.transport.payload import decode_payload
from ..schemas import LogResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["log"])


@router.post("/log", response_model=LogResult)
async def log_reading(request: Request):
    # Cuerpo crudo: un JSON roto también es 400, no 422
    result = decode_payload(await request.body())
    if not result.valid:
        logger.warning("[API_LOG] Invalid payload: %s", result.error)
        return JSONResponse(status_code=400, content={"error": "Invalid payload"})

    store = getattr(request.app.state, "store", None)
    if store is None or not store.is_configured:
        logger.error("[API_LOG] Store not configured")
        return JSONResponse(
            status_code=500,
            content={"error": "Server is misconfigured (missing env vars)."},
        )

    payload = result.payload
    inserted = await run_in_threadpool(store.insert, payload.temperature, payload.humidity)
    if not inserted:
        return JSONResponse(status_code=500, content={"error": "Insert failed"})

    return {"ok": True}
