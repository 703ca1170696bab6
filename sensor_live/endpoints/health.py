"""Health and readiness endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Request

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Liveness probe: siempre ok si el proceso está vivo."""
    return {"status": "ok"}


@router.get("/ready")
def ready(request: Request):
    """Readiness probe: verifica conectividad con el store durable."""
    store = getattr(request.app.state, "store", None)
    if store is None or not store.ping():
        logger.warning("[READY] Store not reachable")
        raise HTTPException(status_code=503, detail="not ready")
    return {"status": "ready"}
