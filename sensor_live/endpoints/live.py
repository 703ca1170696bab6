"""Endpoints de la API de lectura en vivo (consumida por el dashboard)."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response

from ..core.engine import EXPORT_SOURCES, LiveEngine
from ..schemas import (
    HealthOut,
    SampleOut,
    WindowDurationIn,
    WindowDurationResult,
    WindowOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/live", tags=["live"])


def get_live_engine(request: Request) -> LiveEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine


@router.get("/current", response_model=SampleOut)
def current(engine: LiveEngine = Depends(get_live_engine)):
    """Última muestra de la ventana (real o rellenada)."""
    sample = engine.current_sample()
    if sample is None:
        raise HTTPException(status_code=404, detail="No samples in window")
    return sample.to_dict()


@router.get("/window", response_model=WindowOut)
def window(engine: LiveEngine = Depends(get_live_engine)):
    samples = engine.window_snapshot()
    return {
        "duration": engine.window_duration.value,
        "count": len(samples),
        "samples": [s.to_dict() for s in samples],
    }


@router.put("/window", response_model=WindowDurationResult)
def set_window(body: WindowDurationIn, engine: LiveEngine = Depends(get_live_engine)):
    """Cambia la duración de la ventana y recarga el historial."""
    try:
        loaded = engine.set_window_duration(body.duration)
    except ValueError as e:
        logger.warning("[API_LIVE] Rejected window change: %s", e)
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "duration": engine.window_duration.value,
        "history_loaded": loaded,
        "error": engine.last_error,
    }


@router.get("/health", response_model=HealthOut)
def link_health(engine: LiveEngine = Depends(get_live_engine)):
    """Estado del enlace: connected / unstable / lost."""
    return engine.health().to_dict()


@router.get("/trend")
def trend(engine: LiveEngine = Depends(get_live_engine)):
    return engine.trend().to_dict()


@router.get("/stats")
def summary_stats(engine: LiveEngine = Depends(get_live_engine)):
    return engine.summary_stats().to_dict()


@router.get("/status")
def status(engine: LiveEngine = Depends(get_live_engine)):
    return engine.health_check()


@router.get("/export.csv")
def export_csv(
    source: str = Query(default="live"),
    engine: LiveEngine = Depends(get_live_engine),
):
    """Descarga la serie como CSV (buffer vivo o re-consulta al store)."""
    if source not in EXPORT_SOURCES:
        raise HTTPException(status_code=400, detail=f"source must be one of {list(EXPORT_SOURCES)}")

    body = engine.export_csv(source)
    if body is None:
        logger.error("[API_LIVE] Export failed source=%s", source)
        raise HTTPException(status_code=503, detail="Store unavailable")

    filename = f"sensor_{engine.window_duration.value}_{source}.csv"
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
