from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool

from common.db import dispose_engine

from . import __version__
from .bootstrap import build_live_engine
from .core.engine import LiveEngine
from .core.persistence.store import SensorLogStore
from .endpoints import health_router, live_router, log_router

logger = logging.getLogger(__name__)


def create_app(
    engine: Optional[LiveEngine] = None,
    store: Optional[SensorLogStore] = None,
) -> FastAPI:
    """Crea la app HTTP.

    Con `engine` inyectado la app no gestiona su ciclo de vida (lo hace
    quien lo creó). Sin él, el lifespan arma el motor desde el entorno,
    lo arranca y lo detiene al apagar.
    """
    owns_engine = engine is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if owns_engine:
            live_engine, live_store = await run_in_threadpool(build_live_engine, store=app.state.store)
            app.state.engine = live_engine
            app.state.store = live_store
            # Bloqueante (conexión MQTT + consulta de historial): fuera del event loop
            await run_in_threadpool(live_engine.start)
            logger.info("[APP] Live engine started")
        try:
            yield
        finally:
            if owns_engine and app.state.engine is not None:
                await run_in_threadpool(app.state.engine.stop)
                logger.info("[APP] Live engine stopped")
                app.state.engine = None
                dispose_engine()

    app = FastAPI(title="Sensor Live Service", version=__version__, lifespan=lifespan)
    app.state.engine = engine
    app.state.store = store

    app.include_router(health_router)
    app.include_router(live_router)
    app.include_router(log_router)
    return app


app = create_app()
