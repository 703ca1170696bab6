from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from .config import Settings, get_settings


logger = logging.getLogger(__name__)

# Singleton engine (se crea en el primer uso, nunca al importar)
_engine: Optional[Engine] = None


def build_engine(database_url: str) -> Engine:
    # SQLite no acepta los parámetros de pool de QueuePool.
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            future=True,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        database_url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=300,
        future=True,
    )


def get_engine(settings: Optional[Settings] = None) -> Optional[Engine]:
    """Obtiene el engine del store durable (singleton).

    Returns:
        Engine si DATABASE_URL está configurado, None si no
    """
    global _engine

    if _engine is not None:
        return _engine

    settings = settings or get_settings()
    if not settings.database_url:
        logger.warning("[DB] DATABASE_URL not configured - persistence disabled")
        return None

    try:
        engine = build_engine(settings.database_url)
    except Exception:
        # No exponer la URL (lleva credenciales) en logs
        logger.exception("[DB] Failed to create engine")
        return None

    # Test de conexión: ayuda a ver en logs si el servicio realmente llega a la BD
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("[DB] Connection test OK")
    except Exception:
        logger.exception("[DB] Connection test FAILED")

    _engine = engine
    return _engine


def dispose_engine() -> None:
    """Cierra el pool y olvida el singleton."""
    global _engine

    if _engine is not None:
        _engine.dispose()
        _engine = None
