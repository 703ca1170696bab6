"""Módulo de endpoints HTTP.

Contiene los endpoints de la API del servicio organizados por función.
"""

from .health import router as health_router
from .live import router as live_router
from .log import router as log_router

__all__ = [
    "health_router",
    "live_router",
    "log_router",
]
