"""Monitoring layer - Salud del enlace y métricas."""

from .health import ConnectionHealthMonitor, HealthSnapshot
from .stats import Stats

__all__ = ["ConnectionHealthMonitor", "HealthSnapshot", "Stats"]
