"""Estados de salud del enlace."""

from __future__ import annotations

from enum import Enum


class HealthState(Enum):
    """Clasificación del enlace según el silencio desde el último mensaje real."""

    CONNECTED = "connected"
    UNSTABLE = "unstable"  # Silencio >= T_unstable
    LOST = "lost"          # Silencio >= T_lost
