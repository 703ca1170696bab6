"""Configuración de ventana y cadencias fijas del motor.

Las cadencias (paso, guardado, umbrales de salud) son constantes: el
producto no las expone como configuración en runtime. Solo la duración
de la ventana es seleccionable, y únicamente desde un menú cerrado.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

# Cadencia esperada entre muestras reales
STEP_INTERVAL_MS = 1_000

# Separación mínima entre escrituras al store durable
SAVE_INTERVAL_MS = 15_000

# Umbrales de salud del enlace
UNSTABLE_AFTER_MS = 20_000
LOST_AFTER_MS = 40_000

# Granularidad del tick periódico (salud + evicción + relleno)
TICK_INTERVAL_SECONDS = 1.0

# Look-back de la media móvil
TREND_LOOKBACK = 10

# Tolerancia del exportador sobre el paso esperado (absorbe jitter del store)
EXPORT_GAP_TOLERANCE = 1.5


_SECONDS = {
    "1m": 60,
    "5m": 5 * 60,
    "30m": 30 * 60,
    "1h": 60 * 60,
    "6h": 6 * 60 * 60,
    "1d": 24 * 60 * 60,
}


class WindowDuration(Enum):
    """Duraciones de ventana seleccionables."""

    ONE_MINUTE = "1m"
    FIVE_MINUTES = "5m"
    THIRTY_MINUTES = "30m"
    ONE_HOUR = "1h"
    SIX_HOURS = "6h"
    ONE_DAY = "1d"

    @property
    def seconds(self) -> int:
        return _SECONDS[self.value]

    @property
    def milliseconds(self) -> int:
        return self.seconds * 1000

    @classmethod
    def parse(cls, value: Union[str, int, "WindowDuration"]) -> "WindowDuration":
        """Acepta la etiqueta ("5m") o la duración en segundos (300).

        Raises:
            ValueError: si el valor no está en el menú
        """
        if isinstance(value, cls):
            return value

        if isinstance(value, int) and not isinstance(value, bool):
            for duration in cls:
                if duration.seconds == value:
                    return duration
            raise ValueError(f"Unsupported window duration: {value}s")

        label = str(value).strip().lower()
        for duration in cls:
            if duration.value == label:
                return duration
        if label.isdigit():
            return cls.parse(int(label))

        allowed = ", ".join(d.value for d in cls)
        raise ValueError(f"Unsupported window duration: {value!r} (allowed: {allowed})")
