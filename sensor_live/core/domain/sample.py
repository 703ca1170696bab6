"""Modelo de dominio para muestras de temperatura/humedad."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone


def now_ms() -> int:
    """Instante actual en milisegundos epoch."""
    return int(round(time.time() * 1000))


def datetime_to_ms(dt: datetime) -> int:
    """Convierte un datetime a milisegundos epoch.

    Los datetimes naive se interpretan como UTC: solo los devuelve SQLite
    (CURRENT_TIMESTAMP en texto UTC). En Postgres la columna es TIMESTAMPTZ
    y llega con zona.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(round(dt.timestamp() * 1000))


def ms_to_datetime(timestamp_ms: int) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)


@dataclass(frozen=True)
class Sample:
    """Lectura observada o sintetizada.

    Inmutable: el buffer puede entregar las mismas instancias a renderizado,
    agregación y exportación sin riesgo de que alguien las modifique.
    """

    timestamp_ms: int
    temperature: float
    humidity: float
    synthetic: bool = False
    offline: bool = False

    @property
    def is_genuine(self) -> bool:
        return not self.synthetic

    def carried_forward(self, timestamp_ms: int, *, offline: bool = False) -> "Sample":
        """Crea una muestra sintética con los valores de esta."""
        return replace(self, timestamp_ms=timestamp_ms, synthetic=True, offline=offline)

    def to_dict(self) -> dict:
        return {
            "timestamp_ms": self.timestamp_ms,
            "time": ms_to_datetime(self.timestamp_ms).isoformat(),
            "temperature": self.temperature,
            "humidity": self.humidity,
            "synthetic": self.synthetic,
            "offline": self.offline,
        }
