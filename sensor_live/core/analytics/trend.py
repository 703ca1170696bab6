from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..domain.sample import Sample
from ..domain.window_config import TREND_LOOKBACK


@dataclass(frozen=True)
class MetricSummary:
    """Estadísticos de una métrica sobre la ventana actual.

    Con la ventana vacía todo vale 0.0 (política explícita, no error).
    """

    mean: float = 0.0
    min: float = 0.0
    max: float = 0.0
    count: int = 0

    def to_dict(self) -> dict:
        return {"mean": self.mean, "min": self.min, "max": self.max, "count": self.count}


@dataclass(frozen=True)
class SummaryStats:
    temperature: MetricSummary
    humidity: MetricSummary

    def to_dict(self) -> dict:
        return {
            "temperature": self.temperature.to_dict(),
            "humidity": self.humidity.to_dict(),
        }


@dataclass(frozen=True)
class TrendSeries:
    """Media móvil por punto, alineada con los timestamps del snapshot."""

    timestamps_ms: Tuple[int, ...]
    temperature: Tuple[float, ...]
    humidity: Tuple[float, ...]
    lookback: int

    def to_dict(self) -> dict:
        return {
            "lookback": self.lookback,
            "timestamps_ms": list(self.timestamps_ms),
            "temperature": list(self.temperature),
            "humidity": list(self.humidity),
        }


def moving_average(values: Sequence[float], lookback: int) -> List[float]:
    """Media móvil hacia atrás de `lookback` puntos, recortada al inicio.

    >>> moving_average([10, 20, 30], 3)
    [10.0, 15.0, 20.0]
    """
    if lookback <= 0:
        raise ValueError("lookback must be positive")

    result: List[float] = []
    running = 0.0
    for i, v in enumerate(values):
        running += float(v)
        if i >= lookback:
            running -= float(values[i - lookback])
        n = min(i + 1, lookback)
        result.append(running / n)
    return result


def summarize(values: Sequence[float]) -> MetricSummary:
    if not values:
        return MetricSummary()
    return MetricSummary(
        mean=sum(values) / len(values),
        min=float(min(values)),
        max=float(max(values)),
        count=len(values),
    )


class TrendAggregator:
    """Suavizado y estadísticos sobre un snapshot de la ventana."""

    def __init__(self, lookback: int = TREND_LOOKBACK) -> None:
        if lookback <= 0:
            raise ValueError("lookback must be positive")
        self._lookback = int(lookback)

    def trend(self, samples: Sequence[Sample]) -> TrendSeries:
        temps = [s.temperature for s in samples]
        hums = [s.humidity for s in samples]
        return TrendSeries(
            timestamps_ms=tuple(s.timestamp_ms for s in samples),
            temperature=tuple(moving_average(temps, self._lookback)),
            humidity=tuple(moving_average(hums, self._lookback)),
            lookback=self._lookback,
        )

    def summary(self, samples: Sequence[Sample]) -> SummaryStats:
        return SummaryStats(
            temperature=summarize([s.temperature for s in samples]),
            humidity=summarize([s.humidity for s in samples]),
        )

    @property
    def lookback(self) -> int:
        return self._lookback
