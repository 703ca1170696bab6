"""Exportación de la serie a CSV.

Columnas: time, temperature, humidity, status. El status distingue filas
reales (REAL) de filas rellenadas con el último valor conocido.

Dos fuentes:
- snapshot vivo: ya viene rellenado por el GapFiller, se exporta tal cual
- store durable: se detectan huecos entre timestamps consecutivos con una
  tolerancia mayor que la del camino vivo (jitter del store) y se rellenan
  de la misma forma
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from ..domain.sample import Sample, ms_to_datetime
from ..domain.window_config import EXPORT_GAP_TOLERANCE, SAVE_INTERVAL_MS

logger = logging.getLogger(__name__)

STATUS_REAL = "REAL"
STATUS_MISSING = "MISSING → filled from last value"

CSV_HEADER = ("time", "temperature", "humidity", "status")


@dataclass(frozen=True)
class ExportRow:
    timestamp_ms: int
    temperature: float
    humidity: float
    status: str

    @property
    def is_real(self) -> bool:
        return self.status == STATUS_REAL

    @property
    def time(self) -> str:
        return ms_to_datetime(self.timestamp_ms).isoformat(timespec="milliseconds")

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "status": self.status,
        }


def rows_from_snapshot(samples: Iterable[Sample]) -> List[ExportRow]:
    """Filas a partir del buffer vivo (sintéticas ya marcadas)."""
    return [
        ExportRow(
            timestamp_ms=s.timestamp_ms,
            temperature=s.temperature,
            humidity=s.humidity,
            status=STATUS_MISSING if s.synthetic else STATUS_REAL,
        )
        for s in samples
    ]


def rows_from_store(
    samples: Sequence[Sample],
    step_interval_ms: int = SAVE_INTERVAL_MS,
    tolerance: float = EXPORT_GAP_TOLERANCE,
) -> List[ExportRow]:
    """Filas a partir de lecturas del store, rellenando huecos.

    Un hueco es una diferencia entre timestamps consecutivos mayor que
    `tolerance × step`. Se insertan round(gap / step) - 1 filas MISSING con
    los valores de la fila real anterior. Las filas reales se conservan
    en orden y con sus valores exactos.
    """
    if step_interval_ms <= 0:
        raise ValueError("step_interval_ms must be positive")

    threshold = step_interval_ms * tolerance
    rows: List[ExportRow] = []
    previous = None

    for sample in samples:
        if previous is not None:
            gap = sample.timestamp_ms - previous.timestamp_ms
            if gap > threshold:
                missing = int(round(gap / step_interval_ms)) - 1
                for k in range(1, missing + 1):
                    rows.append(
                        ExportRow(
                            timestamp_ms=previous.timestamp_ms + k * step_interval_ms,
                            temperature=previous.temperature,
                            humidity=previous.humidity,
                            status=STATUS_MISSING,
                        )
                    )
        rows.append(
            ExportRow(
                timestamp_ms=sample.timestamp_ms,
                temperature=sample.temperature,
                humidity=sample.humidity,
                status=STATUS_REAL,
            )
        )
        previous = sample

    return rows


def to_csv(rows: Iterable[ExportRow]) -> str:
    """Renderiza las filas como texto CSV (con encabezado)."""
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    n = 0
    for row in rows:
        writer.writerow([row.time, row.temperature, row.humidity, row.status])
        n += 1
    logger.debug("[EXPORT] Rendered %d rows", n)
    return out.getvalue()
