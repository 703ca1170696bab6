"""Estadísticas del motor."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class Stats:
    """Contadores de ingesta, relleno y persistencia."""

    received: int = 0
    processed: int = 0
    failed: int = 0
    synthesized: int = 0
    evicted: int = 0
    persisted: int = 0
    last_message_at: float = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return (
            f"Stats: received={self.received} processed={self.processed} "
            f"failed={self.failed} synthesized={self.synthesized} "
            f"persisted={self.persisted}"
        )

    def to_dict(self) -> dict:
        """Convierte a diccionario."""
        return {
            "received": self.received,
            "processed": self.processed,
            "failed": self.failed,
            "synthesized": self.synthesized,
            "evicted": self.evicted,
            "persisted": self.persisted,
            "last_message_at": self.last_message_at,
            "started_at": self.started_at.isoformat(),
            "success_rate": self._success_rate(),
        }

    def _success_rate(self) -> float:
        """Calcula tasa de éxito de decodificación."""
        total = self.processed + self.failed
        if total == 0:
            return 1.0
        return self.processed / total
