"""Monitor de salud de la conexión.

Máquina de estados del enlace, derivada SOLO del silencio transcurrido
desde el último mensaje real:

- CONNECTED → UNSTABLE cuando elapsed >= T_unstable
- UNSTABLE  → LOST     cuando elapsed >= T_lost
- cualquier estado → CONNECTED al llegar un mensaje real

Ningún estado es terminal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..domain.health_state import HealthState
from ..domain.window_config import LOST_AFTER_MS, UNSTABLE_AFTER_MS

logger = logging.getLogger(__name__)


@dataclass
class HealthSnapshot:
    """Estado del enlace en un instante."""
    state: HealthState
    elapsed_ms: int
    last_message_ms: int

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "seconds_since_last_message": round(self.elapsed_ms / 1000.0, 3),
            "last_message_ms": self.last_message_ms,
        }


class ConnectionHealthMonitor:
    """Clasifica el enlace (connected / unstable / lost).

    `last_message_ms` arranca en el instante de creación del motor: si nunca
    llega nada, el enlace se degrada igual que tras un corte.
    """

    def __init__(
        self,
        started_at_ms: int,
        unstable_after_ms: int = UNSTABLE_AFTER_MS,
        lost_after_ms: int = LOST_AFTER_MS,
    ):
        if lost_after_ms <= unstable_after_ms:
            raise ValueError("lost_after_ms must be greater than unstable_after_ms")

        self._unstable_after_ms = int(unstable_after_ms)
        self._lost_after_ms = int(lost_after_ms)
        self._last_message_ms = int(started_at_ms)
        self._state = HealthState.CONNECTED
        self._has_message = False

    def record_message(self, at_ms: int) -> None:
        """Registra un mensaje real: vuelve a CONNECTED inmediatamente."""
        if at_ms > self._last_message_ms or not self._has_message:
            self._last_message_ms = int(at_ms)
        self._has_message = True
        self._transition(HealthState.CONNECTED)

    def elapsed_ms(self, now_ms: int) -> int:
        return max(0, int(now_ms) - self._last_message_ms)

    def classify(self, now_ms: int) -> HealthState:
        """Clasificación pura (sin efectos) para un instante."""
        elapsed = self.elapsed_ms(now_ms)
        if elapsed >= self._lost_after_ms:
            return HealthState.LOST
        if elapsed >= self._unstable_after_ms:
            return HealthState.UNSTABLE
        return HealthState.CONNECTED

    def update(self, now_ms: int) -> HealthState:
        """Reclasifica en el tick y registra la transición si la hay."""
        self._transition(self.classify(now_ms))
        return self._state

    def is_offline(self, at_ms: int) -> bool:
        """Decide el flag `offline` de una muestra sintética en `at_ms`.

        Offline desde T_unstable (y por tanto también todo lo que ya está
        en LOST): los periodos de recuperación a medias siguen marcados como
        offline para que el flag no parpadee.
        """
        return self.elapsed_ms(at_ms) >= self._unstable_after_ms

    def snapshot(self, now_ms: int) -> HealthSnapshot:
        return HealthSnapshot(
            state=self.classify(now_ms),
            elapsed_ms=self.elapsed_ms(now_ms),
            last_message_ms=self._last_message_ms,
        )

    def _transition(self, new_state: HealthState) -> None:
        if new_state is self._state:
            return
        log = logger.info if new_state is HealthState.CONNECTED else logger.warning
        log("[HEALTH] %s -> %s", self._state.value, new_state.value)
        self._state = new_state

    @property
    def state(self) -> HealthState:
        """Último estado registrado por `update`/`record_message`."""
        return self._state

    @property
    def last_message_ms(self) -> int:
        return self._last_message_ms

    @property
    def has_message(self) -> bool:
        return self._has_message

    @property
    def unstable_after_ms(self) -> int:
        return self._unstable_after_ms

    @property
    def lost_after_ms(self) -> int:
        return self._lost_after_ms
