"""Throttling de persistencia.

Limita las escrituras al store durable a una cada `save_interval`
(por tiempo transcurrido desde la última, no por "segundos múltiplos de
15"), independientemente de la frecuencia de ingesta.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..domain.sample import Sample
from ..domain.window_config import SAVE_INTERVAL_MS

logger = logging.getLogger(__name__)


class PersistenceThrottler:
    """Reenvía al writer un subconjunto acotado de muestras reales.

    El writer es cualquier objeto con `submit(temperature, humidity) -> bool`
    (normalmente `AsyncStoreWriter`). El cursor avanza al enviar, no al
    confirmar: una escritura fallida simplemente se pierde.
    """

    def __init__(self, writer, *, save_interval_ms: int = SAVE_INTERVAL_MS) -> None:
        self._writer = writer
        self._save_interval_ms = int(save_interval_ms)
        self._last_persisted_ms: Optional[int] = None

    def offer(self, sample: Sample) -> bool:
        """Envía la muestra si ya pasó el intervalo mínimo.

        Returns:
            True si se envió al writer
        """
        if sample.synthetic:
            return False

        last_ms = self._last_persisted_ms
        if last_ms is not None and (sample.timestamp_ms - last_ms) < self._save_interval_ms:
            return False

        self._last_persisted_ms = sample.timestamp_ms
        accepted = self._writer.submit(sample.temperature, sample.humidity)
        if not accepted:
            logger.warning("[THROTTLE] Writer rejected sample at %d", sample.timestamp_ms)
        return bool(accepted)

    @property
    def last_persisted_ms(self) -> Optional[int]:
        return self._last_persisted_ms

    @property
    def save_interval_ms(self) -> int:
        return self._save_interval_ms
