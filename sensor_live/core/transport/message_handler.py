"""Handler de mensajes MQTT."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from paho.mqtt.client import topic_matches_sub

from ..monitoring.stats import Stats
from .payload import SensorPayload, decode_payload

logger = logging.getLogger(__name__)

PayloadSink = Callable[[SensorPayload], object]


class MessageHandler:
    """Decodifica mensajes del topic y los entrega al motor.

    Responsabilidades:
    - Filtrado por topic
    - Parseo y validación del JSON
    - Tracking de estadísticas

    Un payload malformado se loguea y se descarta sin tocar el estado.
    """

    def __init__(
        self,
        sink: PayloadSink,
        topic: str,
        stats: Optional[Stats] = None,
    ):
        self._sink = sink
        self._topic = topic
        self._stats = stats or Stats()

    def handle(self, topic: str, payload: bytes):
        """Procesa un mensaje MQTT."""
        if not topic_matches_sub(self._topic, topic):
            logger.debug("[HANDLER] Ignoring message on %s", topic)
            return

        self._stats.received += 1
        self._stats.last_message_at = time.time()

        result = decode_payload(payload)
        if not result.valid:
            self._stats.failed += 1
            logger.warning("[HANDLER] Dropped malformed payload (topic=%s): %s", topic, result.error)
            return

        try:
            self._sink(result.payload)
            self._stats.processed += 1
        except Exception as e:
            self._stats.failed += 1
            logger.exception("[HANDLER] Error: %s", e)
            return

        # Log periódico
        if self._stats.processed % 60 == 0:
            logger.info("[HANDLER] %s", self._stats)

    @property
    def stats(self) -> Stats:
        return self._stats
