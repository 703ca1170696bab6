"""Tareas periódicas del motor (tick de salud / evicción / relleno)."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTicker:
    """Thread que invoca `callback` cada `interval` segundos.

    Un error en el callback se loguea y el ticker sigue: un tick fallido
    no debe detener la degradación de salud ni la evicción.
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "ticker"):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._interval = float(interval)
        self._callback = callback
        self._name = name
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Inicia el thread del ticker."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, daemon=True, name=self._name)
        self._thread.start()
        logger.info("[TICKER] %s started interval=%.1fs", self._name, self._interval)

    def stop(self, timeout: float = 5.0) -> None:
        """Detiene el ticker y espera al thread."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
            logger.info("[TICKER] %s stopped", self._name)

    def _loop(self) -> None:
        """Loop principal: wait() en vez de sleep() para parar sin demora."""
        while not self._stop_event.wait(self._interval):
            try:
                self._callback()
            except Exception as e:
                logger.exception("[TICKER] %s callback error: %s", self._name, e)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
