"""Escritor asíncrono del store durable.

Desacopla el camino de ingesta (callback de paho / lock del motor) de la
escritura bloqueante en BD: `submit()` solo encola y retorna; un worker
drena la cola y llama a `store.insert()`.

Sin reintentos: una escritura fallida se loguea, se cuenta y se pierde.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100

_STOP = object()


class AsyncStoreWriter:
    """Cola acotada + un worker para inserts best-effort.

    - submit() retorna en microsegundos (put_nowait)
    - Cola llena → la lectura se descarta (backpressure)
    - Los errores del store nunca llegan al llamador
    """

    def __init__(self, store, max_queue_size: int = DEFAULT_QUEUE_SIZE):
        self._store = store
        self._queue: queue.Queue = queue.Queue(maxsize=max_queue_size)
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

        # Métricas
        self._submitted = 0
        self._written = 0
        self._failed = 0
        self._dropped = 0

    def start(self) -> None:
        """Inicia el worker."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(
            target=self._worker_loop,
            daemon=True,
            name="store-writer",
        )
        self._thread.start()
        logger.info("[STORE_WRITER] Started queue_max=%d", self._queue.maxsize)

    def stop(self, drain: bool = True, timeout: float = 5.0) -> None:
        """Detiene el worker. Con drain=True escribe lo pendiente antes."""
        if self._thread is None:
            return

        if not drain:
            self._discard_pending()

        try:
            self._queue.put(_STOP, timeout=timeout)
        except queue.Full:
            logger.warning("[STORE_WRITER] Queue still full on stop, abandoning pending writes")

        self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("[STORE_WRITER] Stopped. %s", self.metrics)

    def submit(self, temperature: float, humidity: float) -> bool:
        """Encola un insert. Devuelve False si la cola está llena."""
        try:
            self._queue.put_nowait((float(temperature), float(humidity)))
        except queue.Full:
            with self._lock:
                self._dropped += 1
            logger.warning("[STORE_WRITER] Queue full, dropping write")
            return False

        with self._lock:
            self._submitted += 1
        return True

    def flush(self) -> None:
        """Bloquea hasta que la cola quede vacía (usado en tests y en stop)."""
        self._queue.join()

    def _worker_loop(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._write(item)
            finally:
                self._queue.task_done()

    def _write(self, item: Tuple[float, float]) -> None:
        temperature, humidity = item
        try:
            ok = self._store.insert(temperature, humidity)
        except Exception as e:
            logger.error("[STORE_WRITER] Insert raised: %s", e)
            ok = False

        with self._lock:
            if ok:
                self._written += 1
            else:
                self._failed += 1

        if not ok:
            logger.warning(
                "[STORE_WRITER] Write lost temperature=%.2f humidity=%.2f",
                temperature, humidity,
            )

    def _discard_pending(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return
            self._queue.task_done()
            with self._lock:
                self._dropped += 1

    @property
    def metrics(self) -> dict:
        with self._lock:
            return {
                "queue_depth": self._queue.qsize(),
                "queue_max": self._queue.maxsize,
                "submitted": self._submitted,
                "written": self._written,
                "failed": self._failed,
                "dropped": self._dropped,
            }
