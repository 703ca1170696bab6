"""Motor de ventana en vivo.

Une los componentes del pipeline:

    transporte → decodificación → GapFiller → SlidingWindowBuffer
                                      ↑              ↑
                           ConnectionHealthMonitor   tick 1s (salud/evicción/relleno)
    muestra real → PersistenceThrottler → AsyncStoreWriter → store durable

Un único RLock protege la ventana, el ancla del relleno y la salud: lo
toman el callback de ingesta (thread de paho), el tick y todas las
lecturas. La E/S externa (consultas al store, inserts) nunca se hace con
el lock tomado.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Tuple, Union

from .analytics.trend import SummaryStats, TrendAggregator, TrendSeries
from .buffer.sliding_window import SlidingWindowBuffer
from .domain.health_state import HealthState
from .domain.sample import Sample, now_ms
from .domain.window_config import (
    LOST_AFTER_MS,
    SAVE_INTERVAL_MS,
    STEP_INTERVAL_MS,
    TICK_INTERVAL_SECONDS,
    TREND_LOOKBACK,
    UNSTABLE_AFTER_MS,
    WindowDuration,
)
from .export.serializer import ExportRow, rows_from_snapshot, rows_from_store, to_csv
from .gap_filler import GapFiller
from .monitoring.health import ConnectionHealthMonitor, HealthSnapshot
from .monitoring.stats import Stats
from .persistence.async_writer import AsyncStoreWriter
from .persistence.throttler import PersistenceThrottler
from .scheduler import PeriodicTicker
from .transport.message_handler import MessageHandler
from .transport.payload import SensorPayload

logger = logging.getLogger(__name__)

EXPORT_SOURCES = ("live", "store")


class LiveEngine:
    """Motor con ciclo de vida explícito (start/stop).

    Colaboradores inyectados:
    - transport: `set_message_handler(fn)`, `connect() -> bool`,
      `disconnect()`, `is_connected`
    - store: `fetch_since_ms(ms) -> list | None`, `insert(t, h) -> bool`
    - writer (opcional): `submit(t, h) -> bool`, `start()`, `stop()`;
      por defecto un `AsyncStoreWriter` sobre el store
    """

    def __init__(
        self,
        transport,
        store,
        *,
        topic: str = "jetson/box/sensor",
        window_duration: Union[str, int, WindowDuration] = WindowDuration.ONE_MINUTE,
        writer=None,
        step_interval_ms: int = STEP_INTERVAL_MS,
        save_interval_ms: int = SAVE_INTERVAL_MS,
        unstable_after_ms: int = UNSTABLE_AFTER_MS,
        lost_after_ms: int = LOST_AFTER_MS,
        trend_lookback: int = TREND_LOOKBACK,
        tick_interval: float = TICK_INTERVAL_SECONDS,
        clock: Callable[[], int] = now_ms,
    ):
        self._transport = transport
        self._store = store
        self._writer = writer if writer is not None else AsyncStoreWriter(store)
        self._clock = clock
        self._lock = threading.RLock()

        self._duration = WindowDuration.parse(window_duration)
        self._buffer = SlidingWindowBuffer()
        self._gap_filler = GapFiller(step_interval_ms)
        self._health = ConnectionHealthMonitor(
            clock(),
            unstable_after_ms=unstable_after_ms,
            lost_after_ms=lost_after_ms,
        )
        self._throttler = PersistenceThrottler(self._writer, save_interval_ms=save_interval_ms)
        self._trend = TrendAggregator(trend_lookback)
        self._stats = Stats()
        self._handler = MessageHandler(self._on_payload, topic, self._stats)
        self._ticker = PeriodicTicker(tick_interval, self.tick, name="engine-tick")

        self._running = False
        self._last_error: Optional[str] = None
        # Cada reset toma un número; solo el más reciente puede aplicar su resultado
        self._reset_generation = 0

    # ------------------------------------------------------------------
    # Ciclo de vida
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Inicia el motor: historial, transporte y tick."""
        if self._running:
            return True

        self._writer.start()

        # 1. Ventana inicial desde el store (un fallo deja la ventana vacía)
        self._reset_window(self._duration)

        # 2. Suscripción al transporte
        self._transport.set_message_handler(self._handler.handle)
        if not self._transport.connect():
            logger.warning("[ENGINE] Transport not connected yet; health will degrade until data arrives")

        # 3. Tick de salud / evicción / relleno
        self._ticker.start()

        self._running = True
        logger.info("[ENGINE] Started window=%s", self._duration.value)
        return True

    def stop(self) -> None:
        """Detiene el tick, libera la suscripción y vacía el writer."""
        if not self._running:
            return

        self._running = False
        self._ticker.stop()
        self._transport.disconnect()
        self._writer.stop()
        logger.info("[ENGINE] Stopped. %s", self._stats)

    # ------------------------------------------------------------------
    # Mutaciones (siempre bajo el lock)
    # ------------------------------------------------------------------

    def ingest(self, temperature: float, humidity: float, at_ms: Optional[int] = None) -> Sample:
        """Camino de ingesta de una muestra real."""
        now = self._clock()
        ts = now if at_ms is None else int(at_ms)
        sample = Sample(timestamp_ms=ts, temperature=float(temperature), humidity=float(humidity))

        with self._lock:
            horizon = now - self._duration.milliseconds
            filled = self._gap_filler.fill_arrival(
                self._buffer.latest(), sample, self._health.is_offline, horizon,
            )
            for synthetic in filled:
                self._buffer.append(synthetic)
            self._buffer.append(sample)
            self._health.record_message(ts)

            self._stats.synthesized += len(filled)
            self._evict_locked(now)

            if self._throttler.offer(sample):
                self._stats.persisted += 1

        return sample

    def tick(self, now: Optional[int] = None) -> HealthState:
        """Tick periódico: salud, relleno por silencio y evicción."""
        now = self._clock() if now is None else int(now)

        with self._lock:
            state = self._health.update(now)
            horizon = now - self._duration.milliseconds
            filled = self._gap_filler.fill_silence(
                self._buffer.latest(), now, self._health.is_offline, horizon,
            )
            for synthetic in filled:
                self._buffer.append(synthetic)
            self._stats.synthesized += len(filled)
            self._evict_locked(now)

        return state

    def set_window_duration(self, duration: Union[str, int, WindowDuration]) -> bool:
        """Cambia la duración de la ventana y la recarga desde el store.

        Raises:
            ValueError: si la duración no está en el menú

        Returns:
            True si el historial se recargó; False si la consulta falló
            (la ventana se conserva, re-filtrada al nuevo horizonte) o si
            otro cambio de duración posterior lo reemplazó
        """
        new_duration = WindowDuration.parse(duration)
        return self._reset_window(new_duration)

    def _reset_window(self, duration: WindowDuration) -> bool:
        with self._lock:
            self._reset_generation += 1
            generation = self._reset_generation
            started = self._clock()

        # E/S fuera del lock: la ingesta sigue mientras tanto
        readings = self._store.fetch_since_ms(started - duration.milliseconds)

        with self._lock:
            if generation != self._reset_generation:
                logger.info(
                    "[WINDOW] Discarding stale reload for window=%s (superseded)", duration.value,
                )
                return False

            now = self._clock()
            previous = self._duration
            self._duration = duration

            if readings is None:
                self._last_error = "history load failed"
                self._evict_locked(now)
                logger.error(
                    "[ENGINE] History load failed for window=%s; keeping current window (%d samples)",
                    duration.value, len(self._buffer),
                )
                return False

            fresh = SlidingWindowBuffer(r.to_sample() for r in readings)
            newest_stored = fresh.latest()
            cutoff = started if newest_stored is None else max(started, newest_stored.timestamp_ms + 1)

            # Muestras reales ingeridas mientras corría la consulta
            carried = [
                s for s in self._buffer.snapshot()
                if s.is_genuine and s.timestamp_ms >= cutoff
            ]
            for sample in carried:
                fresh.append(sample)

            self._buffer = fresh
            self._gap_filler.reset(carried[-1] if carried else None)
            self._last_error = None
            self._evict_locked(now)

        logger.info(
            "[WINDOW] %s -> %s loaded=%d carried=%d",
            previous.value, duration.value, len(readings), len(carried),
        )
        return True

    def _evict_locked(self, now: int) -> None:
        evicted = self._buffer.evict_before(now - self._duration.milliseconds)
        self._stats.evicted += evicted

    def _on_payload(self, payload: SensorPayload) -> None:
        self.ingest(payload.temperature, payload.humidity)

    # ------------------------------------------------------------------
    # API de lectura (sin efectos)
    # ------------------------------------------------------------------

    def _snapshot(self) -> Tuple[Sample, ...]:
        now = self._clock()
        with self._lock:
            horizon = now - self._duration.milliseconds
            samples = self._buffer.snapshot()
        # El tick evicta cada segundo; entre ticks se filtra al leer
        if samples and samples[0].timestamp_ms < horizon:
            samples = tuple(s for s in samples if s.timestamp_ms >= horizon)
        return samples

    def window_snapshot(self) -> Tuple[Sample, ...]:
        return self._snapshot()

    def current_sample(self) -> Optional[Sample]:
        samples = self._snapshot()
        return samples[-1] if samples else None

    def health_state(self) -> HealthState:
        with self._lock:
            return self._health.classify(self._clock())

    def health(self) -> HealthSnapshot:
        with self._lock:
            return self._health.snapshot(self._clock())

    def trend(self) -> TrendSeries:
        return self._trend.trend(self._snapshot())

    def summary_stats(self) -> SummaryStats:
        return self._trend.summary(self._snapshot())

    def export_rows(self, source: str = "live") -> Optional[List[ExportRow]]:
        """Filas de exportación.

        Args:
            source: "live" (buffer actual) o "store" (re-consulta el
                horizonte activo en el store y rellena huecos)

        Returns:
            Filas, o None si la consulta al store falló
        """
        if source not in EXPORT_SOURCES:
            raise ValueError(f"Unsupported export source: {source!r}")

        if source == "live":
            return rows_from_snapshot(self._snapshot())

        readings = self._store.fetch_since_ms(self._clock() - self.window_duration.milliseconds)
        if readings is None:
            logger.error("[ENGINE] Export from store failed")
            return None
        return rows_from_store(
            [r.to_sample() for r in readings],
            step_interval_ms=self._throttler.save_interval_ms,
        )

    def export_csv(self, source: str = "live") -> Optional[str]:
        rows = self.export_rows(source)
        if rows is None:
            return None
        return to_csv(rows)

    @property
    def window_duration(self) -> WindowDuration:
        with self._lock:
            return self._duration

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def stats(self) -> Stats:
        return self._stats

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def health_check(self) -> dict:
        """Estado del motor para el endpoint de status."""
        health = self.health()
        with self._lock:
            window_size = len(self._buffer)
            duration = self._duration
        writer_metrics = getattr(self._writer, "metrics", None)
        return {
            "running": self._running,
            "transport_connected": bool(getattr(self._transport, "is_connected", False)),
            "health": health.to_dict(),
            "window": {"duration": duration.value, "samples": window_size},
            "last_error": self._last_error,
            "writer": writer_metrics if isinstance(writer_metrics, dict) else None,
            **self._stats.to_dict(),
        }
