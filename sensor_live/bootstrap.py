"""Construcción del motor a partir de la configuración del entorno."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from common.config import Settings, get_settings
from common.db import get_engine

from .core.domain.window_config import WindowDuration
from .core.engine import LiveEngine
from .core.persistence.async_writer import AsyncStoreWriter
from .core.persistence.store import SensorLogStore
from .core.transport.mqtt_client import MQTTClient

logger = logging.getLogger(__name__)


def resolve_window(label: Optional[str]) -> WindowDuration:
    """Duración inicial; una etiqueta fuera del menú cae al default con warning."""
    try:
        return WindowDuration.parse(label or WindowDuration.ONE_MINUTE)
    except ValueError:
        logger.warning("[BOOT] Invalid window %r, falling back to %s", label, WindowDuration.ONE_MINUTE.value)
        return WindowDuration.ONE_MINUTE


def build_store(settings: Settings) -> SensorLogStore:
    store = SensorLogStore(get_engine(settings))
    if store.is_configured:
        store.ensure_schema()
    return store


def build_live_engine(
    settings: Optional[Settings] = None,
    store: Optional[SensorLogStore] = None,
    window: Optional[str] = None,
) -> Tuple[LiveEngine, SensorLogStore]:
    """Arma transporte MQTT, store, writer y motor (sin arrancarlo)."""
    settings = settings or get_settings()
    store = store if store is not None else build_store(settings)

    transport = MQTTClient.from_settings(settings)
    writer = AsyncStoreWriter(store, max_queue_size=settings.store_writer_queue_size)

    engine = LiveEngine(
        transport,
        store,
        topic=settings.mqtt_topic,
        window_duration=resolve_window(window or settings.window_default),
        writer=writer,
    )
    logger.info(
        "[BOOT] broker=%s:%d transport=%s topic=%s window=%s persistence=%s",
        settings.mqtt_broker_host,
        settings.mqtt_broker_port,
        settings.mqtt_transport,
        settings.mqtt_topic,
        engine.window_duration.value,
        "on" if store.is_configured else "off",
    )
    return engine, store
