from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _default_env_file() -> str:
    # .env en la raíz del repo; se puede sobreescribir con SENSOR_LIVE_ENV_FILE.
    repo_root = Path(__file__).resolve().parents[1]
    return str(repo_root / ".env")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    mqtt_broker_host: str
    mqtt_broker_port: int
    mqtt_transport: str  # "websockets" | "tcp"
    mqtt_ws_path: str
    mqtt_tls: bool
    mqtt_username: Optional[str]
    mqtt_password: Optional[str]
    mqtt_topic: str
    mqtt_client_id: str

    database_url: Optional[str]

    window_default: str
    store_writer_queue_size: int


def get_settings() -> Settings:
    # Carga el env file (si existe) sin pisar variables de entorno reales.
    env_file = os.getenv("SENSOR_LIVE_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    # Valores por defecto: broker público que usa el dashboard
    # (WebSocket seguro en 8884, path /mqtt).
    return Settings(
        mqtt_broker_host=os.getenv("MQTT_BROKER_HOST", "broker.hivemq.com"),
        mqtt_broker_port=int(os.getenv("MQTT_BROKER_PORT", "8884")),
        mqtt_transport=os.getenv("MQTT_TRANSPORT", "websockets").strip().lower(),
        mqtt_ws_path=os.getenv("MQTT_WS_PATH", "/mqtt"),
        mqtt_tls=_env_bool("MQTT_TLS", True),
        mqtt_username=os.getenv("MQTT_USERNAME") or None,
        mqtt_password=os.getenv("MQTT_PASSWORD") or None,
        mqtt_topic=os.getenv("MQTT_TOPIC", "jetson/box/sensor"),
        mqtt_client_id=os.getenv("MQTT_CLIENT_ID", "sensor-live"),
        database_url=os.getenv("DATABASE_URL") or None,
        window_default=os.getenv("LIVE_WINDOW_DEFAULT", "1m"),
        store_writer_queue_size=int(os.getenv("STORE_WRITER_QUEUE_SIZE", "100")),
    )
