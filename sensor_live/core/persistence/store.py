"""Store durable de lecturas (tabla sensor_logs).

El servicio solo inserta {temperature, humidity}: `created_at` lo asigna la
BD por default. Las lecturas se consultan por rango simple para la carga
inicial, los cambios de duración de ventana y la exportación.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from ..domain.sample import Sample, datetime_to_ms, ms_to_datetime

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredReading:
    """Fila de sensor_logs."""
    temperature: float
    humidity: float
    created_at: datetime

    @property
    def timestamp_ms(self) -> int:
        return datetime_to_ms(self.created_at)

    def to_sample(self) -> Sample:
        return Sample(
            timestamp_ms=self.timestamp_ms,
            temperature=self.temperature,
            humidity=self.humidity,
        )


def _parse_created_at(value) -> datetime:
    # SQLite devuelve texto ("YYYY-MM-DD HH:MM:SS"); Postgres devuelve datetime
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


class SensorLogStore:
    """Cliente del store durable sobre SQLAlchemy.

    Todos los métodos capturan y loguean los errores: la persistencia es
    secundaria a la vista en vivo y nunca debe tumbar el motor.
    """

    TABLE = "sensor_logs"

    def __init__(self, engine: Optional[Engine]):
        self._engine = engine

    @property
    def is_configured(self) -> bool:
        return self._engine is not None

    def ensure_schema(self) -> bool:
        """Crea la tabla si no existe."""
        if self._engine is None:
            return False

        dialect = self._engine.dialect.name
        if dialect == "sqlite":
            id_column = "id INTEGER PRIMARY KEY AUTOINCREMENT"
            # SQLite guarda CURRENT_TIMESTAMP como texto UTC sin zona
            created_type = "TIMESTAMP"
        else:
            id_column = "id BIGSERIAL PRIMARY KEY"
            # Con zona: el default no depende del TimeZone de la sesión
            created_type = "TIMESTAMPTZ"

        try:
            with self._engine.begin() as conn:
                conn.execute(
                    text(f"""
                        CREATE TABLE IF NOT EXISTS {self.TABLE} (
                            {id_column},
                            temperature DOUBLE PRECISION NOT NULL,
                            humidity DOUBLE PRECISION NOT NULL,
                            created_at {created_type} NOT NULL DEFAULT CURRENT_TIMESTAMP
                        )
                    """)
                )
            return True
        except Exception:
            logger.exception("[STORE] Failed to ensure schema")
            return False

    def insert(self, temperature: float, humidity: float) -> bool:
        """Inserta una lectura. `created_at` lo pone la BD.

        Returns:
            True si se insertó, False si falló o no hay BD configurada
        """
        if self._engine is None:
            logger.warning("[STORE] Not configured - cannot insert reading")
            return False

        try:
            with self._engine.begin() as conn:
                conn.execute(
                    text(f"""
                        INSERT INTO {self.TABLE} (temperature, humidity)
                        VALUES (:temperature, :humidity)
                    """),
                    {"temperature": float(temperature), "humidity": float(humidity)},
                )
            return True
        except Exception as e:
            logger.error("[STORE] Insert failed: %s", type(e).__name__)
            return False

    def fetch_since(self, since: datetime) -> Optional[List[StoredReading]]:
        """Lecturas con created_at >= since, en orden ascendente.

        Returns:
            Lista de lecturas, o None si la consulta falló
        """
        if self._engine is None:
            logger.warning("[STORE] Not configured - cannot query readings")
            return None

        try:
            with self._engine.connect() as conn:
                rows = conn.execute(
                    text(f"""
                        SELECT temperature, humidity, created_at
                        FROM {self.TABLE}
                        WHERE created_at >= :since
                        ORDER BY created_at ASC
                    """),
                    {"since": self._bind_datetime(since)},
                ).fetchall()
        except Exception:
            logger.exception("[STORE] Query failed since=%s", since.isoformat())
            return None

        readings = []
        for row in rows:
            try:
                readings.append(
                    StoredReading(
                        temperature=float(row.temperature),
                        humidity=float(row.humidity),
                        created_at=_parse_created_at(row.created_at),
                    )
                )
            except (TypeError, ValueError) as e:
                logger.warning("[STORE] Skipping malformed row: %s", e)
        return readings

    def fetch_since_ms(self, since_ms: int) -> Optional[List[StoredReading]]:
        return self.fetch_since(ms_to_datetime(since_ms))

    def ping(self) -> bool:
        if self._engine is None:
            return False
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            return False

    def _bind_datetime(self, since: datetime):
        # CURRENT_TIMESTAMP en SQLite es texto UTC sin zona: comparar igual
        if self._engine is not None and self._engine.dialect.name == "sqlite":
            if since.tzinfo is not None:
                since = since.astimezone(timezone.utc).replace(tzinfo=None)
            return since.strftime("%Y-%m-%d %H:%M:%S")
        return since
