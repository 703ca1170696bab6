"""Validación de payloads de ingesta.

Formato esperado en el topic (JSON):
    {"temperature": 24.3, "humidity": 51.2}
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

logger = logging.getLogger(__name__)

# Rango físico amplio: solo descarta basura evidente, no valida el sensor
_VALUE_LIMIT = 1e6


class SensorPayload(BaseModel):
    """Schema de validación para lecturas del sensor."""

    model_config = ConfigDict(extra="ignore")

    temperature: float
    humidity: float

    @field_validator("temperature", "humidity", mode="before")
    @classmethod
    def reject_bool(cls, v):
        # JSON true/false no es una lectura numérica
        if isinstance(v, bool):
            raise ValueError("Value must be a number, not a boolean")
        return v

    @field_validator("temperature", "humidity")
    @classmethod
    def validate_finite(cls, v: float) -> float:
        if math.isnan(v):
            raise ValueError("Value is NaN")
        if math.isinf(v):
            raise ValueError("Value is infinite")
        if not (-_VALUE_LIMIT < v < _VALUE_LIMIT):
            raise ValueError("Value out of range")
        return v


@dataclass
class DecodeResult:
    """Resultado de decodificación."""

    valid: bool
    payload: Optional[SensorPayload] = None
    error: Optional[str] = None


def decode_payload(raw: Union[bytes, str, dict[str, Any]]) -> DecodeResult:
    """Decodifica y valida un mensaje del topic.

    Args:
        raw: Payload MQTT (bytes), texto JSON o dict ya parseado

    Returns:
        DecodeResult con payload validado o error
    """
    try:
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        data = json.loads(raw) if isinstance(raw, str) else raw
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        return DecodeResult(valid=False, error=f"Invalid JSON: {e}")

    if not isinstance(data, dict):
        return DecodeResult(valid=False, error=f"Expected JSON object, got {type(data).__name__}")

    try:
        payload = SensorPayload(**data)
    except Exception as e:
        return DecodeResult(valid=False, error=str(e))

    return DecodeResult(valid=True, payload=payload)
