from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class SampleOut(BaseModel):
    timestamp_ms: int
    time: str
    temperature: float
    humidity: float
    synthetic: bool = False
    offline: bool = False


class WindowOut(BaseModel):
    duration: str
    count: int
    samples: List[SampleOut] = Field(default_factory=list)


class HealthOut(BaseModel):
    state: str
    seconds_since_last_message: float
    last_message_ms: int


class WindowDurationIn(BaseModel):
    duration: str = Field(..., description="Una de: 1m, 5m, 30m, 1h, 6h, 1d")


class WindowDurationResult(BaseModel):
    duration: str
    history_loaded: bool
    error: Optional[str] = None


class LogResult(BaseModel):
    ok: bool
