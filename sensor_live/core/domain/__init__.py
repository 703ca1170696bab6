"""Domain layer - Modelos y constantes."""

from .health_state import HealthState
from .sample import Sample
from .window_config import WindowDuration

__all__ = ["HealthState", "Sample", "WindowDuration"]
