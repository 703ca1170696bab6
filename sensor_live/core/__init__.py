"""Core module - Ventana en vivo de telemetría.

Estructura:
- transport/    → Recepción MQTT y validación de payloads
- domain/       → Muestra, estados de salud, duraciones de ventana
- buffer/       → Ventana deslizante ordenada por tiempo
- monitoring/   → Salud del enlace y contadores
- persistence/  → Store durable, escritor asíncrono y throttling
- analytics/    → Medias móviles y resumen estadístico
- export/       → Filas y CSV de exportación
- gap_filler    → Relleno de huecos con el último valor
- engine        → Orquestación de todo lo anterior
"""

from .engine import LiveEngine

__all__ = ["LiveEngine"]
