from __future__ import annotations

from collections import deque
from typing import Deque, Iterable, Optional, Tuple

from ..domain.sample import Sample


class SlidingWindowBuffer:
    """Buffer deslizante en memoria de la serie viva.

    - Mantiene las muestras ordenadas por timestamp (no decreciente).
    - Nunca guarda dos muestras con el mismo timestamp: un append con un
      timestamp existente sobreescribe la muestra guardada.
    - `evict_before` recorta todo lo anterior al horizonte.

    No es thread-safe: el motor serializa todos los accesos con su lock.
    """

    def __init__(self, samples: Iterable[Sample] = ()) -> None:
        self._samples: Deque[Sample] = deque()
        for sample in samples:
            self.append(sample)

    def append(self, sample: Sample) -> bool:
        """Inserta respetando el orden temporal.

        Returns:
            True si se agregó una muestra nueva, False si sobreescribió
            una existente con el mismo timestamp.
        """
        buf = self._samples

        # Camino rápido: la ingesta llega en orden
        if not buf or sample.timestamp_ms > buf[-1].timestamp_ms:
            buf.append(sample)
            return True

        if sample.timestamp_ms == buf[-1].timestamp_ms:
            buf[-1] = sample
            return False

        # Fuera de orden: buscar desde la cola (caso raro, ventanas cortas)
        idx = len(buf) - 1
        while idx >= 0 and buf[idx].timestamp_ms > sample.timestamp_ms:
            idx -= 1

        if idx >= 0 and buf[idx].timestamp_ms == sample.timestamp_ms:
            buf[idx] = sample
            return False

        buf.insert(idx + 1, sample)
        return True

    def evict_before(self, horizon_ms: int) -> int:
        """Elimina las muestras con timestamp < horizonte. Devuelve cuántas."""
        buf = self._samples
        evicted = 0
        while buf and buf[0].timestamp_ms < horizon_ms:
            buf.popleft()
            evicted += 1
        return evicted

    def snapshot(self) -> Tuple[Sample, ...]:
        """Copia inmutable de la serie actual."""
        return tuple(self._samples)

    def latest(self) -> Optional[Sample]:
        return self._samples[-1] if self._samples else None

    def clear(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)

    def __bool__(self) -> bool:
        return bool(self._samples)
