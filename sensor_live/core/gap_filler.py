"""Relleno de huecos de la serie viva.

Mantiene la cadencia visual uniforme (un punto por paso) aunque los
mensajes reales lleguen irregularmente o dejen de llegar. Cada muestra
sintética repite los últimos valores reales conocidos.

Dos caminos:
- llegada: al recibir una muestra real, rellena los pasos que faltan
  entre la última muestra del buffer y la nueva.
- tick: durante un silencio, agrega una muestra por cada paso vencido.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .domain.sample import Sample
from .domain.window_config import STEP_INTERVAL_MS

logger = logging.getLogger(__name__)

OfflineFn = Callable[[int], bool]


class GapFiller:
    """Sintetiza muestras para los pasos sin datos.

    El ancla es la última muestra REAL desde el último reset. Sin ancla no
    se rellena nada: ni la primera muestra de una ventana vacía ni el tramo
    que cruza un reset de ventana.
    """

    def __init__(self, step_interval_ms: int = STEP_INTERVAL_MS):
        if step_interval_ms <= 0:
            raise ValueError("step_interval_ms must be positive")
        self._step_ms = int(step_interval_ms)
        # Un tick no rellena un paso hasta que venció con medio paso de margen
        self._grace_ms = self._step_ms // 2
        self._anchor: Optional[Sample] = None

    def reset(self, anchor: Optional[Sample] = None) -> None:
        """Reset de ventana / arranque.

        Sin `anchor` se olvida el ancla; con `anchor` (muestra real llegada
        después del reset) el relleno continúa desde ella.
        """
        self._anchor = anchor

    def fill_arrival(
        self,
        last: Optional[Sample],
        incoming: Sample,
        is_offline: OfflineFn,
        not_before_ms: int,
    ) -> List[Sample]:
        """Muestras sintéticas a insertar ANTES de `incoming`.

        Args:
            last: Última muestra del buffer (real o sintética)
            incoming: Muestra real recién decodificada
            is_offline: Decide el flag offline para un instante
            not_before_ms: Horizonte actual; no se sintetiza nada anterior

        Returns:
            floor(gap / step) - 1 muestras (menos las que caen fuera del
            horizonte), vacía si no hay hueco o no hay ancla
        """
        anchor = self._anchor
        if incoming.is_genuine and (anchor is None or incoming.timestamp_ms > anchor.timestamp_ms):
            self._anchor = incoming

        if anchor is None or last is None:
            return []

        gap = incoming.timestamp_ms - last.timestamp_ms
        if gap <= self._step_ms:
            return []

        missing = gap // self._step_ms - 1
        filled = []
        for k in range(1, missing + 1):
            ts = last.timestamp_ms + k * self._step_ms
            if ts < not_before_ms:
                continue
            filled.append(anchor.carried_forward(ts, offline=is_offline(ts)))

        if filled:
            logger.debug(
                "[GAP] Filled %d steps before sample at %d (gap=%dms)",
                len(filled), incoming.timestamp_ms, gap,
            )
        return filled

    def fill_silence(
        self,
        last: Optional[Sample],
        now_ms: int,
        is_offline: OfflineFn,
        not_before_ms: int,
    ) -> List[Sample]:
        """Muestras sintéticas para los pasos vencidos sin datos (tick).

        Normalmente devuelve una sola muestra por tick; si el tick se atrasó
        devuelve una por cada paso vencido dentro del horizonte.
        """
        anchor = self._anchor
        if anchor is None or last is None:
            return []

        ts = last.timestamp_ms + self._step_ms
        if ts < not_before_ms:
            # Saltar directo al primer paso dentro del horizonte
            behind = not_before_ms - last.timestamp_ms
            steps = -(-behind // self._step_ms)
            ts = last.timestamp_ms + steps * self._step_ms

        filled = []
        while ts + self._grace_ms <= now_ms:
            filled.append(anchor.carried_forward(ts, offline=is_offline(ts)))
            ts += self._step_ms
        return filled

    @property
    def step_interval_ms(self) -> int:
        return self._step_ms

    @property
    def anchor(self) -> Optional[Sample]:
        return self._anchor
