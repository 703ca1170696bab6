"""CLI: corre el motor sin HTTP y loguea el estado periódicamente."""

from __future__ import annotations

import argparse
import logging
import threading

from common.config import get_settings
from common.db import dispose_engine

from .bootstrap import build_live_engine
from .core.domain.window_config import WindowDuration

logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    p = argparse.ArgumentParser(description="Sensor live window (MQTT -> ventana en vivo -> store)")
    p.add_argument(
        "--window",
        choices=[d.value for d in WindowDuration],
        default=None,
        help="duración inicial de la ventana (por defecto LIVE_WINDOW_DEFAULT)",
    )
    p.add_argument("--status-every", type=float, default=30.0, help="segundos entre logs de estado")
    args = p.parse_args()

    engine, _ = build_live_engine(get_settings(), window=args.window)

    stop_event = threading.Event()
    engine.start()
    try:
        while not stop_event.wait(args.status_every):
            current = engine.current_sample()
            health = engine.health()
            logger.info(
                "[STATUS] health=%s silence=%.1fs samples=%d current=%s | %s",
                health.state.value,
                health.elapsed_ms / 1000.0,
                len(engine.window_snapshot()),
                f"{current.temperature:.1f}C/{current.humidity:.1f}%" if current else "-",
                engine.stats,
            )
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        engine.stop()
        dispose_engine()


if __name__ == "__main__":
    main()
