"""Loguru configuration for applications embedding logitagg.

The package disables its own loguru records on import; call
:func:`configure_logging` (the CLI does) to route them somewhere.
"""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"


def configure_logging(
    level: str = "INFO",
    log_dir: str | Path | None = None,
    *,
    rotation: str = "1 day",
    retention: str = "30 days",
) -> None:
    """Replace loguru's sinks with a stderr sink and an optional daily file."""

    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=_FORMAT)
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_dir / "{time:YYYY-MM-DD}.log"),
            rotation=rotation,
            retention=retention,
            level=level.upper(),
            format=_FORMAT,
            enqueue=True,
        )
    logger.enable("logitagg")


__all__ = ["configure_logging"]
