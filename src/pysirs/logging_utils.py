"""Logging setup shared by the CLI and batch scripts."""

from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_LEVEL_ENV = "PYSIRS_LOG_LEVEL"


def resolve_level(level: Optional[str | int] = None) -> int:
    """Turn ``level`` (or ``$PYSIRS_LOG_LEVEL``, default INFO) into an int."""
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level '{level}'")
    return value


def configure_logging(level: Optional[str | int] = None, *, force: bool = False) -> None:
    """Configure logging for a pysirs run.

    An application that already installed root handlers keeps them; only
    the ``pysirs`` logger level is adjusted in that case.
    """
    level = resolve_level(level)

    root = logging.getLogger()
    if root.handlers and not force:
        logging.getLogger("pysirs").setLevel(level)
        return

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        force=force,
    )


__all__ = ["LOG_FORMAT", "LOG_LEVEL_ENV", "resolve_level", "configure_logging"]
