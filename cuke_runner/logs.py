"""Logging setup for the ``cuke_runner`` logger hierarchy."""
from __future__ import annotations

import logging
import sys

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": TRACE,
}

ROOT_LOGGER = "cuke_runner"
_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"


def level_from_name(name: str) -> int:
    try:
        return LEVELS[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown log level: {name!r} (expected one of {', '.join(LEVELS)})") from None


def configure_logging(level: str = "info") -> logging.Logger:
    """Attach a single stderr handler to the package logger; safe to call repeatedly."""
    log = logging.getLogger(ROOT_LOGGER)
    log.setLevel(level_from_name(level))
    if not any(getattr(h, "_cuke_runner", False) for h in log.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
        handler._cuke_runner = True  # type: ignore[attr-defined]
        log.addHandler(handler)
    return log
