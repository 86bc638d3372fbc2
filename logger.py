"""
logger.py

Responsibility: Configures Python's standard logging for a run: one stdout
handler, a "[timestamp] [LEVEL] message" line format, and the level chosen in
the configuration file.
Does NOT: decide what gets logged; modules log through logging.getLogger(__name__).
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# "off" sits above CRITICAL so nothing is emitted
_LEVELS = {
    "off": logging.CRITICAL + 10,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}

# Libraries whose INFO output repeats what our own debug lines already say
_CHATTY_LOGGERS = ("httpx", "httpcore")

# The handler added by the last configure_logging call
_installed_handler: logging.Handler | None = None


def resolve_level(name: str) -> int:
    """Maps a configuration level name to a logging level (default INFO)."""
    return _LEVELS.get(name.strip().lower(), logging.INFO)


def configure_logging(level: str = "info", stream: TextIO | None = None) -> None:
    """
    Installs a single stream handler on the root logger.

    Safe to call more than once: a later call replaces the handler installed
    by an earlier one (configuration errors are reported before the
    configured level is known).

    Args:
        level: Level name from the configuration ("info", "debug", ...).
        stream: Output stream; defaults to stdout so schedulers such as
                systemd or cron capture it with the rest of the run.
    """
    numeric = resolve_level(level)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    global _installed_handler
    root = logging.getLogger()
    if _installed_handler is not None:
        root.removeHandler(_installed_handler)
    _installed_handler = handler
    root.addHandler(handler)
    root.setLevel(numeric)

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if numeric <= logging.DEBUG else logging.WARNING)
