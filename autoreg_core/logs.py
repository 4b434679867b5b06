"""Diagnostic sink for registry warnings and errors."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

DIAGNOSTIC_PREFIX = "[AutoRegister]"
LOG_FORMAT = f"{DIAGNOSTIC_PREFIX} %(levelname)s %(message)s"
ROOT_LOGGER = "autoreg_core"

_HANDLER_MARKER = "_autoreg_handler"


def configure_logging(level: str | int = "WARNING", stream: TextIO | None = None) -> logging.Logger:
    """Attach a single prefixed handler to the ``autoreg_core`` logger.

    Calling it again replaces the previous handler, so the level and stream can
    be changed at runtime.
    """

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)
    log = logging.getLogger(ROOT_LOGGER)
    for handler in list(log.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            log.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(handler, _HANDLER_MARKER, True)
    log.addHandler(handler)
    log.setLevel(level)
    return log
