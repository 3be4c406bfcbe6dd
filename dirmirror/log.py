"""Logging setup for command-line use.

Library modules only create module loggers; handlers are installed here, once,
on the package logger.
"""

from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "dirmirror"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_handler: logging.Handler | None = None


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a stderr handler to the package logger and set its level.

    Calling this again only updates the level. Unknown level names fall back
    to ``INFO``.
    """
    global _handler

    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        level = resolved if isinstance(resolved, int) else logging.INFO

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_handler)
        logger.propagate = False
    return logger


__all__ = ["PACKAGE_LOGGER", "LOG_FORMAT", "configure_logging"]
