"""Logging for the ``captacion`` package.

Library modules call ``get_logger(__name__)``; the CLI and the API lifespan
call ``configure_logging()`` once to send records to stderr.
"""
from __future__ import annotations

import logging
import os
import sys

PACKAGE = "captacion"
FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_package_logger = logging.getLogger(PACKAGE)
_package_logger.addHandler(logging.NullHandler())


def _level(level: int | str | None) -> int:
    """``level`` or ``CAPTACION_LOG_LEVEL`` as a logging level; INFO when unset or unknown."""
    if level is None:
        level = os.getenv("CAPTACION_LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    return logging.getLevelName(name) if isinstance(logging.getLevelName(name), int) else logging.INFO


def configure_logging(level: int | str | None = None) -> None:
    """Attach one stderr handler to the package logger; later calls are no-ops."""
    if any(isinstance(h, logging.StreamHandler) for h in _package_logger.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(FORMAT))
    _package_logger.addHandler(handler)
    _package_logger.setLevel(_level(level))
    _package_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
