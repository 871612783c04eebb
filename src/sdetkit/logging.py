"""Package logger wiring.

Every module logs through ``get_logger(__name__)``, a child of the ``sdetkit``
logger. The package logger carries a ``NullHandler``, so the library stays
silent until the host application configures logging or calls
:func:`configure_logging`.
"""

from __future__ import annotations

import logging as py_logging
import sys
from typing import TextIO

PACKAGE_LOGGER = "sdetkit"
LOG_LEVELS = {
    "DEBUG": py_logging.DEBUG,
    "INFO": py_logging.INFO,
    "WARN": py_logging.WARNING,
    "WARNING": py_logging.WARNING,
    "ERROR": py_logging.ERROR,
}
_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(lineno)d %(message)s"


def _install_null_handler(logger: py_logging.Logger) -> None:
    if not any(isinstance(handler, py_logging.NullHandler) for handler in logger.handlers):
        logger.addHandler(py_logging.NullHandler())


def get_logger(name: str) -> py_logging.Logger:
    _install_null_handler(py_logging.getLogger(PACKAGE_LOGGER))
    return py_logging.getLogger(name)


def configure_logging(level: str = "INFO", stream: TextIO | None = None) -> py_logging.Logger:
    """Opt in to retry/timeout diagnostics on ``stream`` (stderr by default)."""
    resolved = LOG_LEVELS.get(level.upper(), py_logging.INFO)

    logger = py_logging.getLogger(PACKAGE_LOGGER)
    reset_logging()
    logger.setLevel(resolved)

    handler = py_logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(py_logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def reset_logging() -> py_logging.Logger:
    """Drop configured handlers and return to the silent library default."""
    logger = py_logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(py_logging.NOTSET)
    logger.propagate = True
    _install_null_handler(logger)
    return logger
