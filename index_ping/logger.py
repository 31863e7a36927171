"""Project-wide logging configuration for **IndexPing**.

Highlights
----------
* Unified format for console (stderr, so stdout stays clean for JSON output)
  and optional file output (with rotation).
* Single, importable instance :data:`logger`::

      from index_ping.logger import logger
      logger.info("Submission started")
* Component loggers via :func:`get_logger` share the project handlers::

      log = get_logger("submitter")   # -> "IndexPing.submitter"
* Re-configurable at runtime via :func:`configure`.
"""
from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

# --------------------------------------------------------------------------- #
# Constants & basic types                                                     #
# --------------------------------------------------------------------------- #

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "IndexPing"
_LEVEL_ENV: Final[str] = "INDEXPING_LOG_LEVEL"

_LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Helper builders                                                             #
# --------------------------------------------------------------------------- #


def _stderr_handler(fmt: str) -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _file_handler(file: Path | str, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=str(file),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _default_level() -> str:
    """Level from ``INDEXPING_LOG_LEVEL``; unknown names fall back to ``INFO``."""
    name = os.environ.get(_LEVEL_ENV, "").strip().upper()
    return name if name in logging.getLevelNamesMapping() else "INFO"


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def configure(
    *,
    level: _LevelT | None = None,
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """(Re)configure the project logger.

    Parameters
    ----------
    level
        Numeric or textual logging level (e.g. ``"DEBUG"``). *None* → value of
        ``INDEXPING_LOG_LEVEL`` or ``INFO``.
    log_file
        Path to a logfile. *None* → stderr-only output.
    log_format
        Format string for :class:`logging.Formatter`.
    replace_handlers
        *True* – remove existing handlers; *False* – just append new one(s).
    """
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(level if level is not None else _default_level())

    if replace_handlers:
        lg.handlers.clear()

    lg.addHandler(_stderr_handler(log_format))

    if log_file is not None:
        lg.addHandler(_file_handler(log_file, log_format))

    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT | None = None,
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Shortcut used by the CLI and the web entry point."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


def get_logger(component: str) -> logging.Logger:
    """Child logger ``IndexPing.<component>``; inherits the project handlers."""
    return logging.getLogger(f"{_LOGGER_NAME}.{component}")


# --------------------------------------------------------------------------- #
# Ready-to-use instance                                                       #
# --------------------------------------------------------------------------- #

logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "get_logger"]
