"""Logging setup for applications driving hand states."""

from __future__ import annotations

import logging
import os

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    *,
    level: str | None = None,
    format: str = DEFAULT_FORMAT,
    datefmt: str = DEFAULT_DATEFMT,
) -> logging.Logger:
    """Configure logging for the ``pokerstate`` package.

    Args:
        level: Optional explicit log level (e.g. ``config.system.log_level``).
            Falls back to the ``POKERSTATE_LOG_LEVEL`` env var, then INFO.
        format: Log format string.
        datefmt: Date format string.

    Returns:
        The package logger (``pokerstate``).
    """
    raw_level = level if level is not None else os.getenv("POKERSTATE_LOG_LEVEL")
    resolved_level = (raw_level or "INFO").upper()
    logging.basicConfig(level=resolved_level, format=format, datefmt=datefmt)

    package_logger = logging.getLogger("pokerstate")
    package_logger.setLevel(resolved_level)
    package_logger.debug(f"Logging configured at {resolved_level}")
    return package_logger
