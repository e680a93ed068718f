"""
Logging setup.

glmbench logs through loguru's global ``logger``. ``configure_logging``
replaces the default sink with a single stderr sink at the requested level
and is safe to call more than once.
"""

from __future__ import annotations

import sys

from loguru import logger

__all__ = ["configure_logging", "logger"]

_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level:<7} | {message}"


def configure_logging(level: str = "INFO", sink=None) -> None:
    """Route glmbench log records to ``sink`` (stderr by default)."""
    logger.remove()
    logger.add(
        sink if sink is not None else sys.stderr,
        level=level.upper(),
        format=_LOG_FORMAT,
        backtrace=True,
        diagnose=False,
    )
    logger.debug("Logging configured at level {}", level.upper())
