"""Loguru setup shared by the CLI, the HTTP service, and the MCP server."""

from __future__ import annotations

import os
import sys

from loguru import logger

DEFAULT_LEVEL = "WARNING"
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)

_configured_level: str | None = None


def _truthy(value: str | None) -> bool:
    return (value or "").lower() in ("1", "true", "yes")


def setup_logging(level: str | None = None, suppress_console: bool | None = None) -> None:
    """
    Configure the global loguru logger.

    Args:
        level: Minimum level for the console sink. Falls back to
            CLASSINTEL_LOG_LEVEL, then WARNING.
        suppress_console: Drop console output entirely. If None, checks
            CLASSINTEL_MACHINE_MODE.

    Calling again with the same level is a no-op; a different level replaces
    the sink.
    """
    global _configured_level

    if level is None:
        level = os.getenv("CLASSINTEL_LOG_LEVEL", DEFAULT_LEVEL).upper()
    if suppress_console is None:
        suppress_console = _truthy(os.getenv("CLASSINTEL_MACHINE_MODE"))

    marker = "off" if suppress_console else level
    if _configured_level == marker:
        return
    _configured_level = marker

    logger.remove()
    if suppress_console:
        return

    logger.add(sys.stderr, level=level, format=LOG_FORMAT, colorize=True)
