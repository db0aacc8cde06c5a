"""Structlog-based logging configuration.

The library only emits events through ``structlog.get_logger``. Applications
that want JSON output call ``configure_logging`` once at startup.
"""

import logging
from typing import Final

import structlog

from gemini_chat.config import get_settings

_CONFIGURED: Final[dict[str, bool]] = {"value": False}


def configure_logging(level: str | None = None) -> None:
    """Configure structlog for structured JSON output.

    ``level`` defaults to the ``LOG_LEVEL`` setting. Later calls do nothing.
    """
    if _CONFIGURED["value"]:
        return

    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(message)s",
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
        wrapper_class=structlog.stdlib.BoundLogger,
    )
    _CONFIGURED["value"] = True


__all__ = ["configure_logging"]
