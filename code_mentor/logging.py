"""Structured logging setup.

All modules log through structlog with snake_case event names and keyword
context, e.g. ``logger.info("analysis_started", mode="repo")``. Output goes to
stderr so it never mixes with report text printed on stdout.
"""

import logging
import sys
from typing import Optional

import structlog

from code_mentor.config import settings


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure structlog and the stdlib root handler.

    Args:
        level: Log level name. Defaults to LOG_LEVEL from settings.
        fmt: 'console' or 'json'. Defaults to LOG_FORMAT from settings.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    renderer_name = (fmt or settings.LOG_FORMAT).lower()

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if renderer_name == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Return a structlog logger bound to the given module name."""
    return structlog.get_logger(name)
