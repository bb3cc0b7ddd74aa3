"""Structured logging setup"""

import logging
import sys
from typing import Optional

import structlog

from solana_lens.utils.config import settings


def stderr_logger_factory(*args) -> structlog.PrintLogger:
    """Print to the current sys.stderr, resolved per logger rather than at configure time"""
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Configure structlog for the process

    Args:
        level: Log level name, defaults to settings.LOG_LEVEL
        fmt: "json" for machine-readable output, anything else for
            the human-readable console renderer
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    level_value = getattr(logging, level_name, logging.INFO)
    output_format = (fmt or settings.LOG_FORMAT).strip().lower()

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if output_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=stderr_logger_factory,
        # Uncached so every call goes through the factory
        cache_logger_on_first_use=False,
    )
