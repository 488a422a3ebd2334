"""
Structured logging configuration using structlog.
"""

import logging
from typing import Optional, TextIO

import structlog

from .config import Settings, settings as default_settings


def setup_logging(config: Optional[Settings] = None, stream: Optional[TextIO] = None) -> None:
    """
    Configure structlog for structured logging.

    Renders JSON lines when ``log_json`` is set, otherwise the colored
    console renderer. Events below ``log_level`` are filtered out.

    Args:
        config: Settings to read; defaults to the global settings
        stream: Output stream; defaults to stdout
    """
    config = config or default_settings

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                structlog.processors.JSONRenderer()
                if config.log_json
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )
