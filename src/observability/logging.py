"""
Structured logging configuration using structlog.

JSON logs in production, colored console logs in development. Standard
library loggers (asyncpg, httpx, uvicorn) are routed through the same
handler so every line shares one format.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from src.config.settings import get_settings
from src.observability.tracing import add_trace_context


def setup_logging() -> None:
    """
    Configure structured logging for the service.

    Usage:
        setup_logging()
        logger = structlog.get_logger(__name__)
        logger.info("Suggestions served", query="aapl", count=3)
    """
    settings = get_settings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if settings.tracing_enabled:
        shared_processors.append(add_trace_context)

    if settings.is_production:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )

    # Noisy libraries
    for name in ("httpx", "httpcore", "asyncio", "asyncpg", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger (defaults to the root logger name)."""
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """
    Bind context variables to all subsequent log messages.

    Useful for request/correlation IDs that should appear in all logs.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
