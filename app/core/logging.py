"""
Logging configuration for the accounts service.
Uses structlog for structured logging (JSON in production, console otherwise).
"""

import logging
import sys
from typing import Any

import structlog
from asgi_correlation_id import correlation_id

from app.config import get_settings


def add_correlation_id(logger, method_name, event_dict):
    """Attach the current request id, when there is one."""
    request_id = correlation_id.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def configure_logging() -> None:
    """Configure structlog and route stdlib logging through it."""
    settings = get_settings()
    production = settings.ENVIRONMENT == "production"

    shared_processors: list[Any] = [
        add_correlation_id,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer = structlog.processors.JSONRenderer() if production else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter_processors: list[Any] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if production:
        formatter_processors.append(structlog.processors.format_exc_info)
    formatter_processors.append(renderer)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=formatter_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(settings.LOG_LEVEL.upper())

    # uvicorn's access log duplicates RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").disabled = True
