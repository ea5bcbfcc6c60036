"""Centralized logging configuration with structured logging.

Library modules log through ``logging.getLogger(__name__)``; this module
routes those records through structlog:
- Pretty console logs for development
- JSON logs for production
- Request ID from asgi-correlation-id on every record

Usage:
    from rest_errors.core.logging_config import setup_logging
    setup_logging()  # Call once at app startup
"""

import importlib.util
import logging
import sys
from typing import Any

import structlog
from asgi_correlation_id import correlation_id

from rest_errors.main_config import LoggingConfig, logging_config


def get_request_id(_logger: Any, _method_name: str, event_dict: dict) -> dict:
    """Add request_id from asgi-correlation-id contextvar to log events."""
    request_id = correlation_id.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def _build_renderer(config: LoggingConfig) -> Any:
    if config.log_format == "json":
        return structlog.processors.JSONRenderer()
    # rich gives colored tracebacks when installed (dev dependency)
    colors = importlib.util.find_spec("rich") is not None
    return structlog.dev.ConsoleRenderer(colors=colors)


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure structured logging for the entire application.

    Args:
        config: logging settings, the environment derived ``logging_config`` if omitted
    """
    config = config or logging_config
    log_level = config.log_level.upper()

    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        get_request_id,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_build_renderer(config),
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for uvicorn_logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        uvicorn_logger = logging.getLogger(uvicorn_logger_name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.addHandler(handler)
        uvicorn_logger.propagate = False

    logging.getLogger("uvicorn").setLevel(log_level)
    logging.getLogger("uvicorn.error").setLevel(log_level)
    logging.getLogger("uvicorn.access").setLevel(config.log_level_uvicorn_access.upper())

    logger = structlog.get_logger(__name__)
    logger.info("logging_configured", log_format=config.log_format, log_level=log_level)
