"""Structured logging configuration.

Application code logs events with keyword context, e.g.
``logger.info("capacity_found", site_id=..., rack_ids=[...])``. Every event
carries the service name and deployment environment.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from rack_capacity.infrastructure.config import ObservabilityConfig

SERVICE_NAME = "rack_capacity"


def setup_logging(config: ObservabilityConfig) -> structlog.stdlib.BoundLogger:
    """Configure structlog and stdlib logging, returning the service logger."""
    level = getattr(logging, config.log_level)

    # Domain services log through stdlib loggers
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", stream=sys.stdout, level=level)
    logging.getLogger("rack_capacity").setLevel(level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if config.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=SERVICE_NAME, environment=config.environment)

    return get_logger(SERVICE_NAME)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.stdlib.BoundLogger:
    """Get a bound logger instance."""
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
