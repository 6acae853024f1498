"""Structured logging setup.

Learn: Modules call structlog.get_logger() at import time; the returned
proxy picks up whatever configuration is active when it first logs.
configure_logging() runs once from create_app(). Event names follow a
"component.event" convention (auth.token_malformed, events.created) and
everything else goes in as key/value context.
"""

import logging
import sys
from typing import Any

import structlog

from eventkeeper.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structlog + stdlib logging for the application.

    request_id (bound by RequestIdMiddleware) is merged into every entry
    through structlog's contextvars processor.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # capture_logs() in tests only sees uncached loggers.
        cache_logger_on_first_use=settings.environment == "production",
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)
    logging.getLogger().setLevel(log_level)
