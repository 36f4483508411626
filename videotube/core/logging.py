"""
Structured logging setup.

Every module asks for a logger with ``get_logger(__name__)`` and emits
snake_case events with key/value context:

    logger.info("video_published", video_id=video.id, owner_id=user.id)

Output is JSON in deployed environments (one object per line, easy to ship
to a log aggregator) and a colourised console rendering during development,
selected by ``LOG_FORMAT``. Request-scoped values (request id, method, path)
are bound through ``structlog.contextvars`` by the request middleware and
merged into every event emitted while that request is being handled.
"""

import logging
import sys

import structlog
from structlog.typing import FilteringBoundLogger

from videotube.core.config import Settings


def setup_logging(settings: Settings) -> None:
    """
    Configure structlog and the stdlib root logger from ``settings``.

    Safe to call more than once; the last call wins. Loggers handed out by
    ``get_logger`` before the call pick up the new configuration, since
    they are resolved lazily on first use.
    """
    level = logging.getLevelName(settings.LOG_LEVEL)

    # Libraries that log through the stdlib (uvicorn, sqlalchemy) end up
    # on stdout with the same level threshold.
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        force=True,
    )

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if settings.LOG_FORMAT == "json":
        processors.extend([
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ])
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    """Return a structlog logger tagged with the calling module name."""
    if name:
        # ``logger`` is a wrap_logger parameter, so the name goes under logger_name
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()
