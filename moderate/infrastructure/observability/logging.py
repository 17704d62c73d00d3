"""structlog setup for the moderation service.

Production writes one JSON object per line; any other environment gets
the coloured console renderer. Every event carries the level, an ISO
timestamp, the ``app`` name and, inside a request, its correlation id:

    {"event": "entry_rejected", "level": "info", "app": "moderate-api",
     "timestamp": "2026-03-02T09:00:00.000000Z", "correlation_id": "...",
     "service": "ModerationService", "operation": "reject", "queue_id": 7}

Environment Variables:
- LOG_LEVEL: Minimum level (default: INFO). Also applied to stdlib
  loggers, so SQLAlchemy engine output follows the same threshold.
- SERVICE_NAME: Value of the ``app`` field (default: moderate-api).
"""

import logging
import os
from typing import Any, cast

import structlog
from structlog.typing import Processor

from moderate.infrastructure.observability.correlation import correlation_id_processor

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_APP_NAME = "moderate-api"


def _resolve_level(level_name: str | None) -> int:
    name = (level_name or os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _app_name_processor(app_name: str) -> Processor:
    def add_app_name(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.setdefault("app", app_name)
        return event_dict

    return cast(Processor, add_app_name)


def configure_structlog(
    environment: str = "production", log_level: str | None = None
) -> None:
    """Configure structlog once at startup.

    Args:
        environment: ``production`` for JSON lines, anything else for console.
        log_level: Level name overriding LOG_LEVEL.
    """
    level = _resolve_level(log_level)
    logging.basicConfig(level=level, format="%(name)s %(message)s")
    logging.getLogger().setLevel(level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _app_name_processor(os.getenv("SERVICE_NAME", DEFAULT_APP_NAME)),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if environment == "production":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger_for_service(
    service_name: str, component: str = "moderation"
) -> structlog.BoundLogger:
    """Logger bound with ``service`` and ``component``, for module-level code."""
    return structlog.get_logger().bind(service=service_name, component=component)
