"""Structured logging shared by the moderation services.

Every service logs through a structlog logger bound with its class name
and component. Per-call loggers add the operation name, the request's
correlation id, and whatever identifiers the call is about.

    class AdmissionControlService(LoggingMixin):
        def __init__(self, ...) -> None:
            ...
            self._init_logger(component="moderation.admission")

        async def check_admission(self, reporter_id: int) -> AdmissionResult:
            log = self._log_operation("check_admission", reporter_id=reporter_id)
            log.info("admission_granted")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from moderate.infrastructure.observability.correlation import get_correlation_id

if TYPE_CHECKING:
    from moderate.domain.models.queue_entry import QueueEntry


class LoggingMixin:
    """Gives a service ``self._log`` and per-operation child loggers."""

    _log: structlog.BoundLogger

    def _init_logger(self, component: str = "moderation") -> None:
        """Bind the service logger. Call once from ``__init__``."""
        self._log = structlog.get_logger().bind(
            service=type(self).__name__,
            component=component,
        )

    def _log_operation(self, operation: str, **context: object) -> structlog.BoundLogger:
        """Child logger for one call, carrying the current correlation id."""
        return self._log.bind(
            operation=operation,
            correlation_id=get_correlation_id(),
            **context,
        )

    def _log_entry(
        self, operation: str, entry: QueueEntry, **context: object
    ) -> structlog.BoundLogger:
        """Child logger for a call acting on a loaded queue entry."""
        return self._log_operation(
            operation,
            queue_id=entry.id,
            kind=entry.kind.value,
            project_id=entry.project_id,
            reporter_id=entry.reporter_id,
            **context,
        )
