"""Admission control for the moderation queue.

Bounds how many PENDING entries one reporter can accumulate inside a
sliding time window. The count is taken from the queue itself, so once a
moderator decides on entries the reporter can submit again.

Developer Golden Rules:
1. CHECK BEFORE PERSIST - Runs before the entry is inserted, so the entry
   being created is never counted against itself.
2. ZERO DISABLES - A configured maximum of 0 admits everything.
3. FAIL LOUD - Refusals raise RateLimitExceededError with limit and window.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from moderate.application.services.base import LoggingMixin
from moderate.config.moderation_config import AntispamConfig
from moderate.domain.errors.rate_limit import RateLimitExceededError
from moderate.domain.models.results import AdmissionResult
from moderate.infrastructure.monitoring.metrics import (
    ModerationMetrics,
    get_metrics_collector,
)

if TYPE_CHECKING:
    from moderate.application.ports.queue_repository import QueueRepositoryProtocol
    from moderate.application.ports.time_authority import TimeAuthorityProtocol


class AdmissionControlService(LoggingMixin):
    """Per-reporter rate limiter guarding queue insertion.

    Attributes:
        _repository: Queue store the pending count is read from.
        _config: Antispam limit and window.
        _time: Time authority for the window start.
        _metrics: Metrics collector for rate limit hits.
    """

    def __init__(
        self,
        repository: QueueRepositoryProtocol,
        time_authority: TimeAuthorityProtocol,
        config: AntispamConfig | None = None,
        metrics: ModerationMetrics | None = None,
    ) -> None:
        """Initialize admission control.

        Args:
            repository: Queue store port.
            time_authority: Time authority port.
            config: Antispam configuration (defaults to 10 per hour).
            metrics: Metrics collector (defaults to the process singleton).
        """
        self._repository = repository
        self._time = time_authority
        self._config = config or AntispamConfig()
        self._metrics = metrics or get_metrics_collector()
        self._init_logger(component="moderation.admission")

    async def check_admission(self, reporter_id: int) -> AdmissionResult:
        """Check whether a reporter may enqueue another submission.

        Args:
            reporter_id: Reporter about to submit.

        Returns:
            AdmissionResult describing the count that was checked.

        Raises:
            RateLimitExceededError: If the reporter already has at least the
                configured maximum of PENDING entries inside the window.
        """
        limit = self._config.max_event_count
        window_seconds = self._config.time_window_seconds
        if limit == 0:
            return AdmissionResult(
                current_count=0, limit=0, window_seconds=window_seconds
            )

        log = self._log_operation("check_admission", reporter_id=reporter_id)
        since = self._time.utcnow() - timedelta(seconds=window_seconds)
        current_count = await self._repository.count_pending_since(reporter_id, since)

        if current_count >= limit:
            log.info(
                "rate_limit_exceeded",
                current_count=current_count,
                limit=limit,
                window_seconds=window_seconds,
            )
            self._metrics.increment_rate_limit_hits()
            raise RateLimitExceededError(
                reporter_id=reporter_id,
                current_count=current_count,
                limit=limit,
                window_seconds=window_seconds,
            )

        log.debug("admission_granted", current_count=current_count, limit=limit)
        return AdmissionResult(
            current_count=current_count,
            limit=limit,
            window_seconds=window_seconds,
        )

    def get_limit(self) -> int:
        return self._config.max_event_count

    def get_window_seconds(self) -> int:
        return self._config.time_window_seconds
