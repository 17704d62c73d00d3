"""Rate limit error for moderation queue admission.

Raised before an entry is persisted, so the rejected submission never
counts against the reporter.
"""

from __future__ import annotations

from moderate.domain.exceptions import ModerateError


class RateLimitExceededError(ModerateError):
    """Raised when a reporter has too many pending entries in the window.

    This error triggers a 429 response with a Retry-After header.

    Attributes:
        reporter_id: The rate-limited reporter.
        current_count: Pending entries counted inside the window.
        limit: Configured maximum per window.
        window_seconds: Sliding window size in seconds.
    """

    def __init__(
        self,
        reporter_id: int,
        current_count: int,
        limit: int,
        window_seconds: int,
    ) -> None:
        """Initialize rate limit exceeded error.

        Args:
            reporter_id: Reporter hitting the limit.
            current_count: Pending entries inside the window.
            limit: Maximum pending entries allowed per window.
            window_seconds: Window size in seconds.
        """
        self.reporter_id = reporter_id
        self.current_count = current_count
        self.limit = limit
        self.window_seconds = window_seconds
        super().__init__(
            f"Hit moderation queue rate limit threshold for user {reporter_id}: "
            f"{current_count}/{limit} pending submissions within {window_seconds}s"
        )
