"""Clock port for the moderation services.

Submission stamps, decision stamps, the admission window and the retention
cutoff are all read from an injected time authority, never from
``datetime.now()``. Tests substitute a frozen clock.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Source of UTC-aware timestamps.

    Implementations: ``SystemTimeAuthority`` (host clock) and, in tests,
    ``tests.helpers.fake_time_authority.FakeTimeAuthority``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Current time, timezone-aware."""

    @abstractmethod
    def utcnow(self) -> datetime:
        """Current time in UTC. Used for every queue timestamp."""

    @abstractmethod
    def monotonic(self) -> float:
        """Seconds on a clock that never goes backwards."""
