"""Moderation queue configuration.

Defines who may moderate, who bypasses moderation, which notifications
are sent, and the antispam limits guarding queue insertion. Values are
injected into the services at construction; nothing reads ambient global
state at call time.

Environment Variables (Moderation):
- MODERATE_THRESHOLD: Access level required to view and act on the queue
  (default: MANAGER)
- MODERATE_BYPASS_THRESHOLD: Access level that skips moderation (default: DEVELOPER)
- MODERATE_NOTIFY_ON_REJECT: Notify reporters of rejections (default: true)
- MODERATE_NOTIFY_ON_SPAM: Notify reporters flagged as spam (default: false)
- MODERATE_INCLUDE_MODERATOR_IN_NOTIFICATIONS: Name the moderator (default: false)
- MODERATE_PAGE_SIZE: Queue page size (default: 100)
- MODERATE_HISTORY_LIMIT: Default history length (default: 50)
- MODERATE_CLEANUP_ON_VIEW: Run retention cleanup before listing (default: true)

Environment Variables (Antispam):
- MODERATE_ANTISPAM_MAX_EVENT_COUNT: Pending entries allowed per window,
  0 disables the check (default: 10)
- MODERATE_ANTISPAM_TIME_WINDOW_SECONDS: Sliding window in seconds (default: 3600)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from moderate.domain.models.access_level import AccessLevel

# Moderated entries older than this are removed by cleanup. Not configurable.
RETENTION_DAYS: int = 30

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable with default.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive). Anything
    else falls back to the default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return default


def _get_level_env(key: str, default: AccessLevel) -> AccessLevel:
    """Get access level environment variable (name or number) with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return AccessLevel.parse(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class ModerationConfig:
    """Configuration for the moderation engine and bypass policy.

    Attributes:
        moderate_threshold: Level needed to see and act on a project's entries.
        bypass_threshold: Level at which submissions skip the queue.
        notify_on_reject: Send a notification when an entry is rejected.
        notify_on_spam: Send a notification before a reporter is flagged as spam.
        include_moderator_in_notifications: Put the moderator id in the context.
        page_size: Maximum entries returned by a queue listing.
        history_limit: Default number of entries in a history listing.
        cleanup_on_view: Run retention cleanup before each queue listing.
    """

    moderate_threshold: int = AccessLevel.MANAGER
    bypass_threshold: int = AccessLevel.DEVELOPER
    notify_on_reject: bool = True
    notify_on_spam: bool = False
    include_moderator_in_notifications: bool = False
    page_size: int = 100
    history_limit: int = 50
    cleanup_on_view: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.moderate_threshold < 0:
            raise ValueError(
                f"moderate_threshold must be non-negative, got {self.moderate_threshold}"
            )
        if self.bypass_threshold < 0:
            raise ValueError(
                f"bypass_threshold must be non-negative, got {self.bypass_threshold}"
            )
        if self.page_size < 1:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if self.history_limit < 1:
            raise ValueError(
                f"history_limit must be positive, got {self.history_limit}"
            )

    @classmethod
    def from_environment(cls) -> ModerationConfig:
        """Create config from MODERATE_* environment variables with defaults."""
        return cls(
            moderate_threshold=_get_level_env("MODERATE_THRESHOLD", AccessLevel.MANAGER),
            bypass_threshold=_get_level_env(
                "MODERATE_BYPASS_THRESHOLD", AccessLevel.DEVELOPER
            ),
            notify_on_reject=_get_bool_env("MODERATE_NOTIFY_ON_REJECT", True),
            notify_on_spam=_get_bool_env("MODERATE_NOTIFY_ON_SPAM", False),
            include_moderator_in_notifications=_get_bool_env(
                "MODERATE_INCLUDE_MODERATOR_IN_NOTIFICATIONS", False
            ),
            page_size=_get_int_env("MODERATE_PAGE_SIZE", 100),
            history_limit=_get_int_env("MODERATE_HISTORY_LIMIT", 50),
            cleanup_on_view=_get_bool_env("MODERATE_CLEANUP_ON_VIEW", True),
        )


@dataclass(frozen=True)
class AntispamConfig:
    """Configuration for moderation queue admission control.

    Attributes:
        max_event_count: Pending entries a reporter may have inside the
            window. 0 disables rate limiting.
        time_window_seconds: Sliding window size in seconds.
    """

    max_event_count: int = 10
    time_window_seconds: int = 3600

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_event_count < 0:
            raise ValueError(
                f"max_event_count must be non-negative, got {self.max_event_count}"
            )
        if self.time_window_seconds < 1:
            raise ValueError(
                f"time_window_seconds must be positive, got {self.time_window_seconds}"
            )

    @property
    def enabled(self) -> bool:
        return self.max_event_count > 0

    @classmethod
    def from_environment(cls) -> AntispamConfig:
        """Create config from MODERATE_ANTISPAM_* environment variables."""
        return cls(
            max_event_count=_get_int_env("MODERATE_ANTISPAM_MAX_EVENT_COUNT", 10),
            time_window_seconds=_get_int_env(
                "MODERATE_ANTISPAM_TIME_WINDOW_SECONDS", 3600
            ),
        )


# Default production configs
DEFAULT_MODERATION_CONFIG = ModerationConfig()
DEFAULT_ANTISPAM_CONFIG = AntispamConfig()

# Testing configs: small pages, tight limits, no implicit cleanup
TEST_MODERATION_CONFIG = ModerationConfig(
    page_size=5,
    history_limit=5,
    cleanup_on_view=False,
)
TEST_ANTISPAM_CONFIG = AntispamConfig(max_event_count=3, time_window_seconds=300)
