"""Access levels used for moderation and bypass thresholds.

The tracker expresses permissions as ordered integer levels. A user "meets"
a threshold when their level in a project is greater than or equal to it.
"""

from __future__ import annotations

from enum import IntEnum

# Scope value meaning "every project the acting user can moderate"
ALL_PROJECTS: int = 0


class AccessLevel(IntEnum):
    """Standard tracker access levels, lowest to highest."""

    VIEWER = 10
    REPORTER = 25
    UPDATER = 40
    DEVELOPER = 55
    MANAGER = 70
    ADMINISTRATOR = 90

    @classmethod
    def parse(cls, value: str | int) -> AccessLevel:
        """Parse an access level from a name ("manager") or number ("70").

        Args:
            value: Level name (case-insensitive) or integer value.

        Returns:
            The matching AccessLevel.

        Raises:
            ValueError: If the value names no known level.
        """
        if isinstance(value, int):
            return cls(value)
        text = value.strip()
        if text.isdigit():
            return cls(int(text))
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(f"Unknown access level: {value!r}") from None
