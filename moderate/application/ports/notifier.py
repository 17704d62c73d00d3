"""Notifier port - delivers moderation decision notices to reporters.

Delivery is best effort. The moderation service catches and logs any
exception raised here; a failed notice never reverses a decision.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from moderate.domain.models.notification import NotificationTemplate


@runtime_checkable
class NotifierProtocol(Protocol):
    """Protocol for notification delivery (email or otherwise)."""

    async def notify(
        self,
        user_id: int,
        template: NotificationTemplate,
        context: dict[str, Any],
    ) -> None:
        """Send one notification.

        Args:
            user_id: Recipient.
            template: Template to render.
            context: Template variables.
        """
        ...
