"""Notifier stub for testing.

Records every notice together with the recipient's enabled flag at send
time, so tests can assert that spam notices precede account disabling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from moderate.domain.models.notification import NotificationTemplate

if TYPE_CHECKING:
    from moderate.application.ports.identity_directory import (
        IdentityDirectoryProtocol,
    )


@dataclass(frozen=True)
class SentNotification:
    user_id: int
    template: NotificationTemplate
    context: dict[str, Any] = field(default_factory=dict)
    recipient_enabled: bool | None = None


class NotifierStub:
    """Stub implementation of NotifierProtocol.

    Attributes:
        sent: Delivered notifications in order.
        fail_with: Exception raised instead of delivering, if set.
    """

    def __init__(self, directory: IdentityDirectoryProtocol | None = None) -> None:
        self._directory = directory
        self.sent: list[SentNotification] = []
        self.fail_with: Exception | None = None

    async def notify(
        self,
        user_id: int,
        template: NotificationTemplate,
        context: dict[str, Any],
    ) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        enabled = (
            await self._directory.user_enabled(user_id)
            if self._directory is not None
            else None
        )
        self.sent.append(
            SentNotification(
                user_id=user_id,
                template=template,
                context=dict(context),
                recipient_enabled=enabled,
            )
        )

    def clear(self) -> None:
        self.sent.clear()
        self.fail_with = None
