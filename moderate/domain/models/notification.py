"""Notification template kinds sent to reporters about moderation decisions."""

from __future__ import annotations

from enum import Enum

from moderate.domain.models.queue_entry import QueueEntryKind


class NotificationTemplate(Enum):
    """Template the notifier renders for a reporter."""

    REJECTED_ISSUE = "rejected_issue"
    REJECTED_NOTE = "rejected_note"
    SPAM_ISSUE = "spam_issue"
    SPAM_NOTE = "spam_note"

    @classmethod
    def rejection_for(cls, kind: QueueEntryKind) -> NotificationTemplate:
        if kind is QueueEntryKind.ISSUE:
            return cls.REJECTED_ISSUE
        return cls.REJECTED_NOTE

    @classmethod
    def spam_for(cls, kind: QueueEntryKind) -> NotificationTemplate:
        if kind is QueueEntryKind.ISSUE:
            return cls.SPAM_ISSUE
        return cls.SPAM_NOTE
