"""Domain models for the moderation queue."""

from moderate.domain.models.access_level import ALL_PROJECTS, AccessLevel
from moderate.domain.models.notification import NotificationTemplate
from moderate.domain.models.queue_entry import (
    MODERATED_STATUSES,
    STATUS_TRANSITIONS,
    NewQueueEntry,
    QueueEntry,
    QueueEntryKind,
    QueueStatus,
    status_display_name,
)
from moderate.domain.models.results import (
    AdmissionResult,
    ApprovalResult,
    QueuePage,
    SubmissionOutcome,
)

__all__: list[str] = [
    "ALL_PROJECTS",
    "AccessLevel",
    "AdmissionResult",
    "ApprovalResult",
    "MODERATED_STATUSES",
    "NewQueueEntry",
    "NotificationTemplate",
    "QueueEntry",
    "QueueEntryKind",
    "QueuePage",
    "QueueStatus",
    "STATUS_TRANSITIONS",
    "SubmissionOutcome",
    "status_display_name",
]
