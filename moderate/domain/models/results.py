"""Result types returned by moderation and submission operations."""

from __future__ import annotations

from dataclasses import dataclass, field

from moderate.domain.models.queue_entry import QueueEntry, QueueEntryKind


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome of a successful admission check.

    Attributes:
        current_count: Pending entries the reporter has inside the window.
        limit: Configured maximum (0 means rate limiting disabled).
        window_seconds: Sliding window size.
    """

    current_count: int
    limit: int
    window_seconds: int

    @property
    def remaining(self) -> int:
        """Submissions still admitted in the window, -1 when unlimited."""
        if self.limit == 0:
            return -1
        return max(0, self.limit - self.current_count - 1)


@dataclass(frozen=True)
class ApprovalResult:
    """Outcome of approving a queue entry.

    Attributes:
        entry: The entry after its transition to APPROVED.
        created_id: Id of the issue or note the approval created.
    """

    entry: QueueEntry
    created_id: int


@dataclass(frozen=True)
class QueuePage:
    """A capped page of queue entries.

    Attributes:
        items: Entries on this page, newest first.
        has_more: True when more entries matched than the page holds.
        total_count: Number of matching entries ignoring the cap.
    """

    items: list[QueueEntry] = field(default_factory=list)
    has_more: bool = False
    total_count: int = 0

    @classmethod
    def empty(cls) -> QueuePage:
        return cls()


@dataclass(frozen=True)
class SubmissionOutcome:
    """Outcome of gating a submission.

    Exactly one of ``queue_id`` and ``created_id`` is set.

    Attributes:
        kind: Submitted content kind.
        moderated: True when the submission was queued for review.
        queue_id: Queue entry id for moderated submissions.
        created_id: Issue or note id for submissions that bypassed moderation.
    """

    kind: QueueEntryKind
    moderated: bool
    queue_id: int | None = None
    created_id: int | None = None
