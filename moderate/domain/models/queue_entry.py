"""Queue entry domain model and moderation state machine.

A queue entry wraps one submitted issue or note while it waits for (or
after it received) a moderator decision.

State Machine:
    PENDING -> APPROVED (content materialized under the reporter's identity)
    PENDING -> REJECTED
    PENDING -> SPAM
    REJECTED -> SPAM (spam cascade only)
    SPAM -> SPAM (spam cascade re-stamps moderator and timestamp)

    APPROVED is terminal. No transition ever leaves it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class QueueEntryKind(Enum):
    """Kind of submission held by a queue entry.

    Values match the persisted ``type`` column.
    """

    ISSUE = "issue"
    NOTE = "note"


class QueueStatus(Enum):
    """Lifecycle status of a queue entry.

    Values are the persisted status codes.
    """

    PENDING = 0
    REJECTED = 1
    APPROVED = 2
    SPAM = 3

    @property
    def display_name(self) -> str:
        """Human readable status name."""
        return self.name.capitalize()

    def is_terminal(self) -> bool:
        """Check whether a moderator decision has been recorded.

        Returns:
            True for APPROVED, REJECTED and SPAM.
        """
        return self in MODERATED_STATUSES

    def valid_transitions(self) -> frozenset[QueueStatus]:
        """Get valid target statuses from this status.

        Returns:
            Frozenset of reachable statuses (empty for APPROVED).
        """
        return STATUS_TRANSITIONS.get(self, frozenset())

    def can_transition_to(self, target: QueueStatus) -> bool:
        """Check a single transition against the transition table."""
        return target in self.valid_transitions()


def status_display_name(code: int) -> str:
    """Display name for a raw status code, "Unknown" for unrecognized codes."""
    try:
        return QueueStatus(code).display_name
    except ValueError:
        return "Unknown"


# Statuses recorded by a moderator decision; cleanup and history only see these
MODERATED_STATUSES: frozenset[QueueStatus] = frozenset(
    {QueueStatus.APPROVED, QueueStatus.REJECTED, QueueStatus.SPAM}
)

# Allowed transitions. REJECTED/SPAM -> SPAM is only taken by the spam cascade.
STATUS_TRANSITIONS: dict[QueueStatus, frozenset[QueueStatus]] = {
    QueueStatus.PENDING: frozenset(
        {QueueStatus.APPROVED, QueueStatus.REJECTED, QueueStatus.SPAM}
    ),
    QueueStatus.REJECTED: frozenset({QueueStatus.SPAM}),
    QueueStatus.SPAM: frozenset({QueueStatus.SPAM}),
    QueueStatus.APPROVED: frozenset(),
}


def encode_payload(payload: Mapping[str, Any]) -> str:
    """Serialize a submission payload to its stored JSON text."""
    return json.dumps(dict(payload), ensure_ascii=False, separators=(",", ":"))


def decode_payload(data: str) -> dict[str, Any]:
    """Deserialize stored JSON text back into a payload mapping.

    Raises:
        ValueError: If the stored text is not a JSON object.
    """
    payload = json.loads(data)
    if not isinstance(payload, dict):
        raise ValueError("Stored payload is not a JSON object")
    return payload


@dataclass(frozen=True)
class NewQueueEntry:
    """A submission about to be inserted into the queue.

    The store assigns ``id`` and persists ``status`` as PENDING.

    Attributes:
        kind: Issue or note.
        project_id: Project the submission belongs to.
        reporter_id: User who submitted it.
        parent_id: Parent issue for notes, 0 for issues.
        payload: Submission content in the content materializer's input shape.
        submitted_at: Enqueue timestamp (UTC).
    """

    kind: QueueEntryKind
    project_id: int
    reporter_id: int
    parent_id: int
    payload: Mapping[str, Any]
    submitted_at: datetime

    def __post_init__(self) -> None:
        """Validate submission fields."""
        if self.project_id <= 0:
            raise ValueError(f"project_id must be positive, got {self.project_id}")
        if self.reporter_id <= 0:
            raise ValueError(f"reporter_id must be positive, got {self.reporter_id}")
        if self.kind is QueueEntryKind.NOTE and self.parent_id <= 0:
            raise ValueError("Notes require a parent issue id")
        if self.kind is QueueEntryKind.ISSUE and self.parent_id != 0:
            raise ValueError("Issues must not carry a parent issue id")
        if not isinstance(self.payload, Mapping) or not self.payload:
            raise ValueError("Submission payload must be a non-empty mapping")


@dataclass(frozen=True)
class QueueEntry:
    """A moderation queue entry as read back from the store.

    Frozen: status changes produce a new instance via ``with_status``.

    Attributes:
        id: Store-assigned, monotonically increasing identifier.
        kind: Issue or note (immutable).
        project_id: Scoping project (immutable).
        reporter_id: Original submitter (immutable).
        parent_id: Parent issue id for notes, 0 for issues.
        payload: Submission content, read-only view.
        submitted_at: Enqueue timestamp (immutable).
        status: Current lifecycle status.
        moderator_id: Moderator who recorded the decision, 0 while pending.
        moderated_at: Time of the decision, None while pending.
    """

    id: int
    kind: QueueEntryKind
    project_id: int
    reporter_id: int
    parent_id: int
    payload: Mapping[str, Any]
    submitted_at: datetime
    status: QueueStatus = field(default=QueueStatus.PENDING)
    moderator_id: int = field(default=0)
    moderated_at: datetime | None = field(default=None)

    def __post_init__(self) -> None:
        if not isinstance(self.payload, MappingProxyType):
            object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    @property
    def is_pending(self) -> bool:
        return self.status is QueueStatus.PENDING

    def payload_dict(self) -> dict[str, Any]:
        """Return a mutable deep copy of the payload for collaborators."""
        return decode_payload(encode_payload(self.payload))

    def with_status(
        self,
        new_status: QueueStatus,
        moderator_id: int,
        moderated_at: datetime,
    ) -> QueueEntry:
        """Create a copy with a recorded moderator decision.

        Args:
            new_status: Target status.
            moderator_id: Moderator recording the decision.
            moderated_at: Decision timestamp.

        Returns:
            New QueueEntry with status, moderator and timestamp updated.

        Raises:
            EntryAlreadyApprovedError: If the entry is already APPROVED.
            InvalidStateTransitionError: If the transition table forbids it.
        """
        from moderate.domain.errors.state_transition import (
            EntryAlreadyApprovedError,
            InvalidStateTransitionError,
        )

        if self.status is QueueStatus.APPROVED:
            raise EntryAlreadyApprovedError(queue_id=self.id)
        if not self.status.can_transition_to(new_status):
            raise InvalidStateTransitionError(
                queue_id=self.id,
                from_status=self.status,
                to_status=new_status,
                allowed_transitions=sorted(
                    self.status.valid_transitions(), key=lambda s: s.value
                ),
            )

        return QueueEntry(
            id=self.id,
            kind=self.kind,
            project_id=self.project_id,
            reporter_id=self.reporter_id,
            parent_id=self.parent_id,
            payload=self.payload,
            submitted_at=self.submitted_at,
            status=new_status,
            moderator_id=moderator_id,
            moderated_at=moderated_at,
        )
