"""Unit tests for the queue entry model and moderation state machine.

Tests cover:
- Status codes, display names and the transition table
- APPROVED is terminal
- with_status() stamping and rejection of illegal transitions
- NewQueueEntry validation
- Payload immutability and JSON round trip
"""

from datetime import datetime, timezone

import pytest

from moderate.domain.errors.state_transition import (
    EntryAlreadyApprovedError,
    InvalidStateTransitionError,
)
from moderate.domain.models.queue_entry import (
    MODERATED_STATUSES,
    NewQueueEntry,
    QueueEntry,
    QueueEntryKind,
    QueueStatus,
    decode_payload,
    encode_payload,
    status_display_name,
)

SUBMITTED = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
DECIDED = datetime(2026, 3, 1, 13, 0, tzinfo=timezone.utc)


def _entry(status: QueueStatus = QueueStatus.PENDING, **overrides) -> QueueEntry:
    fields = {
        "id": 7,
        "kind": QueueEntryKind.ISSUE,
        "project_id": 1,
        "reporter_id": 10,
        "parent_id": 0,
        "payload": {"summary": "Crash on save", "description": "Steps..."},
        "submitted_at": SUBMITTED,
        "status": status,
    }
    fields.update(overrides)
    return QueueEntry(**fields)


class TestQueueStatus:
    """Tests for QueueStatus codes and the transition table."""

    def test_persisted_codes(self) -> None:
        assert QueueStatus.PENDING.value == 0
        assert QueueStatus.REJECTED.value == 1
        assert QueueStatus.APPROVED.value == 2
        assert QueueStatus.SPAM.value == 3

    def test_display_names(self) -> None:
        assert [s.display_name for s in QueueStatus] == [
            "Pending",
            "Rejected",
            "Approved",
            "Spam",
        ]

    def test_unknown_code_displays_unknown(self) -> None:
        assert status_display_name(2) == "Approved"
        assert status_display_name(42) == "Unknown"

    def test_pending_reaches_every_decision(self) -> None:
        assert QueueStatus.PENDING.valid_transitions() == MODERATED_STATUSES

    def test_approved_is_terminal(self) -> None:
        assert QueueStatus.APPROVED.valid_transitions() == frozenset()
        for target in QueueStatus:
            assert not QueueStatus.APPROVED.can_transition_to(target)

    def test_rejected_only_moves_to_spam(self) -> None:
        assert QueueStatus.REJECTED.valid_transitions() == frozenset({QueueStatus.SPAM})

    def test_spam_can_be_restamped(self) -> None:
        assert QueueStatus.SPAM.can_transition_to(QueueStatus.SPAM)
        assert not QueueStatus.SPAM.can_transition_to(QueueStatus.PENDING)

    def test_is_terminal(self) -> None:
        assert not QueueStatus.PENDING.is_terminal()
        assert all(s.is_terminal() for s in MODERATED_STATUSES)


class TestWithStatus:
    """Tests for QueueEntry.with_status()."""

    def test_stamps_moderator_and_time(self) -> None:
        entry = _entry()
        approved = entry.with_status(QueueStatus.APPROVED, 20, DECIDED)

        assert approved.status is QueueStatus.APPROVED
        assert approved.moderator_id == 20
        assert approved.moderated_at == DECIDED
        # Original untouched
        assert entry.is_pending
        assert entry.moderator_id == 0
        assert entry.moderated_at is None

    def test_immutable_fields_carry_over(self) -> None:
        entry = _entry()
        rejected = entry.with_status(QueueStatus.REJECTED, 20, DECIDED)

        assert rejected.id == entry.id
        assert rejected.kind is entry.kind
        assert rejected.project_id == entry.project_id
        assert rejected.reporter_id == entry.reporter_id
        assert rejected.submitted_at == entry.submitted_at
        assert dict(rejected.payload) == dict(entry.payload)

    @pytest.mark.parametrize("target", list(QueueStatus))
    def test_approved_entry_never_changes(self, target: QueueStatus) -> None:
        entry = _entry(QueueStatus.APPROVED, moderator_id=20, moderated_at=DECIDED)
        with pytest.raises(EntryAlreadyApprovedError) as exc_info:
            entry.with_status(target, 21, DECIDED)
        assert exc_info.value.queue_id == 7

    def test_rejected_cannot_be_approved(self) -> None:
        entry = _entry(QueueStatus.REJECTED, moderator_id=20, moderated_at=DECIDED)
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            entry.with_status(QueueStatus.APPROVED, 20, DECIDED)
        assert exc_info.value.from_status is QueueStatus.REJECTED
        assert exc_info.value.to_status is QueueStatus.APPROVED
        assert exc_info.value.allowed_transitions == [QueueStatus.SPAM]

    def test_pending_to_pending_is_invalid(self) -> None:
        with pytest.raises(InvalidStateTransitionError):
            _entry().with_status(QueueStatus.PENDING, 20, DECIDED)


class TestNewQueueEntry:
    """Tests for NewQueueEntry validation."""

    def test_valid_note(self) -> None:
        entry = NewQueueEntry(
            kind=QueueEntryKind.NOTE,
            project_id=1,
            reporter_id=10,
            parent_id=100,
            payload={"text": "Same here"},
            submitted_at=SUBMITTED,
        )
        assert entry.parent_id == 100

    def test_note_requires_parent(self) -> None:
        with pytest.raises(ValueError, match="parent issue"):
            NewQueueEntry(
                kind=QueueEntryKind.NOTE,
                project_id=1,
                reporter_id=10,
                parent_id=0,
                payload={"text": "orphan"},
                submitted_at=SUBMITTED,
            )

    def test_issue_rejects_parent(self) -> None:
        with pytest.raises(ValueError, match="must not carry"):
            NewQueueEntry(
                kind=QueueEntryKind.ISSUE,
                project_id=1,
                reporter_id=10,
                parent_id=5,
                payload={"summary": "x"},
                submitted_at=SUBMITTED,
            )

    @pytest.mark.parametrize("project_id, reporter_id", [(0, 10), (1, 0), (-1, 10)])
    def test_ids_must_be_positive(self, project_id: int, reporter_id: int) -> None:
        with pytest.raises(ValueError, match="must be positive"):
            NewQueueEntry(
                kind=QueueEntryKind.ISSUE,
                project_id=project_id,
                reporter_id=reporter_id,
                parent_id=0,
                payload={"summary": "x"},
                submitted_at=SUBMITTED,
            )

    def test_empty_payload_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            NewQueueEntry(
                kind=QueueEntryKind.ISSUE,
                project_id=1,
                reporter_id=10,
                parent_id=0,
                payload={},
                submitted_at=SUBMITTED,
            )


class TestPayload:
    """Tests for payload handling."""

    def test_payload_is_read_only(self) -> None:
        entry = _entry()
        with pytest.raises(TypeError):
            entry.payload["summary"] = "changed"  # type: ignore[index]

    def test_payload_dict_is_independent_copy(self) -> None:
        entry = _entry(payload={"summary": "x", "tags": ["a", "b"]})
        copy = entry.payload_dict()
        copy["tags"].append("c")
        assert list(entry.payload["tags"]) == ["a", "b"]

    def test_unicode_and_nesting_survive_storage(self) -> None:
        payload = {
            "summary": "Überlauf in Zeile 3 – ✓",
            "custom_fields": {"severity": 50, "tags": ["ui", None, True]},
        }
        assert decode_payload(encode_payload(payload)) == payload

    def test_decode_rejects_non_object(self) -> None:
        with pytest.raises(ValueError, match="not a JSON object"):
            decode_payload("[1, 2]")
