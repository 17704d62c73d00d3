"""Content materializer stub for testing.

Creates issues and notes in memory, recording who each one was created as.
Applies the minimal field checks a real tracker would (issues need a
summary, notes need text) and can be told to fail.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from moderate.domain.errors.validation import ContentValidationError
from moderate.domain.models.queue_entry import QueueEntryKind


@dataclass(frozen=True)
class MaterializedContent:
    """Record of one created issue or note."""

    kind: QueueEntryKind
    content_id: int
    acting_user_id: int
    payload: dict[str, Any] = field(default_factory=dict)
    issue_id: int = 0


class ContentMaterializerStub:
    """Stub implementation of ContentMaterializerProtocol.

    Attributes:
        created: Every successfully created issue and note, in order.
        fail_with: Exception raised by the next calls, if set.
    """

    def __init__(self, first_issue_id: int = 1000, first_note_id: int = 5000) -> None:
        self.created: list[MaterializedContent] = []
        self.fail_with: Exception | None = None
        self._next_issue_id = first_issue_id
        self._next_note_id = first_note_id

    async def create_issue(self, payload: dict[str, Any], acting_user_id: int) -> int:
        # Yield so concurrent callers interleave as they would against a real host
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        if not str(payload.get("summary", "")).strip():
            raise ContentValidationError("Issue summary is required", field="summary")

        issue_id = self._next_issue_id
        self._next_issue_id += 1
        self.created.append(
            MaterializedContent(
                kind=QueueEntryKind.ISSUE,
                content_id=issue_id,
                acting_user_id=acting_user_id,
                payload=payload,
            )
        )
        return issue_id

    async def create_note(
        self,
        issue_id: int,
        payload: dict[str, Any],
        acting_user_id: int,
    ) -> int:
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        if not str(payload.get("text", "")).strip():
            raise ContentValidationError("Note text is required", field="text")

        note_id = self._next_note_id
        self._next_note_id += 1
        self.created.append(
            MaterializedContent(
                kind=QueueEntryKind.NOTE,
                content_id=note_id,
                acting_user_id=acting_user_id,
                payload=payload,
                issue_id=issue_id,
            )
        )
        return note_id

    def clear(self) -> None:
        """Forget created content and any configured failure (for testing)."""
        self.created.clear()
        self.fail_with = None
