"""Queue repository port - durable storage of moderation queue entries.

Developer Golden Rules:
1. CAS FOR TRANSITIONS - Every single-entry status change goes through
   transition_cas() (UPDATE ... WHERE status = expected RETURNING).
2. RESERVE FOR APPROVAL - Approval holds reserve(queue_id) across
   validate -> materialize -> CAS so a concurrent approval cannot
   materialize the same entry twice.
3. ONE STATEMENT FOR SPAM - mark_reporter_spam() is a single multi-row
   update, never read-loop-write.
4. REPORTER BEFORE ENTRY - Approval and the spam cascade both hold
   reserve_reporter(reporter_id) outside reserve(queue_id), so a cascade
   never flips an entry whose approval is materializing.
5. PENDING NEVER EXPIRES - delete_moderated_before() only removes
   APPROVED, REJECTED and SPAM entries.
"""

from __future__ import annotations

from collections.abc import Collection
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Protocol, runtime_checkable

from moderate.domain.models.queue_entry import NewQueueEntry, QueueEntry, QueueStatus


@runtime_checkable
class QueueRepositoryProtocol(Protocol):
    """Protocol for moderation queue storage operations.

    Implementations may use PostgreSQL or in-memory storage.
    """

    async def add(self, entry: NewQueueEntry) -> QueueEntry:
        """Insert a new PENDING entry.

        Args:
            entry: The submission to store.

        Returns:
            The stored entry with its assigned id.
        """
        ...

    async def get(self, queue_id: int) -> QueueEntry | None:
        """Retrieve an entry by id, None if unknown."""
        ...

    def reserve(self, queue_id: int) -> AbstractAsyncContextManager[QueueEntry | None]:
        """Hold an exclusive reservation on one entry.

        The context yields the entry as read after the reservation was
        acquired (None if it does not exist). A second reservation on the
        same id waits until the first is released. The reservation does
        not block reads or CAS updates issued by the holder.

        Args:
            queue_id: Entry to reserve.

        Returns:
            Async context manager yielding the current entry or None.
        """
        ...

    def reserve_reporter(self, reporter_id: int) -> AbstractAsyncContextManager[None]:
        """Hold an exclusive reservation on all of a reporter's entries.

        Taken before any entry reservation. Does not block reads or writes.
        """
        ...

    async def transition_cas(
        self,
        queue_id: int,
        expected_status: QueueStatus,
        new_status: QueueStatus,
        moderator_id: int,
        moderated_at: datetime,
    ) -> QueueEntry:
        """Atomically move an entry from expected_status to new_status.

        Args:
            queue_id: Entry to update.
            expected_status: Status the entry must currently have.
            new_status: Target status.
            moderator_id: Moderator recording the decision.
            moderated_at: Decision timestamp.

        Returns:
            The updated entry.

        Raises:
            QueueEntryNotFoundError: If the entry does not exist.
            ConcurrentModificationError: If the current status differs.
            EntryAlreadyApprovedError: If the entry is APPROVED.
            InvalidStateTransitionError: If the transition is not allowed.
        """
        ...

    async def mark_reporter_spam(
        self,
        reporter_id: int,
        moderator_id: int,
        moderated_at: datetime,
    ) -> int:
        """Set every non-APPROVED entry of a reporter to SPAM in one statement.

        Args:
            reporter_id: Reporter whose entries are flagged.
            moderator_id: Moderator stamped on every changed entry.
            moderated_at: Timestamp stamped on every changed entry.

        Returns:
            Number of entries changed.
        """
        ...

    async def delete(self, queue_id: int) -> bool:
        """Hard delete one entry. Returns True if a row was removed."""
        ...

    async def delete_by_project(self, project_id: int) -> int:
        """Hard delete every entry of a project. Returns rows removed."""
        ...

    async def delete_by_reporter(self, reporter_id: int) -> int:
        """Hard delete every entry of a reporter. Returns rows removed."""
        ...

    async def delete_moderated_before(self, cutoff: datetime) -> int:
        """Delete APPROVED/REJECTED/SPAM entries moderated before cutoff.

        PENDING entries are never deleted, regardless of age.

        Returns:
            Rows removed.
        """
        ...

    async def count_pending_since(self, reporter_id: int, since: datetime) -> int:
        """Count a reporter's PENDING entries submitted at or after since."""
        ...

    async def list_submitted(
        self,
        project_ids: Collection[int],
        statuses: Collection[QueueStatus],
        limit: int,
    ) -> tuple[list[QueueEntry], int]:
        """List entries ordered by submitted_at (then id) descending.

        Args:
            project_ids: Projects to include (empty means no results).
            statuses: Statuses to include.
            limit: Maximum entries to return.

        Returns:
            Tuple of (entries, total count ignoring limit).
        """
        ...

    async def list_moderated(
        self,
        project_ids: Collection[int],
        limit: int,
    ) -> list[QueueEntry]:
        """List APPROVED/REJECTED/SPAM entries, newest moderated first."""
        ...

    async def count_by_status(
        self,
        project_ids: Collection[int],
        status: QueueStatus,
    ) -> int:
        """Count entries with a status across projects."""
        ...
