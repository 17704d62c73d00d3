"""Queue repository stub implementation.

In-memory QueueRepositoryProtocol for development and testing. Payloads are
kept as the same JSON text the database stores, so every read returns a
round-tripped copy.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Collection
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime

from moderate.application.ports.queue_repository import QueueRepositoryProtocol
from moderate.domain.errors.concurrent_modification import ConcurrentModificationError
from moderate.domain.errors.queue import QueueEntryNotFoundError
from moderate.domain.errors.state_transition import (
    EntryAlreadyApprovedError,
    InvalidStateTransitionError,
)
from moderate.domain.models.queue_entry import (
    MODERATED_STATUSES,
    NewQueueEntry,
    QueueEntry,
    QueueStatus,
    decode_payload,
    encode_payload,
)


class _KeyedLocks:
    """asyncio locks created per key and dropped once nobody holds or awaits them."""

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

class QueueRepositoryStub(QueueRepositoryProtocol):
    """In-memory stub implementation of QueueRepositoryProtocol.

    NOT suitable for production use.

    Attributes:
        _entries: Stored entries by id, payload held separately as JSON text.
        _data: Serialized payload by entry id.
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._entries: dict[int, QueueEntry] = {}
        self._data: dict[int, str] = {}
        self._next_id = 1
        # Guards every multi-step mutation (in-memory equivalent of a row lock)
        self._cas_lock = asyncio.Lock()
        self._reservations = _KeyedLocks()
        self._reporter_reservations = _KeyedLocks()

    def _load(self, queue_id: int) -> QueueEntry | None:
        entry = self._entries.get(queue_id)
        if entry is None:
            return None
        return replace(entry, payload=decode_payload(self._data[queue_id]))

    def _remove(self, queue_ids: list[int]) -> int:
        for queue_id in queue_ids:
            del self._entries[queue_id]
            del self._data[queue_id]
        return len(queue_ids)

    async def add(self, entry: NewQueueEntry) -> QueueEntry:
        async with self._cas_lock:
            queue_id = self._next_id
            self._next_id += 1
            self._data[queue_id] = encode_payload(entry.payload)
            self._entries[queue_id] = QueueEntry(
                id=queue_id,
                kind=entry.kind,
                project_id=entry.project_id,
                reporter_id=entry.reporter_id,
                parent_id=entry.parent_id,
                payload={},
                submitted_at=entry.submitted_at,
            )
        return self._load(queue_id)  # type: ignore[return-value]

    async def get(self, queue_id: int) -> QueueEntry | None:
        return self._load(queue_id)

    @asynccontextmanager
    async def reserve(self, queue_id: int) -> AsyncIterator[QueueEntry | None]:
        async with self._reservations.hold(queue_id):
            yield self._load(queue_id)

    @asynccontextmanager
    async def reserve_reporter(self, reporter_id: int) -> AsyncIterator[None]:
        async with self._reporter_reservations.hold(reporter_id):
            yield

    async def transition_cas(
        self,
        queue_id: int,
        expected_status: QueueStatus,
        new_status: QueueStatus,
        moderator_id: int,
        moderated_at: datetime,
    ) -> QueueEntry:
        """Atomic status change using compare-and-swap.

        Simulates ``UPDATE ... WHERE status = expected RETURNING`` with a lock.

        Raises:
            QueueEntryNotFoundError: If the entry does not exist.
            EntryAlreadyApprovedError: If the entry is APPROVED.
            ConcurrentModificationError: If the current status differs.
            InvalidStateTransitionError: If the transition is not allowed.
        """
        async with self._cas_lock:
            entry = self._entries.get(queue_id)
            if entry is None:
                raise QueueEntryNotFoundError(queue_id)

            if entry.status is QueueStatus.APPROVED:
                raise EntryAlreadyApprovedError(queue_id=queue_id)

            if entry.status is not expected_status:
                raise ConcurrentModificationError(
                    queue_id=queue_id,
                    expected_status=expected_status,
                    actual_status=entry.status,
                )

            if not entry.status.can_transition_to(new_status):
                raise InvalidStateTransitionError(
                    queue_id=queue_id,
                    from_status=entry.status,
                    to_status=new_status,
                    allowed_transitions=list(entry.status.valid_transitions()),
                )

            self._entries[queue_id] = replace(
                entry,
                status=new_status,
                moderator_id=moderator_id,
                moderated_at=moderated_at,
            )
        return self._load(queue_id)  # type: ignore[return-value]

    async def mark_reporter_spam(
        self,
        reporter_id: int,
        moderator_id: int,
        moderated_at: datetime,
    ) -> int:
        async with self._cas_lock:
            changed = 0
            for queue_id, entry in self._entries.items():
                if (
                    entry.reporter_id == reporter_id
                    and entry.status is not QueueStatus.APPROVED
                ):
                    self._entries[queue_id] = replace(
                        entry,
                        status=QueueStatus.SPAM,
                        moderator_id=moderator_id,
                        moderated_at=moderated_at,
                    )
                    changed += 1
        return changed

    async def delete(self, queue_id: int) -> bool:
        async with self._cas_lock:
            if queue_id not in self._entries:
                return False
            self._remove([queue_id])
        return True

    async def delete_by_project(self, project_id: int) -> int:
        async with self._cas_lock:
            return self._remove(
                [i for i, e in self._entries.items() if e.project_id == project_id]
            )

    async def delete_by_reporter(self, reporter_id: int) -> int:
        async with self._cas_lock:
            return self._remove(
                [i for i, e in self._entries.items() if e.reporter_id == reporter_id]
            )

    async def delete_moderated_before(self, cutoff: datetime) -> int:
        async with self._cas_lock:
            return self._remove(
                [
                    i
                    for i, e in self._entries.items()
                    if e.status in MODERATED_STATUSES
                    and e.moderated_at is not None
                    and e.moderated_at < cutoff
                ]
            )

    async def count_pending_since(self, reporter_id: int, since: datetime) -> int:
        return sum(
            1
            for e in self._entries.values()
            if e.reporter_id == reporter_id
            and e.status is QueueStatus.PENDING
            and e.submitted_at >= since
        )

    async def list_submitted(
        self,
        project_ids: Collection[int],
        statuses: Collection[QueueStatus],
        limit: int,
    ) -> tuple[list[QueueEntry], int]:
        matching = [
            e
            for e in self._entries.values()
            if e.project_id in project_ids and e.status in statuses
        ]
        matching.sort(key=lambda e: (e.submitted_at, e.id), reverse=True)
        return [self._load(e.id) for e in matching[:limit]], len(matching)  # type: ignore[misc]

    async def list_moderated(
        self,
        project_ids: Collection[int],
        limit: int,
    ) -> list[QueueEntry]:
        matching = [
            e
            for e in self._entries.values()
            if e.project_id in project_ids and e.status in MODERATED_STATUSES
        ]
        matching.sort(key=lambda e: (e.moderated_at, e.id), reverse=True)
        return [self._load(e.id) for e in matching[:limit]]  # type: ignore[misc]

    async def count_by_status(
        self,
        project_ids: Collection[int],
        status: QueueStatus,
    ) -> int:
        return sum(
            1
            for e in self._entries.values()
            if e.project_id in project_ids and e.status is status
        )

    # Test helpers

    def clear(self) -> None:
        """Clear all stored entries (for testing)."""
        self._entries.clear()
        self._data.clear()

    def get_all(self) -> list[QueueEntry]:
        """Get all stored entries in id order (for testing)."""
        return [self._load(i) for i in sorted(self._entries)]  # type: ignore[misc]

    def put(self, entry: QueueEntry) -> None:
        """Store an entry verbatim, keeping its id and status (for testing)."""
        self._data[entry.id] = encode_payload(entry.payload)
        self._entries[entry.id] = entry
        self._next_id = max(self._next_id, entry.id + 1)
