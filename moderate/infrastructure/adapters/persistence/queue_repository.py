"""PostgreSQL queue repository (SQLAlchemy async + asyncpg).

Stores entries in the ``moderate_queue`` table created by
``moderate/migrations/001_create_moderate_queue.sql``.

Concurrency:
- transition_cas() is a single ``UPDATE ... WHERE status = :expected
  RETURNING``; zero rows back means another writer got there first.
- reserve() and reserve_reporter() take a session-level
  ``pg_advisory_lock`` on a dedicated connection and release it in
  ``finally``. Keys are ``hashtextextended("entry:<id>", ns)`` and
  ``hashtextextended("reporter:<id>", ns)``, so any bigint id fits
  and entry and reporter reservations hash different strings.
- mark_reporter_spam() is one multi-row UPDATE excluding APPROVED rows.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Collection
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

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
    QueueEntryKind,
    QueueStatus,
    decode_payload,
    encode_payload,
)

logger = get_logger()

# Hash seed ("mod") for advisory lock keys
_LOCK_NAMESPACE = 0x6D6F64

_COLUMNS = (
    "id, type, project_id, reporter_id, bug_id, data, date_submitted, "
    "status, moderator_id, date_moderated"
)


def _row_to_entry(row: Any) -> QueueEntry:
    m = row._mapping
    return QueueEntry(
        id=m["id"],
        kind=QueueEntryKind(m["type"]),
        project_id=m["project_id"],
        reporter_id=m["reporter_id"],
        parent_id=m["bug_id"],
        payload=decode_payload(m["data"]),
        submitted_at=m["date_submitted"],
        status=QueueStatus(m["status"]),
        moderator_id=m["moderator_id"],
        moderated_at=m["date_moderated"],
    )


def _status_codes(statuses: Collection[QueueStatus]) -> list[int]:
    return sorted(s.value for s in statuses)


class PostgresQueueRepository:
    """QueueRepositoryProtocol backed by PostgreSQL.

    Attributes:
        _session_factory: SQLAlchemy async session factory.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(self, entry: NewQueueEntry) -> QueueEntry:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"""
                    INSERT INTO moderate_queue
                        (type, project_id, reporter_id, bug_id, data,
                         date_submitted, status, moderator_id)
                    VALUES
                        (:type, :project_id, :reporter_id, :bug_id, :data,
                         :date_submitted, :status, 0)
                    RETURNING {_COLUMNS}
                """),
                {
                    "type": entry.kind.value,
                    "project_id": entry.project_id,
                    "reporter_id": entry.reporter_id,
                    "bug_id": entry.parent_id,
                    "data": encode_payload(entry.payload),
                    "date_submitted": entry.submitted_at,
                    "status": QueueStatus.PENDING.value,
                },
            )
            stored = _row_to_entry(result.one())
            await session.commit()
        return stored

    async def get(self, queue_id: int) -> QueueEntry | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"SELECT {_COLUMNS} FROM moderate_queue WHERE id = :id"),
                {"id": queue_id},
            )
            row = result.fetchone()
        return _row_to_entry(row) if row else None

    @asynccontextmanager
    async def _advisory_lock(self, key: str) -> AsyncIterator[AsyncSession]:
        params = {"key": key, "ns": _LOCK_NAMESPACE}
        async with self._session_factory() as session:
            await session.execute(
                text("SELECT pg_advisory_lock(hashtextextended(:key, :ns))"), params
            )
            try:
                yield session
            finally:
                await session.execute(
                    text("SELECT pg_advisory_unlock(hashtextextended(:key, :ns))"),
                    params,
                )
                await session.commit()

    @asynccontextmanager
    async def reserve(self, queue_id: int) -> AsyncIterator[QueueEntry | None]:
        async with self._advisory_lock(f"entry:{queue_id}") as session:
            result = await session.execute(
                text(f"SELECT {_COLUMNS} FROM moderate_queue WHERE id = :id"),
                {"id": queue_id},
            )
            row = result.fetchone()
            yield _row_to_entry(row) if row else None

    @asynccontextmanager
    async def reserve_reporter(self, reporter_id: int) -> AsyncIterator[None]:
        async with self._advisory_lock(f"reporter:{reporter_id}"):
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

        SQL Pattern:
            UPDATE moderate_queue
            SET status = :new, moderator_id = :m, date_moderated = :at
            WHERE id = :id AND status = :expected
            RETURNING ...

        Raises:
            QueueEntryNotFoundError: If the entry does not exist.
            EntryAlreadyApprovedError: If the entry is APPROVED.
            ConcurrentModificationError: If the current status differs.
            InvalidStateTransitionError: If the transition is not allowed.
        """
        if expected_status is QueueStatus.APPROVED:
            raise EntryAlreadyApprovedError(queue_id=queue_id)
        if not expected_status.can_transition_to(new_status):
            raise InvalidStateTransitionError(
                queue_id=queue_id,
                from_status=expected_status,
                to_status=new_status,
                allowed_transitions=list(expected_status.valid_transitions()),
            )

        async with self._session_factory() as session:
            result = await session.execute(
                text(f"""
                    UPDATE moderate_queue
                    SET status = :new_status,
                        moderator_id = :moderator_id,
                        date_moderated = :moderated_at
                    WHERE id = :id AND status = :expected_status
                    RETURNING {_COLUMNS}
                """),
                {
                    "id": queue_id,
                    "new_status": new_status.value,
                    "expected_status": expected_status.value,
                    "moderator_id": moderator_id,
                    "moderated_at": moderated_at,
                },
            )
            row = result.fetchone()
            if row is not None:
                await session.commit()
                return _row_to_entry(row)

            current = await session.execute(
                text("SELECT status FROM moderate_queue WHERE id = :id"),
                {"id": queue_id},
            )
            actual = current.scalar()

        if actual is None:
            raise QueueEntryNotFoundError(queue_id)
        actual_status = QueueStatus(actual)
        if actual_status is QueueStatus.APPROVED:
            raise EntryAlreadyApprovedError(queue_id=queue_id)
        logger.warning(
            "queue_cas_conflict",
            queue_id=queue_id,
            expected=expected_status.display_name,
            actual=actual_status.display_name,
        )
        raise ConcurrentModificationError(
            queue_id=queue_id,
            expected_status=expected_status,
            actual_status=actual_status,
        )

    async def mark_reporter_spam(
        self,
        reporter_id: int,
        moderator_id: int,
        moderated_at: datetime,
    ) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    UPDATE moderate_queue
                    SET status = :spam,
                        moderator_id = :moderator_id,
                        date_moderated = :moderated_at
                    WHERE reporter_id = :reporter_id AND status <> :approved
                """),
                {
                    "spam": QueueStatus.SPAM.value,
                    "approved": QueueStatus.APPROVED.value,
                    "reporter_id": reporter_id,
                    "moderator_id": moderator_id,
                    "moderated_at": moderated_at,
                },
            )
            await session.commit()
        return result.rowcount

    async def _delete_where(self, clause: str, params: dict[str, Any]) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"DELETE FROM moderate_queue WHERE {clause}"), params
            )
            await session.commit()
        return result.rowcount

    async def delete(self, queue_id: int) -> bool:
        return await self._delete_where("id = :id", {"id": queue_id}) > 0

    async def delete_by_project(self, project_id: int) -> int:
        return await self._delete_where(
            "project_id = :project_id", {"project_id": project_id}
        )

    async def delete_by_reporter(self, reporter_id: int) -> int:
        return await self._delete_where(
            "reporter_id = :reporter_id", {"reporter_id": reporter_id}
        )

    async def delete_moderated_before(self, cutoff: datetime) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    DELETE FROM moderate_queue
                    WHERE status IN :statuses AND date_moderated < :cutoff
                """).bindparams(bindparam("statuses", expanding=True)),
                {"statuses": _status_codes(MODERATED_STATUSES), "cutoff": cutoff},
            )
            await session.commit()
        return result.rowcount

    async def count_pending_since(self, reporter_id: int, since: datetime) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT COUNT(*) FROM moderate_queue
                    WHERE reporter_id = :reporter_id
                      AND status = :pending
                      AND date_submitted >= :since
                """),
                {
                    "reporter_id": reporter_id,
                    "pending": QueueStatus.PENDING.value,
                    "since": since,
                },
            )
            return result.scalar() or 0

    async def list_submitted(
        self,
        project_ids: Collection[int],
        statuses: Collection[QueueStatus],
        limit: int,
    ) -> tuple[list[QueueEntry], int]:
        if not project_ids or not statuses:
            return [], 0
        params = {
            "project_ids": sorted(project_ids),
            "statuses": _status_codes(statuses),
        }
        where = "project_id IN :project_ids AND status IN :statuses"
        expanding = (
            bindparam("project_ids", expanding=True),
            bindparam("statuses", expanding=True),
        )
        async with self._session_factory() as session:
            rows = await session.execute(
                text(f"""
                    SELECT {_COLUMNS} FROM moderate_queue
                    WHERE {where}
                    ORDER BY date_submitted DESC, id DESC
                    LIMIT :limit
                """).bindparams(*expanding),
                {**params, "limit": limit},
            )
            entries = [_row_to_entry(r) for r in rows.fetchall()]
            total = await session.execute(
                text(f"SELECT COUNT(*) FROM moderate_queue WHERE {where}").bindparams(
                    *expanding
                ),
                params,
            )
            return entries, total.scalar() or 0

    async def list_moderated(
        self,
        project_ids: Collection[int],
        limit: int,
    ) -> list[QueueEntry]:
        if not project_ids:
            return []
        async with self._session_factory() as session:
            rows = await session.execute(
                text(f"""
                    SELECT {_COLUMNS} FROM moderate_queue
                    WHERE project_id IN :project_ids AND status IN :statuses
                    ORDER BY date_moderated DESC, id DESC
                    LIMIT :limit
                """).bindparams(
                    bindparam("project_ids", expanding=True),
                    bindparam("statuses", expanding=True),
                ),
                {
                    "project_ids": sorted(project_ids),
                    "statuses": _status_codes(MODERATED_STATUSES),
                    "limit": limit,
                },
            )
            return [_row_to_entry(r) for r in rows.fetchall()]

    async def count_by_status(
        self,
        project_ids: Collection[int],
        status: QueueStatus,
    ) -> int:
        if not project_ids:
            return 0
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT COUNT(*) FROM moderate_queue
                    WHERE project_id IN :project_ids AND status = :status
                """).bindparams(bindparam("project_ids", expanding=True)),
                {"project_ids": sorted(project_ids), "status": status.value},
            )
            return result.scalar() or 0
