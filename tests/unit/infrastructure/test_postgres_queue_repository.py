"""Unit tests for PostgresQueueRepository against a mocked async session."""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from moderate.domain.errors import (
    ConcurrentModificationError,
    EntryAlreadyApprovedError,
    QueueEntryNotFoundError,
)
from moderate.domain.models.queue_entry import QueueEntryKind, QueueStatus
from moderate.infrastructure.adapters.persistence.queue_repository import (
    PostgresQueueRepository,
    _row_to_entry,
)

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def _row(**overrides: Any) -> SimpleNamespace:
    mapping = {
        "id": 7,
        "type": "note",
        "project_id": 1,
        "reporter_id": 10,
        "bug_id": 100,
        "data": '{"text": "hello"}',
        "date_submitted": T0,
        "status": 0,
        "moderator_id": 0,
        "date_moderated": None,
    }
    mapping.update(overrides)
    return SimpleNamespace(_mapping=mapping)


def _result(row: Any = None, scalar: Any = None, rowcount: int = 0) -> MagicMock:
    result = MagicMock()
    result.fetchone.return_value = row
    result.one.return_value = row
    result.scalar.return_value = scalar
    result.rowcount = rowcount
    return result


def _factory(*results: MagicMock) -> tuple[MagicMock, AsyncMock]:
    session = AsyncMock()
    session.execute = AsyncMock(side_effect=list(results))
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory, session


def _sql(session: AsyncMock, call: int) -> str:
    return str(session.execute.call_args_list[call].args[0])


class TestRowMapping:
    def test_maps_columns(self) -> None:
        entry = _row_to_entry(_row())

        assert entry.id == 7
        assert entry.kind is QueueEntryKind.NOTE
        assert entry.parent_id == 100
        assert entry.payload["text"] == "hello"
        assert entry.status is QueueStatus.PENDING
        assert entry.moderated_at is None

    def test_maps_decision(self) -> None:
        entry = _row_to_entry(_row(status=3, moderator_id=20, date_moderated=T0))

        assert entry.status is QueueStatus.SPAM
        assert entry.moderator_id == 20
        assert entry.moderated_at == T0


class TestGet:
    async def test_missing(self) -> None:
        factory, _ = _factory(_result(row=None))
        assert await PostgresQueueRepository(factory).get(7) is None

    async def test_found(self) -> None:
        factory, session = _factory(_result(row=_row()))

        entry = await PostgresQueueRepository(factory).get(7)

        assert entry is not None and entry.id == 7
        assert session.execute.call_args.args[1] == {"id": 7}


class TestTransitionCas:
    async def test_swap_commits(self) -> None:
        factory, session = _factory(
            _result(row=_row(status=1, moderator_id=20, date_moderated=T0))
        )

        entry = await PostgresQueueRepository(factory).transition_cas(
            7, QueueStatus.PENDING, QueueStatus.REJECTED, 20, T0
        )

        assert entry.status is QueueStatus.REJECTED
        assert "AND status = :expected_status" in _sql(session, 0)
        params = session.execute.call_args_list[0].args[1]
        assert params["expected_status"] == 0
        assert params["new_status"] == 1
        session.commit.assert_awaited_once()

    async def test_missing_row(self) -> None:
        factory, session = _factory(_result(row=None), _result(scalar=None))

        with pytest.raises(QueueEntryNotFoundError):
            await PostgresQueueRepository(factory).transition_cas(
                7, QueueStatus.PENDING, QueueStatus.REJECTED, 20, T0
            )
        session.commit.assert_not_awaited()

    async def test_lost_to_approval(self) -> None:
        factory, _ = _factory(_result(row=None), _result(scalar=2))

        with pytest.raises(EntryAlreadyApprovedError):
            await PostgresQueueRepository(factory).transition_cas(
                7, QueueStatus.PENDING, QueueStatus.APPROVED, 20, T0
            )

    async def test_lost_to_other_decision(self) -> None:
        factory, _ = _factory(_result(row=None), _result(scalar=1))

        with pytest.raises(ConcurrentModificationError) as exc_info:
            await PostgresQueueRepository(factory).transition_cas(
                7, QueueStatus.PENDING, QueueStatus.SPAM, 20, T0
            )
        assert exc_info.value.actual_status is QueueStatus.REJECTED

    async def test_approved_expectation_never_queries(self) -> None:
        factory, session = _factory()

        with pytest.raises(EntryAlreadyApprovedError):
            await PostgresQueueRepository(factory).transition_cas(
                7, QueueStatus.APPROVED, QueueStatus.SPAM, 20, T0
            )
        session.execute.assert_not_awaited()


class TestReserve:
    async def test_lock_released_on_error(self) -> None:
        factory, session = _factory(_result(), _result(row=_row()), _result())
        repo = PostgresQueueRepository(factory)

        with pytest.raises(RuntimeError):
            async with repo.reserve(7) as entry:
                assert entry is not None
                raise RuntimeError("boom")

        assert "pg_advisory_lock" in _sql(session, 0)
        assert "pg_advisory_unlock" in _sql(session, 2)
        session.commit.assert_awaited_once()

    async def test_bigint_id_is_hashed_into_key(self) -> None:
        factory, session = _factory(_result(), _result(row=None), _result())
        repo = PostgresQueueRepository(factory)
        queue_id = 2**31 + 5

        async with repo.reserve(queue_id) as entry:
            assert entry is None

        assert "hashtextextended" in _sql(session, 0)
        assert "integer" not in _sql(session, 0)
        assert session.execute.call_args_list[0].args[1]["key"] == f"entry:{queue_id}"
        assert session.execute.call_args_list[1].args[1] == {"id": queue_id}

    async def test_reporter_reservation(self) -> None:
        factory, session = _factory(_result(), _result())
        repo = PostgresQueueRepository(factory)

        async with repo.reserve_reporter(10):
            assert session.execute.await_count == 1

        lock_params = session.execute.call_args_list[0].args[1]
        assert lock_params["key"] == "reporter:10"
        assert "pg_advisory_lock" in _sql(session, 0)
        assert "pg_advisory_unlock" in _sql(session, 1)
        assert session.execute.call_args_list[1].args[1] == lock_params
        session.commit.assert_awaited_once()


class TestBulk:
    async def test_mark_reporter_spam(self) -> None:
        factory, session = _factory(_result(rowcount=4))

        changed = await PostgresQueueRepository(factory).mark_reporter_spam(10, 20, T0)

        assert changed == 4
        params = session.execute.call_args.args[1]
        assert params["spam"] == QueueStatus.SPAM.value
        assert params["approved"] == QueueStatus.APPROVED.value
        assert "status <> :approved" in _sql(session, 0)

    async def test_delete_moderated_before_excludes_pending(self) -> None:
        factory, session = _factory(_result(rowcount=2))

        removed = await PostgresQueueRepository(factory).delete_moderated_before(T0)

        assert removed == 2
        assert session.execute.call_args.args[1]["statuses"] == [1, 2, 3]

    async def test_empty_scope_skips_database(self) -> None:
        factory, _ = _factory()
        repo = PostgresQueueRepository(factory)

        assert await repo.list_submitted(set(), {QueueStatus.PENDING}, 10) == ([], 0)
        assert await repo.list_moderated(set(), 10) == []
        assert await repo.count_by_status(set(), QueueStatus.PENDING) == 0
        factory.assert_not_called()

    async def test_list_submitted(self) -> None:
        rows = MagicMock()
        rows.fetchall.return_value = [_row(id=9), _row(id=8)]
        factory, session = _factory(rows, _result(scalar=3))

        items, total = await PostgresQueueRepository(factory).list_submitted(
            {2, 1}, {QueueStatus.PENDING}, limit=3
        )

        assert [e.id for e in items] == [9, 8]
        assert total == 3
        params = session.execute.call_args_list[0].args[1]
        assert params["project_ids"] == [1, 2]
        assert params["limit"] == 3
