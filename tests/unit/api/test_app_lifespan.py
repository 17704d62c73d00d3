"""Startup and shutdown hooks of the FastAPI application."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

import moderate.api.main as main


@pytest.fixture
def hooks(monkeypatch: pytest.MonkeyPatch) -> tuple[AsyncMock, AsyncMock]:
    migrate = AsyncMock(return_value=["001_create_moderate_queue.sql"])
    close = AsyncMock()
    monkeypatch.setattr(main, "apply_migrations", migrate)
    monkeypatch.setattr(main, "close_database_engine", close)
    return migrate, close


class TestLifespan:
    def test_migrates_when_database_configured(
        self, monkeypatch: pytest.MonkeyPatch, hooks: tuple[AsyncMock, AsyncMock]
    ) -> None:
        migrate, close = hooks
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/tracker")

        with TestClient(main.app):
            migrate.assert_awaited_once_with()
            close.assert_not_awaited()

        close.assert_awaited_once()

    def test_in_memory_store_skips_migrations(
        self, monkeypatch: pytest.MonkeyPatch, hooks: tuple[AsyncMock, AsyncMock]
    ) -> None:
        migrate, close = hooks
        monkeypatch.delenv("DATABASE_URL", raising=False)

        with TestClient(main.app):
            pass

        migrate.assert_not_awaited()
        close.assert_awaited_once()
