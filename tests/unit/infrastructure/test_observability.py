"""Unit tests for structured logging and correlation IDs."""

import asyncio
import json
import logging
import re
from datetime import datetime, timezone

import pytest
import structlog
from structlog.testing import capture_logs

from moderate.application.services.base import LoggingMixin
from moderate.domain.models.queue_entry import QueueEntry, QueueEntryKind
from moderate.infrastructure.observability.correlation import (
    MAX_CORRELATION_ID_LENGTH,
    bind_correlation_id,
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from moderate.infrastructure.observability.logging import (
    configure_structlog,
    get_logger_for_service,
)


@pytest.fixture(autouse=True)
def clean_correlation_id():
    set_correlation_id("")
    yield
    set_correlation_id("")


class TestCorrelationId:
    async def test_generate_returns_uuid4(self) -> None:
        uuid_pattern = re.compile(
            r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
        )
        assert uuid_pattern.match(generate_correlation_id())

    async def test_unset_is_empty_string(self) -> None:
        assert get_correlation_id() == ""

    async def test_isolated_between_tasks(self) -> None:
        results: dict[str, str] = {}

        async def handle(name: str) -> None:
            set_correlation_id(f"id-{name}")
            await asyncio.sleep(0)
            results[name] = get_correlation_id()

        await asyncio.gather(handle("a"), handle("b"))

        assert results == {"a": "id-a", "b": "id-b"}

    def test_processor_adds_id(self) -> None:
        set_correlation_id("req-1")
        event = correlation_id_processor(None, "info", {"event": "x"})
        assert event["correlation_id"] == "req-1"

    def test_processor_keeps_explicit_id(self) -> None:
        set_correlation_id("req-1")
        event = correlation_id_processor(
            None, "info", {"event": "x", "correlation_id": "bound"}
        )
        assert event["correlation_id"] == "bound"

    def test_processor_skips_when_unset(self) -> None:
        event = correlation_id_processor(None, "info", {"event": "x"})
        assert "correlation_id" not in event

    def test_bind_keeps_supplied_id(self) -> None:
        assert bind_correlation_id("  abc-123 ") == "abc-123"
        assert get_correlation_id() == "abc-123"

    @pytest.mark.parametrize("incoming", [None, "", "   ", "x" * (MAX_CORRELATION_ID_LENGTH + 1)])
    def test_bind_replaces_untrusted_id(self, incoming: str | None) -> None:
        bound = bind_correlation_id(incoming)

        assert bound != (incoming or "").strip()
        assert len(bound) == 36
        assert get_correlation_id() == bound


class TestConfigureStructlog:
    def test_production_renders_json(self) -> None:
        configure_structlog(environment="production")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_development_renders_console(self) -> None:
        configure_structlog(environment="development")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_explicit_level_overrides_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        configure_structlog(environment="production", log_level="warning")
        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        configure_structlog(environment="production")
        assert logging.getLogger().level == logging.INFO

    def test_json_line(
        self, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("SERVICE_NAME", raising=False)
        configure_structlog(environment="production")
        set_correlation_id("json-test")

        structlog.get_logger().info("entry_rejected", queue_id=7)

        output = capsys.readouterr().out.strip()
        if output:
            entry = json.loads(output.splitlines()[-1])
            assert entry["event"] == "entry_rejected"
            assert entry["level"] == "info"
            assert entry["queue_id"] == 7
            assert entry["correlation_id"] == "json-test"
            assert entry["app"] == "moderate-api"
            assert "timestamp" in entry


class _ExampleService(LoggingMixin):
    def __init__(self) -> None:
        self._init_logger(component="moderation.test")

    def run(self, queue_id: int) -> None:
        self._log_operation("run", queue_id=queue_id).info("ran")

    def touch(self, entry: QueueEntry) -> None:
        self._log_entry("touch", entry, template="approved").info("touched")


class TestLoggingMixin:
    def test_binds_service_operation_and_correlation(self) -> None:
        set_correlation_id("mixin-test")
        with capture_logs() as logs:
            _ExampleService().run(42)

        assert logs == [
            {
                "event": "ran",
                "log_level": "info",
                "service": "_ExampleService",
                "component": "moderation.test",
                "operation": "run",
                "correlation_id": "mixin-test",
                "queue_id": 42,
            }
        ]

    def test_service_logger(self) -> None:
        with capture_logs() as logs:
            get_logger_for_service("ModerationService").info("hello")

        assert logs[0]["service"] == "ModerationService"
        assert logs[0]["component"] == "moderation"

    def test_entry_logger_carries_entry_identity(self) -> None:
        entry = QueueEntry(
            id=7,
            kind=QueueEntryKind.NOTE,
            project_id=1,
            reporter_id=10,
            parent_id=100,
            payload={"text": "Same here"},
            submitted_at=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
        )
        with capture_logs() as logs:
            _ExampleService().touch(entry)

        assert logs[0]["operation"] == "touch"
        assert logs[0]["queue_id"] == 7
        assert logs[0]["kind"] == entry.kind.value
        assert logs[0]["project_id"] == 1
        assert logs[0]["reporter_id"] == 10
        assert logs[0]["template"] == "approved"
