"""Unit tests for moderation dependency wiring."""

from collections.abc import Iterator

import pytest

from moderate.bootstrap import moderation as bootstrap
from moderate.config.moderation_config import ModerationConfig
from moderate.infrastructure.stubs import (
    ContentMaterializerStub,
    PermissionOracleStub,
    QueueRepositoryStub,
)


@pytest.fixture(autouse=True)
def fresh_bootstrap(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    bootstrap.reset_moderation_dependencies()
    yield
    bootstrap.reset_moderation_dependencies()


class TestModerationBootstrap:
    def test_stub_store_without_database(self) -> None:
        assert isinstance(bootstrap.get_queue_repository(), QueueRepositoryStub)

    def test_services_are_singletons(self) -> None:
        service = bootstrap.get_moderation_service()
        assert bootstrap.get_moderation_service() is service
        assert bootstrap.get_submission_service() is bootstrap.get_submission_service()

    def test_host_adapters_rewire_services(self) -> None:
        service = bootstrap.get_moderation_service()
        materializer = ContentMaterializerStub()
        permissions = PermissionOracleStub()

        bootstrap.set_host_adapters(permissions=permissions, materializer=materializer)

        assert bootstrap.get_moderation_service() is not service
        assert bootstrap.get_content_materializer() is materializer
        assert bootstrap.get_permission_oracle() is permissions

    def test_config_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MODERATE_PAGE_SIZE", "25")
        assert bootstrap.get_moderation_config().page_size == 25

    def test_explicit_config_wins(self) -> None:
        config = ModerationConfig(page_size=7)
        bootstrap.set_moderation_config(config)
        assert bootstrap.get_moderation_config() is config

    def test_explicit_repository(self) -> None:
        repository = QueueRepositoryStub()
        bootstrap.set_queue_repository(repository)
        assert bootstrap.get_queue_repository() is repository
