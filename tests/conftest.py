"""
Pytest configuration and shared fixtures for moderation queue tests.

Testing Standards:
- Async tests run under pytest-asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async collaborators that only need call assertions
- Use the in-memory stubs for anything with state

Fixture world:
- Projects 1 and 2, both enabled.
- User 10 reports in project 1 (REPORTER) and owns issue 100.
- User 11 reports in project 2 (REPORTER).
- User 20 moderates project 1 (MANAGER).
- User 30 is a DEVELOPER in project 1.
- User 40 is a global ADMINISTRATOR.
- User 50 has no access anywhere.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from prometheus_client import CollectorRegistry

from moderate.application.services.admission_control_service import (
    AdmissionControlService,
)
from moderate.application.services.bypass_policy_service import BypassPolicyService
from moderate.application.services.moderation_service import ModerationService
from moderate.application.services.submission_service import SubmissionGateService
from moderate.application.services.visibility_service import VisibilityService
from moderate.config.moderation_config import (
    TEST_ANTISPAM_CONFIG,
    TEST_MODERATION_CONFIG,
    AntispamConfig,
    ModerationConfig,
)
from moderate.domain.models.access_level import AccessLevel
from moderate.infrastructure.monitoring.metrics import ModerationMetrics
from moderate.infrastructure.stubs import (
    ContentMaterializerStub,
    IdentityDirectoryStub,
    NotifierStub,
    PermissionOracleStub,
    QueueRepositoryStub,
)
from tests.helpers.fake_time_authority import FakeTimeAuthority

PROJECT_A = 1
PROJECT_B = 2
REPORTER = 10
REPORTER_B = 11
MODERATOR = 20
DEVELOPER = 30
ADMIN = 40
OUTSIDER = 50
ISSUE_A = 100


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    from moderate import __version__

    return __version__


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    return FakeTimeAuthority(frozen_at=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def metrics() -> ModerationMetrics:
    """Metrics collector on an isolated registry."""
    return ModerationMetrics(registry=CollectorRegistry())


@pytest.fixture
def repository() -> QueueRepositoryStub:
    return QueueRepositoryStub()


@pytest.fixture
def directory() -> IdentityDirectoryStub:
    directory = IdentityDirectoryStub()
    for project_id in (PROJECT_A, PROJECT_B):
        directory.add_project(project_id)
    for user_id in (REPORTER, REPORTER_B, MODERATOR, DEVELOPER, ADMIN, OUTSIDER):
        directory.add_user(user_id)
    directory.add_issue(ISSUE_A, PROJECT_A, REPORTER)
    return directory


@pytest.fixture
def permissions() -> PermissionOracleStub:
    permissions = PermissionOracleStub()
    permissions.add_project(PROJECT_A)
    permissions.add_project(PROJECT_B)
    permissions.set_project_level(PROJECT_A, REPORTER, AccessLevel.REPORTER)
    permissions.set_project_level(PROJECT_B, REPORTER_B, AccessLevel.REPORTER)
    permissions.set_project_level(PROJECT_A, MODERATOR, AccessLevel.MANAGER)
    permissions.set_project_level(PROJECT_A, DEVELOPER, AccessLevel.DEVELOPER)
    permissions.set_global_level(ADMIN, AccessLevel.ADMINISTRATOR)
    return permissions


@pytest.fixture
def materializer() -> ContentMaterializerStub:
    return ContentMaterializerStub()


@pytest.fixture
def notifier(directory: IdentityDirectoryStub) -> NotifierStub:
    return NotifierStub(directory)


@pytest.fixture
def moderation_config() -> ModerationConfig:
    return TEST_MODERATION_CONFIG


@pytest.fixture
def antispam_config() -> AntispamConfig:
    return TEST_ANTISPAM_CONFIG


@pytest.fixture
def visibility_service(
    permissions: PermissionOracleStub, moderation_config: ModerationConfig
) -> VisibilityService:
    return VisibilityService(permissions, moderation_config)


@pytest.fixture
def admission_service(
    repository: QueueRepositoryStub,
    fake_time_authority: FakeTimeAuthority,
    antispam_config: AntispamConfig,
    metrics: ModerationMetrics,
) -> AdmissionControlService:
    return AdmissionControlService(
        repository, fake_time_authority, antispam_config, metrics
    )


@pytest.fixture
def moderation_service(
    repository: QueueRepositoryStub,
    visibility_service: VisibilityService,
    admission_service: AdmissionControlService,
    materializer: ContentMaterializerStub,
    directory: IdentityDirectoryStub,
    notifier: NotifierStub,
    fake_time_authority: FakeTimeAuthority,
    moderation_config: ModerationConfig,
    metrics: ModerationMetrics,
) -> ModerationService:
    return ModerationService(
        repository=repository,
        visibility=visibility_service,
        admission=admission_service,
        materializer=materializer,
        directory=directory,
        notifier=notifier,
        time_authority=fake_time_authority,
        config=moderation_config,
        metrics=metrics,
    )


@pytest.fixture
def bypass_service(
    permissions: PermissionOracleStub,
    directory: IdentityDirectoryStub,
    moderation_config: ModerationConfig,
) -> BypassPolicyService:
    return BypassPolicyService(permissions, directory, moderation_config)


@pytest.fixture
def submission_service(
    bypass_service: BypassPolicyService,
    moderation_service: ModerationService,
    materializer: ContentMaterializerStub,
    directory: IdentityDirectoryStub,
) -> SubmissionGateService:
    return SubmissionGateService(
        bypass=bypass_service,
        moderation=moderation_service,
        materializer=materializer,
        directory=directory,
    )
