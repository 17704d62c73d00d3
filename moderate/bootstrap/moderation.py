"""Bootstrap wiring for moderation queue dependencies.

The queue store is PostgreSQL when DATABASE_URL is set and the in-memory
stub otherwise. Host collaborators (permissions, identity directory,
content materializer, notifier) are in-memory stubs until the host
registers its own adapters through the ``set_*`` functions.
"""

from __future__ import annotations

import os

from structlog import get_logger

from moderate.application.ports.content_materializer import (
    ContentMaterializerProtocol,
)
from moderate.application.ports.identity_directory import IdentityDirectoryProtocol
from moderate.application.ports.notifier import NotifierProtocol
from moderate.application.ports.permission_oracle import PermissionOracleProtocol
from moderate.application.ports.queue_repository import QueueRepositoryProtocol
from moderate.application.ports.time_authority import TimeAuthorityProtocol
from moderate.application.services.admission_control_service import (
    AdmissionControlService,
)
from moderate.application.services.bypass_policy_service import BypassPolicyService
from moderate.application.services.moderation_service import ModerationService
from moderate.application.services.submission_service import SubmissionGateService
from moderate.application.services.visibility_service import VisibilityService
from moderate.config.moderation_config import AntispamConfig, ModerationConfig
from moderate.infrastructure.adapters.system_time_authority import SystemTimeAuthority
from moderate.infrastructure.stubs.content_materializer_stub import (
    ContentMaterializerStub,
)
from moderate.infrastructure.stubs.identity_directory_stub import IdentityDirectoryStub
from moderate.infrastructure.stubs.notifier_stub import NotifierStub
from moderate.infrastructure.stubs.permission_oracle_stub import PermissionOracleStub
from moderate.infrastructure.stubs.queue_repository_stub import QueueRepositoryStub

logger = get_logger()

_queue_repository: QueueRepositoryProtocol | None = None
_permission_oracle: PermissionOracleProtocol | None = None
_identity_directory: IdentityDirectoryProtocol | None = None
_content_materializer: ContentMaterializerProtocol | None = None
_notifier: NotifierProtocol | None = None
_time_authority: TimeAuthorityProtocol | None = None
_moderation_config: ModerationConfig | None = None
_antispam_config: AntispamConfig | None = None
_moderation_service: ModerationService | None = None
_submission_service: SubmissionGateService | None = None


def get_queue_repository() -> QueueRepositoryProtocol:
    """Get the queue store.

    Returns the PostgreSQL repository if DATABASE_URL is configured,
    otherwise the in-memory stub.
    """
    global _queue_repository
    if _queue_repository is None:
        if os.environ.get("DATABASE_URL"):
            from moderate.bootstrap.database import get_session_factory
            from moderate.infrastructure.adapters.persistence.queue_repository import (
                PostgresQueueRepository,
            )

            _queue_repository = PostgresQueueRepository(
                session_factory=get_session_factory()
            )
            logger.info("queue_repository_initialized", repository_type="PostgreSQL")
        else:
            logger.warning(
                "queue_repository_initialized",
                repository_type="InMemoryStub",
                message="DATABASE_URL not set - queue entries will not persist",
            )
            _queue_repository = QueueRepositoryStub()
    return _queue_repository


def get_permission_oracle() -> PermissionOracleProtocol:
    global _permission_oracle
    if _permission_oracle is None:
        _permission_oracle = PermissionOracleStub()
    return _permission_oracle


def get_identity_directory() -> IdentityDirectoryProtocol:
    global _identity_directory
    if _identity_directory is None:
        _identity_directory = IdentityDirectoryStub()
    return _identity_directory


def get_content_materializer() -> ContentMaterializerProtocol:
    global _content_materializer
    if _content_materializer is None:
        _content_materializer = ContentMaterializerStub()
    return _content_materializer


def get_notifier() -> NotifierProtocol:
    global _notifier
    if _notifier is None:
        _notifier = NotifierStub(get_identity_directory())
    return _notifier


def get_time_authority() -> TimeAuthorityProtocol:
    global _time_authority
    if _time_authority is None:
        _time_authority = SystemTimeAuthority()
    return _time_authority


def get_moderation_config() -> ModerationConfig:
    global _moderation_config
    if _moderation_config is None:
        _moderation_config = ModerationConfig.from_environment()
    return _moderation_config


def get_antispam_config() -> AntispamConfig:
    global _antispam_config
    if _antispam_config is None:
        _antispam_config = AntispamConfig.from_environment()
    return _antispam_config


def get_moderation_service() -> ModerationService:
    """Get the moderation engine, wiring it on first use."""
    global _moderation_service
    if _moderation_service is None:
        repository = get_queue_repository()
        time_authority = get_time_authority()
        config = get_moderation_config()
        _moderation_service = ModerationService(
            repository=repository,
            visibility=VisibilityService(get_permission_oracle(), config),
            admission=AdmissionControlService(
                repository, time_authority, get_antispam_config()
            ),
            materializer=get_content_materializer(),
            directory=get_identity_directory(),
            notifier=get_notifier(),
            time_authority=time_authority,
            config=config,
        )
    return _moderation_service


def get_submission_service() -> SubmissionGateService:
    """Get the submission gate, wiring it on first use."""
    global _submission_service
    if _submission_service is None:
        _submission_service = SubmissionGateService(
            bypass=BypassPolicyService(
                get_permission_oracle(),
                get_identity_directory(),
                get_moderation_config(),
            ),
            moderation=get_moderation_service(),
            materializer=get_content_materializer(),
            directory=get_identity_directory(),
        )
    return _submission_service


def set_queue_repository(repository: QueueRepositoryProtocol) -> None:
    global _queue_repository, _moderation_service, _submission_service
    _queue_repository = repository
    _moderation_service = None
    _submission_service = None


def set_host_adapters(
    permissions: PermissionOracleProtocol | None = None,
    directory: IdentityDirectoryProtocol | None = None,
    materializer: ContentMaterializerProtocol | None = None,
    notifier: NotifierProtocol | None = None,
) -> None:
    """Register the host tracker's adapters. Omitted ones are left as is."""
    global _permission_oracle, _identity_directory, _content_materializer, _notifier
    global _moderation_service, _submission_service
    if permissions is not None:
        _permission_oracle = permissions
    if directory is not None:
        _identity_directory = directory
    if materializer is not None:
        _content_materializer = materializer
    if notifier is not None:
        _notifier = notifier
    _moderation_service = None
    _submission_service = None


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    global _time_authority, _moderation_service, _submission_service
    _time_authority = time_authority
    _moderation_service = None
    _submission_service = None


def set_moderation_config(
    config: ModerationConfig | None = None,
    antispam: AntispamConfig | None = None,
) -> None:
    global _moderation_config, _antispam_config
    global _moderation_service, _submission_service
    if config is not None:
        _moderation_config = config
    if antispam is not None:
        _antispam_config = antispam
    _moderation_service = None
    _submission_service = None


def reset_moderation_dependencies() -> None:
    """Reset moderation dependency singletons."""
    global _queue_repository, _permission_oracle, _identity_directory
    global _content_materializer, _notifier, _time_authority
    global _moderation_config, _antispam_config
    global _moderation_service, _submission_service

    _queue_repository = None
    _permission_oracle = None
    _identity_directory = None
    _content_materializer = None
    _notifier = None
    _time_authority = None
    _moderation_config = None
    _antispam_config = None
    _moderation_service = None
    _submission_service = None
