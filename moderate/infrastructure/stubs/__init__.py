"""In-memory stub adapters for development and testing."""

from moderate.infrastructure.stubs.content_materializer_stub import (
    ContentMaterializerStub,
    MaterializedContent,
)
from moderate.infrastructure.stubs.identity_directory_stub import IdentityDirectoryStub
from moderate.infrastructure.stubs.notifier_stub import NotifierStub, SentNotification
from moderate.infrastructure.stubs.permission_oracle_stub import PermissionOracleStub
from moderate.infrastructure.stubs.queue_repository_stub import QueueRepositoryStub

__all__ = [
    "ContentMaterializerStub",
    "IdentityDirectoryStub",
    "MaterializedContent",
    "NotifierStub",
    "PermissionOracleStub",
    "QueueRepositoryStub",
    "SentNotification",
]
