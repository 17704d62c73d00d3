"""Ports (Protocols) for the moderation queue's store and collaborators."""

from moderate.application.ports.content_materializer import (
    ContentMaterializerProtocol,
)
from moderate.application.ports.identity_directory import IdentityDirectoryProtocol
from moderate.application.ports.notifier import NotifierProtocol
from moderate.application.ports.permission_oracle import PermissionOracleProtocol
from moderate.application.ports.queue_repository import QueueRepositoryProtocol
from moderate.application.ports.time_authority import TimeAuthorityProtocol

__all__: list[str] = [
    "ContentMaterializerProtocol",
    "IdentityDirectoryProtocol",
    "NotifierProtocol",
    "PermissionOracleProtocol",
    "QueueRepositoryProtocol",
    "TimeAuthorityProtocol",
]
