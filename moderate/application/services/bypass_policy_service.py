"""Bypass policy - decides which submissions skip moderation.

Issues bypass when the author's project level reaches the bypass threshold.
Notes bypass on the same condition (checked in the parent issue's project)
or when the author reported the parent issue: self-notes on one's own issue
are never moderated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from moderate.application.services.base import LoggingMixin
from moderate.config.moderation_config import ModerationConfig
from moderate.domain.models.queue_entry import QueueEntryKind

if TYPE_CHECKING:
    from moderate.application.ports.identity_directory import (
        IdentityDirectoryProtocol,
    )
    from moderate.application.ports.permission_oracle import PermissionOracleProtocol


class BypassPolicyService(LoggingMixin):
    """Evaluates moderation exemption at submission time."""

    def __init__(
        self,
        permissions: PermissionOracleProtocol,
        directory: IdentityDirectoryProtocol,
        config: ModerationConfig | None = None,
    ) -> None:
        self._permissions = permissions
        self._directory = directory
        self._config = config or ModerationConfig()
        self._init_logger(component="moderation.bypass")

    async def should_bypass_issue(self, project_id: int, user_id: int) -> bool:
        """True if the user's level in the project reaches the bypass threshold."""
        return await self._permissions.has_project_level(
            self._config.bypass_threshold, project_id, user_id
        )

    async def should_bypass_note(self, issue_id: int, user_id: int) -> bool:
        """True if the user may add notes to the issue without moderation.

        Args:
            issue_id: Parent issue of the note.
            user_id: Note author.

        Returns:
            True when the author meets the bypass threshold in the issue's
            project or reported the issue.
        """
        project_id = await self._directory.get_issue_project(issue_id)
        if project_id is not None and await self.should_bypass_issue(
            project_id, user_id
        ):
            return True

        reporter_id = await self._directory.get_issue_reporter(issue_id)
        return reporter_id is not None and reporter_id == user_id

    async def should_bypass(
        self,
        kind: QueueEntryKind,
        project_id: int,
        user_id: int,
        parent_id: int = 0,
    ) -> bool:
        """Dispatch to the issue or note rule.

        Args:
            kind: Kind of content being submitted.
            project_id: Target project (used for issues).
            user_id: Submitting user.
            parent_id: Parent issue (required for notes).

        Returns:
            True if the submission is exempt from moderation.
        """
        if kind is QueueEntryKind.NOTE:
            bypass = await self.should_bypass_note(parent_id, user_id)
        else:
            bypass = await self.should_bypass_issue(project_id, user_id)

        self._log_operation(
            "should_bypass",
            kind=kind.value,
            project_id=project_id,
            parent_id=parent_id,
            user_id=user_id,
        ).debug("bypass_evaluated", bypass=bypass)
        return bypass
