"""Submission Gate - routes new issues and notes around or into the queue.

Exempt submissions are created immediately under the author's identity;
everything else goes through admission control into the moderation queue
as a PENDING entry.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from moderate.application.services.base import LoggingMixin
from moderate.domain.models.queue_entry import QueueEntryKind
from moderate.domain.models.results import SubmissionOutcome

if TYPE_CHECKING:
    from moderate.application.ports.content_materializer import (
        ContentMaterializerProtocol,
    )
    from moderate.application.ports.identity_directory import (
        IdentityDirectoryProtocol,
    )
    from moderate.application.services.bypass_policy_service import (
        BypassPolicyService,
    )
    from moderate.application.services.moderation_service import ModerationService


class SubmissionGateService(LoggingMixin):
    """Entry point for content submitted by tracker users."""

    def __init__(
        self,
        bypass: BypassPolicyService,
        moderation: ModerationService,
        materializer: ContentMaterializerProtocol,
        directory: IdentityDirectoryProtocol,
    ) -> None:
        self._bypass = bypass
        self._moderation = moderation
        self._materializer = materializer
        self._directory = directory
        self._init_logger(component="moderation.submission")

    async def will_be_moderated(
        self,
        kind: QueueEntryKind,
        project_id: int,
        user_id: int,
        parent_id: int = 0,
    ) -> bool:
        """Tell the host whether a submission would be held for review."""
        return not await self._bypass.should_bypass(
            kind, project_id, user_id, parent_id
        )

    async def submit_issue(
        self,
        project_id: int,
        reporter_id: int,
        payload: Mapping[str, Any],
    ) -> SubmissionOutcome:
        """Submit a new issue.

        Args:
            project_id: Target project.
            reporter_id: Author of the issue.
            payload: Issue content (summary, description, ...).

        Returns:
            SubmissionOutcome carrying the created issue id when the author
            bypasses moderation, the queue entry id otherwise.

        Raises:
            RateLimitExceededError: If the author is over the admission limit.
            ContentValidationError: From the materializer on direct creation.
        """
        log = self._log_operation(
            "submit_issue", project_id=project_id, reporter_id=reporter_id
        )

        if await self._bypass.should_bypass_issue(project_id, reporter_id):
            created_id = await self._materializer.create_issue(
                dict(payload), acting_user_id=reporter_id
            )
            log.info("submission_bypassed_moderation", created_id=created_id)
            return SubmissionOutcome(
                kind=QueueEntryKind.ISSUE, moderated=False, created_id=created_id
            )

        queue_id = await self._moderation.enqueue(
            QueueEntryKind.ISSUE, project_id, reporter_id, 0, payload
        )
        log.info("submission_queued", queue_id=queue_id)
        return SubmissionOutcome(
            kind=QueueEntryKind.ISSUE, moderated=True, queue_id=queue_id
        )

    async def submit_note(
        self,
        issue_id: int,
        reporter_id: int,
        payload: Mapping[str, Any],
    ) -> SubmissionOutcome:
        """Submit a note on an existing issue.

        Raises:
            ValueError: If the parent issue does not exist.
            RateLimitExceededError: If the author is over the admission limit.
        """
        log = self._log_operation(
            "submit_note", issue_id=issue_id, reporter_id=reporter_id
        )

        project_id = await self._directory.get_issue_project(issue_id)
        if project_id is None:
            raise ValueError(f"Parent issue {issue_id} does not exist")

        if await self._bypass.should_bypass_note(issue_id, reporter_id):
            created_id = await self._materializer.create_note(
                issue_id, dict(payload), acting_user_id=reporter_id
            )
            log.info("submission_bypassed_moderation", created_id=created_id)
            return SubmissionOutcome(
                kind=QueueEntryKind.NOTE, moderated=False, created_id=created_id
            )

        queue_id = await self._moderation.enqueue(
            QueueEntryKind.NOTE, project_id, reporter_id, issue_id, payload
        )
        log.info("submission_queued", queue_id=queue_id)
        return SubmissionOutcome(
            kind=QueueEntryKind.NOTE, moderated=True, queue_id=queue_id
        )
