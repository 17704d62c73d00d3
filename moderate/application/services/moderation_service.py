"""Moderation Service - the moderation queue state machine.

Orchestrates the queue store, visibility filter, admission control and the
two outbound collaborators (content materializer, notifier) for every
queue operation: enqueue, approve, reject, mark spam, delete, retention
cleanup and the access-scoped listings.

Developer Golden Rules:
1. ACCESS BEFORE ACTION - Every moderator action checks the moderation
   threshold for the entry's project before touching anything.
2. RESERVE TO APPROVE - Approval holds the entry reservation across
   revalidate -> materialize -> CAS; at most one approval materializes.
   The reporter reservation is taken first, by approvals and by the spam
   cascade alike, so a cascade never overlaps a materializing approval.
3. AUTHOR IS EXPLICIT - Content is materialized with acting_user_id set to
   the reporter. No shared session identity is ever swapped.
4. NOTIFY BEST EFFORT - Notifier failures are logged and counted, never
   raised, and never reverse a decision.
5. PENDING IS NEVER EXPIRED - Retention cleanup only removes decided entries.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from moderate.application.services.base import LoggingMixin
from moderate.config.moderation_config import RETENTION_DAYS, ModerationConfig
from moderate.domain.errors.concurrent_modification import ConcurrentModificationError
from moderate.domain.errors.queue import QueueEntryNotFoundError
from moderate.domain.errors.stale_reference import StaleEntity, StaleReferenceError
from moderate.domain.models.access_level import ALL_PROJECTS
from moderate.domain.models.notification import NotificationTemplate
from moderate.domain.models.queue_entry import (
    NewQueueEntry,
    QueueEntry,
    QueueEntryKind,
    QueueStatus,
)
from moderate.domain.models.results import ApprovalResult, QueuePage
from moderate.infrastructure.monitoring.metrics import (
    ModerationMetrics,
    get_metrics_collector,
)

if TYPE_CHECKING:
    from moderate.application.ports.content_materializer import (
        ContentMaterializerProtocol,
    )
    from moderate.application.ports.identity_directory import (
        IdentityDirectoryProtocol,
    )
    from moderate.application.ports.notifier import NotifierProtocol
    from moderate.application.ports.queue_repository import QueueRepositoryProtocol
    from moderate.application.ports.time_authority import TimeAuthorityProtocol
    from moderate.application.services.admission_control_service import (
        AdmissionControlService,
    )
    from moderate.application.services.visibility_service import VisibilityService


class ModerationService(LoggingMixin):
    """Moderation engine for queued issues and notes.

    Attributes:
        _repository: Queue store.
        _visibility: Per-user project scope at the moderation threshold.
        _admission: Admission control guarding enqueue.
        _materializer: Creates approved issues and notes.
        _directory: Users, projects and issues of the host tracker.
        _notifier: Reporter notifications (best effort).
        _time: Time authority for submission and decision stamps.
        _config: Moderation configuration.
        _metrics: Prometheus metrics collector.
    """

    def __init__(
        self,
        repository: QueueRepositoryProtocol,
        visibility: VisibilityService,
        admission: AdmissionControlService,
        materializer: ContentMaterializerProtocol,
        directory: IdentityDirectoryProtocol,
        notifier: NotifierProtocol,
        time_authority: TimeAuthorityProtocol,
        config: ModerationConfig | None = None,
        metrics: ModerationMetrics | None = None,
    ) -> None:
        """Initialize the moderation service.

        Args:
            repository: Queue store port.
            visibility: Visibility filter service.
            admission: Admission control service.
            materializer: Content materializer port.
            directory: Identity directory port.
            notifier: Notifier port.
            time_authority: Time authority port.
            config: Moderation configuration (defaults apply if None).
            metrics: Metrics collector (process singleton if None).
        """
        self._repository = repository
        self._visibility = visibility
        self._admission = admission
        self._materializer = materializer
        self._directory = directory
        self._notifier = notifier
        self._time = time_authority
        self._config = config or ModerationConfig()
        self._metrics = metrics or get_metrics_collector()
        self._init_logger(component="moderation")

    # =========================================================================
    # Submission
    # =========================================================================

    async def enqueue(
        self,
        kind: QueueEntryKind,
        project_id: int | None,
        reporter_id: int,
        parent_id: int,
        payload: Mapping[str, Any],
    ) -> int:
        """Place a submission in the queue as PENDING.

        Args:
            kind: Issue or note.
            project_id: Target project. For notes it may be None or 0, in
                which case the parent issue's project is used.
            reporter_id: Submitting user.
            parent_id: Parent issue for notes, 0 for issues.
            payload: Submission content in the materializer's input shape.

        Returns:
            The new queue entry id.

        Raises:
            RateLimitExceededError: If admission control refuses the reporter.
            ValueError: If the submission is malformed or a note's parent
                issue does not exist.
        """
        log = self._log_operation(
            "enqueue", kind=kind.value, reporter_id=reporter_id, parent_id=parent_id
        )

        if kind is QueueEntryKind.NOTE and not project_id:
            project_id = await self._directory.get_issue_project(parent_id)
            if project_id is None:
                raise ValueError(f"Parent issue {parent_id} does not exist")

        await self._admission.check_admission(reporter_id)

        entry = await self._repository.add(
            NewQueueEntry(
                kind=kind,
                project_id=project_id or 0,
                reporter_id=reporter_id,
                parent_id=parent_id,
                payload=payload,
                submitted_at=self._time.utcnow(),
            )
        )

        self._metrics.increment_enqueued(kind.value)
        log.info("entry_enqueued", queue_id=entry.id, project_id=entry.project_id)
        return entry.id

    # =========================================================================
    # Point lookup
    # =========================================================================

    async def get_entry(self, queue_id: int, acting_user_id: int) -> QueueEntry:
        """Fetch one entry the acting user may moderate.

        Raises:
            QueueEntryNotFoundError: If the id is unknown.
            ModerationAccessDeniedError: If the user cannot moderate its project.
        """
        entry = await self._repository.get(queue_id)
        if entry is None:
            raise QueueEntryNotFoundError(queue_id)
        await self._visibility.ensure_can_moderate(entry.project_id, acting_user_id)
        return entry

    # =========================================================================
    # Transitions
    # =========================================================================

    async def approve(self, queue_id: int, acting_user_id: int) -> ApprovalResult:
        """Approve a pending entry and create its issue or note as the reporter.

        Args:
            queue_id: Entry to approve.
            acting_user_id: Moderator approving it.

        Returns:
            ApprovalResult with the APPROVED entry and the created content id.

        Raises:
            QueueEntryNotFoundError: If the id is unknown.
            ModerationAccessDeniedError: If the moderator lacks access.
            EntryAlreadyApprovedError: If another approval won.
            InvalidStateTransitionError: If the entry was rejected or is spam.
            StaleReferenceError: If reporter, project or parent issue vanished;
                the entry stays PENDING.
            ContentValidationError: Propagated from the materializer; the
                entry stays PENDING.
        """
        log = self._log_operation(
            "approve", queue_id=queue_id, moderator_id=acting_user_id
        )

        # reporter_id never changes after submission
        submitted = await self._repository.get(queue_id)
        if submitted is None:
            raise QueueEntryNotFoundError(queue_id)

        async with (
            self._repository.reserve_reporter(submitted.reporter_id),
            self._repository.reserve(queue_id) as entry,
        ):
            if entry is None:
                raise QueueEntryNotFoundError(queue_id)
            await self._visibility.ensure_can_moderate(
                entry.project_id, acting_user_id
            )

            moderated_at = self._time.utcnow()
            # Validates against the transition table before any side effect
            entry.with_status(QueueStatus.APPROVED, acting_user_id, moderated_at)

            await self._ensure_references(entry)

            log.debug(
                "materializing_entry", kind=entry.kind.value, reporter_id=entry.reporter_id
            )
            created_id = await self._materialize(entry)

            try:
                approved = await self._repository.transition_cas(
                    queue_id,
                    QueueStatus.PENDING,
                    QueueStatus.APPROVED,
                    acting_user_id,
                    moderated_at,
                )
            except ConcurrentModificationError as e:
                log.error(
                    "approval_lost_after_materialization",
                    created_id=created_id,
                    actual_status=e.actual_status.display_name,
                )
                raise

        self._metrics.increment_transitions(QueueStatus.APPROVED.display_name)
        log.info(
            "entry_approved",
            kind=approved.kind.value,
            reporter_id=approved.reporter_id,
            created_id=created_id,
        )
        return ApprovalResult(entry=approved, created_id=created_id)

    async def reject(self, queue_id: int, acting_user_id: int) -> QueueEntry:
        """Reject a pending entry and optionally notify its reporter.

        Args:
            queue_id: Entry to reject.
            acting_user_id: Moderator rejecting it.

        Returns:
            The REJECTED entry.

        Raises:
            QueueEntryNotFoundError: If the id is unknown.
            ModerationAccessDeniedError: If the moderator lacks access.
            EntryAlreadyApprovedError: If the entry is approved.
            InvalidStateTransitionError: If the entry is already decided.
        """
        log = self._log_operation(
            "reject", queue_id=queue_id, moderator_id=acting_user_id
        )

        async with self._repository.reserve(queue_id) as entry:
            if entry is None:
                raise QueueEntryNotFoundError(queue_id)
            await self._visibility.ensure_can_moderate(
                entry.project_id, acting_user_id
            )

            moderated_at = self._time.utcnow()
            entry.with_status(QueueStatus.REJECTED, acting_user_id, moderated_at)
            rejected = await self._repository.transition_cas(
                queue_id,
                entry.status,
                QueueStatus.REJECTED,
                acting_user_id,
                moderated_at,
            )

        self._metrics.increment_transitions(QueueStatus.REJECTED.display_name)
        log.info("entry_rejected", kind=rejected.kind.value, reporter_id=rejected.reporter_id)

        if self._config.notify_on_reject:
            await self._notify(
                rejected,
                NotificationTemplate.rejection_for(rejected.kind),
                acting_user_id,
            )
        return rejected

    async def mark_spam(self, queue_id: int, acting_user_id: int) -> int:
        """Flag an entry as spam, cascading to all of its reporter's entries.

        Every entry of the reporter that is not APPROVED (pending, rejected,
        already spam, and the target itself) becomes SPAM with this
        moderator and timestamp. The reporter's account is then disabled.

        Args:
            queue_id: Entry being flagged.
            acting_user_id: Moderator flagging it.

        Returns:
            Number of entries changed by the cascade.

        Raises:
            QueueEntryNotFoundError: If the id is unknown.
            ModerationAccessDeniedError: If the moderator lacks access.
        """
        log = self._log_operation(
            "mark_spam", queue_id=queue_id, moderator_id=acting_user_id
        )
        entry = await self.get_entry(queue_id, acting_user_id)
        reporter_id = entry.reporter_id

        # The notice has to go out while the account is still enabled
        if self._config.notify_on_spam:
            await self._notify(
                entry, NotificationTemplate.spam_for(entry.kind), acting_user_id
            )

        # Waits for in-flight approvals of this reporter's entries
        async with (
            self._repository.reserve_reporter(reporter_id),
            self._repository.reserve(queue_id),
        ):
            spam_count = await self._repository.mark_reporter_spam(
                reporter_id, acting_user_id, self._time.utcnow()
            )

        self._metrics.increment_transitions(QueueStatus.SPAM.display_name, spam_count)
        log.info("spam_cascade_applied", reporter_id=reporter_id, spam_count=spam_count)

        await self._disable_reporter(reporter_id)
        return spam_count

    async def delete(self, queue_id: int, acting_user_id: int | None = None) -> bool:
        """Hard delete an entry without recording a decision.

        Args:
            queue_id: Entry to delete.
            acting_user_id: Moderator deleting it. When given, the entry must
                exist and the moderator must have access to its project.
                Internal callers pass None and delete unconditionally.

        Returns:
            True if an entry was removed.

        Raises:
            QueueEntryNotFoundError: If a moderator deletes an unknown id.
            ModerationAccessDeniedError: If the moderator lacks access.
        """
        log = self._log_operation(
            "delete", queue_id=queue_id, moderator_id=acting_user_id
        )
        if acting_user_id is not None:
            await self.get_entry(queue_id, acting_user_id)

        deleted = await self._repository.delete(queue_id)
        if acting_user_id is not None and not deleted:
            raise QueueEntryNotFoundError(queue_id)

        log.info("entry_deleted", deleted=deleted)
        return deleted

    async def delete_by_project(self, project_id: int) -> int:
        """Purge every entry of a deleted project. Returns entries removed."""
        removed = await self._repository.delete_by_project(project_id)
        self._log_operation("delete_by_project", project_id=project_id).info(
            "project_entries_purged", removed=removed
        )
        return removed

    async def delete_by_reporter(self, reporter_id: int) -> int:
        """Purge every entry of a deleted user. Returns entries removed."""
        removed = await self._repository.delete_by_reporter(reporter_id)
        self._log_operation("delete_by_reporter", reporter_id=reporter_id).info(
            "reporter_entries_purged", removed=removed
        )
        return removed

    async def cleanup(self) -> int:
        """Remove decided entries moderated more than RETENTION_DAYS ago.

        PENDING entries are kept regardless of age. Safe to run concurrently.

        Returns:
            Number of entries removed.
        """
        cutoff = self._time.utcnow() - timedelta(days=RETENTION_DAYS)
        removed = await self._repository.delete_moderated_before(cutoff)
        self._metrics.increment_cleanup_deleted(removed)
        if removed:
            self._log_operation("cleanup").info(
                "retention_cleanup_completed",
                removed=removed,
                cutoff=cutoff.isoformat(),
            )
        return removed

    # =========================================================================
    # Listings
    # =========================================================================

    async def list_pending(
        self,
        scope: int,
        include_moderated: bool,
        acting_user_id: int,
    ) -> QueuePage:
        """List queue entries visible to the acting user, newest submitted first.

        Args:
            scope: ALL_PROJECTS or a single project id.
            include_moderated: Also return approved, rejected and spam entries.
            acting_user_id: User viewing the queue.

        Returns:
            QueuePage capped at the configured page size. A scope outside
            the user's moderation access yields an empty page.
        """
        if self._config.cleanup_on_view:
            await self.cleanup()

        projects = await self._visibility.resolve_scope(scope, acting_user_id)
        if not projects:
            return QueuePage.empty()

        statuses = (
            frozenset(QueueStatus) if include_moderated else frozenset({QueueStatus.PENDING})
        )
        page_size = self._config.page_size
        items, total = await self._repository.list_submitted(
            projects, statuses, limit=page_size + 1
        )
        return QueuePage(
            items=items[:page_size],
            has_more=len(items) > page_size,
            total_count=total,
        )

    async def list_history(
        self,
        scope: int,
        limit: int | None,
        acting_user_id: int,
    ) -> list[QueueEntry]:
        """List decided entries visible to the user, newest moderated first.

        Args:
            scope: ALL_PROJECTS or a single project id.
            limit: Maximum entries (configured default if None).
            acting_user_id: User viewing the history.

        Returns:
            Up to ``limit`` APPROVED, REJECTED and SPAM entries.
        """
        if limit is None:
            limit = self._config.history_limit
        if limit < 1:
            return []

        projects = await self._visibility.resolve_scope(scope, acting_user_id)
        if not projects:
            return []
        return await self._repository.list_moderated(projects, limit)

    async def can_moderate_anything(self, acting_user_id: int) -> bool:
        """True if the user meets the moderation threshold in any project."""
        return await self._visibility.can_moderate_anything(acting_user_id)

    async def count_pending(self, scope: int, acting_user_id: int) -> int:
        """Count pending entries visible to the acting user."""
        projects = await self._visibility.resolve_scope(scope, acting_user_id)
        if not projects:
            return 0
        count = await self._repository.count_by_status(projects, QueueStatus.PENDING)
        if scope == ALL_PROJECTS:
            self._metrics.set_pending_entries(count)
        return count

    # =========================================================================
    # Internals
    # =========================================================================

    async def _ensure_references(self, entry: QueueEntry) -> None:
        """Raise StaleReferenceError if anything the entry points at is gone."""
        reporter_id = entry.reporter_id
        if not await self._directory.user_exists(
            reporter_id
        ) or not await self._directory.user_enabled(reporter_id):
            raise StaleReferenceError(entry.id, StaleEntity.REPORTER, reporter_id)

        project_id = entry.project_id
        if not await self._directory.project_exists(
            project_id
        ) or not await self._directory.project_enabled(project_id):
            raise StaleReferenceError(entry.id, StaleEntity.PROJECT, project_id)

        if entry.kind is QueueEntryKind.NOTE and not await self._directory.issue_exists(
            entry.parent_id
        ):
            raise StaleReferenceError(entry.id, StaleEntity.PARENT_ISSUE, entry.parent_id)

    async def _materialize(self, entry: QueueEntry) -> int:
        """Create the entry's issue or note attributed to its reporter."""
        payload = entry.payload_dict()
        if entry.kind is QueueEntryKind.ISSUE:
            return await self._materializer.create_issue(
                payload, acting_user_id=entry.reporter_id
            )
        return await self._materializer.create_note(
            entry.parent_id, payload, acting_user_id=entry.reporter_id
        )

    async def _disable_reporter(self, reporter_id: int) -> None:
        """Disable the reporter's account if it still exists."""
        log = self._log_operation("disable_reporter", reporter_id=reporter_id)
        if not await self._directory.user_exists(reporter_id):
            log.info("reporter_already_removed")
            return
        await self._directory.disable_user(reporter_id)
        log.info("reporter_disabled")

    def _notification_context(
        self, entry: QueueEntry, template: NotificationTemplate, moderator_id: int
    ) -> dict[str, Any]:
        context: dict[str, Any] = {
            "queue_id": entry.id,
            "kind": entry.kind.value,
            "project_id": entry.project_id,
            "submitted_at": entry.submitted_at.isoformat(),
        }
        if self._config.include_moderator_in_notifications:
            context["moderator_id"] = moderator_id

        if template in (
            NotificationTemplate.REJECTED_ISSUE,
            NotificationTemplate.REJECTED_NOTE,
        ):
            if entry.kind is QueueEntryKind.ISSUE:
                context["summary"] = entry.payload.get("summary", "")
                context["description"] = entry.payload.get("description", "")
            else:
                context["text"] = entry.payload.get("text", "")
        return context

    async def _notify(
        self, entry: QueueEntry, template: NotificationTemplate, moderator_id: int
    ) -> None:
        """Send a reporter notification; failures are logged, never raised."""
        log = self._log_entry("notify", entry, template=template.value)
        try:
            if not await self._directory.user_enabled(entry.reporter_id):
                log.info("notification_skipped_disabled_user")
                return
            await self._notifier.notify(
                entry.reporter_id,
                template,
                self._notification_context(entry, template, moderator_id),
            )
        except Exception as e:
            self._metrics.increment_notification_failures(template.value)
            log.warning("notification_failed", error=str(e), error_type=type(e).__name__)
            return

        log.info("notification_sent")
