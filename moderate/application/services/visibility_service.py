"""Visibility filter - which projects' queue entries a user may see and act on.

Listing outside the visible set yields nothing; point lookups outside it
raise ModerationAccessDeniedError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from moderate.application.services.base import LoggingMixin
from moderate.config.moderation_config import ModerationConfig
from moderate.domain.errors.queue import ModerationAccessDeniedError
from moderate.domain.models.access_level import ALL_PROJECTS

if TYPE_CHECKING:
    from moderate.application.ports.permission_oracle import PermissionOracleProtocol


class VisibilityService(LoggingMixin):
    """Computes per-user project scope at the moderation threshold."""

    def __init__(
        self,
        permissions: PermissionOracleProtocol,
        config: ModerationConfig | None = None,
    ) -> None:
        self._permissions = permissions
        self._config = config or ModerationConfig()
        self._init_logger(component="moderation.visibility")

    @property
    def threshold(self) -> int:
        return self._config.moderate_threshold

    async def accessible_projects(self, user_id: int) -> frozenset[int]:
        """Projects where the user meets the moderation threshold.

        An empty set means the user may see and act on nothing.
        """
        return frozenset(
            await self._permissions.accessible_projects(self.threshold, user_id)
        )

    async def resolve_scope(self, scope: int, user_id: int) -> frozenset[int]:
        """Expand a listing scope into the project ids the user may see.

        Args:
            scope: ALL_PROJECTS or a single project id.
            user_id: Acting user.

        Returns:
            Visible project ids; empty when the user may see nothing in scope.
        """
        if scope == ALL_PROJECTS:
            projects = await self.accessible_projects(user_id)
        elif await self._permissions.has_project_level(self.threshold, scope, user_id):
            projects = frozenset({scope})
        else:
            projects = frozenset()

        self._log_operation("resolve_scope", scope=scope, user_id=user_id).debug(
            "scope_resolved", project_count=len(projects)
        )
        return projects

    async def can_moderate(self, project_id: int, user_id: int) -> bool:
        return await self._permissions.has_project_level(
            self.threshold, project_id, user_id
        )

    async def ensure_can_moderate(self, project_id: int, user_id: int) -> None:
        """Raise unless the user meets the moderation threshold for the project.

        Raises:
            ModerationAccessDeniedError: If access is lacking.
        """
        if not await self.can_moderate(project_id, user_id):
            self._log_operation(
                "ensure_can_moderate", project_id=project_id, user_id=user_id
            ).info("moderation_access_denied", threshold=self.threshold)
            raise ModerationAccessDeniedError(
                user_id=user_id,
                project_id=project_id,
                threshold=self.threshold,
            )

    async def can_moderate_anything(self, user_id: int) -> bool:
        """True if the user can moderate at least one project."""
        return bool(await self.accessible_projects(user_id))
