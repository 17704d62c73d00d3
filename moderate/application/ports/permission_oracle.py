"""Permission oracle port - the host tracker's access-level model."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PermissionOracleProtocol(Protocol):
    """Protocol answering access-level questions for users and projects."""

    async def has_project_level(
        self, threshold: int, project_id: int, user_id: int
    ) -> bool:
        """True if the user's level in the project is at or above threshold."""
        ...

    async def accessible_projects(self, threshold: int, user_id: int) -> frozenset[int]:
        """Projects where the user's level is at or above threshold."""
        ...

    async def has_global_level(self, threshold: int, user_id: int) -> bool:
        """True if the user's global level is at or above threshold."""
        ...
