"""Permission oracle stub for testing.

Holds per-project and global access levels in memory. A user's effective
level in a project is the higher of the two.
"""

from __future__ import annotations


class PermissionOracleStub:
    """Stub implementation of PermissionOracleProtocol."""

    def __init__(self) -> None:
        self._project_levels: dict[tuple[int, int], int] = {}
        self._global_levels: dict[int, int] = {}
        self._projects: set[int] = set()

    def add_project(self, project_id: int) -> None:
        """Register a project so global levels apply to it."""
        self._projects.add(project_id)

    def set_project_level(self, project_id: int, user_id: int, level: int) -> None:
        self._projects.add(project_id)
        self._project_levels[(project_id, user_id)] = level

    def set_global_level(self, user_id: int, level: int) -> None:
        self._global_levels[user_id] = level

    def _level(self, project_id: int, user_id: int) -> int:
        return max(
            self._project_levels.get((project_id, user_id), 0),
            self._global_levels.get(user_id, 0),
        )

    async def has_project_level(
        self, threshold: int, project_id: int, user_id: int
    ) -> bool:
        return self._level(project_id, user_id) >= threshold

    async def accessible_projects(self, threshold: int, user_id: int) -> frozenset[int]:
        return frozenset(
            p for p in self._projects if self._level(p, user_id) >= threshold
        )

    async def has_global_level(self, threshold: int, user_id: int) -> bool:
        return self._global_levels.get(user_id, 0) >= threshold
