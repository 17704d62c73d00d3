"""Identity directory port - existence and state of users, projects and issues."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IdentityDirectoryProtocol(Protocol):
    """Protocol over the host tracker's user, project and issue records."""

    async def user_exists(self, user_id: int) -> bool: ...

    async def user_enabled(self, user_id: int) -> bool: ...

    async def disable_user(self, user_id: int) -> None:
        """Disable a user account so it can no longer sign in or report.

        Disabling an already disabled account is a no-op.
        """
        ...

    async def project_exists(self, project_id: int) -> bool: ...

    async def project_enabled(self, project_id: int) -> bool: ...

    async def issue_exists(self, issue_id: int) -> bool: ...

    async def get_issue_project(self, issue_id: int) -> int | None:
        """Project an issue belongs to, None if the issue does not exist."""
        ...

    async def get_issue_reporter(self, issue_id: int) -> int | None:
        """Reporter of an issue, None if the issue does not exist."""
        ...
