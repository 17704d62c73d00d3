"""Identity directory stub for testing.

In-memory users, projects and issues with enabled flags. Tests remove or
disable records to simulate stale references.
"""

from __future__ import annotations


class IdentityDirectoryStub:
    """Stub implementation of IdentityDirectoryProtocol.

    Attributes:
        disabled_calls: User ids passed to disable_user, in call order.
    """

    def __init__(self) -> None:
        self._users: dict[int, bool] = {}
        self._projects: dict[int, bool] = {}
        # issue_id -> (project_id, reporter_id)
        self._issues: dict[int, tuple[int, int]] = {}
        self.disabled_calls: list[int] = []

    def add_user(self, user_id: int, enabled: bool = True) -> None:
        self._users[user_id] = enabled

    def remove_user(self, user_id: int) -> None:
        self._users.pop(user_id, None)

    def add_project(self, project_id: int, enabled: bool = True) -> None:
        self._projects[project_id] = enabled

    def remove_project(self, project_id: int) -> None:
        self._projects.pop(project_id, None)

    def set_project_enabled(self, project_id: int, enabled: bool) -> None:
        self._projects[project_id] = enabled

    def add_issue(self, issue_id: int, project_id: int, reporter_id: int) -> None:
        self._issues[issue_id] = (project_id, reporter_id)

    def remove_issue(self, issue_id: int) -> None:
        self._issues.pop(issue_id, None)

    async def user_exists(self, user_id: int) -> bool:
        return user_id in self._users

    async def user_enabled(self, user_id: int) -> bool:
        return self._users.get(user_id, False)

    async def disable_user(self, user_id: int) -> None:
        self.disabled_calls.append(user_id)
        if user_id in self._users:
            self._users[user_id] = False

    async def project_exists(self, project_id: int) -> bool:
        return project_id in self._projects

    async def project_enabled(self, project_id: int) -> bool:
        return self._projects.get(project_id, False)

    async def issue_exists(self, issue_id: int) -> bool:
        return issue_id in self._issues

    async def get_issue_project(self, issue_id: int) -> int | None:
        issue = self._issues.get(issue_id)
        return issue[0] if issue else None

    async def get_issue_reporter(self, issue_id: int) -> int | None:
        issue = self._issues.get(issue_id)
        return issue[1] if issue else None
