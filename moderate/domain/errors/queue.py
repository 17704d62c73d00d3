"""Queue lookup and authorization errors.

NotFound and AccessDenied are surfaced to the caller unchanged; the API maps
them to 404 and 403.
"""

from __future__ import annotations

from moderate.domain.exceptions import ModerateError


class QueueEntryNotFoundError(ModerateError):
    """Raised when a queue id does not exist.

    Attributes:
        queue_id: The unknown queue entry id.
    """

    def __init__(self, queue_id: int) -> None:
        self.queue_id = queue_id
        super().__init__(f"Queue entry {queue_id} not found")


class ModerationAccessDeniedError(ModerateError):
    """Raised when the acting user lacks the moderation threshold for a project.

    Attributes:
        user_id: The acting user.
        project_id: Project the user tried to moderate.
        threshold: Required access level.
    """

    def __init__(self, user_id: int, project_id: int, threshold: int) -> None:
        self.user_id = user_id
        self.project_id = project_id
        self.threshold = threshold
        super().__init__(
            f"User {user_id} lacks moderation access (level {threshold}) "
            f"to project {project_id}"
        )
