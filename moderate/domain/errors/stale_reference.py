"""Stale reference error raised when approving an entry whose context vanished."""

from __future__ import annotations

from enum import Enum

from moderate.domain.exceptions import ModerateError


class StaleEntity(Enum):
    """Entity an approval found missing or disabled."""

    REPORTER = "reporter"
    PROJECT = "project"
    PARENT_ISSUE = "parent_issue"


_REASONS: dict[StaleEntity, str] = {
    StaleEntity.REPORTER: "reporter no longer exists or is disabled",
    StaleEntity.PROJECT: "project no longer exists or is disabled",
    StaleEntity.PARENT_ISSUE: "parent issue no longer exists",
}


class StaleReferenceError(ModerateError):
    """Raised when an entry references a reporter, project or issue that is gone.

    The entry is left PENDING; a moderator has to reject or delete it.

    Attributes:
        queue_id: The entry that could not be approved.
        entity: Which reference is stale.
        entity_id: Id of the stale reporter, project or issue.
    """

    def __init__(self, queue_id: int, entity: StaleEntity, entity_id: int) -> None:
        self.queue_id = queue_id
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            f"Cannot approve queue entry {queue_id}: {_REASONS[entity]} "
            f"({entity.value} {entity_id})"
        )
