"""Concurrent modification error for compare-and-swap status updates."""

from __future__ import annotations

from typing import TYPE_CHECKING

from moderate.domain.exceptions import ModerateError

if TYPE_CHECKING:
    from moderate.domain.models.queue_entry import QueueStatus


class ConcurrentModificationError(ModerateError):
    """Raised when a CAS status update finds a different status than expected.

    Another moderator changed the entry first. The losing caller should
    re-read the entry instead of retrying blindly.

    Attributes:
        queue_id: Entry that was being modified.
        expected_status: Status the caller expected.
        actual_status: Status found in the store.
        operation: Operation that lost the race (e.g. "approve").
    """

    def __init__(
        self,
        queue_id: int,
        expected_status: QueueStatus,
        actual_status: QueueStatus,
        operation: str = "transition",
    ) -> None:
        self.queue_id = queue_id
        self.expected_status = expected_status
        self.actual_status = actual_status
        self.operation = operation
        super().__init__(
            f"Concurrent modification detected for queue entry {queue_id} "
            f"during {operation}. Expected {expected_status.display_name}, "
            f"found {actual_status.display_name}."
        )
