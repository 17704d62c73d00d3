"""State transition errors for the moderation state machine."""

from __future__ import annotations

from typing import TYPE_CHECKING

from moderate.domain.exceptions import ModerateError

if TYPE_CHECKING:
    from moderate.domain.models.queue_entry import QueueStatus


class InvalidStateTransitionError(ModerateError):
    """Raised when a transition is not in the transition table.

    Attributes:
        queue_id: Entry being transitioned.
        from_status: Current status.
        to_status: Attempted target status.
        allowed_transitions: Valid targets from the current status.
    """

    def __init__(
        self,
        queue_id: int,
        from_status: QueueStatus,
        to_status: QueueStatus,
        allowed_transitions: list[QueueStatus] | None = None,
    ) -> None:
        """Initialize invalid state transition error.

        Args:
            queue_id: Entry being transitioned.
            from_status: Current status.
            to_status: Attempted invalid target status.
            allowed_transitions: Valid statuses from the current one (optional).
        """
        self.queue_id = queue_id
        self.from_status = from_status
        self.to_status = to_status
        self.allowed_transitions = allowed_transitions or []

        allowed_str = (
            f" Valid transitions: {[s.display_name for s in self.allowed_transitions]}"
            if self.allowed_transitions
            else ""
        )
        super().__init__(
            f"Invalid status transition for queue entry {queue_id}: "
            f"{from_status.display_name} -> {to_status.display_name}.{allowed_str}"
        )


class EntryAlreadyApprovedError(ModerateError):
    """Raised when anything tries to change an APPROVED entry.

    Attributes:
        queue_id: The approved entry.
    """

    def __init__(self, queue_id: int) -> None:
        self.queue_id = queue_id
        super().__init__(
            f"Queue entry {queue_id} is already approved. "
            "Approved entries cannot be modified."
        )
