"""Domain errors for the moderation queue.

All exceptions inherit from ModerateError.
"""

from moderate.domain.errors.concurrent_modification import ConcurrentModificationError
from moderate.domain.errors.queue import (
    ModerationAccessDeniedError,
    QueueEntryNotFoundError,
)
from moderate.domain.errors.rate_limit import RateLimitExceededError
from moderate.domain.errors.stale_reference import StaleEntity, StaleReferenceError
from moderate.domain.errors.state_transition import (
    EntryAlreadyApprovedError,
    InvalidStateTransitionError,
)
from moderate.domain.errors.validation import ContentValidationError
from moderate.domain.exceptions import ModerateError

__all__: list[str] = [
    "ConcurrentModificationError",
    "ContentValidationError",
    "EntryAlreadyApprovedError",
    "InvalidStateTransitionError",
    "ModerateError",
    "ModerationAccessDeniedError",
    "QueueEntryNotFoundError",
    "RateLimitExceededError",
    "StaleEntity",
    "StaleReferenceError",
]
