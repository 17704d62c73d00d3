"""API request/response models."""

from moderate.api.models.moderation import (
    ApproveResponse,
    ModerationErrorResponse,
    QueueEntryResponse,
    QueueHistoryResponse,
    QueuePageResponse,
    QueueStatsResponse,
    RejectResponse,
    SpamResponse,
)

__all__ = [
    "ApproveResponse",
    "ModerationErrorResponse",
    "QueueEntryResponse",
    "QueueHistoryResponse",
    "QueuePageResponse",
    "QueueStatsResponse",
    "RejectResponse",
    "SpamResponse",
]
