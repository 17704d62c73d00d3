"""Moderation queue API request/response models.

Pydantic models for the /v1/moderate endpoints. Submission payloads are
never returned by list endpoints.
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer

from moderate.domain.models.queue_entry import QueueEntry

# ISO 8601 with Z suffix (Pydantic v2)
DateTimeWithZ = Annotated[
    datetime,
    PlainSerializer(
        lambda v: v.isoformat().replace("+00:00", "Z") if v else None, return_type=str
    ),
]


class QueueEntryResponse(BaseModel):
    """One queue entry without its submission payload."""

    id: int = Field(..., description="Queue entry id")
    kind: str = Field(..., description="'issue' or 'note'")
    project_id: int
    reporter_id: int
    parent_id: int = Field(..., description="Parent issue id for notes, 0 for issues")
    submitted_at: DateTimeWithZ
    status: int = Field(..., description="Status code (0 pending, 1 rejected, 2 approved, 3 spam)")
    status_name: str
    moderator_id: int
    moderated_at: DateTimeWithZ | None = None

    @classmethod
    def from_entry(cls, entry: QueueEntry) -> "QueueEntryResponse":
        return cls(
            id=entry.id,
            kind=entry.kind.value,
            project_id=entry.project_id,
            reporter_id=entry.reporter_id,
            parent_id=entry.parent_id,
            submitted_at=entry.submitted_at,
            status=entry.status.value,
            status_name=entry.status.display_name,
            moderator_id=entry.moderator_id,
            moderated_at=entry.moderated_at,
        )


class QueuePageResponse(BaseModel):
    """A page of the moderation queue."""

    items: list[QueueEntryResponse]
    has_more: bool = Field(..., description="More entries matched than the page holds")
    total_count: int


class QueueHistoryResponse(BaseModel):
    """Recently moderated entries, newest decision first."""

    items: list[QueueEntryResponse]


class QueueStatsResponse(BaseModel):
    project_id: int = Field(..., description="Requested scope (0 = all projects)")
    pending_count: int


class ApproveResponse(BaseModel):
    entry: QueueEntryResponse
    created_id: int = Field(..., description="Id of the created issue or note")


class RejectResponse(BaseModel):
    entry: QueueEntryResponse


class SpamResponse(BaseModel):
    queue_id: int
    reporter_id: int
    spam_count: int = Field(..., description="Entries flagged by the cascade")


class ModerationErrorResponse(BaseModel):
    """Error response for moderation operations (RFC 7807).

    Attributes:
        type: Error type URI.
        title: Human-readable error title.
        status: HTTP status code.
        detail: Detailed error message.
        instance: Request path that caused the error.
    """

    type: str = Field(..., description="Error type URI")
    title: str = Field(..., description="Human-readable error title")
    status: int = Field(..., description="HTTP status code")
    detail: str = Field(..., description="Detailed error message")
    instance: str = Field(..., description="Request path that caused the error")
