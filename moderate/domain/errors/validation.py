"""Content validation error raised by the content materializer."""

from __future__ import annotations

from moderate.domain.exceptions import ModerateError


class ContentValidationError(ModerateError):
    """Raised by a content materializer that refuses a payload.

    Propagated unchanged through approval and bypass creation.

    Attributes:
        field: Offending payload field, when known.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)
