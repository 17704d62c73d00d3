"""Base exception classes for the moderation domain layer."""


class ModerateError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class so the API
    layer can map the whole family in one place.
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
