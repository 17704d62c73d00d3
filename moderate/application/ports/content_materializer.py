"""Content materializer port - turns queued payloads into real issues and notes.

The acting identity is an explicit argument: the created content is
attributed to ``acting_user_id``. No process-wide "current user" is
touched, so nothing has to be restored afterwards.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ContentMaterializerProtocol(Protocol):
    """Protocol for the host tracker's content creation logic."""

    async def create_issue(self, payload: dict[str, Any], acting_user_id: int) -> int:
        """Create an issue from a submission payload.

        Args:
            payload: Issue data in the host's issue-creation shape.
            acting_user_id: User the issue is created as (its reporter).

        Returns:
            The new issue id.

        Raises:
            ContentValidationError: If the host rejects the payload.
        """
        ...

    async def create_note(
        self,
        issue_id: int,
        payload: dict[str, Any],
        acting_user_id: int,
    ) -> int:
        """Add a note to an issue from a submission payload.

        Args:
            issue_id: Issue the note attaches to.
            payload: Note data in the host's note-creation shape.
            acting_user_id: User the note is created as.

        Returns:
            The new note id.

        Raises:
            ContentValidationError: If the host rejects the payload.
        """
        ...
