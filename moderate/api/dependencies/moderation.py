"""Moderation API dependencies.

Services come from the bootstrap composition root. The acting user is
identified by the ``X-User-Id`` header set by the host's authentication
layer.
"""

from fastapi import Header, HTTPException, Request

from moderate.application.services.moderation_service import ModerationService
from moderate.bootstrap.moderation import get_moderation_service as _get_service

USER_HEADER = "X-User-Id"


def get_moderation_service() -> ModerationService:
    """Get the moderation service singleton."""
    return _get_service()


async def get_acting_user_id(
    request: Request,
    x_user_id: str | None = Header(default=None, alias=USER_HEADER),
) -> int:
    """Resolve the acting user from the X-User-Id header.

    Raises:
        HTTPException: 401 when the header is missing or not a positive integer.
    """
    if x_user_id is not None and x_user_id.strip().isdigit():
        user_id = int(x_user_id)
        if user_id > 0:
            return user_id
    raise HTTPException(
        status_code=401,
        detail={
            "type": "urn:moderate:unauthenticated",
            "title": "Unauthenticated",
            "status": 401,
            "detail": f"{USER_HEADER} header with a positive user id is required",
            "instance": str(request.url),
        },
    )
