"""Moderation queue API routes.

FastAPI router for moderators working the queue: list pending and
recently moderated entries, count what is waiting, and approve, reject,
flag as spam or delete single entries.

Developer Golden Rules:
1. ACTOR FROM HEADER - Every route resolves the acting user from X-User-Id.
2. SCOPE BY ACCESS - Listings only ever contain projects the actor moderates.
3. NO PAYLOADS IN LISTS - List items carry metadata and status_name only.
4. FAIL LOUD - Domain errors become RFC 7807 problem documents.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from moderate.api.dependencies.correlation import get_correlation_id_header
from moderate.api.dependencies.moderation import (
    get_acting_user_id,
    get_moderation_service,
)
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
from moderate.application.services.moderation_service import ModerationService
from moderate.domain.errors import (
    ConcurrentModificationError,
    ContentValidationError,
    EntryAlreadyApprovedError,
    InvalidStateTransitionError,
    ModerateError,
    ModerationAccessDeniedError,
    QueueEntryNotFoundError,
    RateLimitExceededError,
    StaleReferenceError,
)
from moderate.domain.models.access_level import ALL_PROJECTS

router = APIRouter(
    prefix="/v1/moderate",
    tags=["moderation"],
    dependencies=[Depends(get_correlation_id_header)],
)

_ERROR_RESPONSES = {
    401: {"model": ModerationErrorResponse, "description": "Missing X-User-Id"},
    403: {"model": ModerationErrorResponse, "description": "Not a moderator here"},
    404: {"model": ModerationErrorResponse, "description": "Queue entry not found"},
    409: {"model": ModerationErrorResponse, "description": "Entry state conflict"},
}


def _problem(
    request: Request,
    status: int,
    slug: str,
    title: str,
    detail: str,
    headers: dict[str, str] | None = None,
    **extensions: object,
) -> HTTPException:
    return HTTPException(
        status_code=status,
        detail={
            "type": f"urn:moderate:{slug}",
            "title": title,
            "status": status,
            "detail": detail,
            "instance": str(request.url),
            **extensions,
        },
        headers=headers,
    )


def _to_http_exception(error: ModerateError, request: Request) -> HTTPException:
    """Map a domain error to its RFC 7807 HTTPException."""
    if isinstance(error, QueueEntryNotFoundError):
        return _problem(
            request, 404, "entry-not-found", "Queue Entry Not Found", str(error),
            queue_id=error.queue_id,
        )
    if isinstance(error, ModerationAccessDeniedError):
        return _problem(
            request, 403, "access-denied", "Moderation Access Denied", str(error),
            project_id=error.project_id,
        )
    if isinstance(error, RateLimitExceededError):
        return _problem(
            request, 429, "rate-limit-exceeded", "Rate Limit Exceeded", str(error),
            headers={"Retry-After": str(error.window_seconds)},
            rate_limit_limit=error.limit,
            rate_limit_current=error.current_count,
        )
    if isinstance(error, StaleReferenceError):
        return _problem(
            request, 409, "stale-reference", "Stale Reference", str(error),
            entity=error.entity.value,
            entity_id=error.entity_id,
        )
    if isinstance(error, ContentValidationError):
        return _problem(
            request, 400, "content-validation", "Content Validation Failed", str(error),
            field=error.field,
        )
    if isinstance(error, EntryAlreadyApprovedError):
        return _problem(
            request, 409, "already-approved", "Entry Already Approved", str(error),
            queue_id=error.queue_id,
        )
    if isinstance(error, InvalidStateTransitionError):
        return _problem(
            request, 409, "invalid-transition", "Invalid State Transition", str(error),
            current_status=error.from_status.display_name,
        )
    if isinstance(error, ConcurrentModificationError):
        return _problem(
            request, 409, "concurrent-modification", "Concurrent Modification", str(error),
            current_status=error.actual_status.display_name,
        )
    return _problem(request, 400, "moderation-error", "Moderation Error", str(error))


async def _require_moderator(
    request: Request, service: ModerationService, acting_user_id: int
) -> None:
    if not await service.can_moderate_anything(acting_user_id):
        raise _problem(
            request, 403, "access-denied", "Moderation Access Denied",
            f"User {acting_user_id} cannot moderate any project",
        )


@router.get(
    "/queue",
    response_model=QueuePageResponse,
    responses=_ERROR_RESPONSES,
    summary="List the moderation queue",
)
async def list_queue(
    request: Request,
    project_id: int = Query(default=ALL_PROJECTS, ge=0, description="0 = all projects"),
    include_moderated: bool = Query(default=False),
    acting_user_id: int = Depends(get_acting_user_id),
    service: ModerationService = Depends(get_moderation_service),
) -> QueuePageResponse:
    """List entries the acting user may moderate, newest submitted first.

    Users who cannot moderate any project are refused outright.
    """
    await _require_moderator(request, service, acting_user_id)
    try:
        page = await service.list_pending(project_id, include_moderated, acting_user_id)
    except ModerateError as e:
        raise _to_http_exception(e, request) from None
    return QueuePageResponse(
        items=[QueueEntryResponse.from_entry(e) for e in page.items],
        has_more=page.has_more,
        total_count=page.total_count,
    )


@router.get(
    "/history",
    response_model=QueueHistoryResponse,
    responses=_ERROR_RESPONSES,
    summary="List recently moderated entries",
)
async def list_history(
    request: Request,
    project_id: int = Query(default=ALL_PROJECTS, ge=0),
    limit: int | None = Query(default=None, ge=1, le=1000),
    acting_user_id: int = Depends(get_acting_user_id),
    service: ModerationService = Depends(get_moderation_service),
) -> QueueHistoryResponse:
    await _require_moderator(request, service, acting_user_id)
    try:
        entries = await service.list_history(project_id, limit, acting_user_id)
    except ModerateError as e:
        raise _to_http_exception(e, request) from None
    return QueueHistoryResponse(items=[QueueEntryResponse.from_entry(e) for e in entries])


@router.get(
    "/stats",
    response_model=QueueStatsResponse,
    responses=_ERROR_RESPONSES,
    summary="Count pending entries",
)
async def queue_stats(
    request: Request,
    project_id: int = Query(default=ALL_PROJECTS, ge=0),
    acting_user_id: int = Depends(get_acting_user_id),
    service: ModerationService = Depends(get_moderation_service),
) -> QueueStatsResponse:
    await _require_moderator(request, service, acting_user_id)
    count = await service.count_pending(project_id, acting_user_id)
    return QueueStatsResponse(project_id=project_id, pending_count=count)


@router.post(
    "/approve/{queue_id}",
    response_model=ApproveResponse,
    responses={
        **_ERROR_RESPONSES,
        400: {"model": ModerationErrorResponse, "description": "Payload refused by host"},
    },
    summary="Approve a pending entry",
)
async def approve_entry(
    queue_id: int,
    request: Request,
    acting_user_id: int = Depends(get_acting_user_id),
    service: ModerationService = Depends(get_moderation_service),
) -> ApproveResponse:
    """Create the queued issue or note as its reporter and mark the entry approved."""
    try:
        result = await service.approve(queue_id, acting_user_id)
    except ModerateError as e:
        raise _to_http_exception(e, request) from None
    return ApproveResponse(
        entry=QueueEntryResponse.from_entry(result.entry),
        created_id=result.created_id,
    )


@router.post(
    "/reject/{queue_id}",
    response_model=RejectResponse,
    responses=_ERROR_RESPONSES,
    summary="Reject a pending entry",
)
async def reject_entry(
    queue_id: int,
    request: Request,
    acting_user_id: int = Depends(get_acting_user_id),
    service: ModerationService = Depends(get_moderation_service),
) -> RejectResponse:
    try:
        entry = await service.reject(queue_id, acting_user_id)
    except ModerateError as e:
        raise _to_http_exception(e, request) from None
    return RejectResponse(entry=QueueEntryResponse.from_entry(entry))


@router.post(
    "/spam/{queue_id}",
    response_model=SpamResponse,
    responses=_ERROR_RESPONSES,
    summary="Flag an entry's reporter as a spammer",
)
async def mark_spam(
    queue_id: int,
    request: Request,
    acting_user_id: int = Depends(get_acting_user_id),
    service: ModerationService = Depends(get_moderation_service),
) -> SpamResponse:
    """Flag every non-approved entry of the reporter as spam and disable the account."""
    try:
        entry = await service.get_entry(queue_id, acting_user_id)
        spam_count = await service.mark_spam(queue_id, acting_user_id)
    except ModerateError as e:
        raise _to_http_exception(e, request) from None
    return SpamResponse(
        queue_id=queue_id, reporter_id=entry.reporter_id, spam_count=spam_count
    )


@router.delete(
    "/{queue_id}",
    status_code=204,
    response_class=Response,
    responses=_ERROR_RESPONSES,
    summary="Delete a queue entry",
)
async def delete_entry(
    queue_id: int,
    request: Request,
    acting_user_id: int = Depends(get_acting_user_id),
    service: ModerationService = Depends(get_moderation_service),
) -> Response:
    try:
        await service.delete(queue_id, acting_user_id)
    except ModerateError as e:
        raise _to_http_exception(e, request) from None
    return Response(status_code=204)
