"""Correlation id dependency for the moderation routers."""

from fastapi import Header

from moderate.infrastructure.observability import bind_correlation_id

CORRELATION_HEADER = "X-Correlation-ID"


async def get_correlation_id_header(
    x_correlation_id: str | None = Header(default=None, alias=CORRELATION_HEADER),
) -> str:
    """Bind the request's correlation id for every log line it produces."""
    return bind_correlation_id(x_correlation_id)
