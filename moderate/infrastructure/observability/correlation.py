"""Request correlation ids.

The id of the request being handled sits in a ContextVar, so every log
line written while moderating an entry can be tied back to the HTTP call
(or host hook) that caused it, across awaits.

The API binds it per request from ``X-Correlation-ID``; services read it
through ``LoggingMixin._log_operation``.
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4

# Longest caller-supplied id we keep; longer values are replaced
MAX_CORRELATION_ID_LENGTH = 128

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    return str(uuid4())


def get_correlation_id() -> str:
    """Current correlation id, ``""`` outside a request."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def bind_correlation_id(incoming: str | None) -> str:
    """Adopt a caller-supplied id, or mint one, and make it current.

    Blank or oversized values are not trusted.

    Returns:
        The id now bound to the context.
    """
    candidate = (incoming or "").strip()
    if not candidate or len(candidate) > MAX_CORRELATION_ID_LENGTH:
        candidate = generate_correlation_id()
    set_correlation_id(candidate)
    return candidate


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor: stamp the current correlation id on the event.

    An id bound explicitly on the logger wins over the context value.
    """
    correlation_id = _correlation_id.get()
    if correlation_id:
        event_dict.setdefault("correlation_id", correlation_id)
    return event_dict
