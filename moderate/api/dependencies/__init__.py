"""FastAPI dependencies."""

from moderate.api.dependencies.correlation import get_correlation_id_header
from moderate.api.dependencies.moderation import (
    get_acting_user_id,
    get_moderation_service,
)

__all__ = [
    "get_acting_user_id",
    "get_correlation_id_header",
    "get_moderation_service",
]
