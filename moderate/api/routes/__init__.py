"""API routers."""

from moderate.api.routes.metrics import router as metrics_router
from moderate.api.routes.moderation import router as moderation_router

__all__ = ["metrics_router", "moderation_router"]
