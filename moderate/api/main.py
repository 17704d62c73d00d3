"""FastAPI application entry point for the moderation queue."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from moderate import __version__
from moderate.api.routes.metrics import router as metrics_router
from moderate.api.routes.moderation import router as moderation_router
from moderate.bootstrap.database import apply_migrations, close_database_engine
from moderate.bootstrap.logging import configure_structlog


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    configure_structlog()
    # The in-memory store needs no schema
    if os.environ.get("DATABASE_URL"):
        await apply_migrations()
    yield
    await close_database_engine()


app = FastAPI(
    title="Moderation Queue API",
    description="Review queue for issue and note submissions",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(moderation_router)
app.include_router(metrics_router)
