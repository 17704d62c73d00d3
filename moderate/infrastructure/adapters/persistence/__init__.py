"""PostgreSQL persistence adapters."""

from moderate.infrastructure.adapters.persistence.queue_repository import (
    PostgresQueueRepository,
)

__all__ = ["PostgresQueueRepository"]
