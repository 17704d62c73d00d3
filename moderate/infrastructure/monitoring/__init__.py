"""Monitoring infrastructure (Prometheus metrics)."""

from moderate.infrastructure.monitoring.metrics import (
    METRICS_CONTENT_TYPE,
    ModerationMetrics,
    generate_metrics,
    get_metrics_collector,
    reset_metrics_collector,
)

__all__: list[str] = [
    "METRICS_CONTENT_TYPE",
    "ModerationMetrics",
    "generate_metrics",
    "get_metrics_collector",
    "reset_metrics_collector",
]
