"""Prometheus metrics for the moderation queue.

Operational counters only: what entered the queue, which decisions were
recorded, how often admission control and notifications failed.

Labels: service, environment (plus a per-metric dimension).
"""

import os
import threading

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

# Content type for Prometheus metrics endpoint
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Thread lock for singleton initialization
_collector_lock = threading.Lock()


class ModerationMetrics:
    """Collects and manages moderation queue Prometheus metrics.

    Attributes:
        entries_enqueued_total: Counter of queued submissions by kind.
        transitions_total: Counter of recorded decisions by target status.
        rate_limit_hits_total: Counter of submissions refused by admission control.
        notifications_failed_total: Counter of swallowed notifier failures.
        cleanup_deleted_total: Counter of entries removed by retention cleanup.
        pending_entries: Gauge of pending entries seen by the last queue count.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize the collector.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "moderate-api")

        self.entries_enqueued_total = Counter(
            name="moderate_entries_enqueued_total",
            documentation="Total submissions placed in the moderation queue",
            labelnames=["service", "environment", "kind"],
            registry=self._registry,
        )

        self.transitions_total = Counter(
            name="moderate_transitions_total",
            documentation="Total moderation decisions recorded, by resulting status",
            labelnames=["service", "environment", "status"],
            registry=self._registry,
        )

        self.rate_limit_hits_total = Counter(
            name="moderate_rate_limit_hits_total",
            documentation="Total submissions refused by moderation queue rate limiting",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.notifications_failed_total = Counter(
            name="moderate_notifications_failed_total",
            documentation="Total reporter notifications that failed to send",
            labelnames=["service", "environment", "template"],
            registry=self._registry,
        )

        self.cleanup_deleted_total = Counter(
            name="moderate_cleanup_deleted_total",
            documentation="Total moderated entries removed by retention cleanup",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.pending_entries = Gauge(
            name="moderate_pending_entries",
            documentation="Pending entries visible to the last queue count",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

    def _labels(self) -> dict[str, str]:
        return {"service": self._service_name, "environment": self._environment}

    def increment_enqueued(self, kind: str) -> None:
        """Count one queued submission.

        Args:
            kind: Entry kind ("issue" or "note").
        """
        self.entries_enqueued_total.labels(**self._labels(), kind=kind).inc()

    def increment_transitions(self, status: str, count: int = 1) -> None:
        """Count recorded decisions.

        Args:
            status: Resulting status name.
            count: Number of entries that changed (spam cascades change many).
        """
        if count > 0:
            self.transitions_total.labels(**self._labels(), status=status).inc(count)

    def increment_rate_limit_hits(self) -> None:
        """Count one submission refused by admission control."""
        self.rate_limit_hits_total.labels(**self._labels()).inc()

    def increment_notification_failures(self, template: str) -> None:
        self.notifications_failed_total.labels(**self._labels(), template=template).inc()

    def increment_cleanup_deleted(self, count: int) -> None:
        if count > 0:
            self.cleanup_deleted_total.labels(**self._labels()).inc(count)

    def set_pending_entries(self, count: int) -> None:
        self.pending_entries.labels(**self._labels()).set(count)

    def get_registry(self) -> CollectorRegistry:
        """Get the collector registry."""
        return self._registry


# Singleton instance
_metrics_collector: ModerationMetrics | None = None


def get_metrics_collector() -> ModerationMetrics:
    """Get the singleton ModerationMetrics instance (thread-safe).

    Uses double-checked locking for lazy initialization.
    """
    global _metrics_collector
    if _metrics_collector is None:
        with _collector_lock:
            if _metrics_collector is None:
                _metrics_collector = ModerationMetrics()
    return _metrics_collector


def generate_metrics() -> bytes:
    """Generate Prometheus metrics in exposition format."""
    return generate_latest(get_metrics_collector().get_registry())


def reset_metrics_collector() -> None:
    """Reset the singleton collector (for testing only)."""
    global _metrics_collector
    with _collector_lock:
        _metrics_collector = None
