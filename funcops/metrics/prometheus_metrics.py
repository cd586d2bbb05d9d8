"""Prometheus metrics definitions and helpers.

Provides the metric definitions shared by all function operators.
"""

import threading
from typing import Callable, Optional

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


class OperatorMetrics:
    """Function operator metrics."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize operator metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.registry = registry

        # Calls through any operator
        self.calls = Counter(
            "funcops_calls_total",
            "Total number of calls made through a function operator",
            ["operator", "function"],
            registry=registry,
        )

        # Failures turned into values by safely/possibly
        self.errors_captured = Counter(
            "funcops_errors_captured_total",
            "Total number of exceptions captured instead of raised",
            ["function", "error_type"],
            registry=registry,
        )

        # memoise hits/misses/evictions
        self.cache_events = Counter(
            "funcops_cache_events_total",
            "Memoisation cache events",
            ["function", "event"],
            registry=registry,
        )

        self.delay_seconds = Counter(
            "funcops_delay_seconds_total",
            "Total time spent sleeping before calls",
            ["function"],
            registry=registry,
        )

        self.progress_markers = Counter(
            "funcops_progress_markers_total",
            "Number of progress markers emitted",
            ["function"],
            registry=registry,
        )

        self.retries = Counter(
            "funcops_retries_total",
            "Number of retried calls",
            ["function"],
            registry=registry,
        )

        self.call_duration = Histogram(
            "funcops_call_duration_seconds",
            "Wall-clock duration of timed calls",
            ["function"],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 60.0],
            registry=registry,
        )


_metrics_instance: Optional[OperatorMetrics] = None
_metrics_lock = threading.Lock()


def get_metrics() -> OperatorMetrics:
    """Return the process-wide metrics registered on the default registry."""
    global _metrics_instance
    with _metrics_lock:
        if _metrics_instance is None:
            _metrics_instance = OperatorMetrics()
        return _metrics_instance


def resolve_metrics(metrics: Optional[OperatorMetrics]) -> Optional[OperatorMetrics]:
    """Pick the metrics an operator should record to.

    An explicit instance always wins; otherwise the global instance is used
    unless FUNCOPS_METRICS_ENABLED is false, in which case nothing is recorded.
    """
    if metrics is not None:
        return metrics

    from ..config import get_config

    if not get_config().metrics_enabled:
        return None
    return get_metrics()


def get_metrics_handler(registry: CollectorRegistry = REGISTRY) -> Callable[[], bytes]:
    """Get metrics handler for an HTTP endpoint.

    Returns:
        Function that generates Prometheus metrics output
    """

    def metrics_handler() -> bytes:
        return generate_latest(registry)

    return metrics_handler
