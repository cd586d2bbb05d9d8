"""Metrics module using Prometheus."""

from .prometheus_metrics import OperatorMetrics, get_metrics, get_metrics_handler, resolve_metrics

__all__ = ["OperatorMetrics", "get_metrics", "get_metrics_handler", "resolve_metrics"]
