"""
Performance Monitoring
Prometheus-based metrics collection for the generation service
"""

from uigen.core.tracing import trace_operation, trace_operation_async
from .metrics import METRICS_CONTENT_TYPE, MetricsCollector, metrics_collector

__all__ = [
    "METRICS_CONTENT_TYPE",
    "MetricsCollector",
    "metrics_collector",
    "trace_operation",
    "trace_operation_async",
]
