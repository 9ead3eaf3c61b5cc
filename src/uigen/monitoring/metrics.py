"""
Metrics Collection
Prometheus metrics for the generation pipeline
"""

import time
from contextlib import contextmanager
from typing import Callable

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, Summary, generate_latest


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for the UI generation service.
    """

    def __init__(self) -> None:
        # Generation metrics
        self.generation_requests_total = Counter(
            "uigen_generation_requests_total",
            "Total number of generation runs",
            ["outcome"],
        )
        self.generation_duration = Histogram(
            "uigen_generation_duration_seconds",
            "End-to-end generation duration in seconds",
            buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0],
        )
        self.validation_retries_total = Counter(
            "uigen_validation_retries_total",
            "Generator retries triggered by validation failures",
        )

        # LLM metrics
        self.llm_calls_total = Counter(
            "uigen_llm_calls_total",
            "Total number of LLM API calls",
            ["role", "status"],
        )
        self.llm_duration = Histogram(
            "uigen_llm_duration_seconds",
            "LLM API call duration in seconds",
            ["role"],
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
        )
        self.llm_tokens = Summary(
            "uigen_llm_tokens",
            "Tokens used per LLM call",
            ["role"],
        )

        # Preview metrics
        self.preview_faults_total = Counter(
            "uigen_preview_faults_total",
            "Preview compile and render faults",
            ["channel"],
        )

        # HTTP metrics
        self.http_requests_total = Counter(
            "uigen_http_requests_total",
            "Total number of API requests",
            ["route", "status"],
        )

        # Error metrics
        self.errors_total = Counter(
            "uigen_errors_total",
            "Total number of errors",
            ["error_type", "component"],
        )

        # System metrics
        self.uptime = Gauge(
            "uigen_uptime_seconds",
            "Service uptime in seconds",
        )
        self.start_time = time.time()

    def record_generation(self, outcome: str, duration: float) -> None:
        """Record a finished generation run (success, validation_error, generation_error)."""
        self.generation_requests_total.labels(outcome=outcome).inc()
        self.generation_duration.observe(duration)

    def record_validation_retry(self) -> None:
        """Record one generator retry."""
        self.validation_retries_total.inc()

    def record_llm_call(self, role: str, status: str, duration: float, tokens: int = 0) -> None:
        """Record an LLM API call."""
        self.llm_calls_total.labels(role=role, status=status).inc()
        self.llm_duration.labels(role=role).observe(duration)
        if tokens:
            self.llm_tokens.labels(role=role).observe(tokens)

    def record_preview_fault(self, channel: str) -> None:
        """Record a preview fault on the compile or render channel."""
        self.preview_faults_total.labels(channel=channel).inc()

    def record_http_request(self, route: str, status: int) -> None:
        """Record an API request."""
        self.http_requests_total.labels(route=route, status=str(status)).inc()

    def record_error(self, error_type: str, component: str) -> None:
        """Record an error."""
        self.errors_total.labels(error_type=error_type, component=component).inc()

    def update_uptime(self) -> None:
        """Update the uptime metric."""
        self.uptime.set(time.time() - self.start_time)

    @contextmanager
    def measure_duration(self, callback: Callable[[float], None]):
        """Context manager to measure operation duration."""
        start = time.time()
        try:
            yield
        finally:
            callback(time.time() - start)

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        self.update_uptime()
        return generate_latest()


METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST

# Global metrics collector instance
metrics_collector = MetricsCollector()
