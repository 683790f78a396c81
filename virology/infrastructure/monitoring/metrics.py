"""Prometheus metrics infrastructure.

Operational metrics for the virology token service: HTTP latency and
error rates, plus counters for the token lifecycle so collisions and
token space exhaustion can be alerted on.

Labels: service, environment on every metric.
"""

import os
import threading
import time

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Content type for Prometheus metrics endpoint
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Thread lock for singleton initialization
_collector_lock = threading.Lock()

# Histogram buckets for request duration (10ms to 10s). The exchange
# floor sits at 1s, so the buckets straddle it.
DEFAULT_HISTOGRAM_BUCKETS = (0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 1.5, 2.5, 5.0, 10.0)


class MetricsCollector:
    """Collects and manages operational Prometheus metrics.

    Attributes:
        uptime_seconds: Gauge tracking seconds since service start.
        http_request_duration_seconds: Histogram for request latency.
        http_requests_total: Counter for all HTTP requests.
        http_requests_failed_total: Counter for failed requests (4xx, 5xx).
        test_orders_created_total: Orders created, by request type.
        token_collisions_total: Conditional creates rejected as duplicates.
        token_space_exhausted_total: Orders abandoned after the retry budget.
        result_lookups_total: Polling outcomes, by status.
        cta_exchanges_total: Exchange outcomes, by status.
        test_results_posted_total: Result posting outcomes.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics collector.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self.histogram_buckets = DEFAULT_HISTOGRAM_BUCKETS
        self.startup_times: dict[str, float] = {}

        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "virology-api")

        base_labels = ["service", "environment"]

        self.uptime_seconds = Gauge(
            name="uptime_seconds",
            documentation="Seconds since service start",
            labelnames=base_labels,
            registry=self._registry,
        )

        self.http_request_duration_seconds = Histogram(
            name="http_request_duration_seconds",
            documentation="HTTP request duration in seconds",
            labelnames=[*base_labels, "method", "endpoint"],
            buckets=self.histogram_buckets,
            registry=self._registry,
        )

        self.http_requests_total = Counter(
            name="http_requests_total",
            documentation="Total HTTP requests",
            labelnames=[*base_labels, "method", "endpoint", "status"],
            registry=self._registry,
        )

        self.http_requests_failed_total = Counter(
            name="http_requests_failed_total",
            documentation="Total failed HTTP requests (4xx, 5xx)",
            labelnames=[*base_labels, "method", "endpoint", "status", "error_type"],
            registry=self._registry,
        )

        self.test_orders_created_total = Counter(
            name="virology_test_orders_created_total",
            documentation="Test orders created",
            labelnames=[*base_labels, "request_type"],
            registry=self._registry,
        )

        self.token_collisions_total = Counter(
            name="virology_token_collisions_total",
            documentation="Test order creates rejected because a token already existed",
            labelnames=base_labels,
            registry=self._registry,
        )

        # Any increment here should page: the token space or store is broken
        self.token_space_exhausted_total = Counter(
            name="virology_token_space_exhausted_total",
            documentation="Test orders abandoned after exhausting token retries",
            labelnames=base_labels,
            registry=self._registry,
        )

        self.result_lookups_total = Counter(
            name="virology_result_lookups_total",
            documentation="Test result polling outcomes",
            labelnames=[*base_labels, "outcome"],
            registry=self._registry,
        )

        self.cta_exchanges_total = Counter(
            name="virology_cta_exchanges_total",
            documentation="CTA token exchange outcomes",
            labelnames=[*base_labels, "outcome"],
            registry=self._registry,
        )

        self.test_results_posted_total = Counter(
            name="virology_test_results_posted_total",
            documentation="Test result posting outcomes",
            labelnames=[*base_labels, "outcome"],
            registry=self._registry,
        )

    def _labels(self) -> dict[str, str]:
        return {"service": self._service_name, "environment": self._environment}

    def observe_request_duration(
        self, method: str, endpoint: str, duration: float
    ) -> None:
        """Record a request duration observation.

        Args:
            method: HTTP method (GET, POST, etc.).
            endpoint: Request endpoint path.
            duration: Request duration in seconds.
        """
        self.http_request_duration_seconds.labels(
            **self._labels(), method=method, endpoint=endpoint
        ).observe(duration)

    def increment_requests(self, method: str, endpoint: str, status: str) -> None:
        self.http_requests_total.labels(
            **self._labels(), method=method, endpoint=endpoint, status=status
        ).inc()

    def increment_failed_requests(
        self, method: str, endpoint: str, status: str, error_type: str = "http_error"
    ) -> None:
        self.http_requests_failed_total.labels(
            **self._labels(),
            method=method,
            endpoint=endpoint,
            status=status,
            error_type=error_type,
        ).inc()

    def increment_test_orders_created(self, request_type: str) -> None:
        self.test_orders_created_total.labels(
            **self._labels(), request_type=request_type
        ).inc()

    def increment_token_collisions(self) -> None:
        self.token_collisions_total.labels(**self._labels()).inc()

    def increment_token_space_exhausted(self) -> None:
        self.token_space_exhausted_total.labels(**self._labels()).inc()

    def increment_result_lookups(self, outcome: str) -> None:
        self.result_lookups_total.labels(**self._labels(), outcome=outcome).inc()

    def increment_cta_exchanges(self, outcome: str) -> None:
        self.cta_exchanges_total.labels(**self._labels(), outcome=outcome).inc()

    def increment_test_results_posted(self, outcome: str) -> None:
        self.test_results_posted_total.labels(**self._labels(), outcome=outcome).inc()

    def record_startup(self, service: str) -> None:
        """Record service startup time.

        Args:
            service: Service name.
        """
        self.startup_times[service] = time.time()

    def update_uptime_gauges(self) -> None:
        """Update uptime gauges for all registered services."""
        for service, started in self.startup_times.items():
            self.uptime_seconds.labels(
                service=service, environment=self._environment
            ).set(time.time() - started)

    def get_registry(self) -> CollectorRegistry:
        return self._registry


# Singleton instance
_metrics_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get the singleton MetricsCollector instance (thread-safe).

    Uses double-checked locking for thread-safe lazy initialization.

    Returns:
        The global MetricsCollector instance.
    """
    global _metrics_collector
    if _metrics_collector is None:
        with _collector_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()
    return _metrics_collector


def generate_metrics() -> bytes:
    """Generate Prometheus metrics in exposition format.

    Returns:
        Metrics in Prometheus text format as bytes.
    """
    collector = get_metrics_collector()
    collector.update_uptime_gauges()
    return generate_latest(collector.get_registry())


def reset_metrics_collector() -> None:
    """Reset the singleton collector (for testing only)."""
    global _metrics_collector
    with _collector_lock:
        _metrics_collector = None
