"""Unit tests for the Prometheus metrics collector."""

from prometheus_client import CollectorRegistry

from virology.infrastructure.monitoring.metrics import (
    MetricsCollector,
    generate_metrics,
    get_metrics_collector,
    reset_metrics_collector,
)


def _sample(registry: CollectorRegistry, name: str, **labels: str) -> float | None:
    return registry.get_sample_value(
        name, {"service": "virology-api", "environment": "test", **labels}
    )


class TestMetricsCollector:
    """Tests for MetricsCollector counters."""

    def test_token_lifecycle_counters(self, monkeypatch) -> None:  # type: ignore[no-untyped-def]
        monkeypatch.setenv("ENVIRONMENT", "test")
        registry = CollectorRegistry()
        collector = MetricsCollector(registry=registry)

        collector.increment_test_orders_created("ORDER")
        collector.increment_test_orders_created("ORDER")
        collector.increment_token_collisions()
        collector.increment_token_space_exhausted()
        collector.increment_cta_exchanges("CONSUMED")
        collector.increment_result_lookups("PENDING")
        collector.increment_test_results_posted("POSTED")

        assert (
            _sample(registry, "virology_test_orders_created_total", request_type="ORDER")
            == 2.0
        )
        assert _sample(registry, "virology_token_collisions_total") == 1.0
        assert _sample(registry, "virology_token_space_exhausted_total") == 1.0
        assert (
            _sample(registry, "virology_cta_exchanges_total", outcome="CONSUMED") == 1.0
        )
        assert (
            _sample(registry, "virology_result_lookups_total", outcome="PENDING") == 1.0
        )
        assert (
            _sample(registry, "virology_test_results_posted_total", outcome="POSTED")
            == 1.0
        )

    def test_http_metrics(self, monkeypatch) -> None:  # type: ignore[no-untyped-def]
        monkeypatch.setenv("ENVIRONMENT", "test")
        registry = CollectorRegistry()
        collector = MetricsCollector(registry=registry)

        collector.increment_requests("POST", "/virology-test/cta-exchange", "400")
        collector.increment_failed_requests(
            "POST", "/virology-test/cta-exchange", "400", "bad_request"
        )
        collector.observe_request_duration("POST", "/virology-test/cta-exchange", 1.2)

        assert (
            _sample(
                registry,
                "http_requests_total",
                method="POST",
                endpoint="/virology-test/cta-exchange",
                status="400",
            )
            == 1.0
        )
        assert (
            _sample(
                registry,
                "http_request_duration_seconds_count",
                method="POST",
                endpoint="/virology-test/cta-exchange",
            )
            == 1.0
        )


class TestSingleton:
    """Tests for the process-wide collector."""

    def test_singleton_and_reset(self) -> None:
        first = get_metrics_collector()
        assert get_metrics_collector() is first

        reset_metrics_collector()
        assert get_metrics_collector() is not first

    def test_generate_metrics_exposition(self) -> None:
        collector = get_metrics_collector()
        collector.record_startup("virology-api")
        collector.increment_token_collisions()

        output = generate_metrics().decode()

        assert "virology_token_collisions_total" in output
        assert "uptime_seconds" in output
