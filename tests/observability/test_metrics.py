"""Tests for the in-process metrics collector."""

import threading

import pytest

from integrator.observability.metrics import (
    Counter,
    Histogram,
    MetricsCollector,
    get_metrics,
    reset_metrics,
)


class TestCounter:
    def test_counter_increment_with_labels(self) -> None:
        counter = Counter(name="test_total", help_text="Test")
        counter.increment({"outcome": "success"})
        counter.increment({"outcome": "success"}, 2.0)
        counter.increment({"outcome": "failure"})

        assert counter.get({"outcome": "success"}) == 3.0
        assert counter.get({"outcome": "failure"}) == 1.0
        assert counter.get({"outcome": "other"}) == 0.0

    def test_counter_rejects_negative_increment(self) -> None:
        counter = Counter(name="test_total", help_text="Test")

        with pytest.raises(ValueError, match="cannot decrease"):
            counter.increment(value=-1.0)


class TestHistogram:
    def test_histogram_buckets_are_cumulative(self) -> None:
        histogram = Histogram(name="test_seconds", help_text="Test", buckets=(0.1, 1.0))
        histogram.observe(0.05)
        histogram.observe(0.5)
        histogram.observe(5.0)

        lines = histogram.render()

        assert 'test_seconds_bucket{le="0.1"} 1.0' in lines
        assert 'test_seconds_bucket{le="1.0"} 2.0' in lines
        assert 'test_seconds_bucket{le="+Inf"} 3.0' in lines
        assert histogram.get_count() == 3.0
        assert histogram.get_sum() == pytest.approx(5.55)


class TestMetricsCollector:
    def test_collector_has_default_metrics(self) -> None:
        output = MetricsCollector().export_prometheus()

        for name in (
            "integrator_integrations_total",
            "integrator_failures_total",
            "integrator_duplicate_deliveries_total",
            "integrator_transport_requests_total",
            "integrator_integration_duration_seconds",
            "integrator_process_uptime_seconds",
        ):
            assert f"# TYPE {name}" in output

    def test_unknown_metric_is_ignored(self) -> None:
        collector = MetricsCollector()
        collector.increment_counter("unknown_total")
        collector.observe_histogram("unknown_seconds", 1.0)

        assert collector.get_counter("unknown_total") == 0.0
        assert collector.get_histogram_count("unknown_seconds") == 0.0

    def test_register_custom_metrics(self) -> None:
        collector = MetricsCollector()
        collector.register_counter("custom_total", "Custom")
        collector.register_histogram("custom_seconds", "Custom", buckets=(1.0,))

        collector.increment_counter("custom_total", {"a": "b"})
        collector.observe_histogram("custom_seconds", 0.5)

        assert collector.get_counter("custom_total", {"a": "b"}) == 1.0
        assert collector.get_histogram_count("custom_seconds") == 1.0

    def test_label_values_are_escaped(self) -> None:
        collector = MetricsCollector()
        collector.increment_counter("integrator_failures_total", {"kind": 'a"b'})

        assert 'integrator_failures_total{kind="a\\"b"} 1.0' in collector.export_prometheus()

    def test_reset(self) -> None:
        collector = MetricsCollector()
        collector.increment_counter("integrator_integrations_total", {"outcome": "success"})
        collector.reset()

        assert collector.get_counter("integrator_integrations_total", {"outcome": "success"}) == 0.0

    def test_collector_thread_safety(self) -> None:
        collector = MetricsCollector()

        def work() -> None:
            for _ in range(1000):
                collector.increment_counter("integrator_integrations_total")

        threads = [threading.Thread(target=work) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert collector.get_counter("integrator_integrations_total") == 8000.0


class TestGlobalCollector:
    def test_get_metrics_returns_singleton(self) -> None:
        assert get_metrics() is get_metrics()

    def test_reset_metrics_clears_data(self) -> None:
        get_metrics().increment_counter("integrator_duplicate_deliveries_total")
        reset_metrics()

        assert get_metrics().get_counter("integrator_duplicate_deliveries_total") == 0.0
