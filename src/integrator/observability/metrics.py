"""In-process metrics for the integrator.

Counters and histograms are kept in memory and can be exported in the
Prometheus text exposition format, e.g. from an application's own
``/metrics`` handler.

Example:
    >>> from integrator.observability.metrics import get_metrics
    >>> metrics = get_metrics()
    >>> metrics.increment_counter("integrator_integrations_total", {"outcome": "success"})
    >>> metrics.get_counter("integrator_integrations_total", {"outcome": "success"})
    1.0
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import ClassVar

LabelKey = tuple[tuple[str, str], ...]

DEFAULT_LATENCY_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)


def _label_key(labels: dict[str, str] | None) -> LabelKey:
    return tuple(sorted((labels or {}).items()))


def _escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _format_labels(key: LabelKey, extra: tuple[str, str] | None = None) -> str:
    pairs = list(key)
    if extra is not None:
        pairs.append(extra)
    if not pairs:
        return ""
    return "{" + ",".join(f'{k}="{_escape_label_value(v)}"' for k, v in pairs) + "}"


@dataclass
class Counter:
    """A monotonically increasing counter, one value per label combination."""

    name: str
    help_text: str
    values: dict[LabelKey, float] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def increment(self, labels: dict[str, str] | None = None, value: float = 1.0) -> None:
        if value < 0:
            raise ValueError(f"Counter {self.name} cannot decrease (got {value})")
        key = _label_key(labels)
        with self._lock:
            self.values[key] = self.values.get(key, 0.0) + value

    def get(self, labels: dict[str, str] | None = None) -> float:
        with self._lock:
            return self.values.get(_label_key(labels), 0.0)

    def render(self) -> list[str]:
        lines = [f"# HELP {self.name} {self.help_text}", f"# TYPE {self.name} counter"]
        with self._lock:
            if not self.values:
                lines.append(f"{self.name} 0")
            for key, value in self.values.items():
                lines.append(f"{self.name}{_format_labels(key)} {value}")
        return lines


@dataclass
class _HistogramSeries:
    bucket_counts: list[float]
    total: float = 0.0
    count: float = 0.0


@dataclass
class Histogram:
    """Distribution of observed values with fixed upper-bound buckets."""

    name: str
    help_text: str
    buckets: tuple[float, ...] = DEFAULT_LATENCY_BUCKETS
    series: dict[LabelKey, _HistogramSeries] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def observe(self, value: float, labels: dict[str, str] | None = None) -> None:
        key = _label_key(labels)
        with self._lock:
            data = self.series.get(key)
            if data is None:
                data = _HistogramSeries(bucket_counts=[0.0] * len(self.buckets))
                self.series[key] = data
            for i, bound in enumerate(self.buckets):
                if value <= bound:
                    data.bucket_counts[i] += 1.0
            data.total += value
            data.count += 1.0

    def get_count(self, labels: dict[str, str] | None = None) -> float:
        with self._lock:
            data = self.series.get(_label_key(labels))
            return data.count if data is not None else 0.0

    def get_sum(self, labels: dict[str, str] | None = None) -> float:
        with self._lock:
            data = self.series.get(_label_key(labels))
            return data.total if data is not None else 0.0

    def render(self) -> list[str]:
        lines = [f"# HELP {self.name} {self.help_text}", f"# TYPE {self.name} histogram"]
        with self._lock:
            if not self.series:
                for bound in self.buckets:
                    lines.append(f'{self.name}_bucket{{le="{bound}"}} 0')
                lines.append(f'{self.name}_bucket{{le="+Inf"}} 0')
                lines.append(f"{self.name}_sum 0")
                lines.append(f"{self.name}_count 0")
            for key, data in self.series.items():
                # bucket counts are already cumulative: observe() fills every bound >= value
                for bound, bucket_count in zip(self.buckets, data.bucket_counts):
                    lines.append(
                        f"{self.name}_bucket{_format_labels(key, ('le', str(bound)))} {bucket_count}"
                    )
                lines.append(f"{self.name}_bucket{_format_labels(key, ('le', '+Inf'))} {data.count}")
                lines.append(f"{self.name}_sum{_format_labels(key)} {data.total}")
                lines.append(f"{self.name}_count{_format_labels(key)} {data.count}")
        return lines


class MetricsCollector:
    """Thread-safe registry of counters and histograms.

    Unknown metric names are ignored by ``increment_counter`` and
    ``observe_histogram``; register them first.
    """

    DEFAULT_COUNTERS: ClassVar[dict[str, str]] = {
        "integrator_integrations_total": "Completed integrations by outcome",
        "integrator_failures_total": "Failed integrations by failure kind",
        "integrator_duplicate_deliveries_total": "Transport deliveries dropped after the first",
        "integrator_transport_requests_total": "Requests executed by bundled transports",
    }

    DEFAULT_HISTOGRAMS: ClassVar[dict[str, str]] = {
        "integrator_integration_duration_seconds": "Time from integrate() to delivery",
    }

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters = {
            name: Counter(name=name, help_text=help_text)
            for name, help_text in self.DEFAULT_COUNTERS.items()
        }
        self._histograms = {
            name: Histogram(name=name, help_text=help_text)
            for name, help_text in self.DEFAULT_HISTOGRAMS.items()
        }
        self._start_time = time.time()

    def register_counter(self, name: str, help_text: str) -> None:
        with self._lock:
            self._counters.setdefault(name, Counter(name=name, help_text=help_text))

    def register_histogram(
        self, name: str, help_text: str, buckets: tuple[float, ...] = DEFAULT_LATENCY_BUCKETS
    ) -> None:
        with self._lock:
            self._histograms.setdefault(
                name, Histogram(name=name, help_text=help_text, buckets=buckets)
            )

    def increment_counter(
        self, name: str, labels: dict[str, str] | None = None, value: float = 1.0
    ) -> None:
        with self._lock:
            counter = self._counters.get(name)
        if counter is not None:
            counter.increment(labels, value)

    def observe_histogram(
        self, name: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        with self._lock:
            histogram = self._histograms.get(name)
        if histogram is not None:
            histogram.observe(value, labels)

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> float:
        with self._lock:
            counter = self._counters.get(name)
        return counter.get(labels) if counter is not None else 0.0

    def get_histogram_count(self, name: str, labels: dict[str, str] | None = None) -> float:
        with self._lock:
            histogram = self._histograms.get(name)
        return histogram.get_count(labels) if histogram is not None else 0.0

    def export_prometheus(self) -> str:
        """Export all metrics in Prometheus text format."""
        with self._lock:
            counters = list(self._counters.values())
            histograms = list(self._histograms.values())
        lines: list[str] = []
        for counter in counters:
            lines.extend(counter.render())
        for histogram in histograms:
            lines.extend(histogram.render())
        lines.append("# HELP integrator_process_uptime_seconds Time since collector creation")
        lines.append("# TYPE integrator_process_uptime_seconds gauge")
        lines.append(f"integrator_process_uptime_seconds {time.time() - self._start_time:.3f}")
        return "\n".join(lines) + "\n"

    def reset(self) -> None:
        """Reset all metrics to zero. Useful for testing."""
        with self._lock:
            for counter in self._counters.values():
                with counter._lock:
                    counter.values.clear()
            for histogram in self._histograms.values():
                with histogram._lock:
                    histogram.series.clear()


_metrics_collector: MetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics() -> MetricsCollector:
    """Get the process-wide metrics collector."""
    global _metrics_collector
    with _collector_lock:
        if _metrics_collector is None:
            _metrics_collector = MetricsCollector()
        return _metrics_collector


def reset_metrics() -> None:
    """Reset the process-wide metrics collector. Useful for testing."""
    with _collector_lock:
        collector = _metrics_collector
    if collector is not None:
        collector.reset()
