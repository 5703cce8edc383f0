"""
In-process metrics for pumpcurve
Counts quotes, account fetches and decode failures, and samples RPC latency
"""

import statistics
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional, Tuple


LabelKey = Tuple[str, Tuple[Tuple[str, str], ...]]


@dataclass
class LatencySummary:
    """Summary of recorded latencies for one operation (milliseconds)"""
    operation: str
    count: int
    p50: float
    p99: float
    mean: float
    max: float


class MetricsCollector:
    """Collects counters and latency samples"""

    def __init__(self, enable_histogram: bool = True, max_samples: int = 10_000):
        """
        Args:
            enable_histogram: Whether latency samples are kept
            max_samples: Samples retained per operation (oldest dropped first)
        """
        self.enable_histogram = enable_histogram
        self._latencies: Dict[str, Deque[float]] = defaultdict(lambda: deque(maxlen=max_samples))
        self._counters: Dict[LabelKey, int] = defaultdict(int)

    @staticmethod
    def _key(metric_name: str, labels: Optional[Dict[str, str]]) -> LabelKey:
        return metric_name, tuple(sorted((labels or {}).items()))

    def increment_counter(
        self,
        metric_name: str,
        value: int = 1,
        labels: Optional[Dict[str, str]] = None
    ) -> None:
        """Increment a counter, optionally scoped by labels"""
        self._counters[self._key(metric_name, labels)] += value

    def get_counter(self, metric_name: str, labels: Optional[Dict[str, str]] = None) -> int:
        """Current counter value (0 if never incremented)"""
        return self._counters.get(self._key(metric_name, labels), 0)

    def record_latency(
        self,
        operation: str,
        latency_ms: float,
        labels: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Record one latency sample and bump the operation's call counter

        Args:
            operation: Operation name (e.g. "http_rpc_call")
            latency_ms: Latency in milliseconds
            labels: Optional labels applied to the call counter
        """
        if self.enable_histogram:
            self._latencies[operation].append(latency_ms)
        self.increment_counter(f"{operation}_count", labels=labels)

    def get_latency_summary(self, operation: str) -> Optional[LatencySummary]:
        """Summarise latencies for an operation, None when nothing was recorded"""
        samples = sorted(self._latencies.get(operation, ()))
        if not samples:
            return None

        return LatencySummary(
            operation=operation,
            count=len(samples),
            p50=self._percentile(samples, 50),
            p99=self._percentile(samples, 99),
            mean=statistics.mean(samples),
            max=samples[-1],
        )

    def export_metrics(self) -> Dict:
        """Export counters and latency summaries as a JSON-serializable dict"""
        counters = {}
        for (name, labels), value in self._counters.items():
            if labels:
                name = name + "{" + ",".join(f"{k}={v}" for k, v in labels) + "}"
            counters[name] = value

        latencies = {}
        for operation in self._latencies:
            summary = self.get_latency_summary(operation)
            if summary:
                latencies[operation] = {
                    "count": summary.count,
                    "p50": summary.p50,
                    "p99": summary.p99,
                    "mean": summary.mean,
                    "max": summary.max,
                }

        return {"counters": counters, "latencies": latencies}

    def reset(self) -> None:
        """Drop all recorded data (used by tests)"""
        self._latencies.clear()
        self._counters.clear()

    @staticmethod
    def _percentile(sorted_data: List[float], percentile: float) -> float:
        """Linear-interpolated percentile over pre-sorted data"""
        if len(sorted_data) == 1:
            return sorted_data[0]

        index = (percentile / 100) * (len(sorted_data) - 1)
        lower = int(index)
        upper = min(lower + 1, len(sorted_data) - 1)
        weight = index - lower
        return sorted_data[lower] * (1 - weight) + sorted_data[upper] * weight


class LatencyTimer:
    """Context manager measuring an operation's wall time"""

    def __init__(self, metrics: MetricsCollector, operation: str, labels: Optional[Dict[str, str]] = None):
        self.metrics = metrics
        self.operation = operation
        self.labels = labels
        self.start_time: Optional[float] = None
        self.latency_ms: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            self.latency_ms = (time.perf_counter() - self.start_time) * 1000
            self.metrics.record_latency(self.operation, self.latency_ms, self.labels)


_global_metrics: Optional[MetricsCollector] = None


def get_metrics() -> MetricsCollector:
    """Get the process-wide metrics collector, creating it on first use"""
    global _global_metrics
    if _global_metrics is None:
        _global_metrics = MetricsCollector()
    return _global_metrics


def init_metrics(enable_histogram: bool = True) -> MetricsCollector:
    """Replace the process-wide metrics collector"""
    global _global_metrics
    _global_metrics = MetricsCollector(enable_histogram)
    return _global_metrics
