"""
Metrics collection for feed monitoring.

Tracks counters, message handling latency and session statistics
with in-memory storage.
"""

import time
from collections import deque
from dataclasses import dataclass


@dataclass
class LatencyStats:
    """Aggregated latency statistics."""

    min_us: int = 0
    max_us: int = 0
    avg_us: float = 0.0
    p50_us: int = 0
    p95_us: int = 0
    p99_us: int = 0
    count: int = 0


@dataclass
class FeedStats:
    """Session statistics derived from counters."""

    messages_received: int = 0
    decode_errors: int = 0
    opportunities_upserted: int = 0
    opportunities_evicted: int = 0
    alerts_high_profit: int = 0
    alerts_standard: int = 0
    connection_attempts: int = 0
    reconnects_scheduled: int = 0

    @property
    def alerts_total(self) -> int:
        """Total alerts raised."""
        return self.alerts_high_profit + self.alerts_standard

    @property
    def decode_error_rate(self) -> float:
        """Share of received units that were dropped."""
        if self.messages_received == 0:
            return 0.0
        return self.decode_errors / self.messages_received


class MetricsCollector:
    """
    Collects and aggregates feed metrics.

    Features:
    - Rolling window latency tracking
    - Named counters
    - Per-minute rates
    """

    def __init__(
        self,
        latency_window_size: int = 1000,
    ) -> None:
        """
        Initialize metrics collector.

        Args:
            latency_window_size: Number of samples to keep for latency stats.
        """
        self._window_size = latency_window_size
        self._latencies: dict[str, deque[int]] = {}
        self._counters: dict[str, int] = {}
        self._start_time = time.time()

    def record_latency(self, name: str, latency_us: int) -> None:
        """
        Record a latency measurement.

        Args:
            name: Metric name (e.g., "message_handling").
            latency_us: Latency in microseconds.
        """
        if name not in self._latencies:
            self._latencies[name] = deque(maxlen=self._window_size)

        self._latencies[name].append(latency_us)

    def increment_counter(self, name: str, value: int = 1) -> None:
        """
        Increment a counter.

        Args:
            name: Counter name.
            value: Amount to increment.
        """
        self._counters[name] = self._counters.get(name, 0) + value

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        return self._counters.get(name, 0)

    def get_latency_stats(self, name: str) -> LatencyStats:
        """
        Get latency statistics for a metric.

        Args:
            name: Metric name.

        Returns:
            LatencyStats with aggregated values.
        """
        samples = self._latencies.get(name)
        if not samples:
            return LatencyStats()

        sorted_samples = sorted(samples)
        n = len(sorted_samples)

        return LatencyStats(
            min_us=sorted_samples[0],
            max_us=sorted_samples[-1],
            avg_us=sum(sorted_samples) / n,
            p50_us=sorted_samples[n // 2],
            p95_us=sorted_samples[int(n * 0.95)],
            p99_us=sorted_samples[int(n * 0.99)] if n > 1 else sorted_samples[-1],
            count=n,
        )

    def get_all_latency_stats(self) -> dict[str, LatencyStats]:
        """Get latency stats for all metrics."""
        return {name: self.get_latency_stats(name) for name in self._latencies}

    @property
    def feed_stats(self) -> FeedStats:
        """Get session statistics."""
        return FeedStats(
            messages_received=self.get_counter("messages_received"),
            decode_errors=self.get_counter("decode_errors"),
            opportunities_upserted=self.get_counter("opportunities_upserted"),
            opportunities_evicted=self.get_counter("opportunities_evicted"),
            alerts_high_profit=self.get_counter("alerts_high_profit"),
            alerts_standard=self.get_counter("alerts_standard"),
            connection_attempts=self.get_counter("connection_attempts"),
            reconnects_scheduled=self.get_counter("reconnects_scheduled"),
        )

    @property
    def uptime_seconds(self) -> float:
        """Get uptime in seconds."""
        return time.time() - self._start_time

    def get_rates(self) -> dict[str, float]:
        """
        Calculate per-minute rates for counters.

        Returns:
            Dict of counter -> rate per minute.
        """
        minutes = self.uptime_seconds / 60
        if minutes == 0:
            return {}

        return {
            f"{name}_per_min": count / minutes
            for name, count in self._counters.items()
        }

    def to_dict(self) -> dict[str, object]:
        """
        Export all metrics as a dict.

        Returns:
            Dict representation of all metrics.
        """
        return {
            "uptime_seconds": self.uptime_seconds,
            "counters": dict(self._counters),
            "latencies": {
                name: {
                    "min": stats.min_us,
                    "max": stats.max_us,
                    "avg": stats.avg_us,
                    "p50": stats.p50_us,
                    "p99": stats.p99_us,
                    "count": stats.count,
                }
                for name, stats in self.get_all_latency_stats().items()
            },
        }

    def reset(self) -> None:
        """Reset all metrics."""
        self._latencies.clear()
        self._counters.clear()
        self._start_time = time.time()
