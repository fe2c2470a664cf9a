"""Metrics collector — thread-safe counters and histograms for batch shipping."""

import threading
import time
from collections import deque

# Batches kept for the size and latency percentiles.
HISTORY_SIZE = 1000


class MetricsCollector:
    """Collects and reports metrics about batch delivery."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._batches_sent: int = 0
        self._batches_failed: int = 0
        self._total_entries: int = 0
        self._dropped_entries: int = 0
        self._printed_entries: int = 0
        self._discarded_entries: int = 0
        self._total_bytes: int = 0
        self._batch_sizes: deque[int] = deque(maxlen=HISTORY_SIZE)
        self._send_times: deque[float] = deque(maxlen=HISTORY_SIZE)
        self._flush_triggers: dict = {"size": 0, "timer": 0, "shutdown": 0}
        self._failure_reasons: dict = {}
        self._start_time = time.monotonic()

    def record_batch(
        self,
        batch_size: int,
        bytes_sent: int,
        send_time_ms: float,
        trigger: str = "size",
    ) -> None:
        """Record a successfully delivered batch.

        Args:
            batch_size: Number of log entries in the batch.
            bytes_sent: Encoded payload size in bytes.
            send_time_ms: Time spent in delivery, retries included.
            trigger: What caused the flush: "size", "timer" or "shutdown".
        """
        with self._lock:
            self._batches_sent += 1
            self._total_entries += batch_size
            self._total_bytes += bytes_sent
            self._batch_sizes.append(batch_size)
            self._send_times.append(send_time_ms)
            self._flush_triggers[trigger] = self._flush_triggers.get(trigger, 0) + 1

    def record_failure(self, batch_size: int, reason: str, trigger: str = "size") -> None:
        """Record a batch that was dropped after encoding or delivery failed."""
        with self._lock:
            self._batches_failed += 1
            self._dropped_entries += batch_size
            self._failure_reasons[reason] = self._failure_reasons.get(reason, 0) + 1
            self._flush_triggers[trigger] = self._flush_triggers.get(trigger, 0) + 1

    def record_printed(self) -> None:
        with self._lock:
            self._printed_entries += 1

    def record_discarded(self) -> None:
        with self._lock:
            self._discarded_entries += 1

    def snapshot(self) -> dict:
        """Return a point-in-time snapshot of all collected metrics."""
        with self._lock:
            batch_sizes = list(self._batch_sizes)
            send_times = list(self._send_times)

            avg_batch = (
                sum(batch_sizes) / len(batch_sizes) if batch_sizes else 0.0
            )
            avg_send = (
                sum(send_times) / len(send_times) if send_times else 0.0
            )

            return {
                "batches_sent": self._batches_sent,
                "batches_failed": self._batches_failed,
                "total_entries": self._total_entries,
                "dropped_entries": self._dropped_entries,
                "printed_entries": self._printed_entries,
                "discarded_entries": self._discarded_entries,
                "total_bytes": self._total_bytes,
                "avg_batch_size": avg_batch,
                "p50_batch_size": self._percentile(batch_sizes, 50),
                "p95_batch_size": self._percentile(batch_sizes, 95),
                "avg_send_time_ms": avg_send,
                "p95_send_time_ms": self._percentile(send_times, 95),
                "flush_triggers": dict(self._flush_triggers),
                "failure_reasons": dict(self._failure_reasons),
                "uptime_seconds": time.monotonic() - self._start_time,
            }

    @staticmethod
    def _percentile(data: list, pct: float) -> float:
        """Interpolated percentile of *data* (0-100), or 0.0 if empty."""
        if not data:
            return 0.0

        sorted_data = sorted(data)
        n = len(sorted_data)

        if n == 1:
            return float(sorted_data[0])

        idx = (pct / 100) * (n - 1)
        lower = int(idx)
        upper = lower + 1
        fraction = idx - lower

        if upper >= n:
            return float(sorted_data[-1])

        return float(sorted_data[lower] + fraction * (sorted_data[upper] - sorted_data[lower]))
