"""Dispatcher loop — the single worker that owns the batch being built.

The loop waits on one ``queue.get`` whose timeout is the time left until the
next flush deadline, so queue arrival, timer expiry and the shutdown sentinel
all wake the same wait point.  Flushing runs synchronously on this thread.
"""

import enum
import logging
import queue
import threading
import time
from typing import Callable, Protocol

from promtail_client.accumulator import BatchAccumulator
from promtail_client.config import ClientConfig
from promtail_client.encoder import encode_batch
from promtail_client.errors import DeliveryError, EncodingError
from promtail_client.metrics import MetricsCollector
from promtail_client.models import LogEntry

logger = logging.getLogger(__name__)
sink_logger = logging.getLogger("promtail_client.sink")

# Queued after the last entry to request shutdown.
SHUTDOWN = object()


class Transport(Protocol):
    def deliver(self, payload: bytes) -> None: ...


class DispatcherState(enum.Enum):
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


def log_sink(line: str) -> None:
    """Default print sink: one INFO record per entry line."""
    sink_logger.info(line)


class Dispatcher:
    """Consumes ``(labels, LogEntry)`` pairs from *entries* and ships batches."""

    def __init__(
        self,
        config: ClientConfig,
        transport: Transport,
        entries: queue.Queue,
        sink: Callable[[str], None] | None = None,
        metrics: MetricsCollector | None = None,
    ):
        self._config = config
        self._transport = transport
        self._queue = entries
        self._sink = sink or log_sink
        self._metrics = metrics or MetricsCollector()
        self._accumulator = BatchAccumulator()
        self._state = DispatcherState.RUNNING
        self._sequence = 0
        self._thread = threading.Thread(target=self._run, name="promtail-dispatcher", daemon=True)

    @property
    def state(self) -> DispatcherState:
        return self._state

    @property
    def pending_count(self) -> int:
        return self._accumulator.size

    def start(self) -> None:
        self._thread.start()

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def stop(self) -> None:
        """Queue the shutdown sentinel and wait for the final flush."""
        if self._thread.is_alive():
            self._queue.put(SHUTDOWN)
            self._thread.join()

    # ------------------------------------------------------------------
    # Worker thread
    # ------------------------------------------------------------------

    def _run(self) -> None:
        batch_wait = self._config.batch_wait
        deadline = time.monotonic() + batch_wait
        try:
            while self._state is DispatcherState.RUNNING:
                now = time.monotonic()
                if now >= deadline:
                    if self._accumulator.size:
                        self._flush("timer")
                    deadline = time.monotonic() + batch_wait
                    continue

                try:
                    item = self._queue.get(timeout=deadline - now)
                except queue.Empty:
                    continue

                if item is SHUTDOWN:
                    self._state = DispatcherState.DRAINING
                    break

                labels, entry = item
                if self._handle_entry(labels, entry):
                    deadline = time.monotonic() + batch_wait

            if self._accumulator.size:
                self._flush("shutdown")
        finally:
            self._state = DispatcherState.STOPPED
            logger.debug("Dispatcher stopped")

    def _handle_entry(self, labels: str, entry: LogEntry) -> bool:
        """Gate *entry* on the print and send levels.

        Returns True when the entry completed a batch and it was flushed.
        """
        printed = entry.level >= self._config.print_level
        if printed:
            try:
                self._sink(entry.line)
            except Exception:
                logger.exception("Print sink failed for entry")
            else:
                self._metrics.record_printed()

        if entry.level < self._config.send_level:
            if not printed:
                self._metrics.record_discarded()
            return False

        self._accumulator.append(labels, entry)
        if self._accumulator.size >= self._config.batch_entries_number:
            self._flush("size")
            return True
        return False

    def _flush(self, trigger: str) -> None:
        """Encode and deliver the current batch; failures are logged and the batch dropped."""
        batch = self._accumulator.drain()
        count = batch.entry_count
        self._sequence += 1
        seq = self._sequence

        try:
            payload = encode_batch(batch)
        except EncodingError as exc:
            logger.error("Dropping batch #%d of %d entries, unable to encode: %s", seq, count, exc)
            self._metrics.record_failure(count, "encoding", trigger)
            return

        start = time.monotonic()
        try:
            self._transport.deliver(payload)
        except DeliveryError as exc:
            logger.error("Dropping batch #%d of %d entries, delivery failed: %s", seq, count, exc)
            self._metrics.record_failure(count, "delivery", trigger)
            return
        except Exception:
            logger.exception("Dropping batch #%d of %d entries, transport raised", seq, count)
            self._metrics.record_failure(count, "transport", trigger)
            return
        elapsed_ms = (time.monotonic() - start) * 1000

        self._metrics.record_batch(
            batch_size=count,
            bytes_sent=len(payload),
            send_time_ms=elapsed_ms,
            trigger=trigger,
        )
        logger.info(
            "Sent batch #%d of %d entries in %d stream(s) (%d bytes, trigger=%s)",
            seq,
            count,
            len(batch.streams),
            len(payload),
            trigger,
        )
