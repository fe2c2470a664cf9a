"""Promtail client — public submission API in front of the dispatcher."""

import logging
import queue
import threading
from typing import Callable, Mapping

from promtail_client.config import ClientConfig
from promtail_client.dispatcher import Dispatcher, Transport
from promtail_client.errors import ClientClosedError
from promtail_client.labels import canonicalize
from promtail_client.levels import LogLevel
from promtail_client.metrics import MetricsCollector
from promtail_client.models import create_log_entry
from promtail_client.retry import RetryPolicy
from promtail_client.transport import HTTPTransport

logger = logging.getLogger(__name__)


class PromtailClient:
    """Ships log entries to a push endpoint in batches.

    ``submit`` only enqueues; a single dispatcher thread batches, encodes
    and delivers.  ``submit`` blocks only while the queue is full.  Delivery
    failures are logged by the dispatcher and never reach the caller.

    *transport* and *sink* may be injected; by default an HTTPTransport is
    built from the config and printed lines go to the ``promtail_client.sink``
    logger.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Transport | None = None,
        sink: Callable[[str], None] | None = None,
    ):
        self._config = config.validate()
        self._owns_transport = transport is None
        if transport is None:
            transport = HTTPTransport(
                config.push_url,
                RetryPolicy(
                    max_retries=config.max_retry,
                    min_wait=config.retry_min_wait,
                    max_wait=config.retry_max_wait,
                ),
                timeout=config.timeout,
            )
        self._transport = transport
        self._metrics = MetricsCollector()
        self._queue: queue.Queue = queue.Queue(maxsize=config.queue_size)
        self._dispatcher = Dispatcher(config, transport, self._queue, sink=sink, metrics=self._metrics)
        self._closed = False
        self._shutdown_lock = threading.Lock()
        self._dispatcher.start()
        logger.debug(
            "Client started: url=%s, batch_entries=%d, batch_wait=%.3fs",
            config.push_url,
            config.batch_entries_number,
            config.batch_wait,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def submit(self, labels: Mapping[str, str], level: LogLevel, line: str) -> None:
        """Queue one entry for shipping.

        *labels* may be a mapping or an already formatted label string, and
        *level* a LogLevel or a level name.  Raises ClientClosedError once
        shutdown has begun.
        """
        if self._closed or not self._dispatcher.is_alive():
            raise ClientClosedError("Client is shut down")
        entry = create_log_entry(level, line)
        self._queue.put((canonicalize(labels), entry))

    def debugf(self, fmt: str, *args, labels: Mapping[str, str] | None = None) -> None:
        self._logf(LogLevel.DEBUG, fmt, args, labels)

    def infof(self, fmt: str, *args, labels: Mapping[str, str] | None = None) -> None:
        self._logf(LogLevel.INFO, fmt, args, labels)

    def warnf(self, fmt: str, *args, labels: Mapping[str, str] | None = None) -> None:
        self._logf(LogLevel.WARN, fmt, args, labels)

    def errorf(self, fmt: str, *args, labels: Mapping[str, str] | None = None) -> None:
        self._logf(LogLevel.ERROR, fmt, args, labels)

    def shutdown(self) -> None:
        """Stop accepting entries, flush what is buffered, and wait for the dispatcher.

        Safe to call more than once; later calls return immediately.
        """
        with self._shutdown_lock:
            if self._closed:
                return
            self._closed = True

        self._dispatcher.stop()
        if self._owns_transport:
            self._transport.close()
        logger.info("Client metrics: %s", self._metrics.snapshot())

    def __enter__(self) -> "PromtailClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def closed(self) -> bool:
        return self._closed

    def _logf(self, level: LogLevel, fmt: str, args: tuple, labels: Mapping[str, str] | None) -> None:
        merged = dict(self._config.labels)
        if labels:
            merged.update(labels)
        self.submit(merged, level, fmt % args if args else fmt)
