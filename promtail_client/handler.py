"""Logging handler that ships stdlib log records through a PromtailClient."""

import logging
from typing import Mapping

from promtail_client.levels import LogLevel


def level_for_record(levelno: int) -> LogLevel:
    """Map a stdlib logging level number onto LogLevel."""
    if levelno >= logging.ERROR:
        return LogLevel.ERROR
    if levelno >= logging.WARNING:
        return LogLevel.WARN
    if levelno >= logging.INFO:
        return LogLevel.INFO
    return LogLevel.DEBUG


class PromtailHandler(logging.Handler):
    """Submit every record to *client* with static labels plus logger and level.

    The handler never closes the client; its owner calls ``shutdown``.
    """

    def __init__(self, client, labels: Mapping[str, str] | None = None, level: int = logging.NOTSET):
        super().__init__(level)
        self._client = client
        self._labels = dict(labels or {})

    def emit(self, record: logging.LogRecord) -> None:
        # The client's own records would feed back into the dispatcher thread.
        if record.name == "promtail_client" or record.name.startswith("promtail_client."):
            return
        try:
            labels = {
                **self._labels,
                "logger": record.name,
                "level": record.levelname.lower(),
            }
            self._client.submit(labels, level_for_record(record.levelno), self.format(record))
        except Exception:
            self.handleError(record)
