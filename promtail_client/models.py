"""Log entry, stream and batch models."""

import datetime
from dataclasses import dataclass, field

from promtail_client.levels import LogLevel, parse_level


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass(frozen=True)
class LogEntry:
    line: str
    level: LogLevel = LogLevel.INFO
    timestamp: datetime.datetime = field(default_factory=_utc_now)


@dataclass
class Stream:
    """Entries sharing one canonical label string."""

    labels: str
    entries: list[LogEntry] = field(default_factory=list)


@dataclass
class Batch:
    streams: list[Stream] = field(default_factory=list)

    @property
    def entry_count(self) -> int:
        return sum(len(stream.entries) for stream in self.streams)


def create_log_entry(level: LogLevel, line: str) -> LogEntry:
    """Factory that stamps a new entry with the current UTC time.

    Raises TypeError if *line* is not a str, so unencodable entries never
    reach a batch.
    """
    if not isinstance(line, str):
        raise TypeError(f"line must be a str, got {type(line).__name__}")
    return LogEntry(line=line, level=parse_level(level))
