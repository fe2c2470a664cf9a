"""Severity levels used for send/print gating."""

from enum import IntEnum


class LogLevel(IntEnum):
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    # Highest level; as a threshold it disables sending or printing.
    DISABLE = 4


_ALIASES = {
    "WARNING": LogLevel.WARN,
    "CRITICAL": LogLevel.ERROR,
    "FATAL": LogLevel.ERROR,
    "OFF": LogLevel.DISABLE,
    "NONE": LogLevel.DISABLE,
}


def parse_level(value) -> LogLevel:
    """Parse a level name (case-insensitive), a number, or a LogLevel.

    Raises ValueError for anything unrecognised.
    """
    if isinstance(value, LogLevel):
        return value
    if isinstance(value, int):
        return LogLevel(value)

    name = str(value).strip().upper()
    if name in LogLevel.__members__:
        return LogLevel[name]
    if name in _ALIASES:
        return _ALIASES[name]
    if name.isdigit():
        return LogLevel(int(name))
    raise ValueError(f"Unknown log level: {value!r}")
