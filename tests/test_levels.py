"""Tests for severity levels."""

import pytest

from promtail_client.levels import LogLevel, parse_level


def test_ordering():
    assert LogLevel.DEBUG < LogLevel.INFO < LogLevel.WARN < LogLevel.ERROR < LogLevel.DISABLE


@pytest.mark.parametrize("value, expected", [
    ("debug", LogLevel.DEBUG),
    ("INFO", LogLevel.INFO),
    ("warn", LogLevel.WARN),
    ("WARNING", LogLevel.WARN),
    ("critical", LogLevel.ERROR),
    ("disable", LogLevel.DISABLE),
    ("2", LogLevel.WARN),
    (3, LogLevel.ERROR),
    (LogLevel.INFO, LogLevel.INFO),
])
def test_parse_level(value, expected):
    assert parse_level(value) is expected


def test_parse_level_rejects_unknown():
    with pytest.raises(ValueError):
        parse_level("verbose")
