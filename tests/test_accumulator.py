"""Tests for the BatchAccumulator."""

from promtail_client.accumulator import BatchAccumulator
from promtail_client.levels import LogLevel
from promtail_client.models import LogEntry


def _entry(i: int) -> LogEntry:
    return LogEntry(line=f"log-{i}", level=LogLevel.INFO)


class TestAppend:
    def test_size_tracks_entries(self):
        acc = BatchAccumulator()
        assert acc.size == 0

        acc.append('{job="a"}', _entry(0))
        acc.append('{job="b"}', _entry(1))
        acc.append('{job="a"}', _entry(2))

        assert acc.size == 3
        assert len(acc) == 3

    def test_same_labels_share_a_stream(self):
        acc = BatchAccumulator()
        acc.append('{job="a"}', _entry(0))
        acc.append('{job="b"}', _entry(1))
        acc.append('{job="a"}', _entry(2))

        batch = acc.drain()

        assert [s.labels for s in batch.streams] == ['{job="a"}', '{job="b"}']
        assert [e.line for e in batch.streams[0].entries] == ["log-0", "log-2"]
        assert [e.line for e in batch.streams[1].entries] == ["log-1"]


class TestDrain:
    def test_drain_resets(self):
        acc = BatchAccumulator()
        acc.append('{job="a"}', _entry(0))

        batch = acc.drain()

        assert batch.entry_count == 1
        assert acc.size == 0
        assert acc.drain().entry_count == 0

    def test_drained_batch_not_mutated_by_later_appends(self):
        acc = BatchAccumulator()
        acc.append('{job="a"}', _entry(0))
        batch = acc.drain()

        acc.append('{job="a"}', _entry(1))

        assert batch.entry_count == 1
        assert len(batch.streams[0].entries) == 1
