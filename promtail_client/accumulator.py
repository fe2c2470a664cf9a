"""Batch accumulator — in-memory bookkeeping for the batch being built.

Not thread-safe: only the dispatcher thread touches it.
"""

from promtail_client.models import Batch, LogEntry, Stream


class BatchAccumulator:
    """Groups entries into one Stream per canonical label string.

    Streams keep the order in which their label set was first seen, and
    entries keep submission order within a stream.
    """

    def __init__(self) -> None:
        self._streams: dict[str, Stream] = {}
        self._count = 0

    def append(self, labels: str, entry: LogEntry) -> None:
        stream = self._streams.get(labels)
        if stream is None:
            stream = self._streams[labels] = Stream(labels=labels)
        stream.entries.append(entry)
        self._count += 1

    @property
    def size(self) -> int:
        """Number of entries accumulated since the last drain."""
        return self._count

    def __len__(self) -> int:
        return self._count

    def drain(self) -> Batch:
        """Return the current batch and reset to empty."""
        batch = Batch(streams=list(self._streams.values()))
        self._streams = {}
        self._count = 0
        return batch
