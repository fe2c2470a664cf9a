"""Entry encoder — JSON wire format for the push endpoint.

Payload shape::

    {"streams": [{"labels": "{job=\"app\"}",
                  "entries": [{"ts": "2024-01-15T08:23:45.123456Z", "line": "..."}]}]}
"""

import datetime
import json

from promtail_client.errors import EncodingError
from promtail_client.models import Batch

CONTENT_TYPE = "application/json"


def format_timestamp(ts: datetime.datetime) -> str:
    """Format a tz-aware datetime as RFC3339, using ``Z`` for UTC."""
    if not isinstance(ts, datetime.datetime):
        raise EncodingError(f"Timestamp must be a datetime, got {type(ts).__name__}")
    if ts.tzinfo is None or ts.utcoffset() is None:
        raise EncodingError(f"Timestamp must be timezone-aware: {ts!r}")

    text = ts.isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def encode_batch(batch: Batch) -> bytes:
    """Serialize *batch* to UTF-8 JSON bytes.

    Empty streams are skipped.  Raises EncodingError on unrepresentable input.
    """
    streams = []
    for stream in batch.streams:
        if not stream.entries:
            continue
        if not isinstance(stream.labels, str):
            raise EncodingError(f"Stream labels must be a string, got {type(stream.labels).__name__}")

        entries = []
        for entry in stream.entries:
            if not isinstance(entry.line, str):
                raise EncodingError(f"Entry line must be a string, got {type(entry.line).__name__}")
            entries.append({"ts": format_timestamp(entry.timestamp), "line": entry.line})
        streams.append({"labels": stream.labels, "entries": entries})

    try:
        return json.dumps({"streams": streams}, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError, UnicodeEncodeError) as exc:
        raise EncodingError(f"Unable to encode batch: {exc}") from exc


def decode_batch(data: bytes) -> dict:
    """Parse a payload produced by *encode_batch* and validate its shape.

    Raises EncodingError when the payload is not valid JSON or does not
    match the push format.
    """
    try:
        payload = json.loads(data)
    except (UnicodeDecodeError, ValueError) as exc:
        raise EncodingError(f"Payload is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("streams"), list):
        raise EncodingError("Payload must be an object with a 'streams' list")

    for i, stream in enumerate(payload["streams"]):
        if not isinstance(stream, dict):
            raise EncodingError(f"Stream {i} is not an object")
        if not isinstance(stream.get("labels"), str):
            raise EncodingError(f"Stream {i} has no 'labels' string")
        entries = stream.get("entries")
        if not isinstance(entries, list):
            raise EncodingError(f"Stream {i} has no 'entries' list")
        for j, entry in enumerate(entries):
            if (
                not isinstance(entry, dict)
                or not isinstance(entry.get("ts"), str)
                or not isinstance(entry.get("line"), str)
            ):
                raise EncodingError(f"Entry {j} of stream {i} must have 'ts' and 'line' strings")
    return payload
