"""Label-set handling — key sanitization and the canonical label string.

The canonical form is ``{key1="value1",key2="value2"}`` with keys sorted and
sanitized, and values escaped like JSON strings.  Canonicalizing a string
that is already canonical returns it unchanged.
"""

import json
import re
from typing import Mapping

from promtail_client.errors import EncodingError

_INVALID_KEY_CHARS = re.compile(r"[^A-Za-z0-9_]")
_PAIR = re.compile(r'\s*([^=,{}\s]+)\s*=\s*"((?:[^"\\]|\\.)*)"\s*')


def sanitize_key(key: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_]`` with ``_``."""
    return _INVALID_KEY_CHARS.sub("_", key)


def format_labels(labels: Mapping[str, str]) -> str:
    """Build the canonical label string for *labels*.

    Keys that collide after sanitization keep the value of the last key in
    sorted order of the original keys.  Raises EncodingError for an empty key.
    """
    sanitized: dict[str, str] = {}
    for key in sorted(labels):
        if not str(key):
            raise EncodingError("Label keys must not be empty")
        sanitized[sanitize_key(str(key))] = str(labels[key])

    pairs = [f"{key}={json.dumps(sanitized[key], ensure_ascii=False)}" for key in sorted(sanitized)]
    return "{" + ",".join(pairs) + "}"


def parse_labels(text: str) -> dict[str, str]:
    """Parse a label string of the form ``{k="v",...}`` into a dict.

    Raises EncodingError if *text* is not a well-formed label string.
    """
    text = text.strip()
    if not (text.startswith("{") and text.endswith("}")):
        raise EncodingError(f"Label string must be wrapped in braces: {text!r}")

    body = text[1:-1].strip()
    labels: dict[str, str] = {}
    if not body:
        return labels

    pos = 0
    while pos < len(body):
        match = _PAIR.match(body, pos)
        if match is None:
            raise EncodingError(f"Malformed label string at offset {pos}: {text!r}")
        key, raw_value = match.groups()
        try:
            labels[key] = json.loads(f'"{raw_value}"')
        except ValueError as exc:
            raise EncodingError(f"Malformed label value for {key!r}: {exc}") from exc

        pos = match.end()
        if pos < len(body):
            if body[pos] != ",":
                raise EncodingError(f"Expected ',' at offset {pos}: {text!r}")
            pos += 1
    return labels


def canonicalize(labels) -> str:
    """Return the canonical label string for a mapping or a label string."""
    if isinstance(labels, str):
        labels = parse_labels(labels)
    return format_labels(labels)
