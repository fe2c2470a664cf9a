"""Shared pytest fixtures for the promtail-client test suite."""

import socket
import threading
import time

import pytest

from promtail_client.config import ClientConfig, ServerConfig
from promtail_client.encoder import decode_batch
from promtail_client.errors import DeliveryError
from promtail_client.levels import LogLevel
from promtail_client.server import PushServer


class FakeResponse:
    def __init__(self, status_code: int, text: str = ""):
        self.status_code = status_code
        self.text = text


class FakeSession:
    """Stands in for requests.Session; replays a scripted list of outcomes.

    Each outcome is an exception instance (raised) or a ``(status, body)``
    tuple.  The last outcome repeats once the script runs out.
    """

    def __init__(self, outcomes):
        self._outcomes = list(outcomes)
        self.calls: list[dict] = []
        self.closed = False

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        index = min(len(self.calls) - 1, len(self._outcomes) - 1)
        outcome = self._outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        status, body = outcome
        return FakeResponse(status, body)

    def close(self):
        self.closed = True


class RecordingTransport:
    """Transport stub that decodes and records every delivered payload.

    Set ``fail`` to make deliveries raise DeliveryError.  Set ``hold`` to an
    Event to block inside ``deliver`` until it is set.
    """

    def __init__(self, fail: bool = False, hold: threading.Event | None = None, delay: float = 0.0):
        self.fail = fail
        self.hold = hold
        self.delay = delay
        self.started = threading.Event()
        self.payloads: list[dict] = []
        self.completed: list[float] = []
        self._lock = threading.Lock()

    def deliver(self, payload: bytes) -> None:
        self.started.set()
        if self.hold is not None:
            self.hold.wait(timeout=10)
        if self.delay:
            time.sleep(self.delay)
        with self._lock:
            self.payloads.append(decode_batch(payload))
            self.completed.append(time.monotonic())
        if self.fail:
            raise DeliveryError("Unexpected HTTP status code", 500, "boom")

    def close(self):
        pass

    @property
    def count(self) -> int:
        with self._lock:
            return len(self.payloads)

    def entry_counts(self) -> list[int]:
        with self._lock:
            return [
                sum(len(stream["entries"]) for stream in payload["streams"])
                for payload in self.payloads
            ]

    def lines(self) -> list[str]:
        with self._lock:
            return [
                entry["line"]
                for payload in self.payloads
                for stream in payload["streams"]
                for entry in stream["entries"]
            ]


def make_config(**overrides) -> ClientConfig:
    """ClientConfig with test-friendly defaults."""
    defaults = {
        "push_url": "http://127.0.0.1:3100/api/prom/push",
        "batch_wait": 30.0,
        "batch_entries_number": 10,
        "send_level": LogLevel.INFO,
        "print_level": LogLevel.DISABLE,
        "max_retry": 0,
        "retry_min_wait": 0.01,
        "retry_max_wait": 0.05,
    }
    defaults.update(overrides)
    return ClientConfig(**defaults)


def wait_for(predicate, timeout: float = 3.0) -> bool:
    """Poll *predicate* until it is true or *timeout* elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def push_server():
    """Start a real PushServer on an ephemeral port."""
    server = PushServer(ServerConfig(host="127.0.0.1", port=0))
    server.start()
    yield server
    server.stop()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def printed():
    """List-backed print sink."""
    lines: list[str] = []
    return lines


@pytest.fixture
def unreachable_url():
    """A push URL on a port nothing listens on."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"http://127.0.0.1:{port}/api/prom/push"

