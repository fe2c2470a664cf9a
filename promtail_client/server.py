"""Development push receiver — a Flask app that accepts push payloads.

Useful for local runs and integration tests: it validates each payload,
keeps it in memory, and answers 204 like a real push endpoint.
"""

import logging
import threading

from flask import Flask, Response, jsonify, request
from werkzeug.serving import make_server

from promtail_client.config import ServerConfig
from promtail_client.encoder import decode_batch
from promtail_client.errors import EncodingError

logger = logging.getLogger(__name__)


class PushStore:
    """Thread-safe record of every accepted push payload."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._batches: list[dict] = []

    def add(self, payload: dict) -> None:
        with self._lock:
            self._batches.append(payload)

    @property
    def batches(self) -> list[dict]:
        with self._lock:
            return list(self._batches)

    @property
    def batch_count(self) -> int:
        with self._lock:
            return len(self._batches)

    @property
    def entry_count(self) -> int:
        with self._lock:
            return sum(
                len(stream["entries"])
                for batch in self._batches
                for stream in batch["streams"]
            )

    def lines(self) -> list[str]:
        """All received lines, in arrival order."""
        with self._lock:
            return [
                entry["line"]
                for batch in self._batches
                for stream in batch["streams"]
                for entry in stream["entries"]
            ]

    def clear(self) -> None:
        with self._lock:
            self._batches.clear()


def create_app(store: PushStore | None = None, push_path: str = ServerConfig.push_path) -> Flask:
    """Flask application factory."""
    app = Flask(__name__)
    store = store if store is not None else PushStore()
    app.config["store"] = store

    @app.route("/health")
    def health():
        return jsonify({
            "status": "healthy",
            "batches": store.batch_count,
            "entries": store.entry_count,
        })

    @app.route(push_path, methods=["POST"])
    def push():
        if request.mimetype != "application/json":
            return jsonify({"error": f"unsupported content type {request.mimetype!r}"}), 415
        try:
            payload = decode_batch(request.get_data())
        except EncodingError as exc:
            logger.warning("Rejected push payload: %s", exc)
            return jsonify({"error": str(exc)}), 400

        store.add(payload)
        entries = sum(len(stream["entries"]) for stream in payload["streams"])
        logger.info("Received batch of %d streams, %d entries", len(payload["streams"]), entries)
        return Response(status=204)

    return app


class PushServer:
    """Runs the receiver app on a background werkzeug server thread."""

    def __init__(self, config: ServerConfig, store: PushStore | None = None):
        self._config = config
        self.store = store if store is not None else PushStore()
        self._app = create_app(self.store, config.push_path)
        self._server = None
        self._thread = None
        self.server_address = None

    @property
    def push_url(self) -> str:
        host, port = self.server_address
        return f"http://{host}:{port}{self._config.push_path}"

    def start(self) -> None:
        """Bind the socket and start serving in a daemon thread."""
        self._server = make_server(self._config.host, self._config.port, self._app, threaded=True)
        self.server_address = self._server.server_address[:2]
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        logger.info("Push receiver listening on %s:%d", self.server_address[0], self.server_address[1])

    def stop(self) -> None:
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        logger.info(
            "Push receiver stopped. Received %d batches, %d total entries",
            self.store.batch_count,
            self.store.entry_count,
        )
