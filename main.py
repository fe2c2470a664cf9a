"""Demo client entry point — ships generated sample logs to a push endpoint."""

import dataclasses
import logging
import random
import signal
import threading

from promtail_client.client import PromtailClient
from promtail_client.config import load_client_config
from promtail_client.errors import ConfigurationError
from promtail_client.levels import LogLevel

SAMPLE_LEVELS = [LogLevel.DEBUG, LogLevel.INFO, LogLevel.INFO, LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR]
SAMPLE_MESSAGES = [
    "User logged in",
    "Request processed successfully",
    "Database query completed",
    "Cache miss for key",
    "Configuration reloaded",
    "Health check passed",
    "Connection timeout to upstream",
    "Disk usage above threshold",
    "Authentication failed for user",
    "Service restarted",
]


def generate_sample_logs(client: PromtailClient, logs_per_second: int, run_time: int,
                         shutdown_event: threading.Event):
    """Submit random sample logs at *logs_per_second* for *run_time* seconds."""
    for _ in range(run_time):
        if shutdown_event.is_set():
            break
        for _ in range(logs_per_second):
            level = random.choice(SAMPLE_LEVELS)
            client.submit(
                {**client.config.labels, "level": level.name.lower()},
                level,
                random.choice(SAMPLE_MESSAGES),
            )
        shutdown_event.wait(timeout=1.0)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    try:
        config = load_client_config()
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        raise SystemExit(2)

    if not config.labels:
        config = dataclasses.replace(config, labels={"job": "promtail-demo"})

    shutdown_event = threading.Event()

    def handle_signal(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    logger.info(
        "Starting promtail client: url=%s, batch_entries=%d, batch_wait=%.1fs",
        config.push_url,
        config.batch_entries_number,
        config.batch_wait,
    )

    client = PromtailClient(config)
    try:
        generate_sample_logs(client, config.logs_per_second, config.run_time, shutdown_event)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        client.shutdown()


if __name__ == "__main__":
    main()
