"""Entry point for the development push receiver."""

import logging
import signal
import threading

from promtail_client.config import load_server_config
from promtail_client.server import PushServer


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    config = load_server_config()
    shutdown_event = threading.Event()

    def handle_signal(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    server = PushServer(config)
    logger.info("Starting push receiver on %s:%d%s", config.host, config.port, config.push_path)
    server.start()
    try:
        shutdown_event.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        server.stop()


if __name__ == "__main__":
    main()
