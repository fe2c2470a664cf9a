"""HTTP transport — POSTs encoded batches with retry and exponential backoff."""

import logging

import requests

from promtail_client.encoder import CONTENT_TYPE
from promtail_client.errors import DeliveryError
from promtail_client.retry import RetryPolicy

logger = logging.getLogger(__name__)

SUCCESS_STATUS = 204


def _is_retryable_status(status: int) -> bool:
    return status == 429 or 500 <= status <= 599


class HTTPTransport:
    """Delivers payloads to a single push URL.

    Network errors, 5xx and 429 responses are retried according to the
    policy.  Only 204 counts as success; any other final status raises
    DeliveryError.
    """

    def __init__(
        self,
        push_url: str,
        retry_policy: RetryPolicy | None = None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self._push_url = push_url
        self._policy = retry_policy or RetryPolicy()
        self._timeout = timeout
        self._session = session or requests.Session()
        self._attempts = 0

    @property
    def attempts(self) -> int:
        """Total HTTP attempts made over the transport's lifetime."""
        return self._attempts

    def deliver(self, payload: bytes) -> None:
        """POST *payload*, retrying transient failures.

        Returns None on a 204 response.  Raises DeliveryError otherwise.
        """
        max_attempts = self._policy.max_attempts
        last_error: DeliveryError | None = None

        for attempt in range(max_attempts):
            if attempt > 0:
                delay = self._policy.wait(attempt - 1)
                logger.debug("Retrying delivery in %.2fs", delay)

            self._attempts += 1
            try:
                resp = self._session.post(
                    self._push_url,
                    data=payload,
                    headers={"Content-Type": CONTENT_TYPE},
                    timeout=self._timeout,
                )
            except (requests.ConnectionError, requests.Timeout) as exc:
                last_error = DeliveryError(f"Unable to send HTTP request: {exc}")
                self._log_retry(attempt, max_attempts, exc)
                continue
            except requests.RequestException as exc:
                raise DeliveryError(f"Unable to send HTTP request: {exc}") from exc

            status = resp.status_code
            if status == SUCCESS_STATUS:
                return

            body = resp.text
            if 200 <= status < 300:
                logger.warning("Unexpected success status %d from %s: %s", status, self._push_url, body)
                raise DeliveryError("Unexpected HTTP status code", status, body)

            last_error = DeliveryError("Unexpected HTTP status code", status, body)
            if not _is_retryable_status(status):
                raise last_error
            self._log_retry(attempt, max_attempts, f"HTTP {status}")

        if max_attempts > 1:
            raise DeliveryError(
                f"Giving up after {max_attempts} attempts: {last_error.args[0]}",
                last_error.status_code,
                last_error.body,
            ) from last_error
        raise last_error

    @staticmethod
    def _log_retry(attempt: int, max_attempts: int, reason) -> None:
        if attempt + 1 < max_attempts:
            logger.warning("Delivery failed (attempt %d/%d): %s", attempt + 1, max_attempts, reason)

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()
