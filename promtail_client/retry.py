"""Retry policy — bounded attempts with capped exponential backoff."""

import time
from dataclasses import dataclass, field
from typing import Callable


def exponential_backoff(attempt: int, min_wait: float, max_wait: float) -> float:
    """Delay before retry number *attempt* (0-based).

    Starts at *min_wait* and doubles each attempt (1s, 2s, 4s, ...),
    capped at *max_wait*.
    """
    return min(min_wait * (2 ** attempt), max_wait)


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to retry a failed delivery and how long to wait.

    ``max_retries`` counts retries, not attempts: a delivery is tried at most
    ``max_retries + 1`` times, and 0 disables retrying.  ``sleep`` is
    injectable so tests can record delays instead of waiting.
    """

    max_retries: int = 0
    min_wait: float = 1.0
    max_wait: float = 30.0
    backoff: Callable[[int, float, float], float] = exponential_backoff
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay(self, attempt: int) -> float:
        return self.backoff(attempt, self.min_wait, self.max_wait)

    def wait(self, attempt: int) -> float:
        """Sleep before retry number *attempt* and return the delay used."""
        delay = self.delay(attempt)
        if delay > 0:
            self.sleep(delay)
        return delay
