"""
RetryPolicy - Exponential backoff with jitter for transient HTTP failures.

Only responses are retried. A request that got no response at all is
treated as permanently failed and never reaches this policy.
"""

import random
from dataclasses import dataclass, field
from typing import Callable

DEFAULT_RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


@dataclass
class RetryPolicy:
    """Retry configuration and backoff calculation."""

    max_retries: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 10.0  # seconds, cap before jitter
    jitter: float = 1.0  # upper bound of the random extra delay
    retryable_statuses: frozenset[int] = DEFAULT_RETRYABLE_STATUSES
    random_fn: Callable[[], float] = field(default=random.random, repr=False)

    def is_retryable(self, status_code: int) -> bool:
        return status_code in self.retryable_statuses

    def should_retry(self, status_code: int, attempt: int) -> bool:
        """
        Check whether a response deserves another attempt.

        Args:
            status_code: Status of the response just received
            attempt: Retries already performed for this request

        Returns:
            True if the status is retryable and the budget is not spent
        """
        return attempt < self.max_retries and self.is_retryable(status_code)

    def get_delay(self, retry_number: int) -> float:
        """
        Seconds to wait before retry ``retry_number`` (1-based).

        min(base_delay * 2^(n-1), max_delay) plus uniform jitter in [0, jitter).
        """
        backoff = min(self.base_delay * 2 ** (retry_number - 1), self.max_delay)
        return backoff + self.random_fn() * self.jitter
