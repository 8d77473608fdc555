"""
Retry and rate-limit policies used by the HTTP transport.

Both are plain objects that the transport consults around each request.
They never perform I/O themselves apart from reading the clock.
"""

import logging
import math
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

import httpx

from canvas_client.exceptions import is_rate_limited
from canvas_client.settings import CanvasSettings

logger = logging.getLogger(__name__)


@dataclass
class RetryPolicy:
    """
    Exponential backoff for transient failures.

    The n-th retry (1-based) waits ``delay * multiplier ** (n - 1)`` seconds,
    capped at ``max_delay``, plus up to 25% jitter when enabled.
    """

    max_retries: int = 3
    delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 16.0
    jitter: bool = True
    retry_on_status: Iterable[int] = field(default_factory=lambda: (500, 502, 503, 504))
    retry_on_timeout: bool = True
    random_func: Callable[[], float] = random.random

    @classmethod
    def from_settings(cls, settings: CanvasSettings) -> "RetryPolicy":
        return cls(
            max_retries=settings.max_retries,
            delay=settings.retry_delay,
            multiplier=settings.retry_multiplier,
            max_delay=settings.retry_max_delay,
            jitter=settings.retry_jitter,
            retry_on_status=tuple(settings.retry_on_status),
        )

    def should_retry_response(self, response: httpx.Response, attempt: int) -> bool:
        """Decide whether a completed response should be retried."""
        if attempt >= self.max_retries:
            return False
        if response.status_code in self.retry_on_status:
            return True
        return is_rate_limited(response)

    def should_retry_exception(self, exc: Exception, attempt: int) -> bool:
        """Decide whether a transport exception should be retried."""
        if attempt >= self.max_retries:
            return False
        if isinstance(exc, httpx.TimeoutException):
            return self.retry_on_timeout
        return isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError))

    def get_delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """
        Compute the wait before retry number ``attempt`` (1-based).

        A server supplied ``Retry-After`` wins when it is longer than the
        computed backoff.
        """
        delay = self.delay * (self.multiplier ** max(attempt - 1, 0))
        delay = min(delay, self.max_delay)
        if self.jitter and delay > 0:
            delay += delay * 0.25 * self.random_func()
        if retry_after is not None and retry_after > delay:
            delay = retry_after
        return delay


class RateLimiter:
    """
    Client-side leaky bucket mirroring Canvas request throttling.

    Each request is pre-charged ``initial_cost`` units. The bucket refills at
    ``leak_rate`` units per second and is resynchronized from the
    ``X-Rate-Limit-Remaining`` and ``X-Request-Cost`` response headers.
    """

    def __init__(
        self,
        *,
        bucket_size: float = 3000,
        leak_rate: float = 50.0,
        initial_cost: float = 50,
        min_remaining: float = 100,
        max_wait: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.bucket_size = bucket_size
        self.leak_rate = leak_rate
        self.initial_cost = initial_cost
        self.min_remaining = min_remaining
        self.max_wait = max_wait
        self._clock = clock
        self._remaining = float(bucket_size)
        self._timestamp = clock()

    @classmethod
    def from_settings(cls, settings: CanvasSettings) -> "RateLimiter":
        return cls(
            bucket_size=settings.rate_limit_bucket_size,
            leak_rate=settings.rate_limit_leak_rate,
            initial_cost=settings.rate_limit_initial_cost,
            min_remaining=settings.rate_limit_min_remaining,
            max_wait=settings.rate_limit_max_wait,
        )

    @property
    def remaining(self) -> float:
        """Units currently available, after applying the leak."""
        self._leak()
        return self._remaining

    def _leak(self) -> None:
        now = self._clock()
        elapsed = now - self._timestamp
        if elapsed > 0:
            self._remaining = min(
                self.bucket_size, self._remaining + elapsed * self.leak_rate
            )
            self._timestamp = now

    def calculate_delay(self) -> float:
        """Seconds to wait before the next request may be sent."""
        needed = self.min_remaining + self.initial_cost - self.remaining
        if needed <= 0:
            return 0.0
        return float(math.ceil(needed / self.leak_rate))

    def consume(self, cost: Optional[float] = None) -> None:
        """Charge the bucket for a request about to be sent."""
        self._leak()
        cost = self.initial_cost if cost is None else cost
        self._remaining = max(0.0, self._remaining - cost)

    def refund(self, cost: Optional[float] = None) -> None:
        """Give back units for a request that never reached the server."""
        self._leak()
        cost = self.initial_cost if cost is None else cost
        self._remaining = min(self.bucket_size, self._remaining + cost)

    def update_from_response(self, response: httpx.Response) -> None:
        """Resynchronize the bucket with the server's view."""
        remaining = _header_float(response, "X-Rate-Limit-Remaining")
        if remaining is not None:
            self._leak()
            self._remaining = min(self.bucket_size, max(0.0, remaining))

        # The remaining header already accounts for the actual cost.
        actual_cost = _header_float(response, "X-Request-Cost")
        if remaining is None and actual_cost is not None:
            if actual_cost < self.initial_cost:
                self.refund(self.initial_cost - actual_cost)
            elif actual_cost > self.initial_cost:
                self.consume(actual_cost - self.initial_cost)
        logger.debug("Rate limit bucket: %.1f units remaining", self._remaining)


def _header_float(response: httpx.Response, name: str) -> Optional[float]:
    value = response.headers.get(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning("Ignoring non-numeric %s header: %r", name, value)
        return None
