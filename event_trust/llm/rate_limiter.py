"""Token bucket rate limiting for outbound search and LLM requests."""

import asyncio
import threading
import time
from typing import Callable, Optional

from loguru import logger


class TokenBucket:
    """
    Token bucket algorithm implementation for rate limiting.

    Tokens refill continuously at a fixed rate; each request consumes one
    or more. Thread-safe.

    Attributes:
        capacity: Maximum number of tokens the bucket can hold
        refill_rate: Tokens added per second
        tokens: Current number of tokens available
    """

    def __init__(
        self,
        capacity: int,
        refill_rate: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize token bucket with capacity and refill rate.

        Args:
            capacity: Maximum tokens (e.g., 30 for 30 RPM)
            refill_rate: Tokens per second (e.g., 0.5 = 30 per minute)
            clock: Monotonic time source (injectable for tests)
        """
        self.capacity = capacity
        self.refill_rate = refill_rate
        self.tokens = float(capacity)
        self._clock = clock
        self.last_refill = clock()
        self.lock = threading.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self.last_refill
        self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

    def acquire(self, tokens: int = 1) -> bool:
        """
        Attempt to take tokens without waiting.

        Returns:
            True if tokens were acquired, False if insufficient tokens available
        """
        with self.lock:
            self._refill()
            if self.tokens >= tokens:
                self.tokens -= tokens
                return True
            return False

    def seconds_until(self, tokens: int = 1) -> float:
        """Time until `tokens` would be available (0.0 if available now)."""
        with self.lock:
            self._refill()
            missing = tokens - self.tokens
            if missing <= 0:
                return 0.0
            return missing / self.refill_rate


class RateLimiter:
    """
    Requests-per-minute limiter for a single outbound endpoint.

    The pipeline is sequential, so callers usually wait for a token
    (acquire) rather than drop the request (can_proceed).
    """

    def __init__(
        self,
        max_rpm: int,
        max_wait: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize rate limiter.

        Args:
            max_rpm: Maximum requests per minute
            max_wait: Longest acquire() will sleep before giving up (None = unbounded)
            clock: Monotonic time source (injectable for tests)
        """
        self.max_rpm = max_rpm
        self.max_wait = max_wait
        self.bucket = TokenBucket(capacity=max_rpm, refill_rate=max_rpm / 60.0, clock=clock)
        logger.debug(f"RateLimiter initialized: {max_rpm} RPM")

    def can_proceed(self) -> bool:
        """Take a request token if one is available right now."""
        if self.bucket.acquire(1):
            return True
        logger.warning("RPM limit reached, request throttled")
        return False

    async def acquire(self) -> bool:
        """
        Wait for a request token.

        Returns:
            True once a token is taken, False if the wait would exceed max_wait
        """
        while True:
            delay = self.bucket.seconds_until(1)
            if delay == 0.0 and self.bucket.acquire(1):
                return True
            if self.max_wait is not None and delay > self.max_wait:
                logger.warning(f"Rate limit wait of {delay:.1f}s exceeds {self.max_wait:.1f}s")
                return False
            await asyncio.sleep(delay)
