"""
Token bucket rate limiter.

Tokens refill lazily from elapsed time on every acquisition; there is no
background timer. When the bucket is empty the caller is suspended until
exactly one token would have accumulated.
"""

import asyncio
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT = 5  # requests per second


@dataclass
class RateLimiter:
    """
    Token bucket with capacity and refill rate both equal to
    ``requests_per_second``.

    ``clock`` returns seconds and ``sleep`` suspends for seconds; both are
    injectable so the limiter can be driven by a fake clock in tests.
    """
    requests_per_second: float = DEFAULT_RATE_LIMIT
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    tokens: float = field(init=False)
    last_refill: float = field(init=False)

    def __post_init__(self):
        if self.requests_per_second <= 0:
            raise ValueError("requests_per_second must be positive")
        self.tokens = float(self.capacity)
        self.last_refill = self.clock()

    @property
    def capacity(self) -> float:
        return self.requests_per_second

    @property
    def refill_rate_per_ms(self) -> float:
        return self.requests_per_second / 1000

    def _refill(self) -> None:
        now = self.clock()
        elapsed_ms = (now - self.last_refill) * 1000
        self.tokens = min(self.capacity, self.tokens + elapsed_ms * self.refill_rate_per_ms)
        self.last_refill = now

    async def acquire(self) -> None:
        """Take one token, waiting for it if the bucket is empty."""
        self._refill()

        if self.tokens >= 1:
            self.tokens -= 1
            return

        wait_ms = math.ceil((1 - self.tokens) / self.refill_rate_per_ms)
        logger.debug(f"Rate limit reached, waiting {wait_ms}ms")
        await self.sleep(wait_ms / 1000)

        # The token accumulated while waiting is the one consumed
        self.tokens = 0.0
        self.last_refill = self.clock()
