"""Rate limiting implementation for capability modules."""

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional

from ..constants import DEFAULT_RATE_LIMIT, SP_API_MODULES


class TokenBucket:
    """Token bucket implementation for rate limiting."""

    def __init__(self, capacity: int, refill_rate: float, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize token bucket.

        Args:
            capacity: Maximum number of tokens in the bucket
            refill_rate: Number of tokens added per second
            clock: Monotonic time source in seconds
        """
        self.capacity = capacity
        self.refill_rate = refill_rate
        self.clock = clock
        self.tokens = float(capacity)
        self.last_refill = clock()

    def _refill(self) -> None:
        now = self.clock()
        time_passed = now - self.last_refill
        self.tokens = min(self.capacity, self.tokens + time_passed * self.refill_rate)
        self.last_refill = now

    def consume(self, tokens: int = 1) -> bool:
        """Try to consume tokens from the bucket.

        Returns:
            True if tokens were consumed, False if not enough tokens available
        """
        self._refill()
        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    def time_until_available(self, tokens: int = 1) -> float:
        """Seconds until enough tokens are available."""
        self._refill()
        if self.tokens >= tokens:
            return 0.0
        return (tokens - self.tokens) / self.refill_rate


class RateLimiter:
    """Per-capability rate limiter shared by the modules of one connection.

    Limits default to the restore rate and burst capacity of the module
    definitions in ``constants.SP_API_MODULES``.
    """

    def __init__(
        self,
        limits: Optional[dict[str, tuple[float, int]]] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limits = {name: definition["rate_limit"] for name, definition in SP_API_MODULES.items()}
        if limits:
            self.limits.update(limits)
        self.sleep = sleep
        self.clock = clock
        self.buckets: dict[str, TokenBucket] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _get_bucket(self, capability: str) -> TokenBucket:
        if capability not in self.buckets:
            rate_per_second, burst_capacity = self.limits.get(capability, DEFAULT_RATE_LIMIT)
            self.buckets[capability] = TokenBucket(
                capacity=burst_capacity, refill_rate=rate_per_second, clock=self.clock
            )
        return self.buckets[capability]

    async def wait_if_needed(self, capability: str, tokens: int = 1) -> float:
        """Wait until a request for ``capability`` is allowed.

        Callers for the same capability are serialized so concurrent batches
        queue up instead of all waking at once.

        Returns:
            Seconds spent waiting
        """
        lock = self._locks.setdefault(capability, asyncio.Lock())
        waited = 0.0
        async with lock:
            bucket = self._get_bucket(capability)
            while not bucket.consume(tokens):
                wait_time = bucket.time_until_available(tokens)
                await self.sleep(wait_time)
                waited += wait_time
        return waited

    def check_available(self, capability: str, tokens: int = 1) -> bool:
        """Check if tokens are available without consuming them."""
        return self._get_bucket(capability).time_until_available(tokens) == 0.0
