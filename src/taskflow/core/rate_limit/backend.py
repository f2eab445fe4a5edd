"""Redis fixed-window rate limiter.

Each client address owns one counter, ``rate_limit_<address>``. Every
request increments it and resets its TTL to the window length in a single
MULTI/EXEC transaction, so a counter can never be left without an expiry.

Because the TTL is reset on every request, a client that keeps sending
requests keeps its window open: the count only drops back to zero after a
full window of silence. This is the intended behaviour, not a true
calendar-aligned fixed window.
"""

import asyncio
from dataclasses import dataclass
from typing import Protocol

from taskflow.config import settings
from taskflow.core.cache.redis import redis_client
from taskflow.core.constants import RATE_LIMIT_KEY_PREFIX
from taskflow.core.errors import ServiceUnavailableError


class CounterStore(Protocol):
    """Shared store offering an atomic increment-and-expire."""

    async def increment_and_expire(self, key: str, ttl: int) -> int:
        """Increment ``key``, set its TTL to ``ttl`` seconds, return the new count."""
        ...


class RedisCounterStore:
    """Counter store backed by Redis.

    INCR and EXPIRE are queued on a transactional pipeline and sent as
    one MULTI/EXEC block.
    """

    async def increment_and_expire(self, key: str, ttl: int) -> int:
        async with redis_client() as client, client.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.expire(key, ttl)
            count, _ = await pipe.execute()
        return int(count)


@dataclass
class RateLimitResult:
    """Result of a rate limit check."""

    allowed: bool
    limit: int
    remaining: int
    count: int


class FixedWindowRateLimiter:
    """Per-identifier request counter over a shared counter store.

    Args:
        store: Counter store (default: Redis)
        prefix: Key prefix for counters
        timeout: Upper bound in seconds for one store round trip
            (default: rate_limit_store_timeout)
    """

    def __init__(
        self,
        store: CounterStore | None = None,
        prefix: str = RATE_LIMIT_KEY_PREFIX,
        timeout: float | None = None,
    ) -> None:
        self.store = store or RedisCounterStore()
        self.prefix = prefix
        self.timeout = timeout if timeout is not None else settings.rate_limit_store_timeout

    def _build_key(self, identifier: str) -> str:
        return f"{self.prefix}{identifier}"

    async def is_allowed(self, identifier: str, limit: int, window: int) -> RateLimitResult:
        """Count one request for ``identifier`` and check it against ``limit``.

        Rejected requests are counted too.

        Args:
            identifier: Client address
            limit: Maximum number of requests allowed in the window
            window: Window length in seconds

        Returns:
            RateLimitResult with allowed status and remaining budget

        Raises:
            ServiceUnavailableError: If the store fails or exceeds the timeout
        """
        key = self._build_key(identifier)

        try:
            count = await asyncio.wait_for(
                self.store.increment_and_expire(key, window),
                timeout=self.timeout,
            )
        except Exception as exc:
            # Any store fault refuses admission, Redis errors and timeouts included
            raise ServiceUnavailableError(
                "Rate limit store unavailable",
                error_code="rate_limit_store_unavailable",
            ) from exc

        return RateLimitResult(
            allowed=count <= limit,
            limit=limit,
            remaining=max(0, limit - count),
            count=count,
        )
