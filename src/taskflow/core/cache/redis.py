"""Redis client configuration and connection management.

One connection pool is shared by every request handled in this process.
Socket timeouts come from ``rate_limit_store_timeout`` so that a stalled
Redis cannot hold a request open longer than the admission budget.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from taskflow.config import settings


_pool: ConnectionPool | None = None


def _get_pool() -> ConnectionPool:
    """Get or create the Redis connection pool."""
    global _pool
    if _pool is None:
        _pool = ConnectionPool.from_url(
            str(settings.redis_url),
            max_connections=settings.redis_max_connections,
            socket_timeout=settings.rate_limit_store_timeout,
            socket_connect_timeout=settings.rate_limit_store_timeout,
            decode_responses=True,
        )
    return _pool


@asynccontextmanager
async def redis_client() -> AsyncGenerator[redis.Redis, None]:  # type: ignore[type-arg]
    """Context manager for a pooled Redis client.

    Usage:
        async with redis_client() as client:
            await client.incr("key")
    """
    client = redis.Redis(connection_pool=_get_pool())
    try:
        yield client
    finally:
        await client.aclose()


async def ping_redis() -> bool:
    """Check Redis connectivity for the readiness probe."""
    async with redis_client() as client:
        return bool(await client.ping())


async def close_redis_pool() -> None:
    """Close the Redis connection pool.

    Call this during application shutdown.
    """
    global _pool
    if _pool is not None:
        await _pool.disconnect()
        _pool = None
