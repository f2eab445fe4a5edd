"""Redis connection management for shared, cross-process state."""

from taskflow.core.cache.redis import close_redis_pool, ping_redis, redis_client


__all__ = [
    "close_redis_pool",
    "ping_redis",
    "redis_client",
]
