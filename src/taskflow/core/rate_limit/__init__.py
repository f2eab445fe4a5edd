"""Rate limiting backed by a shared Redis counter per client address."""

from taskflow.core.rate_limit.backend import (
    CounterStore,
    FixedWindowRateLimiter,
    RateLimitResult,
    RedisCounterStore,
)
from taskflow.core.rate_limit.middleware import RateLimitStage


__all__ = [
    "CounterStore",
    "FixedWindowRateLimiter",
    "RateLimitResult",
    "RateLimitStage",
    "RedisCounterStore",
]
