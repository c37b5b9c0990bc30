"""Redis connection pool — backs the rate limiter.

Learn: Redis is optional. With no LINGOPAL_REDIS_URL (or if Redis is down
at startup) the pool stays None. The rate limiter then lets everything
through and the health check reports "disabled" instead of failing.
"""

from typing import Optional

import redis.asyncio as aioredis

# Global Redis connection pool (initialized in lifespan)
_redis: Optional[aioredis.Redis] = None


async def init_redis(url: str) -> aioredis.Redis:
    """Initialize the Redis connection pool and verify it answers."""
    global _redis
    client = aioredis.from_url(url, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
    except Exception:
        await client.aclose()
        raise
    _redis = client
    return _redis


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def get_redis() -> Optional[aioredis.Redis]:
    """The Redis connection, or None when Redis is not in use."""
    return _redis
