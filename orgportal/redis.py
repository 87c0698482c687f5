"""Redis connection management.

Redis only carries best-effort pub/sub events, so the connection is optional:
callers get ``None`` when it was never initialized or failed at startup.
"""

import redis.asyncio as aioredis

_redis: aioredis.Redis | None = None


def get_redis_optional() -> aioredis.Redis | None:
    """The shared connection, or None when Redis is not configured."""
    return _redis


async def init_redis(url: str) -> aioredis.Redis:
    """Connect and ping; the connection is kept only if the ping succeeds."""
    global _redis
    client = aioredis.from_url(url, decode_responses=True)
    await client.ping()
    _redis = client
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None
