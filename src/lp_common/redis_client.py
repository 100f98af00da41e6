"""Shared Redis connection for workflow lock leases.

Only the RedisWorkflowLock uses it; market and deployment records live in
PostgreSQL. Not opened at all with WORKFLOW_LOCK_BACKEND=memory.
"""

import redis.asyncio as aioredis

from config.settings import settings

_redis: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _redis  # noqa: PLW0603
    if _redis is None:
        _redis = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.CHAIN_REQUEST_TIMEOUT_S,
        )
    return _redis


async def check_redis() -> None:
    """Raise if the lease store cannot be reached."""
    await (await get_redis()).ping()


async def close_redis() -> None:
    global _redis  # noqa: PLW0603
    if _redis is not None:
        await _redis.aclose()
        _redis = None
