"""Redis client used for publishing task transition notifications."""

from __future__ import annotations

import redis.asyncio as redis
from redis.exceptions import RedisError

from taskgraph.core.config import get_settings

_client: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    """Get or lazily create the shared Redis client."""
    global _client
    if _client is None:
        _client = redis.from_url(
            get_settings().redis_url,
            decode_responses=True,
        )
    return _client


async def redis_available() -> bool:
    """Readiness probe: True when Redis answers PING."""
    try:
        client = await get_redis()
        return bool(await client.ping())
    except RedisError:
        return False


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
