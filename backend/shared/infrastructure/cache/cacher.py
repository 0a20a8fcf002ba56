"""
Action Response Cache.

A ``Cacher`` stores JSON-serializable action responses under keys built
by ``get_action_cache_key``. Entity services purge their namespace with
``clean("<service>.*")`` after every write.
"""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable, TYPE_CHECKING

from shared.config.logging import get_logger
from shared.infrastructure.events.redis_pool import get_redis_pool
from shared.infrastructure.redis.constants import ACTION_CACHE_TTL, MAX_KEYS_PER_CLEAN

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = get_logger(__name__)


@runtime_checkable
class Cacher(Protocol):
    """Cache backend capability."""

    async def get(self, key: str) -> Any | None:
        ...

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        ...

    async def clean(self, pattern: str) -> int:
        ...


class RedisCacher:
    """
    Cacher storing JSON values in Redis.

    Read and write failures are logged and treated as misses so a Redis
    outage degrades to uncached calls. ``clean`` propagates errors: a
    write must not silently leave stale entries behind.
    """

    def __init__(self, redis: "Redis | None" = None, ttl: int = ACTION_CACHE_TTL):
        self._redis = redis
        self._ttl = ttl

    async def _client(self) -> "Redis":
        if self._redis is None:
            self._redis = await get_redis_pool()
        return self._redis

    async def get(self, key: str) -> Any | None:
        try:
            redis = await self._client()
            cached = await redis.get(key)
        except Exception as e:
            logger.warning("Redis cache error, falling back to adapter", error=str(e), key=key)
            return None

        if cached is None:
            logger.debug("Cache MISS", key=key)
            return None

        logger.debug("Cache HIT", key=key)
        return json.loads(cached)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        try:
            redis = await self._client()
            await redis.setex(key, ttl or self._ttl, json.dumps(value, default=str))
        except Exception as e:
            logger.warning("Failed to cache action response", error=str(e), key=key)

    async def clean(self, pattern: str) -> int:
        redis = await self._client()
        keys = []
        async for key in redis.scan_iter(match=pattern, count=100):
            keys.append(key)
            if len(keys) >= MAX_KEYS_PER_CLEAN:
                logger.warning(
                    "Hit max keys limit for cache clean",
                    max_keys=MAX_KEYS_PER_CLEAN,
                    pattern=pattern,
                )
                break

        if not keys:
            return 0

        deleted = await redis.delete(*keys)
        logger.info("Cleaned cached responses", deleted=deleted, pattern=pattern)
        return deleted
