import json
import logging
from dataclasses import dataclass
from typing import Any

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheResult:
    """Outcome of a cache call.

    Cache failures are reported here instead of being raised, so callers can
    choose to ignore ``error``: an errored get reads as a miss, an errored set
    as a no-op.
    """
    value: Any = None
    error: Exception | None = None

    @property
    def hit(self) -> bool:
        return self.error is None and self.value is not None


class CacheClient:
    """Read-through cache in front of PokeAPI, backed by Redis."""

    DEFAULT_TTL_MS = 3_600_000  # 1 hour
    DETAIL_KEY_PREFIX = "detail_"

    def __init__(self, redis_url: str = "redis://localhost:6379"):
        self.redis = aioredis.from_url(redis_url, decode_responses=True)

    @classmethod
    def detail_key(cls, name: str) -> str:
        return f"{cls.DETAIL_KEY_PREFIX}{name.lower()}"

    async def get(self, key: str) -> CacheResult:
        try:
            cached = await self.redis.get(key)
        except Exception as e:
            logger.error(f"Redis cache GET error for '{key}': {e}")
            return CacheResult(error=e)

        if cached is None:
            return CacheResult()

        try:
            return CacheResult(value=json.loads(cached))
        except ValueError as e:
            logger.warning(f"Discarding undecodable cache entry '{key}'")
            return CacheResult(error=e)

    async def set(self, key: str, value: Any, ttl_ms: int = DEFAULT_TTL_MS) -> CacheResult:
        try:
            # PX: expiry in milliseconds
            await self.redis.set(key, json.dumps(value), px=ttl_ms)
        except Exception as e:
            logger.error(f"Redis cache SET error for '{key}': {e}")
            return CacheResult(error=e)
        return CacheResult(value=value)

    async def clear(self, list_key: str):
        """Delete the list entry and every detail entry. Useful for testing."""
        keys = await self.redis.keys(f"{self.DETAIL_KEY_PREFIX}*")
        keys.append(list_key)
        await self.redis.delete(*keys)

    async def close(self):
        """Close Redis connection (call on app shutdown)."""
        await self.redis.aclose()
