"""
Redis Cache Store

Production/staging store backed by redis-py's asyncio client. Keys expire
natively via ``SET ... PX``; prefix invalidation walks ``SCAN MATCH``.

Version: 1.0.0
"""

import logging
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from dashboard.core.config import get_settings
from dashboard.services.cache.base import BaseCacheStore

logger = logging.getLogger(__name__)


class RedisCacheStore(BaseCacheStore):
    """
    Redis-backed store.

    Attributes:
        client: redis.asyncio.Redis client (decoded responses)
    """

    def __init__(self, redis_url: Optional[str] = None, client: Optional[aioredis.Redis] = None):
        url = redis_url or get_settings().redis_url
        self.client = client or aioredis.from_url(url, decode_responses=True)
        logger.info(f"RedisCacheStore initialized ({url.split('@')[-1]})")

    @property
    def provider_name(self) -> str:
        return "redis"

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: Optional[float] = None) -> None:
        if ttl_seconds:
            await self.client.set(key, value, px=int(ttl_seconds * 1000))
        else:
            await self.client.set(key, value)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def delete_prefix(self, prefix: str) -> int:
        deleted = 0
        batch: list[str] = []
        async for key in self.client.scan_iter(match=f"{prefix}*", count=500):
            batch.append(key)
            if len(batch) >= 500:
                deleted += await self.client.delete(*batch)
                batch = []
        if batch:
            deleted += await self.client.delete(*batch)
        return deleted

    async def health_check(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError as exc:
            logger.warning(f"Redis health check failed: {exc}")
            return False

    async def close(self) -> None:
        await self.client.aclose()
