"""
Cache Store Factory

Returns the key/value store behind the query cache and dashboard sessions.

Environment Switching:
    - ENV_MODE=development -> MemoryCacheStore (no Redis needed)
    - ENV_MODE=staging / production -> RedisCacheStore at REDIS_URL

Version: 1.0.0
"""

import logging
from functools import lru_cache

from dashboard.core.config import get_settings
from dashboard.services.cache.base import BaseCacheStore
from dashboard.services.cache.memory import MemoryCacheStore
from dashboard.services.cache.redis import RedisCacheStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_cache_store() -> BaseCacheStore:
    """
    Get the configured cache store instance.

    Returns:
        BaseCacheStore: Memory store in development, Redis otherwise
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Cache Store: Using MemoryCacheStore (development mode)")
        return MemoryCacheStore()

    logger.info(f"Cache Store: Using RedisCacheStore ({settings.env_mode.value} mode)")
    return RedisCacheStore(settings.redis_url)


def reset_cache_store() -> None:
    """Clear the cached store instance."""
    get_cache_store.cache_clear()
    logger.debug("Cache store cleared")


__all__ = [
    "get_cache_store",
    "reset_cache_store",
    "BaseCacheStore",
    "MemoryCacheStore",
    "RedisCacheStore",
]
