"""
Cache Store Abstract Base Class

Defines the interface contract for key/value stores backing the query cache
and dashboard sessions. Values are JSON strings; keys are plain strings.

Both MemoryCacheStore and RedisCacheStore implement these methods, so the
query layer behaves identically in development and production.

Version: 1.0.0
"""

from abc import ABC, abstractmethod
from typing import Optional


class BaseCacheStore(ABC):
    """
    Abstract base class for cache stores.

    Implementations:
        - MemoryCacheStore: in-process dict (development, tests)
        - RedisCacheStore: redis-py asyncio client (production, staging)
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the store ("memory" or "redis")."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value or None when missing or expired."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: Optional[float] = None) -> None:
        """Store a value, optionally expiring after ``ttl_seconds``."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass

    @abstractmethod
    async def delete_prefix(self, prefix: str) -> int:
        """
        Delete every key starting with ``prefix``.

        Returns:
            int: Number of deleted keys
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass

    async def close(self) -> None:
        """Release connections (no-op by default)."""
        return None
