"""
In-process cache store used in development mode and tests.
"""

import logging
import time
from typing import Optional

from dashboard.services.cache.base import BaseCacheStore

logger = logging.getLogger(__name__)


class MemoryCacheStore(BaseCacheStore):
    """
    Dict-backed store with per-key expiry.

    Attributes:
        clock: Monotonic time source (overridable in tests)
    """

    SWEEP_INTERVAL_SECONDS = 60.0

    def __init__(self, clock=time.monotonic):
        self.clock = clock
        self._data: dict[str, tuple[str, Optional[float]]] = {}
        self._next_sweep = clock() + self.SWEEP_INTERVAL_SECONDS
        logger.info("MemoryCacheStore initialized")

    @property
    def provider_name(self) -> str:
        return "memory"

    def _alive(self, key: str) -> bool:
        entry = self._data.get(key)
        if entry is None:
            return False
        _, expires_at = entry
        if expires_at is not None and expires_at <= self.clock():
            del self._data[key]
            return False
        return True

    async def get(self, key: str) -> Optional[str]:
        if not self._alive(key):
            return None
        return self._data[key][0]

    async def set(self, key: str, value: str, ttl_seconds: Optional[float] = None) -> None:
        expires_at = self.clock() + ttl_seconds if ttl_seconds else None
        self._data[key] = (value, expires_at)
        if self.clock() >= self._next_sweep:
            self.purge_expired()

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def delete_prefix(self, prefix: str) -> int:
        keys = [k for k in self._data if k.startswith(prefix)]
        for key in keys:
            del self._data[key]
        return len(keys)

    async def health_check(self) -> bool:
        return True

    def keys(self) -> list[str]:
        return [k for k in list(self._data) if self._alive(k)]

    def purge_expired(self) -> int:
        """Drop every expired entry, touched or not."""
        now = self.clock()
        expired = [k for k, (_, expires_at) in self._data.items() if expires_at is not None and expires_at <= now]
        for key in expired:
            del self._data[key]
        self._next_sweep = now + self.SWEEP_INTERVAL_SECONDS
        if expired:
            logger.debug(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    def entry_count(self) -> int:
        """Entries held, including expired ones not yet purged."""
        return len(self._data)
