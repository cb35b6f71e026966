"""
Query Cache

Keyed cache of screen data fetched from the backend.

    - Keys are tuples such as ``("reservations", 12)``, rendered as
      ``query:<namespace>:reservations:12`` in the underlying store; the
      namespace is the authenticated user, so users never share entries.
    - ``fetch`` returns cached data while it is fresh and otherwise runs the
      loader and stores its result for ``stale_seconds``.
    - ``invalidate(("reservations",))`` drops every key under that prefix;
      mutation routes call it for each screen they affect.
    - ``watch`` polls a loader on a fixed interval and yields only when the
      data changed. It runs until the consumer stops iterating.

Usage:
    query = QueryClient(get_cache_store(), namespace=str(user.id))
    tables = await query.fetch(
        ("tables", restaurant_id),
        lambda: api.tables.list_by_restaurant(restaurant_id),
        response_type=list[Table],
    )
    await query.invalidate(("tables",))

Version: 1.0.0
"""

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, TypeVar

from pydantic import TypeAdapter

from dashboard.core.config import get_settings
from dashboard.services.cache.base import BaseCacheStore

logger = logging.getLogger(__name__)

T = TypeVar("T")
QueryKey = tuple

KEY_PREFIX = "query"


def render_key(key: QueryKey) -> str:
    """Render a tuple key as a colon-joined string."""
    return ":".join(str(part) for part in key)


class QueryClient:
    """
    Cache-aside query client over a BaseCacheStore.

    Attributes:
        store: Underlying key/value store
        namespace: Per-user namespace (user id, or "anonymous")
        stale_seconds: Default freshness window
    """

    def __init__(
        self,
        store: BaseCacheStore,
        namespace: str = "anonymous",
        stale_seconds: Optional[float] = None,
    ):
        self.store = store
        self.namespace = namespace
        self.stale_seconds = (
            stale_seconds if stale_seconds is not None else get_settings().query_stale_seconds
        )

    def full_key(self, key: QueryKey) -> str:
        return f"{KEY_PREFIX}:{self.namespace}:{render_key(key)}"

    @staticmethod
    def _adapter(response_type: Any) -> Optional[TypeAdapter]:
        return TypeAdapter(response_type) if response_type is not None else None

    @staticmethod
    def _encode(data: Any, adapter: Optional[TypeAdapter]) -> str:
        if adapter is not None:
            return adapter.dump_json(data).decode()
        return json.dumps(data, default=str)

    @staticmethod
    def _decode(raw: str, adapter: Optional[TypeAdapter]) -> Any:
        if adapter is not None:
            return adapter.validate_json(raw)
        return json.loads(raw)

    async def get_data(self, key: QueryKey, response_type: Any = None) -> Optional[Any]:
        """Return cached data for ``key`` (None when missing or stale)."""
        raw = await self.store.get(self.full_key(key))
        if raw is None:
            return None
        return self._decode(raw, self._adapter(response_type))

    async def set_data(
        self,
        key: QueryKey,
        data: Any,
        response_type: Any = None,
        stale_seconds: Optional[float] = None,
    ) -> None:
        ttl = self.stale_seconds if stale_seconds is None else stale_seconds
        await self.store.set(self.full_key(key), self._encode(data, self._adapter(response_type)), ttl)

    async def fetch(
        self,
        key: QueryKey,
        loader: Callable[[], Awaitable[T]],
        response_type: Any = None,
        stale_seconds: Optional[float] = None,
    ) -> T:
        """
        Return fresh cached data or load, store and return it.

        Args:
            key: Tuple cache key
            loader: Coroutine factory performing the backend call
            response_type: Type used to (de)serialize the cached value
            stale_seconds: Freshness window (defaults to the client's)

        Returns:
            The loader's result (or its cached copy)
        """
        adapter = self._adapter(response_type)
        full_key = self.full_key(key)

        raw = await self.store.get(full_key)
        if raw is not None:
            logger.debug(f"Query cache hit: {full_key}")
            return self._decode(raw, adapter)

        logger.debug(f"Query cache miss: {full_key}")
        data = await loader()
        ttl = self.stale_seconds if stale_seconds is None else stale_seconds
        await self.store.set(full_key, self._encode(data, adapter), ttl)
        return data

    async def invalidate(self, prefix: QueryKey) -> int:
        """
        Drop every cached entry whose key starts with ``prefix``.

        ``("tables",)`` matches ``("tables",)`` and ``("tables", 3)`` but not
        ``("tables_summary",)``.

        Returns:
            int: Number of dropped entries
        """
        base = self.full_key(prefix)
        exact = 1 if await self.store.get(base) is not None else 0
        await self.store.delete(base)
        removed = exact + await self.store.delete_prefix(f"{base}:")
        logger.debug(f"Query cache invalidated: {base} ({removed} entries)")
        return removed

    async def invalidate_many(self, *prefixes: QueryKey) -> int:
        removed = 0
        for prefix in prefixes:
            removed += await self.invalidate(prefix)
        return removed

    async def clear(self) -> int:
        """Drop every entry of this namespace."""
        return await self.store.delete_prefix(f"{KEY_PREFIX}:{self.namespace}:")

    async def watch(
        self,
        key: QueryKey,
        loader: Callable[[], Awaitable[T]],
        interval_seconds: float,
        response_type: Any = None,
    ) -> AsyncIterator[T]:
        """
        Poll ``loader`` every ``interval_seconds`` and yield changed data.

        The first result is always yielded. Each poll refreshes the cache
        entry for ``key`` so regular screen loads see the polled data.
        Loader errors propagate to the consumer and end the stream.
        """
        adapter = self._adapter(response_type)
        last: Optional[str] = None

        while True:
            data = await loader()
            encoded = self._encode(data, adapter)
            await self.store.set(self.full_key(key), encoded, self.stale_seconds)

            if encoded != last:
                last = encoded
                yield data

            await asyncio.sleep(interval_seconds)
