"""
Tests for the memory cache store and the query cache on top of it.
"""

import pytest

from dashboard.schemas import Table
from dashboard.services.cache import MemoryCacheStore
from dashboard.services.query import QueryClient


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemoryCacheStore(clock=clock)


class TestMemoryCacheStore:

    @pytest.mark.asyncio
    async def test_expiry(self, store, clock):
        await store.set("a", "1", ttl_seconds=10)
        assert await store.get("a") == "1"
        clock.now += 10
        assert await store.get("a") is None

    @pytest.mark.asyncio
    async def test_no_ttl_never_expires(self, store, clock):
        await store.set("a", "1")
        clock.now += 10_000
        assert await store.get("a") == "1"

    @pytest.mark.asyncio
    async def test_delete_prefix(self, store):
        for key in ("x:1", "x:2", "y:1"):
            await store.set(key, "v")
        assert await store.delete_prefix("x:") == 2
        assert store.keys() == ["y:1"]

    @pytest.mark.asyncio
    async def test_untouched_expired_entries_are_swept_on_set(self, store, clock):
        """Abandoned sessions do not pile up when nobody reads them again."""
        for n in range(3):
            await store.set(f"session:{n}", "{}", ttl_seconds=30)
        await store.set("kept", "v")
        clock.now += MemoryCacheStore.SWEEP_INTERVAL_SECONDS
        await store.set("fresh", "v", ttl_seconds=30)
        assert store.entry_count() == 2
        assert sorted(store.keys()) == ["fresh", "kept"]

    @pytest.mark.asyncio
    async def test_no_sweep_before_interval(self, store, clock):
        await store.set("a", "1", ttl_seconds=1)
        clock.now += 5
        await store.set("b", "2")
        assert store.entry_count() == 2
        assert store.purge_expired() == 1
        assert store.entry_count() == 1


class TestQueryClient:
    """Cache-aside fetch and prefix invalidation."""

    @pytest.mark.asyncio
    async def test_fetch_caches_until_stale(self, store, clock):
        query = QueryClient(store, namespace="2", stale_seconds=30)
        calls = []

        async def loader():
            calls.append(1)
            return {"count": len(calls)}

        assert await query.fetch(("tables", 1), loader) == {"count": 1}
        assert await query.fetch(("tables", 1), loader) == {"count": 1}
        clock.now += 31
        assert await query.fetch(("tables", 1), loader) == {"count": 2}
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_invalidate_matches_whole_segments(self, store):
        query = QueryClient(store, namespace="2", stale_seconds=30)
        await query.set_data(("tables",), [1])
        await query.set_data(("tables", 1), [2])
        await query.set_data(("tables_summary",), [3])

        assert await query.invalidate(("tables",)) == 2
        assert await query.get_data(("tables",)) is None
        assert await query.get_data(("tables", 1)) is None
        assert await query.get_data(("tables_summary",)) == [3]

    @pytest.mark.asyncio
    async def test_namespaces_are_isolated(self, store):
        """One user's entries are invisible to another."""
        first = QueryClient(store, namespace="2", stale_seconds=30)
        second = QueryClient(store, namespace="3", stale_seconds=30)
        await first.set_data(("restaurants",), ["Bella Vista"])

        assert await second.get_data(("restaurants",)) is None
        await second.clear()
        assert await first.get_data(("restaurants",)) == ["Bella Vista"]

    @pytest.mark.asyncio
    async def test_typed_round_trip(self, store):
        query = QueryClient(store, namespace="2", stale_seconds=30)

        async def loader():
            return [Table(id=1, name="Table 1", guest_count=2)]

        await query.fetch(("tables", 1), loader, response_type=list[Table])
        cached = await query.get_data(("tables", 1), response_type=list[Table])
        assert cached[0].name == "Table 1"
        assert cached[0].guest_count == 2

    @pytest.mark.asyncio
    async def test_watch_yields_only_changes(self, store):
        query = QueryClient(store, namespace="2", stale_seconds=30)
        values = iter([1, 1, 2, 2, 3])

        async def loader():
            return next(values)

        seen = []
        async for value in query.watch(("messages", 1), loader, interval_seconds=0):
            seen.append(value)
            if len(seen) == 3:
                break
        assert seen == [1, 2, 3]
        assert await query.get_data(("messages", 1)) == 3
