"""
Tests for the database-backed HTTP cache.
"""
from datetime import datetime, timedelta

from aion_view.models import HttpCache
from aion_view.services import cache_service


class TestCacheKey:
    def test_sorted_params(self):
        a = cache_service.generate_cache_key("rounds:list", {"b": 1, "a": 2})
        b = cache_service.generate_cache_key("rounds:list", {"a": 2, "b": 1})
        assert a == b
        assert a.startswith("rounds:list:")

    def test_no_params(self):
        assert cache_service.generate_cache_key("critical:flags") == "critical:flags:{}"


class TestCacheStorage:
    """Tests for get/set/expiry and prefix invalidation."""

    async def test_set_and_get(self, db):
        await cache_service.set_cache(db, "a:1", {"items": [1, 2]})
        assert await cache_service.get_cache(db, "a:1") == {"items": [1, 2]}

    async def test_set_replaces(self, db):
        await cache_service.set_cache(db, "a:1", [1])
        await cache_service.set_cache(db, "a:1", [2])
        assert await cache_service.get_cache(db, "a:1") == [2]

    async def test_miss(self, db):
        assert await cache_service.get_cache(db, "nada") is None

    async def test_expired_entry_is_removed(self, db):
        db.add(HttpCache(key="old:1", payload="[1]", created_at=datetime.utcnow() - timedelta(hours=2)))
        await db.commit()

        assert await cache_service.get_cache(db, "old:1", ttl_minutes=30) is None
        assert await db.get(HttpCache, "old:1") is None

    async def test_clear_by_prefix(self, db):
        await cache_service.set_cache(db, "rounds:list:{}", [])
        await cache_service.set_cache(db, "rounds:os-available:{}", [])
        await cache_service.set_cache(db, "roundsx:other:{}", [])
        await cache_service.set_cache(db, "critical:kpi:{}", {})

        removed = await cache_service.clear_cache(db, "rounds")

        assert removed == 2
        assert await cache_service.get_cache(db, "roundsx:other:{}") == []
        assert await cache_service.get_cache(db, "critical:kpi:{}") == {}

    async def test_clear_all(self, db):
        await cache_service.set_cache(db, "a:1", 1)
        await cache_service.set_cache(db, "b:1", 2)
        assert await cache_service.clear_cache(db) == 2

    async def test_clean_expired(self, db):
        db.add(HttpCache(key="old:1", payload="1", created_at=datetime.utcnow() - timedelta(hours=2)))
        await db.commit()
        await cache_service.set_cache(db, "new:1", 1)

        assert await cache_service.clean_expired_cache(db, ttl_minutes=30) == 1
        assert await cache_service.get_cache(db, "new:1") == 1


class TestCached:
    async def test_producer_called_once(self, db):
        calls = []

        async def producer():
            calls.append(1)
            return {"value": 42}

        assert await cache_service.cached(db, "x:1", producer) == {"value": 42}
        assert await cache_service.cached(db, "x:1", producer) == {"value": 42}
        assert len(calls) == 1

    async def test_mock_mode_bypasses_cache(self, db, mock_mode):
        calls = []

        async def producer():
            calls.append(1)
            return len(calls)

        assert await cache_service.cached(db, "x:1", producer) == 1
        assert await cache_service.cached(db, "x:1", producer) == 2
        assert await db.get(HttpCache, "x:1") is None
