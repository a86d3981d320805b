"""
Tests for the in-process cache store and freshness rule.
"""

from datetime import datetime, timedelta, timezone

import pytest

from property_lookup.services.repositories.property_cache_repository import (
    InMemoryPropertyCache,
    is_cache_fresh,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestIsCacheFresh:
    def test_just_under_a_day_is_fresh(self):
        assert is_cache_fresh(NOW - timedelta(hours=23, minutes=59), now=NOW) is True

    def test_just_over_a_day_is_stale(self):
        assert is_cache_fresh(NOW - timedelta(hours=24, minutes=1), now=NOW) is False

    def test_exactly_max_age_is_stale(self):
        assert is_cache_fresh(NOW - timedelta(hours=24), now=NOW) is False

    def test_custom_max_age(self):
        assert is_cache_fresh(NOW - timedelta(hours=2), max_age_hours=1, now=NOW) is False
        assert is_cache_fresh(NOW - timedelta(minutes=30), max_age_hours=1, now=NOW) is True

    def test_naive_timestamps_are_utc(self):
        naive = (NOW - timedelta(hours=1)).replace(tzinfo=None)
        assert is_cache_fresh(naive, now=NOW) is True


class TestInMemoryPropertyCache:
    @pytest.mark.asyncio
    async def test_round_trip_by_normalized_key(self, memory_cache):
        payload = {"address": "123 Main St", "assessedValue": {"land": 1, "building": 2, "total": 3}}

        assert await memory_cache.put("123 Main St", payload) is True
        entry = await memory_cache.get("  123 MAIN ST ")

        assert entry.key == "123 main st"
        assert entry.payload == payload

    @pytest.mark.asyncio
    async def test_miss(self, memory_cache):
        assert await memory_cache.get("1 Nowhere Rd") is None

    @pytest.mark.asyncio
    async def test_upsert_replaces_payload_and_counts_access(self, memory_cache, clock):
        await memory_cache.put("123 Main St", {"version": 1})
        created_at = clock()
        clock.advance(hours=2)

        await memory_cache.put("123 main st", {"version": 2})
        entry = await memory_cache.get("123 Main St")

        assert entry.payload == {"version": 2}
        assert entry.created_at == created_at
        assert entry.updated_at == clock()
        assert entry.access_count >= 2

    @pytest.mark.asyncio
    async def test_get_counts_access(self, memory_cache, clock):
        await memory_cache.put("123 Main St", {"version": 1})
        clock.advance(minutes=5)

        first = await memory_cache.get("123 Main St")
        second = await memory_cache.get("123 Main St")

        assert second.access_count == first.access_count + 1
        assert second.last_accessed_at == clock()
        assert second.updated_at == first.updated_at

    @pytest.mark.asyncio
    async def test_stored_payload_is_isolated_from_callers(self, memory_cache):
        payload = {"features": {"floorCount": 2}}
        await memory_cache.put("123 Main St", payload)
        payload["features"]["floorCount"] = 9

        entry = await memory_cache.get("123 Main St")
        entry.payload["features"]["floorCount"] = 7

        assert (await memory_cache.get("123 Main St")).payload == {"features": {"floorCount": 2}}

    @pytest.mark.asyncio
    async def test_sweep_removes_entries_past_retention(self, memory_cache, clock):
        await memory_cache.put("old", {"n": 1})
        clock.advance(days=91)
        await memory_cache.put("new", {"n": 2})

        assert await memory_cache.sweep(90) == 1
        assert await memory_cache.get("old") is None
        assert await memory_cache.get("new") is not None

    @pytest.mark.asyncio
    async def test_sweep_keeps_refreshed_entries(self, memory_cache, clock):
        await memory_cache.put("123 Main St", {"n": 1})
        clock.advance(days=89)
        await memory_cache.put("123 Main St", {"n": 2})
        clock.advance(days=2)

        assert await memory_cache.sweep(90) == 0

    @pytest.mark.asyncio
    async def test_stats(self, memory_cache, clock):
        assert (await memory_cache.stats()).total_entries == 0

        await memory_cache.put("a", {"n": 1})
        first_created = clock()
        clock.advance(hours=1)
        await memory_cache.put("b", {"n": 2})
        await memory_cache.get("b")

        stats = await memory_cache.stats()

        assert stats.total_entries == 2
        assert stats.avg_access_count == 1.5
        assert stats.oldest_entry == first_created
        assert stats.newest_entry == clock()

    @pytest.mark.asyncio
    async def test_health_check(self):
        health = await InMemoryPropertyCache().health_check()

        assert health == {"status": "healthy", "backend": "memory", "total_entries": 0}
