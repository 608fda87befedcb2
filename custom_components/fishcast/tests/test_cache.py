from datetime import datetime

import pytest

from custom_components.fishcast.cache import MemoryResultCache, coord_key, hour_key


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_coord_key_rounds_to_two_decimals():
    assert coord_key("fishcast", 40.7128, -74.0061) == "fishcast_40.71_-74.01"
    assert coord_key("fishcast", 40.7131, -74.0058) == coord_key("fishcast", 40.7128, -74.0061)


def test_hour_key():
    assert hour_key(datetime(2025, 6, 21, 6, 59)) == "2025062106"


@pytest.mark.asyncio
async def test_get_set_and_expiry():
    clock = FakeClock()
    cache = MemoryResultCache(clock=clock)
    await cache.set("a", {"score": 70}, 60)
    assert await cache.get("a") == {"score": 70}

    clock.now += 59
    assert await cache.get("a") == {"score": 70}

    clock.now += 1
    assert await cache.get("a") is None
    assert cache.stats()["total_entries"] == 0


@pytest.mark.asyncio
async def test_missing_key():
    assert await MemoryResultCache().get("nope") is None


@pytest.mark.asyncio
async def test_invalidate_and_clear():
    cache = MemoryResultCache()
    await cache.set("a", 1, 60)
    await cache.set("b", 2, 60)
    await cache.invalidate("a")
    assert await cache.get("a") is None
    assert await cache.get("b") == 2
    await cache.clear()
    assert await cache.get("b") is None


@pytest.mark.asyncio
async def test_stats_counts_expired_entries():
    clock = FakeClock()
    cache = MemoryResultCache(clock=clock)
    await cache.set("short", 1, 10)
    await cache.set("long", 2, 100)
    clock.now += 50
    assert cache.stats() == {"total_entries": 2, "valid_entries": 1, "expired_entries": 1}
