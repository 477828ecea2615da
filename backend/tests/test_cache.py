"""Tests for the base fare cache."""

from datetime import datetime, timedelta

import pytest

from conftest import StubPriceLookup
from train_estimator.cache import BaseFareCache, CachedPriceLookup
from train_estimator.services.price_lookup import PRICE_LOOKUP_FAILED, PriceLookupInterface

WHEN = datetime(2026, 11, 19, 8, 30)


class TestBaseFareCache:
    """Test the in-memory cache level."""

    def test_miss(self):
        assert BaseFareCache().get("Bordeaux", "Paris", WHEN) is None

    def test_set_and_get(self):
        cache = BaseFareCache()
        cache.set("Bordeaux", "Paris", WHEN, 20.0)
        assert cache.get("Bordeaux", "Paris", WHEN) == 20.0

    def test_key_ignores_case_and_time_of_day(self):
        cache = BaseFareCache()
        cache.set("Bordeaux", "Paris", WHEN, 20.0)
        assert cache.get("bordeaux", "PARIS ", WHEN.replace(hour=18)) == 20.0

    def test_key_depends_on_departure_day(self):
        cache = BaseFareCache()
        cache.set("Bordeaux", "Paris", WHEN, 20.0)
        assert cache.get("Bordeaux", "Paris", WHEN + timedelta(days=1)) is None

    def test_expired_entry(self):
        cache = BaseFareCache(ttl=0)
        cache.set("Bordeaux", "Paris", WHEN, 20.0)
        assert cache.get("Bordeaux", "Paris", WHEN) is None

    def test_invalidate_pair(self):
        cache = BaseFareCache()
        cache.set("Bordeaux", "Paris", WHEN, 20.0)
        cache.set("Paris", "Bordeaux", WHEN + timedelta(days=2), 21.0)
        cache.set("Lyon", "Paris", WHEN, 35.0)

        cache.invalidate("Bordeaux", "Paris")

        assert cache.get("Bordeaux", "Paris", WHEN) is None
        assert cache.get("Paris", "Bordeaux", WHEN + timedelta(days=2)) is None
        assert cache.get("Lyon", "Paris", WHEN) == 35.0

    def test_invalidate_single_day(self):
        cache = BaseFareCache()
        cache.set("Bordeaux", "Paris", WHEN, 20.0)
        cache.set("Bordeaux", "Paris", WHEN + timedelta(days=1), 22.0)

        cache.invalidate("Bordeaux", "Paris", WHEN)

        assert cache.get("Bordeaux", "Paris", WHEN) is None
        assert cache.get("Bordeaux", "Paris", WHEN + timedelta(days=1)) == 22.0

    def test_invalidate_all(self):
        cache = BaseFareCache()
        cache.set("Bordeaux", "Paris", WHEN, 20.0)
        cache.set("Lyon", "Paris", WHEN, 35.0)

        cache.invalidate()

        assert cache.get("Bordeaux", "Paris", WHEN) is None
        assert cache.get("Lyon", "Paris", WHEN) is None


class TestCachedPriceLookup:
    """Test the caching lookup wrapper."""

    @pytest.mark.asyncio
    async def test_second_call_is_served_from_cache(self):
        inner = StubPriceLookup(price=20.0)
        lookup = CachedPriceLookup(inner, BaseFareCache())

        assert await lookup.get_price("Bordeaux", "Paris", WHEN) == 20.0
        assert await lookup.get_price("Bordeaux", "Paris", WHEN) == 20.0
        assert len(inner.calls) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sentinel", [PRICE_LOOKUP_FAILED, None, -5, "20", True])
    async def test_failed_lookup_is_not_cached(self, sentinel):
        inner = StubPriceLookup(price=sentinel)
        lookup = CachedPriceLookup(inner, BaseFareCache())

        assert await lookup.get_price("Bordeaux", "Paris", WHEN) == sentinel
        assert await lookup.get_price("Bordeaux", "Paris", WHEN) == sentinel
        assert len(inner.calls) == 2

    def test_implements_protocol(self):
        lookup = CachedPriceLookup(StubPriceLookup(), BaseFareCache())
        assert isinstance(lookup, PriceLookupInterface)
