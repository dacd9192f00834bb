"""Unit tests for the resource cache."""

from cyclonewatch.models import FreshnessTier
from cyclonewatch.services.cache import CACHE_TTLS, CacheRecord, CacheStore


class TestCacheRecord:
    """Tests for CacheRecord validity."""

    def test_valid_within_ttl(self) -> None:
        record = CacheRecord(value=1, fetched_at=100.0, ttl=300)
        assert record.is_valid(399.9)
        assert not record.is_valid(400.0)

    def test_age(self) -> None:
        assert CacheRecord(value=1, fetched_at=100.0, ttl=300).age(160.0) == 60.0


class TestCacheStoreGetSet:
    """Tests for get/set with TTL expiry."""

    def test_get_within_ttl(self, clock) -> None:
        cache = CacheStore(clock=clock)
        cache.set("cyclone", {"id": "CYC-1"}, ttl=300)
        clock.advance(4 * 60)
        record = cache.get("cyclone")
        assert record is not None
        assert record.value == {"id": "CYC-1"}

    def test_get_after_ttl_evicts(self, clock) -> None:
        cache = CacheStore(clock=clock)
        cache.set("cyclone", {"id": "CYC-1"}, ttl=300)
        clock.advance(6 * 60)
        assert cache.get("cyclone") is None
        assert "cyclone" not in cache.keys()

    def test_get_missing(self, clock) -> None:
        assert CacheStore(clock=clock).get("nope") is None

    def test_set_replaces_record(self, clock) -> None:
        cache = CacheStore(clock=clock)
        cache.set("districts", [1], ttl=300)
        clock.advance(200)
        cache.set("districts", [2], ttl=300)
        clock.advance(200)
        assert cache.get("districts").value == [2]

    def test_get_stale_ignores_ttl(self, clock) -> None:
        cache = CacheStore(clock=clock)
        cache.set("updates", ["old"], ttl=300)
        clock.advance(3600)
        assert cache.get_stale("updates").value == ["old"]
        assert len(cache) == 1

    def test_is_valid(self, clock) -> None:
        cache = CacheStore(clock=clock)
        assert not cache.is_valid("holiday")
        cache.set("holiday", {}, ttl=CACHE_TTLS["holiday"])
        assert cache.is_valid("holiday")
        clock.advance(CACHE_TTLS["holiday"])
        assert not cache.is_valid("holiday")

    def test_clear_one_and_all(self, clock) -> None:
        cache = CacheStore(clock=clock)
        cache.set("a", 1, ttl=60)
        cache.set("b", 2, ttl=60)
        cache.clear("a")
        assert cache.keys() == ["b"]
        cache.clear()
        assert len(cache) == 0


class TestCacheStoreFreshness:
    """Tests for age-based freshness tiers."""

    def test_age_missing(self, clock) -> None:
        assert CacheStore(clock=clock).get_age("x") is None

    def test_age(self, clock) -> None:
        cache = CacheStore(clock=clock)
        cache.set("x", 1, ttl=60)
        clock.advance(42)
        assert cache.get_age("x") == 42

    def test_missing_is_stale_red(self, clock) -> None:
        assert CacheStore(clock=clock).get_freshness("x") == FreshnessTier.STALE_RED

    def test_tiers(self, clock) -> None:
        cache = CacheStore(clock=clock)
        cache.set("x", 1, ttl=300)
        assert cache.get_freshness("x") == FreshnessTier.FRESH
        clock.advance(15 * 60)
        assert cache.get_freshness("x") == FreshnessTier.STALE_YELLOW
        clock.advance(15 * 60)
        assert cache.get_freshness("x") == FreshnessTier.STALE_ORANGE
        clock.advance(30 * 60)
        assert cache.get_freshness("x") == FreshnessTier.STALE_RED

    def test_freshness_independent_of_ttl(self, clock) -> None:
        cache = CacheStore(clock=clock)
        cache.set("x", 1, ttl=60)
        clock.advance(10 * 60)
        assert not cache.is_valid("x")
        assert cache.get_freshness("x") == FreshnessTier.FRESH


class TestCacheStorePrune:
    """Tests for bounding a family of keys."""

    def test_drops_expired_under_prefix(self, clock) -> None:
        cache = CacheStore(clock=clock)
        cache.set("travel_route:A:B", 1, ttl=60)
        cache.set("cyclone", 2, ttl=60)
        clock.advance(61)
        assert cache.prune("travel_route:") == 1
        assert cache.keys() == ["cyclone"]

    def test_drops_oldest_beyond_limit(self, clock) -> None:
        cache = CacheStore(clock=clock)
        for name in "abcd":
            cache.set(f"route:{name}", name, ttl=600)
            clock.advance(1)
        assert cache.prune("route:", max_entries=2) == 2
        assert cache.keys() == ["route:c", "route:d"]

    def test_excluded_key_survives(self, clock) -> None:
        cache = CacheStore(clock=clock)
        cache.set("route:a", 1, ttl=60)
        cache.set("route:b", 2, ttl=60)
        clock.advance(61)
        assert cache.prune("route:", max_entries=0, exclude="route:a") == 1
        assert cache.get_stale("route:a").value == 1
