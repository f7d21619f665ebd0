"""Tests for the in-memory TTL cache."""

from gigmatch.cache import MemoryCache, artist_socials_key, playlist_items_key


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_get_set_and_expiry() -> None:
    clock = FakeClock()
    cache = MemoryCache(default_ttl=60, clock=clock)

    cache.set("k", [1, 2])
    assert cache.get("k") == [1, 2]

    clock.now += 61
    assert cache.get("k") is None
    assert cache.stats()["size"] == 0


def test_per_entry_ttl() -> None:
    clock = FakeClock()
    cache = MemoryCache(default_ttl=60, clock=clock)
    cache.set("short", "a", ttl=5)
    cache.set("long", "b")

    clock.now += 10

    assert cache.clear_expired() == 1
    assert cache.get("long") == "b"


def test_clear_and_clear_all() -> None:
    cache = MemoryCache()
    cache.set("a", 1)
    cache.set("b", 2)

    cache.clear("a")
    cache.clear("missing")
    assert cache.stats() == {"size": 1, "max_size": 1024, "keys": ["b"]}

    cache.clear_all()
    assert cache.get("b") is None


def test_keys() -> None:
    assert playlist_items_key("PL123") == "playlist-items:PL123"
    assert artist_socials_key("Black Coffee") == artist_socials_key("black coffee")


def test_expired_entries_are_dropped_on_write() -> None:
    clock = FakeClock()
    cache = MemoryCache(default_ttl=1, clock=clock)

    for i in range(10_000):
        cache.set(f"key-{i}", i)
        clock.now += 2

    # Only the last entry is still held; every earlier one was purged by a later set
    assert cache.clear_expired() == 1
    assert cache.stats()["size"] == 0


def test_size_bound_evicts_least_recently_used() -> None:
    cache = MemoryCache(max_size=3)
    for key in ("a", "b", "c"):
        cache.set(key, key)
    cache.get("a")

    cache.set("d", "d")

    assert cache.get("b") is None
    assert cache.get("a") == "a"
    assert cache.stats()["size"] == 3
