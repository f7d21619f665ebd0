"""In-memory TTL cache for upstream API responses.

Caches:
- Playlist id -> listening records
- Artist name -> social profile links

Backed by cachetools.TLRUCache so every entry carries its own lifetime and
the cache never grows past maxsize. Concurrent readers may see a stale
value; there are no transactional guarantees.
"""

import time
from typing import Any, Callable, NamedTuple

from cachetools import TLRUCache

from .logging import get_logger

logger = get_logger(__name__)

PLAYLIST_ITEMS_TTL = 60 * 60 * 12
ARTIST_SOCIALS_TTL = 60 * 60 * 24 * 7


def playlist_items_key(playlist_id: str) -> str:
    return f"playlist-items:{playlist_id}"


def artist_socials_key(artist_name: str) -> str:
    return f"artist-socials:{artist_name.lower()}"


class _Entry(NamedTuple):
    value: Any
    ttl: float


def _time_to_use(key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class MemoryCache:
    """Process-local key/value cache with per-entry TTL and a size bound."""

    DEFAULT_TTL_SECONDS = 60 * 60
    DEFAULT_MAX_SIZE = 1024

    def __init__(
        self,
        default_ttl: float | None = None,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache.

        Args:
            default_ttl: TTL in seconds for entries set without an explicit one
            max_size: Entry count past which the least recently used entry is evicted
            clock: Time source, injectable for tests
        """
        self.default_ttl = default_ttl or self.DEFAULT_TTL_SECONDS
        self._cache: TLRUCache[str, _Entry] = TLRUCache(maxsize=max_size, ttu=_time_to_use, timer=clock)

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None when missing or expired."""
        entry = self._cache.get(key)
        if entry is None:
            logger.debug("cache_miss", key=key)
            return None

        logger.debug("cache_hit", key=key)
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store a value for ttl seconds (default TTL when omitted)."""
        self._cache[key] = _Entry(value=value, ttl=ttl or self.default_ttl)
        logger.debug("cache_set", key=key, ttl=ttl or self.default_ttl)

    def clear(self, key: str) -> None:
        """Drop one entry (no-op if absent)."""
        self._cache.pop(key, None)

    def clear_expired(self) -> int:
        """Drop all expired entries. Returns count of deleted entries."""
        before = len(self._cache)
        self._cache.expire()
        return before - len(self._cache)

    def clear_all(self) -> None:
        """Drop every entry."""
        size = len(self._cache)
        self._cache.clear()
        logger.info("cache_cleared", entries=size)

    def stats(self) -> dict[str, Any]:
        self._cache.expire()
        return {"size": len(self._cache), "max_size": self._cache.maxsize, "keys": list(self._cache)}
