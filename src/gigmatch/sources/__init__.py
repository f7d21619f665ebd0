"""Event source interface and registry.

Every ticketing source implements the EventSource protocol so the
pipeline can fan searches out to all of them the same way.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ..models import Event


@dataclass
class SearchQuery:
    """Where and how much to search. Geo fields are ignored by city-only sources."""

    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    radius_km: int = 1000
    size: int = 15
    genre_ids: list[str] = field(default_factory=list)


@runtime_checkable
class EventSource(Protocol):
    """Protocol for live event sources.

    Implementations return an empty list, never raise, when the upstream
    service fails or answers with a non-2xx status.
    """

    @property
    def name(self) -> str:
        """Source identifier, matching EventSourceName values."""
        ...

    async def search_artist(self, artist_name: str, query: SearchQuery) -> list[Event]:
        """Find upcoming events for one performer.

        Args:
            artist_name: Performer to look for
            query: Location and size limits

        Returns:
            Events, partially populated (no scoring fields)
        """
        ...

    async def search_genre(self, keyword: str, query: SearchQuery) -> list[Event]:
        """Find upcoming events for a genre keyword (or query.genre_ids for id-aware sources)."""
        ...


class BaseEventSource(ABC):
    """Abstract base class for event sources."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def search_artist(self, artist_name: str, query: SearchQuery) -> list[Event]:
        pass

    @abstractmethod
    async def search_genre(self, keyword: str, query: SearchQuery) -> list[Event]:
        pass

    async def aclose(self) -> None:
        """Release network resources. No-op by default."""


class EventSourceRegistry:
    """Registry for managing multiple event sources."""

    def __init__(self):
        self._sources: dict[str, EventSource] = {}

    def register(self, source: EventSource) -> None:
        self._sources[source.name] = source

    def get(self, name: str) -> EventSource | None:
        return self._sources.get(name)

    def all(self) -> list[EventSource]:
        return list(self._sources.values())

    @property
    def names(self) -> list[str]:
        return list(self._sources.keys())


__all__ = ["BaseEventSource", "EventSource", "EventSourceRegistry", "SearchQuery"]
