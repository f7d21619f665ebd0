"""Event filters for gigmatch.

Filters operate on scored or raw Event records and report what they drop.
Add new filters by implementing the Filter protocol.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ..models import Event, ExcludedItem


@dataclass
class FilterResult:
    """Result of applying a filter."""

    included: list[Event] = field(default_factory=list)
    excluded: list[ExcludedItem] = field(default_factory=list)


@runtime_checkable
class Filter(Protocol):
    """Protocol for event filters.

    Filters must not reorder the events they keep.
    """

    @property
    def name(self) -> str:
        """Unique identifier for this filter."""
        ...

    def apply(self, events: list[Event]) -> FilterResult:
        """Apply the filter to a list of events.

        Args:
            events: Events to filter

        Returns:
            FilterResult with included and excluded items
        """
        ...


class BaseFilter(ABC):
    """Abstract base class for filters with common functionality."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def exclusion_reason(self, event: Event) -> str | None:
        """Why the event is dropped, or None to keep it."""
        pass

    def apply(self, events: list[Event]) -> FilterResult:
        result = FilterResult()
        for event in events:
            reason = self.exclusion_reason(event)
            if reason is None:
                result.included.append(event)
            else:
                result.excluded.append(
                    ExcludedItem(
                        event_id=event.id,
                        name=f"{event.artist_name} @ {event.venue}",
                        reason=reason,
                        filter_name=self.name,
                    )
                )
        return result


class FilterChain:
    """Chain of filters applied sequentially.

    Each filter receives the included items from the previous filter.
    Excluded items accumulate across all filters.
    """

    def __init__(self):
        self._filters: list[Filter] = []

    def add(self, filter: Filter) -> "FilterChain":
        """Add a filter to the chain. Returns self for chaining."""
        self._filters.append(filter)
        return self

    def apply(self, events: list[Event]) -> FilterResult:
        """Apply all filters in sequence."""
        current = events
        all_excluded: list[ExcludedItem] = []

        for filter in self._filters:
            result = filter.apply(current)
            current = result.included
            all_excluded.extend(result.excluded)

        return FilterResult(included=current, excluded=all_excluded)

    @property
    def filters(self) -> list[Filter]:
        return self._filters.copy()


from .quality import QualityFilter
from .upcoming import UpcomingEventFilter, parse_event_date

__all__ = [
    "Filter",
    "FilterResult",
    "BaseFilter",
    "FilterChain",
    "QualityFilter",
    "UpcomingEventFilter",
    "parse_event_date",
]
