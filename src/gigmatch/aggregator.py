"""Event aggregation across ticketing sources.

Two paths share this module:

1. aggregate(): artist-keyword searches from several sources are merged,
   deduplicated, cut to upcoming dates and sorted chronologically.
2. rank_matches(): scored events from the nearest-matches flow are cut by
   match quality, ranked and capped.
"""

from collections.abc import Mapping, Sequence
from datetime import date
from functools import cmp_to_key
from typing import Callable
from urllib.parse import quote

from .filters import FilterChain, QualityFilter, UpcomingEventFilter, parse_event_date
from .logging import get_logger
from .models import AggregationResult, Event
from .scoring import score_frequency_match, score_style_match

logger = get_logger(__name__)

DEFAULT_QUALITY_THRESHOLD = 75
DEFAULT_MAX_RESULTS = 15


def dedup_key(event: Event) -> str:
    return f"{event.artist_name.lower()}|{event.venue.lower()}|{event.date}"


def _date_sort_key(event: Event) -> tuple[bool, date]:
    parsed = parse_event_date(event.date)
    return (parsed is None, parsed or date.max)


def _compare_matches(a: Event, b: Event) -> int:
    if a.is_exact_match != b.is_exact_match:
        return -1 if a.is_exact_match else 1

    a_score, b_score = a.vibe_match or 0, b.vibe_match or 0
    if a_score != b_score:
        return b_score - a_score

    if a.distance is not None and b.distance is not None:
        return (a.distance > b.distance) - (a.distance < b.distance)

    return 0


class EventAggregator:
    """Merges and ranks event lists coming from the source adapters."""

    def __init__(
        self,
        today: Callable[[], date] = date.today,
        quality_threshold: int = DEFAULT_QUALITY_THRESHOLD,
        max_results: int = DEFAULT_MAX_RESULTS,
    ):
        """Initialize the aggregator.

        Args:
            today: Returns the current day; injectable for tests
            quality_threshold: Minimum vibe match kept by rank_matches
            max_results: Cap applied by rank_matches
        """
        self._today = today
        self.quality_threshold = quality_threshold
        self.max_results = max_results

    @staticmethod
    def deduplicate(events: Sequence[Event]) -> list[Event]:
        """Collapse events with the same artist, venue and date.

        The first copy wins unless a later one has a ticket URL and it does not.
        """
        seen: dict[str, Event] = {}
        for event in events:
            key = dedup_key(event)
            existing = seen.get(key)
            if existing is None or (event.ticket_url and not existing.ticket_url):
                seen[key] = event
        return list(seen.values())

    def filter_upcoming(self, events: Sequence[Event]) -> list[Event]:
        return UpcomingEventFilter(today=self._today).apply(list(events)).included

    @staticmethod
    def sort_by_date(events: Sequence[Event]) -> list[Event]:
        """Earliest first; undated events go last, ties keep input order."""
        return sorted(events, key=_date_sort_key)

    def aggregate(
        self,
        events_by_source: Mapping[str, Sequence[Event]],
        artist_queries: Sequence[str] = (),
    ) -> AggregationResult:
        """Merge per-source results into one upcoming, deduplicated, dated list.

        Args:
            events_by_source: Raw results keyed by source name
            artist_queries: The artist names that were searched for

        Returns:
            AggregationResult with per-source counts and artist coverage
        """
        all_events = [event for events in events_by_source.values() for event in events]
        unique = self.deduplicate(all_events)

        filter_result = FilterChain().add(UpcomingEventFilter(today=self._today)).apply(unique)
        ordered = self.sort_by_date(filter_result.included)

        artists_with_events = list(dict.fromkeys(event.artist_name for event in ordered))
        covered = set(artists_with_events)
        artists_without_events = [artist for artist in artist_queries if artist not in covered]

        logger.info(
            "events_aggregated",
            raw=len(all_events),
            unique=len(unique),
            upcoming=len(ordered),
            artists_with_events=len(artists_with_events),
            artists_queried=len(artist_queries),
        )

        return AggregationResult(
            events=ordered,
            sources={source: len(events) for source, events in events_by_source.items()},
            artists_with_events=artists_with_events,
            artists_without_events=artists_without_events,
            excluded_items=filter_result.excluded,
        )

    def rank_matches(
        self,
        events: Sequence[Event],
        apply_quality_filter: bool = True,
        limit: int | None = None,
    ) -> list[Event]:
        """Rank scored events for the nearest-matches flow.

        Exact-artist hits first, then higher vibe match, then closer venues
        (only when both distances are known). A limit can only tighten
        max_results, never raise it.
        """
        candidates = list(events)
        if apply_quality_filter:
            result = QualityFilter(self.quality_threshold).apply(candidates)
            candidates = result.included
            logger.debug("low_quality_matches_dropped", count=len(result.excluded))

        ranked = sorted(candidates, key=cmp_to_key(_compare_matches))
        cap = min(limit, self.max_results) if limit else self.max_results
        return ranked[:cap]

    @staticmethod
    def get_top_matches(
        events: Sequence[Event],
        frequencies: Mapping[str, int],
        limit: int = 10,
    ) -> list[Event]:
        """Rank events by how much the user plays the performer (70-99 scale), then by date."""
        for event in events:
            event.vibe_match = score_frequency_match(event.artist_name, frequencies)
            event.is_exact_match = event.vibe_match > 0
        ranked = sorted(events, key=lambda e: (-(e.vibe_match or 0), _date_sort_key(e)))
        return ranked[:limit]

    @staticmethod
    def get_smart_matches(
        events: Sequence[Event],
        frequencies: Mapping[str, int],
        user_top_genres: Sequence[str],
        limit: int = 10,
    ) -> list[Event]:
        """Exact-artist hits plus genre-tag hits; unmatched events are dropped."""
        matched: list[Event] = []
        for event in events:
            score = score_frequency_match(event.artist_name, frequencies)
            if score > 0:
                event.is_style_match = False
            else:
                score = score_style_match(event.genres or [], user_top_genres)
                event.is_style_match = score > 0
            event.vibe_match = score
            if score > 0:
                matched.append(event)

        ranked = sorted(
            matched,
            key=lambda e: (e.is_style_match, -(e.vibe_match or 0), _date_sort_key(e)),
        )
        return ranked[:limit]

    @staticmethod
    def search_links(artist_name: str) -> dict[str, str]:
        """Manual search URLs for an artist the sources found nothing for."""
        return {
            "concert-ua": f"https://concert.ua/uk/search?q={quote(artist_name, safe='')}",
            "kontramarka": f"https://kontramarka.ua/uk/search/{quote(artist_name, safe='')}",
            "karabas": f"https://karabas.com/search?query={quote(artist_name, safe='')}",
        }
