"""Pipeline orchestrator for gigmatch.

Nearest-matches flow:
1. Extract artists from the listening history
2. Build the taste profile (Pop fallback when no genre is detected)
3. Search events by genre and by top artists, concurrently
4. Score every event against the profile / artist frequencies
5. Filter by quality, rank and cap
6. Attach artist social links to the top matches

Source failures never fail the request: a failing search contributes no
events. Nothing is retried.
"""

import asyncio
import uuid
from collections.abc import Awaitable, Callable, Sequence

from .aggregator import EventAggregator
from .cache import MemoryCache
from .config import Settings, get_settings
from .extraction import extract_artists
from .history import HistorySource
from .history.spotify import SpotifyHistorySource
from .history.youtube import YouTubeHistorySource
from .logging import bind_request_context, get_logger
from .models import AggregationResult, Event, ListeningRecord, MatchResult, MatchStats, UserLocation
from .profile import apply_default_genre, build_profile
from .scoring import score_event
from .sources import EventSource, EventSourceRegistry, SearchQuery
from .sources.musicbrainz import ArtistSocialResolver
from .sources.ticketmaster import TicketmasterSource
from .taxonomy import format_taste_profile

logger = get_logger(__name__)

SOCIALS_FOR_TOP = 3
UPCOMING_GIGS = 3


class MatchPipeline:
    """Main pipeline orchestrator for gigmatch."""

    def __init__(
        self,
        settings: Settings | None = None,
        registry: EventSourceRegistry | None = None,
        geo_source: EventSource | None = None,
        history_source: HistorySource | None = None,
        social_resolver: ArtistSocialResolver | None = None,
        aggregator: EventAggregator | None = None,
        cache: MemoryCache | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the pipeline.

        Args:
            settings: Optional settings override
            registry: Event sources for artist searches (default: from settings)
            geo_source: Source for the nearest-matches flow (default: "ticketmaster" in registry)
            history_source: Listening-history provider for load_history
            social_resolver: Artist social link lookup; None disables it
            aggregator: Event aggregator (default: from settings)
            cache: Shared response cache
            sleep: Delay function between dispatched searches, injectable for tests
        """
        self.settings = settings or get_settings()
        self.cache = cache or MemoryCache(
            default_ttl=self.settings.cache_ttl_seconds,
            max_size=self.settings.cache_max_size,
        )

        self.source_registry = registry or EventSourceRegistry()
        if registry is None:
            self._init_sources()

        self.geo_source = geo_source or self.source_registry.get("ticketmaster")
        self.history_source = history_source or self._default_history_source()
        self.social_resolver = social_resolver
        self.aggregator = aggregator or EventAggregator(
            quality_threshold=self.settings.quality_threshold,
            max_results=self.settings.max_results,
        )
        self._sleep = sleep

    def _init_sources(self) -> None:
        """Register the sources the settings have credentials for."""
        if self.settings.ticketmaster_api_key:
            self.source_registry.register(
                TicketmasterSource(
                    api_key=self.settings.ticketmaster_api_key,
                    timeout=self.settings.request_timeout,
                )
            )

        logger.info("pipeline_initialized", sources=self.source_registry.names)

    def _default_history_source(self) -> HistorySource | None:
        """YouTube when a token is configured, else Spotify when client credentials are."""
        settings = self.settings
        if settings.youtube_access_token:
            return YouTubeHistorySource(
                access_token=settings.youtube_access_token,
                cache=self.cache,
                timeout=settings.request_timeout,
            )
        if settings.spotify_client_id and settings.spotify_client_secret:
            return SpotifyHistorySource(
                client_id=settings.spotify_client_id,
                client_secret=settings.spotify_client_secret,
                cache=self.cache,
            )
        return None

    async def _settle(self, label: str, searches: list[Awaitable[list[Event]]]) -> list[list[Event]]:
        """Await all searches; a failed one becomes an empty list."""
        results = await asyncio.gather(*searches, return_exceptions=True)
        settled: list[list[Event]] = []
        for index, result in enumerate(results):
            if isinstance(result, BaseException):
                logger.error("source_search_failed", search=label, index=index, error=str(result))
                settled.append([])
            else:
                settled.append(result)
        return settled

    async def _bounded(
        self,
        semaphore: asyncio.Semaphore,
        delay: float,
        search: Callable[[], Awaitable[list[Event]]],
    ) -> list[Event]:
        if delay > 0:
            await self._sleep(delay)
        async with semaphore:
            return await search()

    async def load_history(self, playlist_ids: list[str]) -> list[ListeningRecord]:
        """Fetch listening records for the selected playlists.

        Raises:
            ValueError: If no history source is configured
        """
        if self.history_source is None:
            raise ValueError("No listening-history source configured")

        try:
            records = await self.history_source.get_records(playlist_ids)
        except Exception as e:
            logger.error("history_fetch_failed", source=self.history_source.name, error=str(e))
            return []

        logger.info("history_loaded", playlists=len(playlist_ids), records=len(records))
        return records

    async def find_matches(
        self,
        records: Sequence[ListeningRecord],
        location: UserLocation | dict | None,
        radius_km: int | None = None,
        size: int | None = None,
        playlists_analyzed: int = 0,
    ) -> MatchResult:
        """Find the events nearest to the user that fit their listening history.

        Args:
            records: Listening history
            location: User geolocation (required)
            radius_km: Search radius (default from settings)
            size: Maximum matches returned, capped at settings.max_results
            playlists_analyzed: Reported back in stats

        Returns:
            MatchResult ready for serialization

        Raises:
            ValueError: If the location is missing or malformed, or no geo source is configured
        """
        if location is None:
            raise ValueError("Geolocation required: provide latitude and longitude")
        if not isinstance(location, UserLocation):
            location = UserLocation.model_validate(location)
        if self.geo_source is None:
            raise ValueError("No geo-capable event source configured (set TICKETMASTER_API_KEY)")

        bind_request_context(request_id=uuid.uuid4().hex[:8])
        settings = self.settings
        radius = radius_km or settings.search_radius_km

        extraction = extract_artists(records)
        profile = build_profile(extraction.artists, [record.title for record in records])
        formatted_profile = format_taste_profile(profile)
        apply_default_genre(profile)

        logger.info(
            "matching_started",
            records=len(records),
            unique_artists=len(extraction.artists),
            profile=formatted_profile,
            latitude=location.latitude,
            longitude=location.longitude,
        )

        source = self.geo_source
        semaphore = asyncio.Semaphore(settings.max_concurrency)
        genre_query = SearchQuery(
            latitude=location.latitude,
            longitude=location.longitude,
            radius_km=radius,
            size=settings.genre_result_size,
            genre_ids=list(profile.genre_ids),
        )
        artist_query = SearchQuery(
            latitude=location.latitude,
            longitude=location.longitude,
            radius_km=radius,
            size=settings.artist_result_size,
        )
        genre_keyword = profile.search_terms[0] if profile.search_terms else "music"
        artists_to_search = extraction.artists[: settings.artist_search_limit]

        searches = [
            self._bounded(semaphore, 0, lambda: source.search_genre(genre_keyword, genre_query))
        ]
        # Artist searches are dispatched one request_delay apart
        for position, artist in enumerate(artists_to_search, start=1):
            searches.append(
                self._bounded(
                    semaphore,
                    position * settings.request_delay,
                    lambda artist=artist: source.search_artist(artist, artist_query),
                )
            )

        genre_events, *artist_results = await self._settle("nearest_matches", searches)

        all_events: list[Event] = []
        for event in genre_events:
            event.is_style_match = True
            all_events.append(event)
        for artist, events in zip(artists_to_search, artist_results):
            if events:
                logger.info("artist_events_found", artist=artist, count=len(events))
            for event in events:
                event.is_style_match = False
                event.is_exact_match = True
                all_events.append(event)

        # Same id from both searches: the exact-artist copy replaces the genre copy
        unique: dict[str, Event] = {}
        for event in all_events:
            unique[event.id] = event

        scored = [
            score_event(event, profile, extraction.artists, extraction.frequencies)
            for event in unique.values()
        ]
        matches = self.aggregator.rank_matches(scored, limit=size)

        socials_found = await self._attach_socials(matches)

        exact_count = sum(1 for e in matches if e.is_exact_match)
        style_count = sum(1 for e in matches if e.is_style_match and not e.is_exact_match)

        logger.info(
            "matching_complete",
            candidates=len(unique),
            returned=len(matches),
            exact=exact_count,
            style=style_count,
        )

        return MatchResult(
            top_match=matches[0] if matches else None,
            upcoming_gigs=matches[1 : 1 + UPCOMING_GIGS],
            matches=matches,
            artist_frequencies=extraction.frequencies,
            taste_profile=profile,
            formatted_profile=formatted_profile,
            stats=MatchStats(
                playlists_analyzed=playlists_analyzed,
                total_records=len(records),
                unique_artists=len(extraction.artists),
                events_found=len(matches),
                exact_artist_matches=exact_count,
                style_matches=style_count,
                social_links_found=socials_found,
                user_location=location,
            ),
        )

    async def _attach_socials(self, matches: list[Event]) -> int:
        """Attach social links to the top matched artists. Returns how many artists got links."""
        if self.social_resolver is None or not matches:
            return 0

        names = list(dict.fromkeys(event.artist_name for event in matches[:SOCIALS_FOR_TOP]))
        socials = await asyncio.to_thread(self.social_resolver.resolve_many, names)
        for event in matches:
            if event.artist_name in socials:
                event.socials = socials[event.artist_name]
        return len(socials)

    async def find_events(
        self,
        artist_names: Sequence[str],
        city: str | None = None,
        limit: int = 20,
    ) -> AggregationResult:
        """Search every registered source for the given artists and aggregate the results.

        Sources run concurrently; within a source, artist searches run one
        after another, request_delay apart.
        """
        artists = list(artist_names[:limit])
        query = SearchQuery(city=city)
        sources = self.source_registry.all()

        logger.info("searching_events", artists=len(artists), city=city, sources=self.source_registry.names)

        async def search_source(source: EventSource) -> list[Event]:
            events: list[Event] = []
            for index, artist in enumerate(artists):
                if index:
                    await self._sleep(self.settings.request_delay)
                try:
                    events.extend(await source.search_artist(artist, query))
                except Exception as e:
                    logger.error("artist_search_failed", source=source.name, artist=artist, error=str(e))
            return events

        results = await self._settle("find_events", [search_source(source) for source in sources])
        events_by_source = {source.name: events for source, events in zip(sources, results)}

        return self.aggregator.aggregate(events_by_source, artists)

    async def aclose(self) -> None:
        """Close network clients held by sources."""
        for source in self.source_registry.all():
            close = getattr(source, "aclose", None)
            if close:
                await close()
        close = getattr(self.history_source, "aclose", None)
        if close:
            await close()
