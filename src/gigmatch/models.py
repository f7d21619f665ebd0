"""Pydantic data models for gigmatch.

Listening history comes in as ListeningRecord, events come in from the
source adapters as partially populated Event records and leave the matcher
enriched with scoring fields.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ListeningRecord(BaseModel):
    """One unit of listening history, e.g. one played video."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Video or track title as published")
    channel_text: str = Field(default="", description="Uploader / channel name")


class ExtractedArtist(BaseModel):
    """A normalized artist name with its occurrence count."""

    name: str
    count: int = Field(ge=1)


class ExtractionResult(BaseModel):
    """Artists resolved from a listening history."""

    artists: list[str] = Field(description="Unique names, most frequent first")
    frequencies: dict[str, int] = Field(description="Name -> occurrence count")

    @property
    def extracted(self) -> list[ExtractedArtist]:
        return [ExtractedArtist(name=name, count=self.frequencies[name]) for name in self.artists]


class VibeCategory(BaseModel):
    """Static taste category with its detection keywords and search hooks."""

    model_config = ConfigDict(frozen=True)

    key: str
    display_name: str
    keywords: tuple[str, ...]
    search_terms: tuple[str, ...]
    external_genre_id: str = Field(description="Ticketmaster Discovery genre id")
    weight: int = Field(ge=60, le=95, description="Specificity; higher is more distinctive")


class TasteProfile(BaseModel):
    """Ranked, weighted summary of a listener's inferred vibes."""

    top_vibes: list[str] = Field(default_factory=list, max_length=5)
    vibe_weights: dict[str, int] = Field(
        default_factory=dict, description="Percentage share, only for top vibes"
    )
    vibe_scores: dict[str, float] = Field(
        default_factory=dict, description="Raw weighted frequency per detected vibe"
    )
    genre_ids: list[str] = Field(default_factory=list)
    search_terms: list[str] = Field(default_factory=list)


class EventSourceName(str, Enum):
    """Where an event record came from."""

    CONCERT_UA = "concert-ua"
    KONTRAMARKA = "kontramarka"
    KARABAS = "karabas"
    BANDSINTOWN = "bandsintown"
    TICKETMASTER = "ticketmaster"


class ArtistSocials(BaseModel):
    """Optional external profile links for an artist."""

    youtube: str | None = None
    instagram: str | None = None


class Event(BaseModel):
    """A live event, as returned by a source and enriched by the matcher."""

    id: str = Field(description="Source-prefixed identifier")
    artist_name: str
    venue: str
    date: str = Field(description="ISO 8601 date; kept as text so odd source formats survive")
    time: str | None = None
    location: str = ""
    city: str = ""
    country: str | None = None
    ticket_url: str | None = None
    source: EventSourceName
    image_url: str | None = None
    genres: list[str] | None = None
    distance: float | None = Field(default=None, description="Kilometres from the search point")

    # Scoring enrichment
    is_style_match: bool = False
    is_exact_match: bool = False
    vibe_match: int | None = Field(default=None, ge=0, le=100)
    detected_vibes: list[str] = Field(default_factory=list)
    socials: ArtistSocials | None = None


class ExcludedItem(BaseModel):
    """An event that was dropped by a filter."""

    event_id: str
    name: str = Field(description="Artist @ venue")
    reason: str
    filter_name: str | None = None


class UserLocation(BaseModel):
    """Geolocation supplied by the caller of the nearest-matches flow."""

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    city: str | None = None
    country: str | None = None


class AggregationResult(BaseModel):
    """Merged, deduplicated, upcoming events for a set of artist queries."""

    events: list[Event]
    sources: dict[str, int] = Field(description="Raw result count per source")
    artists_with_events: list[str]
    artists_without_events: list[str]
    excluded_items: list[ExcludedItem] = Field(default_factory=list)


class MatchStats(BaseModel):
    """Counters reported alongside a nearest-matches result."""

    playlists_analyzed: int = 0
    total_records: int
    unique_artists: int
    events_found: int
    exact_artist_matches: int
    style_matches: int
    social_links_found: int = 0
    user_location: UserLocation


class MatchResult(BaseModel):
    """Output of the nearest-matches flow, ready for serialization."""

    top_match: Event | None
    upcoming_gigs: list[Event]
    matches: list[Event]
    artist_frequencies: dict[str, int]
    taste_profile: TasteProfile
    formatted_profile: list[str]
    stats: MatchStats
    metadata: dict[str, Any] = Field(default_factory=dict)
