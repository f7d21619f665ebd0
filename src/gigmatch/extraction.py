"""Artist extraction from noisy listening-history text.

Video titles come in many shapes:
- "Artist - Song Title"
- "Artist Name - Song Title (Official Video)"
- "Song Title by Artist Name"
- "Artist: Song Title"

When the title gives nothing usable, the channel name is the artist
(auto-generated "<Artist> - Topic" channels included).
"""

import re
from collections.abc import Iterable

from .logging import get_logger
from .models import ExtractedArtist, ExtractionResult, ListeningRecord

logger = get_logger(__name__)

TITLE_NOISE_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\(Official Video\)",
        r"\(Official Music Video\)",
        r"\(Official Audio\)",
        r"\(Lyric Video\)",
        r"\(Lyrics\)",
        r"\[Official Video\]",
        r"\[Official Music Video\]",
        r"\[Official Audio\]",
        r"\[Lyric Video\]",
        r"\[Lyrics\]",
    )
]

SEPARATOR_PATTERN = re.compile(r"^([^-:]+)[-:](.+)$", re.DOTALL)
BY_PATTERN = re.compile(r"\s+by\s+([^(\[]+)", re.IGNORECASE)

TOPIC_SUFFIX = " - Topic"
GENERIC_NAMES = {"various artists", "unknown artist"}
MAX_ARTIST_LENGTH = 100


def strip_title_noise(title: str) -> str:
    """Remove "(Official Video)"-style suffixes and surrounding whitespace."""
    cleaned = title
    for pattern in TITLE_NOISE_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return cleaned.strip()


def extract_artist_from_title(title: str) -> str | None:
    """Parse an artist name out of a video title, or None if the title has no artist part."""
    cleaned = strip_title_noise(title)

    match = SEPARATOR_PATTERN.match(cleaned)
    if match:
        artist = match.group(1).strip()
        if artist and len(artist) < MAX_ARTIST_LENGTH and not artist.lower().startswith("official"):
            return artist

    match = BY_PATTERN.search(cleaned)
    if match:
        artist = match.group(1).strip()
        if artist:
            return artist

    return None


def normalize_artist_name(name: str) -> str:
    """Collapse whitespace and normalize "&" / "," spacing. Case is kept as is."""
    normalized = re.sub(r"\s+", " ", name.strip())
    normalized = re.sub(r"\s*&\s*", " & ", normalized)
    normalized = re.sub(r"\s*,\s*", ", ", normalized)
    return normalized.strip()


def resolve_artist(record: ListeningRecord) -> str | None:
    """Resolve the normalized artist for one record, or None if it should not be counted."""
    artist = extract_artist_from_title(record.title)

    if not artist or artist.lower() == "various artists":
        artist = record.channel_text

    if artist and artist.endswith(TOPIC_SUFFIX):
        artist = artist[: -len(TOPIC_SUFFIX)].strip()

    if not artist or not artist.strip() or artist.strip().lower() in GENERIC_NAMES:
        return None

    return normalize_artist_name(artist)


def extract_artists(records: Iterable[ListeningRecord]) -> ExtractionResult:
    """Count artists across a listening history.

    Artists are ordered by descending count; ties keep first-seen order.
    """
    frequencies: dict[str, int] = {}
    skipped = 0

    for record in records:
        artist = resolve_artist(record)
        if artist is None:
            skipped += 1
            continue
        frequencies[artist] = frequencies.get(artist, 0) + 1

    artists = sorted(frequencies, key=lambda name: frequencies[name], reverse=True)

    logger.debug("artists_extracted", unique=len(artists), skipped=skipped)

    return ExtractionResult(artists=artists, frequencies=frequencies)


def extract_unique_artists(records: Iterable[ListeningRecord]) -> list[ExtractedArtist]:
    """Same as extract_artists, shaped as name/count pairs."""
    return extract_artists(records).extracted
