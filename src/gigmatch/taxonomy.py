"""Vibe taxonomy: genre-like categories with keyword detection.

Each category carries the keywords used to spot it in free text, the
terms used to search ticketing sites for it, and the Ticketmaster
Discovery genre id it maps to. Weight is a specificity constant: niche
scenes (Afrohouse) outrank catch-all buckets (Pop, Electronic).

The table is built once at import time and exposed read-only.
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .extraction import normalize_artist_name
from .models import TasteProfile, VibeCategory

# Ticketmaster Discovery genre ids
TM_ELECTRONIC = "KnvZfZ7vAe1"
TM_HIP_HOP = "KnvZfZ7vAev"
TM_POP = "KnvZfZ7vAev"
TM_ROCK = "KnvZfZ7vAeA"
TM_ALTERNATIVE = "KnvZfZ7vAed"
TM_METAL = "KnvZfZ7vAvv"
TM_RNB = "KnvZfZ7vAee"
TM_JAZZ = "KnvZfZ7vAvE"
TM_LATIN = "KnvZfZ7vAJ6"
TM_COUNTRY = "KnvZfZ7vAv6"


def _category(
    key: str,
    display_name: str,
    keywords: Iterable[str],
    search_terms: Iterable[str],
    genre_id: str,
    weight: int,
) -> VibeCategory:
    return VibeCategory(
        key=key,
        display_name=display_name,
        keywords=tuple(keywords),
        search_terms=tuple(search_terms),
        external_genre_id=genre_id,
        weight=weight,
    )


_CATEGORIES = [
    # Electronic & dance
    _category(
        "AFROHOUSE", "Afrohouse",
        ["afrohouse", "afro house", "afro-house", "afrobeat", "organic house", "amapiano"],
        ["afrohouse", "afro house", "organic house"],
        TM_ELECTRONIC, 95,
    ),
    _category(
        "TECHNO", "Techno",
        ["techno", "minimal techno", "detroit techno", "hard techno", "industrial techno"],
        ["techno", "techno party", "rave"],
        TM_ELECTRONIC, 92,
    ),
    _category(
        "HOUSE", "House",
        ["house", "deep house", "tech house", "progressive house", "bass house"],
        ["house music", "deep house", "tech house"],
        TM_ELECTRONIC, 88,
    ),
    _category(
        "ELECTRONIC", "Electronic",
        [
            "electronic", "edm", "electronica", "electronic music", "dance music",
            "dj", "mix", "remix", "club", "rave", "festival", "beat", "synth",
            "melodic", "progressive", "dubstep", "trap music", "bass music",
        ],
        ["electronic", "edm", "dance"],
        TM_ELECTRONIC, 75,
    ),
    _category(
        "DRUM_AND_BASS", "Drum & Bass",
        ["drum and bass", "dnb", "d&b", "jungle", "liquid"],
        ["drum and bass", "dnb"],
        TM_ELECTRONIC, 90,
    ),
    _category(
        "TRANCE", "Trance",
        ["trance", "psytrance", "progressive trance", "uplifting trance"],
        ["trance", "psytrance"],
        TM_ELECTRONIC, 90,
    ),
    # Hip-hop & urban
    _category(
        "HIP_HOP", "Hip-Hop",
        [
            "hip hop", "hip-hop", "hiphop", "rap", "rapper", "mc",
            "ft.", "feat.", "featuring", "cypher", "freestyle", "bars",
            "drill", "grime", "boom bap", "conscious rap",
        ],
        ["hip hop", "rap"],
        TM_HIP_HOP, 85,
    ),
    _category("TRAP", "Trap", ["trap", "trap music", "trap beats"], ["trap"], TM_HIP_HOP, 85),
    # Rock & alternative
    _category(
        "ROCK", "Rock",
        ["rock", "rock music", "classic rock"],
        ["rock", "rock concert"],
        TM_ROCK, 80,
    ),
    _category(
        "INDIE", "Indie",
        ["indie", "indie rock", "indie pop", "alternative", "alt rock"],
        ["indie", "alternative"],
        TM_ALTERNATIVE, 85,
    ),
    _category(
        "METAL", "Metal",
        ["metal", "heavy metal", "metalcore", "death metal", "black metal"],
        ["metal", "heavy metal"],
        TM_METAL, 90,
    ),
    # Pop & mainstream
    _category(
        "POP", "Pop",
        [
            "pop", "pop music", "mainstream", "top 40", "chart",
            "viral", "hit", "single", "album", "official video",
            "music video", "lyric video",
        ],
        ["pop", "pop concert"],
        TM_POP, 70,
    ),
    _category(
        "RNB", "R&B",
        ["r&b", "rnb", "rhythm and blues", "soul", "neo soul"],
        ["rnb", "soul"],
        TM_RNB, 85,
    ),
    _category(
        "JAZZ", "Jazz",
        ["jazz", "jazz music", "bebop", "smooth jazz", "fusion"],
        ["jazz", "jazz club"],
        TM_JAZZ, 90,
    ),
    # Latin & world
    _category(
        "REGGAETON", "Reggaeton",
        ["reggaeton", "reggaetón", "latin trap", "dembow"],
        ["reggaeton", "latin"],
        TM_LATIN, 90,
    ),
    _category(
        "LATIN", "Latin",
        ["latin", "salsa", "bachata", "merengue", "cumbia"],
        ["latin", "salsa"],
        TM_LATIN, 85,
    ),
    _category(
        "COUNTRY", "Country",
        ["country", "country music", "folk", "americana"],
        ["country", "folk"],
        TM_COUNTRY, 85,
    ),
    _category(
        "UKRAINIAN_POP", "Ukrainian Pop",
        ["ukrainian", "ukrainian pop", "ukrainian music", "україна", "українська"],
        ["ukrainian", "ukraine"],
        TM_POP, 95,
    ),
]

VIBE_CATEGORIES: Mapping[str, VibeCategory] = MappingProxyType(
    {category.key: category for category in _CATEGORIES}
)

# Artists whose names give no keyword away. Normalized, lowercased name -> vibe keys.
KNOWN_ARTIST_VIBES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "black coffee": ("AFROHOUSE",),
        "keinemusik": ("AFROHOUSE",),
        "& me": ("AFROHOUSE",),
        "adam port": ("AFROHOUSE",),
        "rampa": ("AFROHOUSE",),
        "themba": ("AFROHOUSE",),
        "amelie lens": ("TECHNO",),
        "charlotte de witte": ("TECHNO",),
        "adam beyer": ("TECHNO",),
        "nina kraviz": ("TECHNO",),
        "jeff mills": ("TECHNO",),
        "ben klock": ("TECHNO",),
        "fisher": ("HOUSE",),
        "chris lake": ("HOUSE",),
        "john summit": ("HOUSE",),
        "peggy gou": ("HOUSE",),
        "andy c": ("DRUM_AND_BASS",),
        "sub focus": ("DRUM_AND_BASS",),
        "armin van buuren": ("TRANCE",),
        "kendrick lamar": ("HIP_HOP",),
        "travis scott": ("HIP_HOP", "TRAP"),
        "future": ("TRAP",),
        "metallica": ("METAL",),
        "bad bunny": ("REGGAETON",),
        "okean elzy": ("UKRAINIAN_POP",),
        "jamala": ("UKRAINIAN_POP",),
    }
)


def detect_vibes(text: str) -> list[str]:
    """Return the vibe keys whose keywords occur in text (case-insensitive substring match).

    Each category appears at most once, in table order.
    """
    normalized = text.lower()
    detected: list[str] = []

    for key, category in VIBE_CATEGORIES.items():
        if any(keyword.lower() in normalized for keyword in category.keywords):
            detected.append(key)

    return detected


def artist_vibes(artist_name: str) -> list[str]:
    """Keyword-detected vibes for an artist name plus any known-artist hints."""
    vibes = detect_vibes(artist_name)
    for vibe in KNOWN_ARTIST_VIBES.get(normalize_artist_name(artist_name).lower(), ()):
        if vibe not in vibes:
            vibes.append(vibe)
    return vibes


def get_vibe_name(vibe_key: str) -> str:
    category = VIBE_CATEGORIES.get(vibe_key)
    return category.display_name if category else vibe_key


def get_vibe_search_terms(vibe_key: str) -> list[str]:
    category = VIBE_CATEGORIES.get(vibe_key)
    return list(category.search_terms) if category else []


def get_genre_id(vibe_key: str) -> str | None:
    category = VIBE_CATEGORIES.get(vibe_key)
    return category.external_genre_id if category else None


def format_taste_profile(profile: TasteProfile) -> list[str]:
    """Render top vibes as "Name (NN%)" strings."""
    return [
        f"{get_vibe_name(vibe)} ({profile.vibe_weights.get(vibe, 0)}%)"
        for vibe in profile.top_vibes
    ]
