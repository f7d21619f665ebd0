"""Taste profile aggregation.

Artist names count fully towards a vibe, titles count half. The top five
vibes by frequency x category weight make up the profile; their
percentages, genre ids and search terms drive the event search.
"""

import math
import re
from collections.abc import Sequence

from .logging import get_logger
from .models import TasteProfile
from .taxonomy import TM_POP, VIBE_CATEGORIES, artist_vibes, detect_vibes

logger = get_logger(__name__)

ARTIST_SCORE = 1.0
TITLE_SCORE = 0.5
MAX_TOP_VIBES = 5

# Descriptor fallbacks for histories without a single genre keyword
DESCRIPTOR_FALLBACKS = [
    (re.compile(r"\b(?:dj|mix|remix|beat|club|rave|festival|edm|dance)\b", re.IGNORECASE), "ELECTRONIC", 0.5),
    (re.compile(r"(?:\bft\.|\bfeat\.|\b(?:featuring|cypher|freestyle|bars)\b)", re.IGNORECASE), "HIP_HOP", 0.5),
    (re.compile(r"\b(?:live|concert|tour|band|guitar|session)\b", re.IGNORECASE), "ROCK", 0.3),
]

DEFAULT_VIBE = "POP"
DEFAULT_GENRE_ID = TM_POP


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _percentages(scores: dict[str, float]) -> dict[str, int]:
    """Rounded percentage shares that never add up to more than 100."""
    total = sum(scores.values())
    if total <= 0:
        return {}

    exact = {vibe: 100 * score / total for vibe, score in scores.items()}
    rounded = {vibe: round_half_up(share) for vibe, share in exact.items()}

    # Rounding several halves up can overshoot; take the excess back from the
    # entries that were rounded up the most.
    overflow = sum(rounded.values()) - 100
    for vibe in sorted(rounded, key=lambda v: rounded[v] - exact[v], reverse=True):
        if overflow <= 0:
            break
        rounded[vibe] -= 1
        overflow -= 1

    return rounded


def build_profile(artists: Sequence[str], titles: Sequence[str] = ()) -> TasteProfile:
    """Infer a weighted taste profile from artist names and listening titles."""
    frequency: dict[str, float] = {}

    for artist in artists:
        for vibe in artist_vibes(artist):
            frequency[vibe] = frequency.get(vibe, 0.0) + ARTIST_SCORE

    for title in titles:
        for vibe in detect_vibes(title):
            frequency[vibe] = frequency.get(vibe, 0.0) + TITLE_SCORE

    if not frequency:
        all_text = " ".join([*artists, *titles])
        for pattern, vibe, score in DESCRIPTOR_FALLBACKS:
            if pattern.search(all_text):
                frequency[vibe] = score
        logger.debug("profile_descriptor_fallback", vibes=list(frequency))

    scores = {
        vibe: count * VIBE_CATEGORIES[vibe].weight
        for vibe, count in frequency.items()
        if count > 0 and vibe in VIBE_CATEGORIES
    }
    ranked = sorted(scores, key=lambda vibe: scores[vibe], reverse=True)
    top_vibes = ranked[:MAX_TOP_VIBES]

    vibe_weights = _percentages({vibe: scores[vibe] for vibe in top_vibes})

    genre_ids: list[str] = []
    search_terms: list[str] = []
    for vibe in top_vibes:
        category = VIBE_CATEGORIES[vibe]
        if category.external_genre_id not in genre_ids:
            genre_ids.append(category.external_genre_id)
        for term in category.search_terms:
            if term not in search_terms:
                search_terms.append(term)

    profile = TasteProfile(
        top_vibes=top_vibes,
        vibe_weights=vibe_weights,
        vibe_scores=frequency,
        genre_ids=genre_ids,
        search_terms=search_terms,
    )

    logger.info(
        "taste_profile_built",
        artists=len(artists),
        titles=len(titles),
        top_vibes=top_vibes,
        weights=vibe_weights,
    )
    return profile


def apply_default_genre(profile: TasteProfile) -> bool:
    """Give a profile without genre ids a broad Pop search. Returns True if applied.

    This is a caller-side policy for the event search: build_profile itself
    never invents a vibe the history does not support.
    """
    if profile.genre_ids:
        return False

    profile.genre_ids.append(DEFAULT_GENRE_ID)
    if DEFAULT_VIBE not in profile.top_vibes:
        profile.top_vibes.append(DEFAULT_VIBE)
    logger.warning("taste_profile_default_genre", genre_id=DEFAULT_GENRE_ID)
    return True
