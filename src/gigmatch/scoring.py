"""Match scoring: how well an event fits a listener.

Two score families live here and are intentionally kept apart:

- exact-artist scores, for events whose performer is in the listening
  history. The nearest-matches flow uses the 95-100 scale
  (score_exact_artist); the frequency ranking in the aggregator uses the
  70-99 scale (score_frequency_match).
- vibe scores, for events matched through genre overlap with the taste
  profile (score_vibe_match, 80-98 for any hit).

All functions are pure.
"""

import math
from collections.abc import Mapping, Sequence

from .models import Event, TasteProfile
from .profile import round_half_up
from .taxonomy import VIBE_CATEGORIES, detect_vibes

STYLE_MATCH_FLOOR = 82
GENRE_FAMILY_SCORE = 80
VIBE_SCORE_MIN = 80
VIBE_SCORE_MAX = 98
STYLE_MATCH_CAP = 85


def _normalize(name: str) -> str:
    return " ".join(name.split()).lower()


def score_exact_artist(
    event_artist: str,
    user_artists: Sequence[str],
    frequencies: Mapping[str, int],
) -> int:
    """Score 95-100 for a performer found in the user's artists, else 0."""
    target = _normalize(event_artist)
    matched = next((artist for artist in user_artists if _normalize(artist) == target), None)
    if matched is None:
        return 0

    frequency = frequencies.get(matched, 1)
    if frequency >= 10:
        return 100
    if frequency >= 5:
        return 98
    if frequency >= 3:
        return 96
    return 95


def score_frequency_match(artist_name: str, frequencies: Mapping[str, int]) -> int:
    """Score 70-99 relative to the most played artist, 0 if never played."""
    frequency = frequencies.get(artist_name, 0)
    if frequency <= 0:
        return 0

    max_frequency = max(frequencies.values())
    score = 70 + math.floor(frequency / max_frequency * 29)
    return min(99, max(70, score))


def score_vibe_match(event_vibes: Sequence[str], profile: TasteProfile) -> int:
    """Score an event's vibes against the profile.

    Direct hits on top vibes score by rank (98, 95, 92, ...) plus up to 5
    points of profile share. Without any direct hit, vibes from the same
    Ticketmaster genre family score 80. Any hit is clamped into 80-98.
    """
    if not event_vibes or not profile.top_vibes:
        return 0

    total = 0.0
    count = 0

    for vibe in event_vibes:
        if vibe not in profile.top_vibes:
            continue
        index = profile.top_vibes.index(vibe)
        position_score = 98 - index * 3
        weight_bonus = min(5, profile.vibe_weights.get(vibe, 0) / 10)
        total += min(98, position_score + weight_bonus)
        count += 1

    if count == 0:
        genre_ids = set(profile.genre_ids)
        for vibe in event_vibes:
            category = VIBE_CATEGORIES.get(vibe)
            if category and category.external_genre_id in genre_ids:
                total += GENRE_FAMILY_SCORE
                count += 1

    if count == 0:
        return 0

    return max(VIBE_SCORE_MIN, min(VIBE_SCORE_MAX, round_half_up(total / count)))


def score_style_match(event_genres: Sequence[str], user_top_genres: Sequence[str]) -> int:
    """Genre-position score for the smart-match ranking: 60, 50, 40, ... capped at 85."""
    best = 0
    for genre in event_genres:
        if genre in user_top_genres:
            best = max(best, 60 - user_top_genres.index(genre) * 10)
    return min(STYLE_MATCH_CAP, max(0, best))


def event_vibes(event: Event) -> list[str]:
    """Vibes detected from an event's performer and genre tags."""
    return detect_vibes(f"{event.artist_name} {' '.join(event.genres or [])}")


def score_event(
    event: Event,
    profile: TasteProfile,
    user_artists: Sequence[str],
    frequencies: Mapping[str, int],
) -> Event:
    """Fill in detected_vibes and vibe_match for the nearest-matches flow.

    Exact-artist hits use the 95-100 scale. Everything else uses the vibe
    score; genre-search hits that still score 0 get the style floor, exact
    hits never do.
    """
    event.detected_vibes = event_vibes(event)

    if event.is_exact_match:
        score = score_exact_artist(event.artist_name, user_artists, frequencies)
    else:
        score = score_vibe_match(event.detected_vibes, profile)

    if score == 0 and event.is_style_match and not event.is_exact_match:
        score = STYLE_MATCH_FLOOR

    event.vibe_match = score
    return event
