"""Tests for the vibe taxonomy."""

import pytest

from gigmatch.models import TasteProfile
from gigmatch.taxonomy import (
    TM_ELECTRONIC,
    VIBE_CATEGORIES,
    artist_vibes,
    detect_vibes,
    format_taste_profile,
    get_genre_id,
    get_vibe_name,
    get_vibe_search_terms,
)


def test_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        VIBE_CATEGORIES["NEW"] = VIBE_CATEGORIES["POP"]  # type: ignore[index]


def test_weights_are_within_range() -> None:
    assert len(VIBE_CATEGORIES) == 18
    assert all(60 <= category.weight <= 95 for category in VIBE_CATEGORIES.values())
    assert VIBE_CATEGORIES["AFROHOUSE"].weight > VIBE_CATEGORIES["TECHNO"].weight


def test_detect_vibes_substring_case_insensitive() -> None:
    vibes = detect_vibes("Boiler Room: HARD TECHNO set")

    assert "TECHNO" in vibes


def test_detect_vibes_each_category_once_in_table_order() -> None:
    vibes = detect_vibes("Deep House and Tech House, house forever")

    assert vibes.count("HOUSE") == 1
    assert vibes == sorted(vibes, key=list(VIBE_CATEGORIES).index)


def test_detect_vibes_nothing_found() -> None:
    assert detect_vibes("Amelie Lens") == []
    assert detect_vibes("") == []


def test_artist_vibes_adds_known_artist_hints() -> None:
    assert artist_vibes("Amelie Lens") == ["TECHNO"]
    assert artist_vibes("  black   COFFEE ") == ["AFROHOUSE"]
    assert artist_vibes("Someone Nobody Knows") == []


def test_lookups() -> None:
    assert get_vibe_name("DRUM_AND_BASS") == "Drum & Bass"
    assert get_vibe_name("UNKNOWN") == "UNKNOWN"
    assert get_vibe_search_terms("TECHNO") == ["techno", "techno party", "rave"]
    assert get_vibe_search_terms("UNKNOWN") == []
    assert get_genre_id("AFROHOUSE") == TM_ELECTRONIC
    assert get_genre_id("UNKNOWN") is None


def test_format_taste_profile() -> None:
    profile = TasteProfile(
        top_vibes=["AFROHOUSE", "TECHNO"],
        vibe_weights={"AFROHOUSE": 51, "TECHNO": 49},
    )

    assert format_taste_profile(profile) == ["Afrohouse (51%)", "Techno (49%)"]


def test_detect_vibes_ignores_keyword_order_and_repeats() -> None:
    text = "techno and jazz and salsa"
    shuffled = "salsa, jazz, techno, techno"

    assert detect_vibes(text) == ["TECHNO", "JAZZ", "LATIN"]
    assert detect_vibes(shuffled) == detect_vibes(text)
    assert detect_vibes(text) == detect_vibes(text)


def test_artist_hint_matches_normalized_name() -> None:
    assert artist_vibes("& ME") == ["AFROHOUSE"]
    assert artist_vibes("&ME") == ["AFROHOUSE"]
