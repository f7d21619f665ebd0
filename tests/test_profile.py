"""Tests for taste profile building."""

from gigmatch.extraction import extract_artists
from gigmatch.models import ListeningRecord
from gigmatch.profile import _percentages, apply_default_genre, build_profile, round_half_up
from gigmatch.taxonomy import TM_ELECTRONIC, TM_POP


def test_afrohouse_outranks_techno_on_equal_frequency() -> None:
    profile = build_profile(["Amelie Lens", "Black Coffee"], [])

    assert profile.top_vibes == ["AFROHOUSE", "TECHNO"]
    assert profile.vibe_weights == {"AFROHOUSE": 51, "TECHNO": 49}
    assert profile.genre_ids == [TM_ELECTRONIC]
    assert profile.search_terms[:3] == ["afrohouse", "afro house", "organic house"]


def test_titles_count_half() -> None:
    profile = build_profile(["Metallica"], ["jazz night", "bebop session"])

    assert profile.vibe_scores["METAL"] == 1.0
    assert profile.vibe_scores["JAZZ"] == 1.0
    # Equal frequency and equal weight (90): first seen wins
    assert profile.top_vibes[:2] == ["METAL", "JAZZ"]


def test_at_most_five_top_vibes_and_weights_cap() -> None:
    titles = [
        "techno", "house", "trance", "dnb", "metal", "jazz", "reggaeton", "salsa", "afrohouse",
    ]

    profile = build_profile([], titles)

    assert len(profile.top_vibes) == 5
    assert set(profile.vibe_weights) == set(profile.top_vibes)
    assert sum(profile.vibe_weights.values()) <= 100
    assert all(0 <= weight <= 100 for weight in profile.vibe_weights.values())


def test_genre_ids_and_search_terms_are_unique() -> None:
    profile = build_profile(["Amelie Lens", "Black Coffee", "Fisher"], [])

    assert profile.genre_ids == [TM_ELECTRONIC]
    assert len(profile.search_terms) == len(set(profile.search_terms))


def test_descriptor_fallback_without_keywords() -> None:
    profile = build_profile(["Someone"], ["Someone - live session"])

    assert profile.top_vibes == ["ROCK"]
    assert profile.vibe_scores == {"ROCK": 0.3}


def test_keywords_win_over_descriptor_fallback() -> None:
    profile = build_profile(["Someone"], ["Someone ft. Another (live)"])

    assert profile.top_vibes == ["HIP_HOP"]


def test_empty_history_gives_empty_profile() -> None:
    profile = build_profile([], [])

    assert profile.top_vibes == []
    assert profile.vibe_weights == {}
    assert profile.genre_ids == []


def test_apply_default_genre() -> None:
    profile = build_profile([], [])

    assert apply_default_genre(profile) is True
    assert profile.genre_ids == [TM_POP]
    assert profile.top_vibes == ["POP"]
    assert apply_default_genre(profile) is False
    assert profile.genre_ids == [TM_POP]


def test_round_half_up() -> None:
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


def test_percentages_take_back_rounding_overflow() -> None:
    weights = _percentages({"AFROHOUSE": 12.5, "TECHNO": 12.5, "HOUSE": 75.0})

    # 12.5 + 12.5 + 75 rounds half up to 101; the first half-rounded entry gives one back
    assert weights == {"AFROHOUSE": 12, "TECHNO": 13, "HOUSE": 75}
    assert sum(weights.values()) == 100


def test_known_artist_with_ampersand_name() -> None:
    extraction = extract_artists([ListeningRecord(title="&ME - Garden")])

    profile = build_profile(extraction.artists, ["&ME - Garden"])

    assert extraction.artists == ["& ME"]
    assert profile.top_vibes == ["AFROHOUSE"]
