"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from gigmatch.cli import app
from gigmatch.config import Settings

runner = CliRunner()


@pytest.fixture
def history_file(tmp_path):
    path = tmp_path / "history.json"
    path.write_text(
        json.dumps(
            [
                {"title": "Black Coffee - Drive"},
                {"title": "Black Coffee - Superman"},
                {"title": "HUMBLE.", "channel_text": "Amelie Lens - Topic"},
            ]
        )
    )
    return path


def test_profile_command(history_file) -> None:
    result = runner.invoke(app, ["profile", "--records", str(history_file)])

    assert result.exit_code == 0
    assert "Unique artists: 2" in result.output
    assert "Black Coffee (2)" in result.output
    assert "Afrohouse (51%)" in result.output
    assert "Techno (49%)" in result.output


def test_profile_missing_file(tmp_path) -> None:
    result = runner.invoke(app, ["profile", "--records", str(tmp_path / "missing.json")])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_match_requires_history() -> None:
    result = runner.invoke(app, ["match", "--lat", "50.45", "--lon", "30.52"])

    assert result.exit_code == 1
    assert "--records" in result.output


def test_match_rejects_bad_location(history_file) -> None:
    result = runner.invoke(app, ["match", "--lat", "123", "--lon", "30.52", "--records", str(history_file)])

    assert result.exit_code == 1
    assert "invalid location" in result.output


def test_find_events_without_sources(monkeypatch) -> None:
    monkeypatch.setattr(
        "gigmatch.pipeline.get_settings",
        lambda: Settings(
            _env_file=None,
            ticketmaster_api_key=None,
            youtube_access_token=None,
            spotify_client_id=None,
        ),
    )

    result = runner.invoke(app, ["find-events", "--artist", "Jamala"])

    assert result.exit_code == 1
    assert "No event sources configured" in result.output
