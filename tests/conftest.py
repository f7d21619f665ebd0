"""Shared test helpers for gigmatch."""

from datetime import date

from gigmatch.models import Event, EventSourceName

TODAY = date(2026, 6, 1)


def make_event(
    id: str = "ticketmaster-1",
    artist_name: str = "Black Coffee",
    venue: str = "Atlas",
    date: str = "2026-07-01",
    **overrides,
) -> Event:
    """Build an Event with sensible defaults."""
    fields = {
        "id": id,
        "artist_name": artist_name,
        "venue": venue,
        "date": date,
        "city": "Kyiv",
        "source": EventSourceName.TICKETMASTER,
    }
    fields.update(overrides)
    return Event(**fields)
