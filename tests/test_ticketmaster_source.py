"""Tests for the Ticketmaster Discovery source."""

import httpx
import pytest

from gigmatch.models import EventSourceName
from gigmatch.sources import SearchQuery
from gigmatch.sources.ticketmaster import TicketmasterSource, haversine_km

RAW_EVENT = {
    "id": "Z7r9jZ1A7",
    "name": "Black Coffee - Summer Tour",
    "url": "https://www.ticketmaster.com/event/Z7r9jZ1A7",
    "distance": 12.3,
    "dates": {"start": {"localDate": "2026-07-04", "localTime": "21:00:00"}},
    "images": [
        {"url": "https://img/small.jpg", "width": 100},
        {"url": "https://img/large.jpg", "width": 1024},
    ],
    "classifications": [
        {"genre": {"name": "Dance/Electronic"}, "subGenre": {"name": "House"}},
    ],
    "_embedded": {
        "venues": [
            {
                "name": "Printworks",
                "city": {"name": "London"},
                "country": {"name": "Great Britain"},
                "location": {"latitude": "51.49", "longitude": "-0.04"},
            }
        ],
        "attractions": [
            {"name": "Black Coffee", "classifications": [{"genre": {"name": "Dance/Electronic"}}]}
        ],
    },
}


def make_source(handler) -> TicketmasterSource:
    return TicketmasterSource(api_key="test-key", transport=httpx.MockTransport(handler))


def test_requires_api_key() -> None:
    with pytest.raises(ValueError):
        TicketmasterSource(api_key="")


def test_haversine_km() -> None:
    assert haversine_km(0, 0, 0, 0) == 0
    # Kyiv to Lviv is roughly 470 km
    assert 460 < haversine_km(50.45, 30.52, 49.84, 24.03) < 480


@pytest.mark.asyncio
async def test_search_genre_sends_geo_and_genre_params() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"_embedded": {"events": [RAW_EVENT]}})

    source = make_source(handler)
    query = SearchQuery(latitude=51.5, longitude=-0.1, radius_km=500, size=30, genre_ids=["KnvZfZ7vAe1"])

    events = await source.search_genre("afrohouse", query)
    await source.aclose()

    params = seen[0].url.params
    assert seen[0].url.path.endswith("/events.json")
    assert params["apikey"] == "test-key"
    assert params["geoPoint"] == "51.5,-0.1"
    assert params["radius"] == "500"
    assert params["unit"] == "km"
    assert params["genreId"] == "KnvZfZ7vAe1"
    assert params["classificationName"] == "music"
    assert params["size"] == "30"
    assert "keyword" not in params

    [event] = events
    assert event.id == "ticketmaster-Z7r9jZ1A7"
    assert event.source == EventSourceName.TICKETMASTER
    assert event.artist_name == "Black Coffee"
    assert event.venue == "Printworks"
    assert event.date == "2026-07-04"
    assert event.time == "21:00:00"
    assert event.location == "London, Great Britain"
    assert event.country == "Great Britain"
    assert event.image_url == "https://img/large.jpg"
    assert event.genres == ["Dance/Electronic", "House"]
    assert event.distance == 12.3


@pytest.mark.asyncio
async def test_search_artist_uses_keyword() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    source = make_source(handler)
    events = await source.search_artist("Amelie Lens", SearchQuery(size=3))
    await source.aclose()

    assert events == []
    assert seen[0].url.params["keyword"] == "Amelie Lens"
    assert "geoPoint" not in seen[0].url.params


@pytest.mark.asyncio
async def test_distance_computed_when_missing() -> None:
    raw = {key: value for key, value in RAW_EVENT.items() if key != "distance"}

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"_embedded": {"events": [raw]}})

    source = make_source(handler)
    [event] = await source.search_nearest(latitude=51.49, longitude=-0.04)
    await source.aclose()

    assert event.distance == 0


@pytest.mark.asyncio
async def test_artist_falls_back_to_event_name() -> None:
    raw = {**RAW_EVENT, "_embedded": {"venues": []}}

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"_embedded": {"events": [raw]}})

    source = make_source(handler)
    [event] = await source.search_nearest(keyword="black coffee")
    await source.aclose()

    assert event.artist_name == "Black Coffee"
    assert event.venue == "Venue TBA"
    assert event.city == "TBA"
    assert event.country is None


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 429, 500])
async def test_http_errors_yield_no_events(status: int) -> None:
    source = make_source(lambda request: httpx.Response(status, json={"fault": "nope"}))

    assert await source.search_nearest(keyword="x") == []
    await source.aclose()


@pytest.mark.asyncio
async def test_network_errors_yield_no_events() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    async with make_source(handler) as source:
        assert await source.search_nearest(keyword="x") == []
