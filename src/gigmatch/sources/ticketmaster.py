"""Ticketmaster Discovery API event source.

Geo-capable source used by the nearest-matches flow.
API documentation: https://developer.ticketmaster.com/products-and-docs/apis/discovery-api/v2/
"""

import math
from typing import Any

import httpx

from ..logging import get_logger
from ..models import Event, EventSourceName
from . import BaseEventSource, SearchQuery

logger = get_logger(__name__)

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


class TicketmasterSource(BaseEventSource):
    """Ticketmaster Discovery v2 event search.

    Searches music events by keyword, genre ids and geo point. Results
    come back sorted by distance and carry the distance in km.
    """

    BASE_URL = "https://app.ticketmaster.com/discovery/v2"

    def __init__(
        self,
        api_key: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the Ticketmaster source.

        Args:
            api_key: Discovery API consumer key
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        if not api_key:
            raise ValueError("Ticketmaster API key is required")
        self.api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @property
    def name(self) -> str:
        return EventSourceName.TICKETMASTER.value

    async def search_nearest(
        self,
        latitude: float | None = None,
        longitude: float | None = None,
        radius_km: int = 1000,
        genre_ids: list[str] | None = None,
        keyword: str | None = None,
        size: int = 15,
        sort: str = "distance,asc",
    ) -> list[Event]:
        """Search music events, nearest first.

        Any HTTP or network failure yields an empty list.
        """
        params: dict[str, Any] = {
            "apikey": self.api_key,
            "size": size,
            "sort": sort,
            "classificationName": "music",
        }
        if latitude is not None and longitude is not None:
            params["geoPoint"] = f"{latitude},{longitude}"
            params["radius"] = radius_km
            params["unit"] = "km"
        if genre_ids:
            params["genreId"] = ",".join(genre_ids)
        if keyword:
            params["keyword"] = keyword

        logger.info(
            "ticketmaster_search",
            keyword=keyword,
            genre_ids=genre_ids,
            radius_km=radius_km,
            size=size,
        )

        try:
            response = await self._client.get("/events.json", params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("ticketmaster_search_failed", error=str(e), keyword=keyword)
            return []

        raw_events = (data.get("_embedded") or {}).get("events") or []
        origin = (latitude, longitude) if latitude is not None and longitude is not None else None
        events = [self._to_event(raw, origin) for raw in raw_events]

        logger.info("ticketmaster_search_complete", keyword=keyword, results=len(events))
        return events

    async def search_artist(self, artist_name: str, query: SearchQuery) -> list[Event]:
        return await self.search_nearest(
            latitude=query.latitude,
            longitude=query.longitude,
            radius_km=query.radius_km,
            keyword=artist_name,
            size=query.size,
        )

    async def search_genre(self, keyword: str, query: SearchQuery) -> list[Event]:
        """Genre search; uses query.genre_ids when given, the keyword otherwise."""
        return await self.search_nearest(
            latitude=query.latitude,
            longitude=query.longitude,
            radius_km=query.radius_km,
            genre_ids=query.genre_ids or None,
            keyword=None if query.genre_ids else keyword,
            size=query.size,
        )

    def _to_event(self, raw: dict[str, Any], origin: tuple[float, float] | None = None) -> Event:
        """Convert a Discovery API event to an Event record.

        When the API leaves out the distance, it is computed from the venue
        coordinates and the search origin.
        """
        embedded = raw.get("_embedded") or {}
        venue = (embedded.get("venues") or [{}])[0]
        attraction = (embedded.get("attractions") or [{}])[0]

        # Prefer the headlining attraction, else the part of the event name before " - "
        event_name = raw.get("name", "")
        artist_name = attraction.get("name") or event_name.split(" - ")[0] or event_name

        genres: list[str] = []
        for classification in [*(raw.get("classifications") or []), *(attraction.get("classifications") or [])]:
            for level in ("genre", "subGenre"):
                genre_name = (classification.get(level) or {}).get("name")
                if genre_name and genre_name not in genres:
                    genres.append(genre_name)

        images = raw.get("images") or []
        image_url = max(images, key=lambda image: image.get("width", 0)).get("url") if images else None

        city = (venue.get("city") or {}).get("name") or "TBA"
        country = (venue.get("country") or {}).get("name") or ""
        start = (raw.get("dates") or {}).get("start") or {}

        distance = raw.get("distance")
        coords = venue.get("location") or {}
        if distance is None and origin and coords.get("latitude") and coords.get("longitude"):
            try:
                distance = round(
                    haversine_km(origin[0], origin[1], float(coords["latitude"]), float(coords["longitude"])),
                    2,
                )
            except ValueError:
                distance = None

        return Event(
            id=f"ticketmaster-{raw.get('id', '')}",
            artist_name=artist_name,
            venue=venue.get("name") or "Venue TBA",
            date=start.get("localDate", ""),
            time=start.get("localTime"),
            location=f"{city}, {country}" if country else city,
            city=city,
            country=country or None,
            ticket_url=raw.get("url"),
            source=EventSourceName.TICKETMASTER,
            image_url=image_url,
            genres=genres or None,
            distance=distance,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "TicketmasterSource":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()
