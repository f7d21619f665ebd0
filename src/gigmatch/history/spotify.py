"""Spotify playlist history via spotipy.

Each playlist track becomes a record titled "Artist - Track" with the
first credited artist as channel text, so it goes through the same
artist extraction as YouTube titles.
"""

import asyncio
from typing import Any

import spotipy
from spotipy.oauth2 import SpotifyClientCredentials

from ..cache import PLAYLIST_ITEMS_TTL, MemoryCache, playlist_items_key
from ..logging import get_logger
from ..models import ListeningRecord

logger = get_logger(__name__)


class SpotifyHistorySource:
    """Reads public playlists with client-credentials auth."""

    FIELDS = "items(track(name,artists(name))),next"

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        cache: MemoryCache | None = None,
        client: spotipy.Spotify | None = None,
    ):
        """Initialize the Spotify source.

        Args:
            client_id: Spotify application client ID
            client_secret: Spotify application client secret
            cache: Optional cache for playlist items
            client: Pre-built spotipy client (overrides the credentials)
        """
        self.cache = cache
        if client is None:
            auth_manager = SpotifyClientCredentials(client_id=client_id, client_secret=client_secret)
            client = spotipy.Spotify(auth_manager=auth_manager)
        self._client = client

    @property
    def name(self) -> str:
        return "spotify"

    @staticmethod
    def _to_record(track: dict[str, Any]) -> ListeningRecord | None:
        artists = [a.get("name", "") for a in track.get("artists") or [] if a.get("name")]
        title = track.get("name", "")
        if not title and not artists:
            return None
        if artists:
            title = f"{', '.join(artists)} - {title}"
        return ListeningRecord(title=title, channel_text=artists[0] if artists else "")

    def get_playlist_items(self, playlist_id: str) -> list[ListeningRecord]:
        """Fetch every track of one playlist, following pagination."""
        if self.cache:
            cached = self.cache.get(playlist_items_key(f"spotify:{playlist_id}"))
            if cached is not None:
                return cached

        records: list[ListeningRecord] = []
        page = self._client.playlist_items(playlist_id, fields=self.FIELDS, additional_types=("track",))
        while page:
            for item in page.get("items", []):
                record = self._to_record(item.get("track") or {})
                if record:
                    records.append(record)
            page = self._client.next(page) if page.get("next") else None

        logger.info("spotify_playlist_fetched", playlist_id=playlist_id, count=len(records))

        if self.cache:
            self.cache.set(playlist_items_key(f"spotify:{playlist_id}"), records, PLAYLIST_ITEMS_TTL)
        return records

    async def get_records(self, playlist_ids: list[str]) -> list[ListeningRecord]:
        """Fetch playlists one by one off the event loop; failed playlists are skipped."""
        records: list[ListeningRecord] = []
        for playlist_id in playlist_ids:
            try:
                records.extend(await asyncio.to_thread(self.get_playlist_items, playlist_id))
            except spotipy.SpotifyException as e:
                logger.error("spotify_playlist_failed", playlist_id=playlist_id, error=str(e))
        return records
