"""YouTube Data API playlist history.

API documentation: https://developers.google.com/youtube/v3/docs/playlistItems/list
"""

import asyncio

import httpx

from ..cache import PLAYLIST_ITEMS_TTL, MemoryCache, playlist_items_key
from ..logging import get_logger
from ..models import ListeningRecord

logger = get_logger(__name__)


class YouTubeHistorySource:
    """Reads playlist items with a user's OAuth access token.

    Token refresh is the caller's concern; an expired token simply makes
    every playlist come back empty.
    """

    BASE_URL = "https://www.googleapis.com/youtube/v3"
    PAGE_SIZE = 50
    BATCH_SIZE = 5

    def __init__(
        self,
        access_token: str,
        cache: MemoryCache | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the YouTube source.

        Args:
            access_token: OAuth bearer token with youtube.readonly scope
            cache: Optional cache for playlist items
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.cache = cache
        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout,
            transport=transport,
        )

    @property
    def name(self) -> str:
        return "youtube"

    async def get_playlist_items(self, playlist_id: str) -> list[ListeningRecord]:
        """Fetch every item of one playlist, following page tokens."""
        if self.cache:
            cached = self.cache.get(playlist_items_key(playlist_id))
            if cached is not None:
                logger.info("playlist_items_cache_hit", playlist_id=playlist_id, count=len(cached))
                return cached

        records: list[ListeningRecord] = []
        page_token: str | None = None

        while True:
            params = {
                "part": "snippet",
                "playlistId": playlist_id,
                "maxResults": self.PAGE_SIZE,
            }
            if page_token:
                params["pageToken"] = page_token

            response = await self._client.get("/playlistItems", params=params)
            response.raise_for_status()
            data = response.json()

            for item in data.get("items", []):
                snippet = item.get("snippet") or {}
                records.append(
                    ListeningRecord(
                        title=snippet.get("title", ""),
                        # videoOwnerChannelTitle is the uploader; channelTitle is the playlist owner
                        channel_text=snippet.get("videoOwnerChannelTitle") or snippet.get("channelTitle") or "",
                    )
                )

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        logger.info("playlist_items_fetched", playlist_id=playlist_id, count=len(records))

        if self.cache:
            self.cache.set(playlist_items_key(playlist_id), records, PLAYLIST_ITEMS_TTL)

        return records

    async def _get_or_empty(self, playlist_id: str) -> list[ListeningRecord]:
        try:
            return await self.get_playlist_items(playlist_id)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("playlist_items_fetch_failed", playlist_id=playlist_id, error=str(e))
            return []

    async def get_records(self, playlist_ids: list[str]) -> list[ListeningRecord]:
        """Fetch several playlists, BATCH_SIZE at a time."""
        records: list[ListeningRecord] = []
        for start in range(0, len(playlist_ids), self.BATCH_SIZE):
            batch = playlist_ids[start : start + self.BATCH_SIZE]
            for items in await asyncio.gather(*(self._get_or_empty(pid) for pid in batch)):
                records.extend(items)
        return records

    async def aclose(self) -> None:
        await self._client.aclose()
