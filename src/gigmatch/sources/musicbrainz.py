"""MusicBrainz artist social links.

Not an event source: resolves an artist name to the YouTube / Instagram
profile links MusicBrainz records as URL relationships. Pass-through
enrichment for matched events, never used for scoring.
"""

import musicbrainzngs

from ..cache import ARTIST_SOCIALS_TTL, MemoryCache, artist_socials_key
from ..logging import get_logger
from ..models import ArtistSocials

logger = get_logger(__name__)

musicbrainzngs.set_useragent(
    "gigmatch",
    "0.1.0",
    "https://github.com/gigmatch/gigmatch",
)


class ArtistSocialResolver:
    """Looks up artist profile links on MusicBrainz, with caching."""

    MAX_ARTISTS = 5

    def __init__(self, cache: MemoryCache | None = None):
        """Initialize the resolver.

        Args:
            cache: Optional cache instance
        """
        self.cache = cache

    def _find_artist_id(self, artist_name: str) -> str | None:
        """Search by name, preferring an exact (case-insensitive) name or alias match."""
        result = musicbrainzngs.search_artists(artist=artist_name, limit=5)
        artists = result.get("artist-list", [])
        if not artists:
            return None

        target = artist_name.lower()
        for candidate in artists:
            if candidate.get("name", "").lower() == target:
                return candidate.get("id")
            for alias in candidate.get("alias-list", []):
                if alias.get("alias", "").lower() == target:
                    return candidate.get("id")

        return artists[0].get("id")

    def resolve(self, artist_name: str) -> ArtistSocials | None:
        """Get social links for an artist, or None when MusicBrainz has none or fails."""
        if self.cache:
            cached = self.cache.get(artist_socials_key(artist_name))
            if cached is not None:
                return cached

        try:
            mbid = self._find_artist_id(artist_name)
            if not mbid:
                logger.info("artist_not_found", artist=artist_name)
                return None
            result = musicbrainzngs.get_artist_by_id(mbid, includes=["url-rels"])
        except musicbrainzngs.WebServiceError as e:
            logger.error("musicbrainz_error", error=str(e), artist=artist_name)
            return None

        socials = ArtistSocials()
        for relation in result.get("artist", {}).get("url-relation-list", []):
            target = relation.get("target", "")
            if "youtube.com" in target and not socials.youtube:
                socials.youtube = target
            elif "instagram.com" in target and not socials.instagram:
                socials.instagram = target

        if not socials.youtube and not socials.instagram:
            return None

        logger.info("artist_socials_resolved", artist=artist_name, mbid=mbid)

        if self.cache:
            self.cache.set(artist_socials_key(artist_name), socials, ARTIST_SOCIALS_TTL)

        return socials

    def resolve_many(self, artist_names: list[str]) -> dict[str, ArtistSocials]:
        """Resolve the first MAX_ARTISTS names; artists without links are left out."""
        socials: dict[str, ArtistSocials] = {}
        for name in artist_names[: self.MAX_ARTISTS]:
            links = self.resolve(name)
            if links:
                socials[name] = links
        return socials
