"""MusicBrainz catalog adapter (musicbrainzngs)."""

from __future__ import annotations

import hashlib
import re
from typing import Any

import musicbrainzngs

from tagmatch.models.catalog import ProviderAlbum, ProviderTrack
from tagmatch.providers.base import LookupCache, coerce_int, parse_duration_ms, retry
from tagmatch.utils.constants import (
    CATALOG_MUSICBRAINZ,
    MUSICBRAINZ_APP_NAME,
    MUSICBRAINZ_APP_VERSION,
    MUSICBRAINZ_CONTACT,
    MUSICBRAINZ_RATE_LIMIT,
    SEARCH_RESULT_LIMIT,
)
from tagmatch.utils.logger import get_logger
from tagmatch.utils.rate_limiter import RateLimiter

logger = get_logger("providers.musicbrainz")

# Lucene special characters that break MusicBrainz phrase queries
_LUCENE_SPECIAL_RE = re.compile(r'[+\-&|!(){}\[\]^"~*?:\\/]')


def clean_for_search(text: str) -> str:
    """Strip Lucene special characters and normalize whitespace.

    Args:
        text: Raw search term from tags or folder names.

    Returns:
        Cleaned string safe for MusicBrainz term queries.
    """
    if not text:
        return ""
    cleaned = _LUCENE_SPECIAL_RE.sub(" ", text)
    return " ".join(cleaned.split())


def format_artist_credit(artist_credit: list) -> str:
    """Format a MusicBrainz artist-credit list into a single string.

    Args:
        artist_credit: MusicBrainz artist-credit list.

    Returns:
        Formatted artist string (e.g. "Artist A feat. Artist B").
    """
    parts = []
    for credit in artist_credit:
        if isinstance(credit, dict):
            artist = credit.get("artist", {})
            name = credit.get("name") or artist.get("name", "")
            joinphrase = credit.get("joinphrase", "")
            parts.append(name + joinphrase)
        elif isinstance(credit, str):
            parts.append(credit)
    return "".join(parts).strip()


def _credit_names(artist_credit: list) -> tuple[str, ...]:
    names = []
    for credit in artist_credit:
        if isinstance(credit, dict):
            name = credit.get("name") or credit.get("artist", {}).get("name", "")
            if name:
                names.append(name)
    return tuple(names)


class MusicBrainzProvider:
    """Searches MusicBrainz releases and normalizes them.

    MusicBrainz requires a user-agent; no token is needed. Lengths are
    already in milliseconds.
    """

    catalog_name = CATALOG_MUSICBRAINZ

    def __init__(
        self,
        rate_limiter: RateLimiter | None = None,
        cache: LookupCache | None = None,
        rate_limit: float = MUSICBRAINZ_RATE_LIMIT,
        client: Any = musicbrainzngs,
    ) -> None:
        """Initialize the adapter.

        Args:
            rate_limiter: Shared limiter; a private one is created if None.
            cache: Optional lookup cache for raw API responses.
            rate_limit: Minimum seconds between MusicBrainz requests.
            client: Object exposing the musicbrainzngs search/get functions.
        """
        self._rate_limiter = rate_limiter or RateLimiter()
        self._cache = cache
        self._rate_limit = rate_limit
        self._client = client

        # Required by the MusicBrainz TOS
        musicbrainzngs.set_useragent(
            MUSICBRAINZ_APP_NAME,
            MUSICBRAINZ_APP_VERSION,
            MUSICBRAINZ_CONTACT,
        )

    def search_albums(self, artist: str, album: str) -> list[ProviderAlbum]:
        """Search MusicBrainz releases by artist and release title.

        Raises:
            ProviderUnavailableError: If every retry failed.
        """
        if not artist and not album:
            return []

        raw = f"{artist or ''}|{album or ''}"
        cache_key = f"mb_release_search:{hashlib.sha256(raw.encode()).hexdigest()[:16]}"

        # strict=False gives term matching, which survives minor spelling differences
        search_kwargs: dict = {"limit": SEARCH_RESULT_LIMIT, "strict": False}
        if artist:
            search_kwargs["artist"] = clean_for_search(artist)
        if album:
            search_kwargs["release"] = clean_for_search(album)

        result = self._cached_call(
            cache_key,
            lambda: self._client.search_releases(**search_kwargs),
        )
        albums = [self._parse_release(r) for r in result.get("release-list", [])]
        logger.debug("MusicBrainz search returned %d releases", len(albums))
        return albums

    def get_tracks(self, album_id: str) -> list[ProviderTrack]:
        """Fetch the full track list of a release, disc by disc.

        Raises:
            ProviderUnavailableError: If every retry failed.
        """
        if not album_id:
            return []

        result = self._cached_call(
            f"mb_release:{album_id}",
            lambda: self._client.get_release_by_id(
                album_id,
                includes=["recordings", "artist-credits"],
            ),
        )
        release = result.get("release", {})

        tracks: list[ProviderTrack] = []
        for medium_index, medium in enumerate(release.get("medium-list", []), start=1):
            disc = coerce_int(medium.get("position"), medium_index)
            for track_index, track in enumerate(medium.get("track-list", []), start=1):
                recording = track.get("recording", {})
                credit = recording.get("artist-credit") or track.get("artist-credit") or []
                tracks.append(
                    ProviderTrack(
                        id=str(recording.get("id") or track.get("id", "")),
                        title=track.get("title") or recording.get("title", ""),
                        disc_number=disc,
                        track_number=coerce_int(track.get("position"), track_index),
                        duration_ms=parse_duration_ms(track.get("length") or recording.get("length")),
                        artists=_credit_names(credit),
                    )
                )

        logger.debug("MusicBrainz release %s has %d tracks", album_id, len(tracks))
        return tracks

    def _cached_call(self, cache_key: str, fetch) -> dict:
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug("Lookup cache hit: %s", cache_key)
                return cached

        def _do_fetch():
            self._rate_limiter.wait("musicbrainz", self._rate_limit)
            return fetch()

        result = retry(_do_fetch, self.catalog_name, retry_on=(musicbrainzngs.WebServiceError,))

        if self._cache is not None:
            self._cache.set(cache_key, result)
        return result

    def _parse_release(self, release: dict) -> ProviderAlbum:
        media = release.get("medium-list", [])
        track_count = sum(coerce_int(m.get("track-count"), 0) for m in media)
        if not track_count:
            track_count = coerce_int(release.get("medium-track-count"), 0)

        credit = release.get("artist-credit", [])
        artist = release.get("artist-credit-phrase") or format_artist_credit(credit)

        tags = sorted(
            release.get("tag-list", []),
            key=lambda t: -coerce_int(t.get("count"), 0),
        )
        release_id = release.get("id", "")

        return ProviderAlbum(
            id=release_id,
            name=release.get("title", ""),
            artist=artist,
            catalog=self.catalog_name,
            release_date=release.get("date") or None,
            track_count=track_count,
            disc_count=coerce_int(release.get("medium-count"), len(media) or 1),
            genres=tuple(t["name"] for t in tags if t.get("name")),
            cover_url=f"https://coverartarchive.org/release/{release_id}/front-500" if release_id else None,
        )
