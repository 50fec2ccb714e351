"""Discogs catalog adapter (REST API via requests)."""

from __future__ import annotations

import re

import requests

from tagmatch.models.catalog import ProviderAlbum, ProviderTrack
from tagmatch.providers.base import LookupCache, coerce_int, parse_duration_ms, retry
from tagmatch.utils.constants import (
    API_TIMEOUT_SECONDS,
    APP_NAME,
    APP_VERSION,
    CATALOG_DISCOGS,
    DISCOGS_API_URL,
    DISCOGS_RATE_LIMIT,
    SEARCH_RESULT_LIMIT,
)
from tagmatch.utils.errors import ProviderUnavailableError
from tagmatch.utils.logger import get_logger
from tagmatch.utils.rate_limiter import RateLimiter

logger = get_logger("providers.discogs")

# Search results carry no track list, so only the first few releases are
# expanded to learn their track counts.
DETAIL_LOOKUP_LIMIT = 5

_DISC_TRACK_RE = re.compile(r"^(?:cd|disc|dvd)?\s*(\d+)[-./](\d+)$", re.IGNORECASE)


def parse_position(position: str) -> tuple[int | None, int | None]:
    """Parse a Discogs tracklist position into (disc, track).

    "1-03" and "CD2.5" carry a disc number; "7" is a plain track number;
    vinyl sides like "A2" yield neither, so callers number them in order.
    """
    position = (position or "").strip()
    match = _DISC_TRACK_RE.match(position)
    if match:
        return int(match.group(1)), int(match.group(2))
    if position.isdigit():
        return None, int(position)
    return None, None


def _artist_names(artists: list) -> tuple[str, ...]:
    # Discogs disambiguates duplicate names as "Name (2)"
    return tuple(
        re.sub(r"\s*\(\d+\)$", "", a.get("name", "")).strip()
        for a in artists
        if isinstance(a, dict) and a.get("name")
    )


class DiscogsProvider:
    """Searches Discogs releases and normalizes them.

    Discogs requires a personal access token for database search.
    """

    catalog_name = CATALOG_DISCOGS

    def __init__(
        self,
        token: str | None,
        rate_limiter: RateLimiter | None = None,
        cache: LookupCache | None = None,
        rate_limit: float = DISCOGS_RATE_LIMIT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            token: Discogs personal access token.
            rate_limiter: Shared limiter; a private one is created if None.
            cache: Optional lookup cache for raw API responses.
            rate_limit: Minimum seconds between Discogs requests.
            session: HTTP session to reuse; a new one is created if None.
        """
        self._token = token
        self._rate_limiter = rate_limiter or RateLimiter()
        self._cache = cache
        self._rate_limit = rate_limit
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": f"{APP_NAME}/{APP_VERSION}"})

    def search_albums(self, artist: str, album: str) -> list[ProviderAlbum]:
        """Search Discogs releases by artist and release title.

        Raises:
            ProviderUnavailableError: If no token is configured or every
                retry failed.
        """
        if not self._token:
            raise ProviderUnavailableError(self.catalog_name, "no Discogs token configured")
        if not artist and not album:
            return []

        params: dict = {"type": "release", "per_page": SEARCH_RESULT_LIMIT}
        if artist:
            params["artist"] = artist
        if album:
            params["release_title"] = album

        data = self._get(f"discogs_search:{artist}|{album}", "/database/search", params)

        albums: list[ProviderAlbum] = []
        for index, item in enumerate(data.get("results", [])):
            release = None
            if index < DETAIL_LOOKUP_LIMIT and item.get("id"):
                release = self._get_release(str(item["id"]))
            albums.append(self._parse_search_item(item, release))

        logger.debug("Discogs search returned %d releases", len(albums))
        return albums

    def get_tracks(self, album_id: str) -> list[ProviderTrack]:
        """Fetch the track list of a release in catalog order.

        Raises:
            ProviderUnavailableError: If every retry failed.
        """
        if not album_id:
            return []
        release = self._get_release(album_id)
        return self._parse_tracklist(release)

    # --- HTTP ---

    def _get_release(self, release_id: str) -> dict:
        return self._get(f"discogs_release:{release_id}", f"/releases/{release_id}", {})

    def _get(self, cache_key: str, path: str, params: dict) -> dict:
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug("Lookup cache hit: %s", cache_key)
                return cached

        def _do_get() -> dict:
            self._rate_limiter.wait("discogs", self._rate_limit)
            response = self._session.get(
                f"{DISCOGS_API_URL}{path}",
                params=params,
                headers={"Authorization": f"Discogs token={self._token}"},
                timeout=API_TIMEOUT_SECONDS,
            )
            if response.status_code == 404:
                logger.debug("Discogs returned 404 for %s", path)
                return {}
            response.raise_for_status()
            return response.json()

        data = retry(_do_get, self.catalog_name, retry_on=(requests.RequestException, ValueError))

        if self._cache is not None and data:
            self._cache.set(cache_key, data)
        return data

    # --- Parsing ---

    def _parse_search_item(self, item: dict, release: dict | None) -> ProviderAlbum:
        # Discogs search title format: "Artist - Album"
        title = item.get("title", "")
        parts = title.split(" - ", 1)
        artist = parts[0].strip() if len(parts) > 1 else ""
        name = parts[1].strip() if len(parts) > 1 else title

        genres = list(item.get("genre", []) or []) + list(item.get("style", []) or [])
        track_count = 0
        disc_count = coerce_int(item.get("format_quantity"), 1) or 1
        release_date = str(item["year"]) if item.get("year") else None

        if release:
            tracks = self._parse_tracklist(release)
            track_count = len(tracks)
            disc_count = max((t.disc_number for t in tracks), default=disc_count)
            artist = " & ".join(_artist_names(release.get("artists", []))) or artist
            name = release.get("title") or name
            release_date = release.get("released") or release_date

        return ProviderAlbum(
            id=str(item.get("id", "")),
            name=name,
            artist=artist,
            catalog=self.catalog_name,
            release_date=release_date,
            track_count=track_count,
            disc_count=disc_count,
            genres=tuple(genres),
            cover_url=item.get("cover_image") or None,
        )

    def _parse_tracklist(self, release: dict) -> list[ProviderTrack]:
        album_artists = _artist_names(release.get("artists", []))
        release_genres = tuple(release.get("genres", []) or [])

        tracks: list[ProviderTrack] = []
        running: dict[int, int] = {}
        for entry in release.get("tracklist", []):
            # Headings and index entries are not playable tracks
            if entry.get("type_", "track") != "track":
                continue
            disc, number = parse_position(entry.get("position", ""))
            disc = disc or 1
            running[disc] = running.get(disc, 0) + 1
            composer = next(
                (
                    a.get("name")
                    for a in entry.get("extraartists", []) or []
                    if "compos" in (a.get("role") or "").lower() or "written" in (a.get("role") or "").lower()
                ),
                None,
            )
            tracks.append(
                ProviderTrack(
                    id=f"{release.get('id', '')}:{entry.get('position') or running[disc]}",
                    title=entry.get("title", ""),
                    disc_number=disc,
                    track_number=number or running[disc],
                    duration_ms=parse_duration_ms(entry.get("duration")),
                    artists=_artist_names(entry.get("artists", []) or []) or album_artists,
                    composer=composer,
                    genres=release_genres,
                )
            )
        return tracks
