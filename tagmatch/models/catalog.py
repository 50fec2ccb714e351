"""Normalized catalog models shared by every provider adapter."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProviderTrack:
    """One track of a catalog album.

    Attributes:
        id: Track identifier within the source catalog.
        title: Track title as the catalog spells it.
        disc_number: Disc number (1-based).
        track_number: Track number within the disc.
        duration_ms: Duration in milliseconds (None when the catalog omits it).
        artists: Credited artist names.
        composer: Composer, when the catalog provides one.
        genres: Track-level genres, when the catalog provides them.
    """

    id: str
    title: str
    disc_number: int = 1
    track_number: int | None = None
    duration_ms: int | None = None
    artists: tuple[str, ...] = ()
    composer: str | None = None
    genres: tuple[str, ...] = ()

    @property
    def has_duration(self) -> bool:
        return bool(self.duration_ms)


@dataclass(frozen=True)
class ProviderAlbum:
    """A release candidate returned by a catalog search.

    Attributes:
        id: Album identifier within the source catalog.
        name: Album title.
        artist: Album artist name.
        release_date: Release date string as given by the catalog
            ("YYYY", "YYYY-MM" or "YYYY-MM-DD").
        track_count: Number of tracks on the release.
        disc_count: Number of discs on the release.
        genres: Genres attached to the release.
        catalog: Name of the source catalog (e.g. "MusicBrainz").
        cover_url: Front cover image URL, if known.
    """

    id: str
    name: str
    artist: str
    catalog: str
    release_date: str | None = None
    track_count: int = 0
    disc_count: int = 1
    genres: tuple[str, ...] = ()
    cover_url: str | None = None

    @property
    def year(self) -> int | None:
        """Release year parsed from the release date, or None."""
        if self.release_date and len(self.release_date) >= 4 and self.release_date[:4].isdigit():
            return int(self.release_date[:4])
        return None

    @property
    def display_label(self) -> str:
        """Human-readable label for logs and reports."""
        label = f"{self.artist} - {self.name}"
        if self.year:
            label += f" ({self.year})"
        return f"{label} [{self.catalog}:{self.id}]"


@dataclass(frozen=True)
class AlbumQuery:
    """What the local folder claims to be.

    Attributes:
        artist: Artist name to search for.
        album: Album name to search for.
        expected_track_count: Number of audio files in the folder.
    """

    artist: str
    album: str
    expected_track_count: int = 0


@dataclass(frozen=True)
class ScoredCandidate:
    """A catalog album together with the score it earned against the query.

    Attributes:
        album: The candidate album.
        score: Album candidate score in [0, 1].
        index: Position of the album in the catalog's result list.
        artist_similarity: Artist name similarity component.
        album_similarity: Album name similarity component.
        track_count_score: Track count component.
    """

    album: ProviderAlbum
    score: float
    index: int
    artist_similarity: float = 0.0
    album_similarity: float = 0.0
    track_count_score: float = 0.0

    @property
    def catalog(self) -> str:
        return self.album.catalog

    def as_dict(self) -> dict:
        """Serialize for reports."""
        return {
            "catalog": self.album.catalog,
            "album_id": self.album.id,
            "artist": self.album.artist,
            "album": self.album.name,
            "track_count": self.album.track_count,
            "score": round(self.score, 4),
            "artist_similarity": round(self.artist_similarity, 4),
            "album_similarity": round(self.album_similarity, 4),
            "track_count_score": round(self.track_count_score, 4),
        }
