"""Local track model -- one audio file found in the folder being tagged."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class LocalTrackFile:
    """A single audio file on disk, as reported by the folder scanner.

    The engine never modifies these; they are read-only inputs to matching.

    Attributes:
        file_path: Path to the audio file.
        enumeration_index: Position of the file in on-disk enumeration order
            (0-based). The ``by_order`` strategy relies on this.
        title: Title tag, or the filename stem when the tag is missing.
        duration_ms: Duration in milliseconds (0 or None when unknown).
        disc_number: Disc number from tags or the disc subfolder.
        track_number: Track number from tags.
        artist: Artist tag.
        album: Album tag.
        genres: Genre tag values, in tag order.
    """

    file_path: Path
    enumeration_index: int
    title: str = ""
    duration_ms: int | None = None
    disc_number: int | None = None
    track_number: int | None = None
    artist: str | None = None
    album: str | None = None
    genres: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Ensure file_path is a Path object and genres a tuple."""
        if isinstance(self.file_path, str):
            object.__setattr__(self, "file_path", Path(self.file_path))
        if not isinstance(self.genres, tuple):
            object.__setattr__(self, "genres", tuple(self.genres))

    @property
    def display_title(self) -> str:
        """Human-readable title, falling back to filename."""
        return self.title or self.file_path.stem

    @property
    def has_duration(self) -> bool:
        return bool(self.duration_ms)
