"""Folder scanner -- turns one album folder into an ordered list of local tracks."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Generator

import mutagen

from tagmatch.models.track import LocalTrackFile
from tagmatch.utils.file_utils import disc_number_from_folder, is_audio_file
from tagmatch.utils.logger import get_logger

logger = get_logger("core.scanner")


def parse_number(raw: str | None) -> int | None:
    """Parse a track/disc number from a tag string (may be '5' or '5/12').

    Args:
        raw: Raw tag string.

    Returns:
        The number as int, or None.
    """
    if not raw:
        return None
    try:
        return int(raw.split("/")[0].strip())
    except (ValueError, IndexError):
        return None


def _first_tag(audio: Any, key: str) -> str | None:
    """First value of a tag from a mutagen file opened with easy=True."""
    try:
        value = audio.get(key)
        if value:
            # Mutagen returns lists for most tag types
            if isinstance(value, list):
                return str(value[0]).strip() if value[0] else None
            return str(value).strip() or None
    except (KeyError, IndexError, TypeError):
        pass
    return None


def _all_tags(audio: Any, key: str) -> tuple[str, ...]:
    try:
        value = audio.get(key)
    except (KeyError, TypeError):
        return ()
    if not value:
        return ()
    values = value if isinstance(value, list) else [value]
    return tuple(str(v).strip() for v in values if v and str(v).strip())


class FolderScanner:
    """Discovers the audio files of one album folder and reads their tags.

    Files are enumerated in sorted path order, recursing into disc
    subfolders, and that order becomes each file's ``enumeration_index``.

    Usage:
        scanner = FolderScanner()
        local_files = scanner.scan("/music/The Beatles - Help!")
    """

    def __init__(
        self,
        progress_callback: Callable[[int, int, str], None] | None = None,
        read_tags: bool = True,
    ) -> None:
        """Initialize the scanner.

        Args:
            progress_callback: Optional callback(current, total, filename)
                called for each file read.
            read_tags: Read tags with mutagen. When False only paths, order
                and folder-derived disc numbers are filled in.
        """
        self._progress_callback = progress_callback
        self._read_tags = read_tags

    def scan(self, folder: Path | str) -> list[LocalTrackFile]:
        """Scan a folder and return its audio files in enumeration order.

        Args:
            folder: Album folder to scan.

        Returns:
            LocalTrackFile list, ``enumeration_index`` 0..n-1.

        Raises:
            FileNotFoundError: If the folder does not exist.
            NotADirectoryError: If the path is not a directory.
        """
        folder = Path(folder)
        if not folder.exists():
            raise FileNotFoundError(f"Directory not found: {folder}")
        if not folder.is_dir():
            raise NotADirectoryError(f"Not a directory: {folder}")

        logger.info("Scanning folder: %s", folder)
        audio_files = list(self._discover_audio_files(folder))
        total = len(audio_files)

        local_files: list[LocalTrackFile] = []
        for index, file_path in enumerate(audio_files):
            local_files.append(self._create_local_file(folder, file_path, index))
            if self._progress_callback:
                self._progress_callback(index + 1, total, file_path.name)

        logger.info("Scan complete: %d audio files", len(local_files))
        return local_files

    def _discover_audio_files(self, root: Path) -> Generator[Path, None, None]:
        try:
            for entry in sorted(root.rglob("*")):
                if entry.is_file() and is_audio_file(entry):
                    yield entry
        except PermissionError as e:
            logger.warning("Permission denied during scan: %s", e)

    def _create_local_file(self, root: Path, file_path: Path, index: int) -> LocalTrackFile:
        folder_disc = None
        if file_path.parent != root:
            folder_disc = disc_number_from_folder(file_path.parent.name)

        fields: dict[str, Any] = {}
        if self._read_tags:
            fields = self._read_file_tags(file_path)

        disc_number = fields.pop("disc_number", None) or folder_disc
        return LocalTrackFile(
            file_path=file_path,
            enumeration_index=index,
            disc_number=disc_number,
            **fields,
        )

    def _read_file_tags(self, path: Path) -> dict[str, Any]:
        """Read the tags matching needs; unreadable files yield an empty dict."""
        try:
            audio = mutagen.File(path, easy=True)
        except (mutagen.MutagenError, OSError, ValueError) as e:
            logger.error("Error reading tags from %s: %s", path, e)
            return {}
        if audio is None:
            logger.warning("Mutagen could not open: %s", path)
            return {}

        duration_ms = None
        info = getattr(audio, "info", None)
        length = getattr(info, "length", None) if info else None
        if length:
            duration_ms = int(round(length * 1000))

        fields = {
            "title": _first_tag(audio, "title") or "",
            "duration_ms": duration_ms,
            "disc_number": parse_number(_first_tag(audio, "discnumber")),
            "track_number": parse_number(_first_tag(audio, "tracknumber")),
            "artist": _first_tag(audio, "artist"),
            "album": _first_tag(audio, "album"),
            "genres": _all_tags(audio, "genre"),
        }
        logger.debug("Read tags for: %s -> %s", path.name, fields["title"])
        return fields
