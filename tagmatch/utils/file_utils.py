"""Path helpers for tagmatch."""

from __future__ import annotations

from pathlib import Path

from tagmatch.utils.constants import SUPPORTED_EXTENSIONS


def is_audio_file(path: Path) -> bool:
    """Check if a file has a supported audio extension.

    Args:
        path: File path to check.

    Returns:
        True if the extension is in SUPPORTED_EXTENSIONS.
    """
    return path.suffix.lower() in SUPPORTED_EXTENSIONS


def disc_number_from_folder(folder_name: str) -> int | None:
    """Infer a disc number from a subfolder name like "CD2" or "Disc 03".

    Args:
        folder_name: Name of the folder that holds the file.

    Returns:
        The disc number, or None if the name does not look like a disc folder.
    """
    name = folder_name.strip().lower().replace("_", " ")
    for prefix in ("disc", "disk", "cd"):
        if name.startswith(prefix):
            rest = name[len(prefix):].strip(" .-")
            if rest.isdigit():
                return int(rest)
    return None
