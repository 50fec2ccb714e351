"""Genre list replace/merge rules."""

from __future__ import annotations

from typing import Iterable

from tagmatch.models.config import GenreMode


def _dedupe(genres: Iterable[str], seen: set[str] | None = None) -> list[str]:
    """Drop blanks and case-insensitive repeats, keeping first-seen casing."""
    seen = set() if seen is None else seen
    result: list[str] = []
    for genre in genres:
        cleaned = " ".join((genre or "").split())
        key = cleaned.lower()
        if not cleaned or key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return result


def merge_genres(
    existing: Iterable[str],
    incoming: Iterable[str],
    mode: GenreMode = GenreMode.MERGE,
) -> list[str]:
    """Combine the genres already on the files with the catalog's genres.

    Args:
        existing: Genres currently tagged on the files.
        incoming: Genres from the chosen catalog album.
        mode: REPLACE keeps only incoming genres; MERGE appends incoming
            genres that are not already present.

    Returns:
        The resulting genre list. Comparison is case-insensitive; the
        casing of the first occurrence and the relative order are kept.
    """
    if mode is GenreMode.REPLACE:
        return _dedupe(incoming)

    seen: set[str] = set()
    merged = _dedupe(existing, seen)
    merged.extend(_dedupe(incoming, seen))
    return merged
