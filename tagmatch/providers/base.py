"""Provider adapter contract and shared helpers for catalog clients.

Every catalog adapter normalizes its source into ProviderAlbum and
ProviderTrack so the matching engine never sees catalog-specific shapes.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

from tagmatch.models.catalog import ProviderAlbum, ProviderTrack
from tagmatch.utils.constants import API_MAX_RETRIES, API_RETRY_BACKOFF_SECONDS
from tagmatch.utils.errors import ProviderUnavailableError
from tagmatch.utils.logger import get_logger

logger = get_logger("providers.base")

T = TypeVar("T")


@runtime_checkable
class ProviderAdapter(Protocol):
    """What the auto mode controller needs from a catalog."""

    @property
    def catalog_name(self) -> str:
        """Catalog name as used in the fallback table (e.g. "Discogs")."""
        ...

    def search_albums(self, artist: str, album: str) -> list[ProviderAlbum]:
        """Search the catalog for releases.

        Raises:
            ProviderUnavailableError: If the catalog cannot be reached.
        """
        ...

    def get_tracks(self, album_id: str) -> list[ProviderTrack]:
        """Fetch the track list of one release, in catalog order.

        Raises:
            ProviderUnavailableError: If the catalog cannot be reached.
        """
        ...


class LookupCache(Protocol):
    """Memoizing cache injected into adapters."""

    def get(self, key: str) -> Any | None:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


class InMemoryCache:
    """Dict-backed LookupCache that lives as long as the caller keeps it."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __len__(self) -> int:
        return len(self._data)


def retry(
    func: Callable[[], T],
    catalog: str,
    retry_on: tuple[type[BaseException], ...],
    max_retries: int = API_MAX_RETRIES,
    backoff: float = API_RETRY_BACKOFF_SECONDS,
    sleep: Callable[[float], None] | None = None,
) -> T:
    """Retry a function call with linear backoff on transient failure.

    Args:
        func: Callable to execute.
        catalog: Name of the catalog (for logging and the raised error).
        retry_on: Exception types that count as transient.
        max_retries: Maximum number of attempts.
        backoff: Base wait between attempts (multiplied by attempt number).
        sleep: Function used to wait between attempts (time.sleep if None).

    Returns:
        The function's return value.

    Raises:
        ProviderUnavailableError: If every attempt failed.
    """
    last_error: BaseException | None = None
    for attempt in range(1, max_retries + 1):
        try:
            return func()
        except retry_on as e:
            last_error = e
            if attempt < max_retries:
                wait_time = backoff * attempt
                logger.warning(
                    "%s request failed (attempt %d/%d): %s -- retrying in %.0fs",
                    catalog, attempt, max_retries, e, wait_time,
                )
                (sleep or time.sleep)(wait_time)
            else:
                logger.error(
                    "%s request failed after %d attempts: %s",
                    catalog, max_retries, e,
                )
    raise ProviderUnavailableError(catalog, str(last_error))


def parse_duration_ms(value: Any) -> int | None:
    """Parse a duration given as ms, seconds, or "h:mm:ss"/"m:ss" into ms.

    Integers (or digit strings) are taken as milliseconds; strings with
    colons are clock durations.

    Returns:
        Milliseconds, or None when the value is missing or unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return int(value) if value > 0 else None

    text = str(value).strip()
    if text.isdigit():
        ms = int(text)
        return ms if ms > 0 else None
    parts = text.split(":")
    if len(parts) < 2 or any(not part.isdigit() for part in parts):
        return None
    seconds = 0
    for part in parts:
        seconds = seconds * 60 + int(part)
    return seconds * 1000 if seconds > 0 else None


def coerce_int(value: Any, default: int | None = None) -> int | None:
    """int(value) for ints and digit strings, otherwise ``default``."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
