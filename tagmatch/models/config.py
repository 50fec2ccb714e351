"""Typed configuration model for tagmatch auto mode.

All configuration values have explicit types, defaults, and documentation.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import Enum

from tagmatch.utils.constants import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_DURATION_FALLOFF_MS,
    DEFAULT_DURATION_HIGH_MS,
    DEFAULT_DURATION_MEDIUM_MS,
    DEFAULT_GENRE_MODE,
    DEFAULT_STARTING_CATALOG,
    DEFAULT_TITLE_HIGH,
    DEFAULT_TITLE_MODERATE,
    DISCOGS_RATE_LIMIT,
    MUSICBRAINZ_RATE_LIMIT,
)


class GenreMode(Enum):
    """How catalog genres combine with genres already on the files."""

    REPLACE = "replace"
    MERGE = "merge"


@dataclass(frozen=True)
class ConfidenceTolerances:
    """Bands used to classify one track pair as HIGH, MEDIUM or LOW.

    Attributes:
        duration_high_ms: Max duration delta for a HIGH pair.
        duration_medium_ms: Duration delta that alone earns MEDIUM.
        duration_falloff_ms: Delta at which the duration score reaches 0.
        title_high: Min title similarity for a HIGH pair.
        title_moderate: Title similarity that alone earns MEDIUM.
    """

    duration_high_ms: int = DEFAULT_DURATION_HIGH_MS
    duration_medium_ms: int = DEFAULT_DURATION_MEDIUM_MS
    duration_falloff_ms: int = DEFAULT_DURATION_FALLOFF_MS
    title_high: float = DEFAULT_TITLE_HIGH
    title_moderate: float = DEFAULT_TITLE_MODERATE


@dataclass
class AutoModeConfig:
    """Strongly-typed configuration for one auto mode run.

    Attributes:
        confidence_threshold: Minimum score (0.5-1.0) for automatic album
            selection and for automatic saving of a track pairing.
        fallback_enabled: Whether to try other catalogs when the starting
            catalog has no confident candidate.
        save_cover: Whether an automatic save should also save cover art.
        genre_mode: "replace" or "merge" (see GenreMode).
        starting_catalog: Catalog queried first.
        duration_high_ms: See ConfidenceTolerances.
        duration_medium_ms: See ConfidenceTolerances.
        duration_falloff_ms: See ConfidenceTolerances.
        title_high: See ConfidenceTolerances.
        title_moderate: See ConfidenceTolerances.
        discogs_token: Discogs personal access token.
        musicbrainz_rate_limit: Seconds between MusicBrainz requests.
        discogs_rate_limit: Seconds between Discogs requests.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        log_file: Path to log file (None = console only).
    """

    # --- Decision ---
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    fallback_enabled: bool = True
    save_cover: bool = False
    genre_mode: str = DEFAULT_GENRE_MODE
    starting_catalog: str = DEFAULT_STARTING_CATALOG

    # --- Track pair tolerances ---
    duration_high_ms: int = DEFAULT_DURATION_HIGH_MS
    duration_medium_ms: int = DEFAULT_DURATION_MEDIUM_MS
    duration_falloff_ms: int = DEFAULT_DURATION_FALLOFF_MS
    title_high: float = DEFAULT_TITLE_HIGH
    title_moderate: float = DEFAULT_TITLE_MODERATE

    # --- Providers ---
    discogs_token: str = ""
    musicbrainz_rate_limit: float = MUSICBRAINZ_RATE_LIMIT
    discogs_rate_limit: float = DISCOGS_RATE_LIMIT

    # --- Logging ---
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> AutoModeConfig:
        """Create an AutoModeConfig from a raw dictionary (e.g., from YAML).

        Unknown keys are silently ignored so YAML files with extra comments
        or future keys don't break older code.

        Args:
            data: Dictionary of configuration values.

        Returns:
            Populated AutoModeConfig instance.
        """
        known_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in known_fields and v is not None}
        return cls(**filtered)

    def to_dict(self) -> dict:
        """Serialize the config to a dictionary."""
        return asdict(self)

    @property
    def genre_mode_enum(self) -> GenreMode:
        """The genre mode as an enum; unknown values fall back to MERGE."""
        try:
            return GenreMode(str(self.genre_mode).lower())
        except ValueError:
            return GenreMode.MERGE

    @property
    def tolerances(self) -> ConfidenceTolerances:
        """Track pair tolerance bands built from the flat config values."""
        return ConfidenceTolerances(
            duration_high_ms=self.duration_high_ms,
            duration_medium_ms=self.duration_medium_ms,
            duration_falloff_ms=self.duration_falloff_ms,
            title_high=self.title_high,
            title_moderate=self.title_moderate,
        )
