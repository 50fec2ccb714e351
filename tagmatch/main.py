"""tagmatch -- Entry point: auto-match one album folder against online catalogs."""

from __future__ import annotations

import argparse
import sys
from collections import Counter
from pathlib import Path
from typing import Sequence

import yaml

from tagmatch.utils.constants import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_DURATION_FALLOFF_MS,
    DEFAULT_DURATION_HIGH_MS,
    DEFAULT_DURATION_MEDIUM_MS,
    DEFAULT_GENRE_MODE,
    DEFAULT_STARTING_CATALOG,
    DEFAULT_TITLE_HIGH,
    DEFAULT_TITLE_MODERATE,
    KNOWN_CATALOGS,
    MAX_CONFIDENCE_THRESHOLD,
    MIN_CONFIDENCE_THRESHOLD,
)
from tagmatch.utils.logger import get_logger, setup_logger

_GENRE_MODES = ("replace", "merge")


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: dict) -> list[str]:
    """Validate configuration values and return a list of warnings.

    Checks:
    - confidence_threshold is numeric and within [0.5, 1.0] (clamped)
    - genre_mode is "replace" or "merge"
    - starting_catalog is a known catalog
    - duration and title tolerance bands are ordered

    Invalid values are fixed in place so the dict can go straight into
    ``AutoModeConfig.from_dict()``.

    Args:
        config: Configuration dictionary.

    Returns:
        List of human-readable warning strings. Empty if all checks pass.
    """
    warnings: list[str] = []

    threshold = config.get("confidence_threshold", DEFAULT_CONFIDENCE_THRESHOLD)
    if not _is_number(threshold):
        warnings.append(
            f"confidence_threshold must be a number, got {threshold!r}. "
            f"Using default ({DEFAULT_CONFIDENCE_THRESHOLD})."
        )
        config["confidence_threshold"] = DEFAULT_CONFIDENCE_THRESHOLD
    elif not (MIN_CONFIDENCE_THRESHOLD <= threshold <= MAX_CONFIDENCE_THRESHOLD):
        clamped = min(max(float(threshold), MIN_CONFIDENCE_THRESHOLD), MAX_CONFIDENCE_THRESHOLD)
        warnings.append(
            f"confidence_threshold must be {MIN_CONFIDENCE_THRESHOLD}-{MAX_CONFIDENCE_THRESHOLD}, "
            f"got {threshold!r}. Clamped to {clamped}."
        )
        config["confidence_threshold"] = clamped

    genre_mode = config.get("genre_mode", DEFAULT_GENRE_MODE)
    if str(genre_mode).lower() not in _GENRE_MODES:
        warnings.append(
            f"genre_mode must be one of {', '.join(_GENRE_MODES)}, got {genre_mode!r}. "
            f"Using default ({DEFAULT_GENRE_MODE})."
        )
        config["genre_mode"] = DEFAULT_GENRE_MODE

    starting = config.get("starting_catalog", DEFAULT_STARTING_CATALOG)
    if starting not in KNOWN_CATALOGS:
        warnings.append(
            f"starting_catalog must be one of {', '.join(KNOWN_CATALOGS)}, got {starting!r}. "
            f"Using default ({DEFAULT_STARTING_CATALOG})."
        )
        config["starting_catalog"] = DEFAULT_STARTING_CATALOG

    duration_defaults = {
        "duration_high_ms": DEFAULT_DURATION_HIGH_MS,
        "duration_medium_ms": DEFAULT_DURATION_MEDIUM_MS,
        "duration_falloff_ms": DEFAULT_DURATION_FALLOFF_MS,
    }
    for key, default in duration_defaults.items():
        value = config.get(key, default)
        if not _is_number(value) or value <= 0:
            warnings.append(f"{key} must be a positive number, got {value!r}. Using default ({default}).")
            config[key] = default
    high = config.get("duration_high_ms", DEFAULT_DURATION_HIGH_MS)
    medium = config.get("duration_medium_ms", DEFAULT_DURATION_MEDIUM_MS)
    falloff = config.get("duration_falloff_ms", DEFAULT_DURATION_FALLOFF_MS)
    if not (high <= medium <= falloff):
        warnings.append(
            f"Duration bands must satisfy high <= medium <= falloff, got "
            f"{high}/{medium}/{falloff}. Using defaults."
        )
        config.update(duration_defaults)

    title_defaults = {"title_high": DEFAULT_TITLE_HIGH, "title_moderate": DEFAULT_TITLE_MODERATE}
    for key, default in title_defaults.items():
        value = config.setdefault(key, default)
        if not _is_number(value) or not (0 <= value <= 1):
            warnings.append(f"{key} must be 0-1, got {value!r}. Using default ({default}).")
            config[key] = default
    if config["title_moderate"] > config["title_high"]:
        warnings.append(
            f"title_moderate ({config['title_moderate']}) must be <= title_high "
            f"({config['title_high']}). Swapping them."
        )
        config["title_high"], config["title_moderate"] = config["title_moderate"], config["title_high"]

    return warnings


def load_config(config_path: Path | str | None = None) -> dict:
    """Load configuration from a YAML file.

    Args:
        config_path: File to read. Defaults to ``config/config.yaml`` at the
            project root.

    Returns:
        Configuration dictionary (suitable for ``AutoModeConfig.from_dict()``).
    """
    config: dict = {}

    if config_path is None:
        config_path = Path(__file__).parent.parent / "config" / DEFAULT_CONFIG_FILENAME
    config_path = Path(config_path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

    return config


def build_providers(config, cache=None, rate_limiter=None) -> list:
    """Create the catalog adapters this installation can use.

    MusicBrainz needs no credentials; Discogs is added only with a token.

    Args:
        config: AutoModeConfig.
        cache: Lookup cache shared by the adapters.
        rate_limiter: Rate limiter shared by the adapters.

    Returns:
        List of provider adapters.
    """
    from tagmatch.providers import DiscogsProvider, MusicBrainzProvider

    providers: list = [
        MusicBrainzProvider(
            rate_limiter=rate_limiter,
            cache=cache,
            rate_limit=config.musicbrainz_rate_limit,
        )
    ]
    if config.discogs_token:
        providers.append(
            DiscogsProvider(
                config.discogs_token,
                rate_limiter=rate_limiter,
                cache=cache,
                rate_limit=config.discogs_rate_limit,
            )
        )
    return providers


def guess_query_terms(folder: Path, local_files: Sequence) -> tuple[str, str]:
    """Guess artist and album from the most common tags, then the folder name.

    Folder names of the form "Artist - Album" are split on the first " - ".
    """
    artists = Counter(f.artist for f in local_files if f.artist)
    albums = Counter(f.album for f in local_files if f.album)
    artist = artists.most_common(1)[0][0] if artists else ""
    album = albums.most_common(1)[0][0] if albums else ""

    if not artist or not album:
        parts = folder.name.split(" - ", 1)
        if len(parts) == 2:
            artist = artist or parts[0].strip()
            album = album or parts[1].strip()
        else:
            album = album or folder.name.strip()
    return artist, album


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Match an album folder against online catalogs and decide whether to auto-tag it.",
    )
    parser.add_argument("folder", help="Album folder to match")
    parser.add_argument("--artist", help="Album artist (default: from tags or folder name)")
    parser.add_argument("--album", help="Album title (default: from tags or folder name)")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--catalog", help="Catalog to query first (overrides config)")
    parser.add_argument("--no-report", action="store_true", help="Do not write the decision report")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Application entry point. Loads config, sets up logging, and runs auto mode.

    Returns:
        Exit code: 0 when the album was auto-saved, 2 when it was deferred to
        interactive review, 1 on usage errors.
    """
    from tagmatch.core.auto_mode import AutoModeController
    from tagmatch.core.report_writer import ReportWriter
    from tagmatch.core.scanner import FolderScanner
    from tagmatch.models.catalog import AlbumQuery
    from tagmatch.models.config import AutoModeConfig
    from tagmatch.providers import InMemoryCache
    from tagmatch.utils.rate_limiter import RateLimiter

    args = build_parser().parse_args(argv)

    raw_config = load_config(args.config)
    if args.catalog:
        raw_config["starting_catalog"] = args.catalog

    # Validate the raw dict first (mutates to fix invalid values)
    config_warnings = validate_config(raw_config)

    # Build typed config from the validated dict
    config = AutoModeConfig.from_dict(raw_config)

    setup_logger(log_level=config.log_level, log_file=config.log_file)
    logger = get_logger("main")

    logger.info("%s v%s starting", APP_NAME, APP_VERSION)

    for warning in config_warnings:
        logger.warning("Config: %s", warning)

    if not config.discogs_token:
        logger.info(
            "Discogs token not configured. Discogs lookups will be skipped. "
            "Set discogs_token in config/config.yaml."
        )

    folder = Path(args.folder)
    try:
        local_files = FolderScanner().scan(folder)
    except (FileNotFoundError, NotADirectoryError) as e:
        logger.error("%s", e)
        return 1

    artist, album = guess_query_terms(folder, local_files)
    query = AlbumQuery(
        artist=args.artist or artist,
        album=args.album or album,
        expected_track_count=len(local_files),
    )
    logger.info("Query: '%s - %s' (%d local tracks)", query.artist, query.album, len(local_files))

    controller = AutoModeController(
        build_providers(config, cache=InMemoryCache(), rate_limiter=RateLimiter()),
        config,
    )
    outcome = controller.run(query, local_files)

    logger.info("Decision: %s -- %s", outcome.decision.value, outcome.rationale)
    if not args.no_report:
        ReportWriter.write_decision_report(folder, outcome)

    return 2 if outcome.needs_review else 0


if __name__ == "__main__":
    sys.exit(main())
