"""Named constants for tagmatch. No magic numbers."""

# --- Application ---
APP_NAME = "tagmatch"
APP_VERSION = "0.1.0"

# --- Supported Audio Extensions ---
SUPPORTED_EXTENSIONS = frozenset({
    ".mp3",
    ".flac",
    ".m4a",
    ".aac",
    ".ogg",
    ".opus",
    ".wma",
    ".aiff",
    ".aif",
    ".wav",
    ".ape",
    ".wv",
})

# --- Catalog Names ---
CATALOG_QOBUZ = "Qobuz"
CATALOG_SPOTIFY = "Spotify"
CATALOG_DISCOGS = "Discogs"
CATALOG_MUSICBRAINZ = "MusicBrainz"

KNOWN_CATALOGS = (CATALOG_QOBUZ, CATALOG_SPOTIFY, CATALOG_DISCOGS, CATALOG_MUSICBRAINZ)

# Alternate catalogs tried, in order, when the starting catalog has no
# candidate above the confidence threshold.
FALLBACK_CHAINS: dict[str, tuple[str, ...]] = {
    CATALOG_QOBUZ: (CATALOG_SPOTIFY, CATALOG_DISCOGS, CATALOG_MUSICBRAINZ),
    CATALOG_SPOTIFY: (CATALOG_QOBUZ, CATALOG_DISCOGS, CATALOG_MUSICBRAINZ),
    CATALOG_DISCOGS: (CATALOG_QOBUZ, CATALOG_SPOTIFY, CATALOG_MUSICBRAINZ),
    CATALOG_MUSICBRAINZ: (CATALOG_QOBUZ, CATALOG_SPOTIFY, CATALOG_DISCOGS),
}

# --- Auto Mode Defaults (overridable in config) ---
DEFAULT_CONFIDENCE_THRESHOLD = 0.80
MIN_CONFIDENCE_THRESHOLD = 0.5
MAX_CONFIDENCE_THRESHOLD = 1.0
DEFAULT_STARTING_CATALOG = CATALOG_MUSICBRAINZ
DEFAULT_GENRE_MODE = "merge"

# --- Album Candidate Scoring Weights ---
WEIGHT_ARTIST = 0.30
WEIGHT_ALBUM = 0.40
WEIGHT_TRACK_COUNT = 0.30

# Track-count score by absolute difference between expected and catalog
# count. 0, 2 and 5 are the fixed anchors; 1, 3 and 4 interpolate between them.
TRACK_COUNT_SCORES = {
    0: 1.0,
    1: 0.9,
    2: 0.8,
    3: 0.7,
    4: 0.6,
    5: 0.5,
}

# --- Track Pair Confidence (durations in milliseconds) ---
DEFAULT_DURATION_HIGH_MS = 5000
DEFAULT_DURATION_MEDIUM_MS = 15000
DEFAULT_DURATION_FALLOFF_MS = 30000
DEFAULT_TITLE_HIGH = 0.85
DEFAULT_TITLE_MODERATE = 0.60

# Pair score blend
WEIGHT_PAIR_TITLE = 0.6
WEIGHT_PAIR_DURATION = 0.4
NEUTRAL_DURATION_SCORE = 0.5  # Used when either side lacks a duration

# --- Sort Strategies (priority order for tie-breaks) ---
STRATEGY_BY_ORDER = "by_order"
STRATEGY_BY_TITLE = "by_title"
STRATEGY_BY_DURATION = "by_duration"
STRATEGY_SMART = "smart"

STRATEGY_PRIORITY = (
    STRATEGY_BY_ORDER,
    STRATEGY_BY_TITLE,
    STRATEGY_BY_DURATION,
    STRATEGY_SMART,
)

# --- API Rate Limits (seconds between requests) ---
MUSICBRAINZ_RATE_LIMIT = 1.0
DISCOGS_RATE_LIMIT = 1.0

# --- API Retry / Timeout ---
API_MAX_RETRIES = 3
API_RETRY_BACKOFF_SECONDS = 3.0  # Base wait between retries (multiplied by attempt)
API_TIMEOUT_SECONDS = 10
SEARCH_RESULT_LIMIT = 10

# --- MusicBrainz ---
MUSICBRAINZ_APP_NAME = APP_NAME
MUSICBRAINZ_APP_VERSION = APP_VERSION
MUSICBRAINZ_CONTACT = "https://example.org/tagmatch"  # Required by MB API TOS (app URL or email)

# --- Discogs ---
DISCOGS_API_URL = "https://api.discogs.com"

# --- Paths ---
DEFAULT_CONFIG_FILENAME = "config.yaml"
DEFAULT_REPORT_BASENAME = "_tagmatch_decision"

# --- Report Strings ---
REPORT_TITLE = "tagmatch -- Auto Mode Decision Report"
