"""Data models for tagmatch."""

from tagmatch.models.track import LocalTrackFile
from tagmatch.models.catalog import AlbumQuery, ProviderAlbum, ProviderTrack, ScoredCandidate
from tagmatch.models.match_result import (
    ConfidenceLevel,
    MatchBasis,
    PairConfidence,
    SortStrategyResult,
    TrackPair,
)
from tagmatch.models.processing_state import AutoModeState
from tagmatch.models.config import AutoModeConfig, ConfidenceTolerances, GenreMode
from tagmatch.models.decision import (
    AlbumSelection,
    AutoModeOutcome,
    ReviewRequest,
    TaggingPlan,
    Transition,
)

__all__ = [
    "LocalTrackFile",
    "AlbumQuery",
    "ProviderAlbum",
    "ProviderTrack",
    "ScoredCandidate",
    "ConfidenceLevel",
    "MatchBasis",
    "PairConfidence",
    "SortStrategyResult",
    "TrackPair",
    "AutoModeState",
    "AutoModeConfig",
    "ConfidenceTolerances",
    "GenreMode",
    "AlbumSelection",
    "AutoModeOutcome",
    "ReviewRequest",
    "TaggingPlan",
    "Transition",
]
