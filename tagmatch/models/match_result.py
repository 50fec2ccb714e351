"""Track pairing result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from tagmatch.models.catalog import ProviderTrack
from tagmatch.models.track import LocalTrackFile


class ConfidenceLevel(Enum):
    """Classification of one local/catalog track pair."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MatchBasis(Enum):
    """Which strategy put the two sides of a pair together."""

    ORDER = "order"
    TITLE = "title"
    DURATION = "duration"
    ORDINAL = "ordinal"
    UNMATCHED = "unmatched"


@dataclass(frozen=True)
class PairConfidence:
    """Output of the pair confidence classifier.

    Attributes:
        level: HIGH / MEDIUM / LOW classification.
        score: Numeric score in [0, 1], used only for ranking.
        title_similarity: Title similarity in [0, 1].
        duration_delta_ms: Absolute duration difference, or None when unknown.
    """

    level: ConfidenceLevel
    score: float
    title_similarity: float = 0.0
    duration_delta_ms: int | None = None


@dataclass(frozen=True)
class TrackPair:
    """One proposed association between a local file and a catalog track.

    Either side may be None when nothing was left to pair it with.
    """

    local: LocalTrackFile | None
    provider: ProviderTrack | None
    level: ConfidenceLevel = ConfidenceLevel.LOW
    score: float = 0.0
    basis: MatchBasis = MatchBasis.UNMATCHED

    @property
    def is_complete(self) -> bool:
        """True when both sides are present."""
        return self.local is not None and self.provider is not None

    def as_dict(self) -> dict:
        """Serialize for reports."""
        return {
            "file_path": str(self.local.file_path) if self.local else None,
            "local_title": self.local.display_title if self.local else None,
            "provider_track_id": self.provider.id if self.provider else None,
            "provider_title": self.provider.title if self.provider else None,
            "level": self.level.value,
            "score": round(self.score, 4),
            "basis": self.basis.value,
        }


@dataclass
class SortStrategyResult:
    """Full pairing proposed by one sort strategy, with its evaluation.

    Attributes:
        strategy: Strategy name (see STRATEGY_PRIORITY).
        pairs: Every local file and every provider track, each exactly once.
        high_count: Number of HIGH confidence pairs.
        aggregate_confidence: Sum of pair scores divided by the number of
            complete pairs, in [0, 1].
    """

    strategy: str
    pairs: list[TrackPair] = field(default_factory=list)
    high_count: int = 0
    aggregate_confidence: float = 0.0

    @property
    def percentage(self) -> float:
        """Aggregate confidence as a percentage (0-100)."""
        return self.aggregate_confidence * 100.0

    @property
    def complete_pairs(self) -> list[TrackPair]:
        return [p for p in self.pairs if p.is_complete]

    @property
    def unmatched_local(self) -> list[LocalTrackFile]:
        return [p.local for p in self.pairs if p.local is not None and p.provider is None]

    @property
    def unmatched_provider(self) -> list[ProviderTrack]:
        return [p.provider for p in self.pairs if p.provider is not None and p.local is None]

    def as_dict(self) -> dict:
        """Serialize for reports."""
        return {
            "strategy": self.strategy,
            "high_count": self.high_count,
            "aggregate_percentage": round(self.percentage, 2),
            "pairs": [p.as_dict() for p in self.pairs],
        }
