"""Confidence classification for a single local file / catalog track pair."""

from __future__ import annotations

from tagmatch.core.string_similarity import title_similarity
from tagmatch.models.catalog import ProviderTrack
from tagmatch.models.config import ConfidenceTolerances
from tagmatch.models.match_result import ConfidenceLevel, PairConfidence
from tagmatch.models.track import LocalTrackFile
from tagmatch.utils.constants import (
    NEUTRAL_DURATION_SCORE,
    WEIGHT_PAIR_DURATION,
    WEIGHT_PAIR_TITLE,
)


def duration_delta_ms(local: LocalTrackFile, provider: ProviderTrack) -> int | None:
    """Absolute duration difference in ms, or None if either side lacks one."""
    if not local.has_duration or not provider.has_duration:
        return None
    return abs(int(local.duration_ms) - int(provider.duration_ms))


class MatchConfidence:
    """Classifies a track pair into HIGH / MEDIUM / LOW and scores it.

    Classification (with the default tolerances):
    - delta <= 5 s and title similarity >= 0.85: HIGH
    - delta <= 15 s or title similarity >= 0.60: MEDIUM
    - otherwise: LOW

    When a duration is unknown the duration conditions cannot hold, so the
    title alone decides. The numeric score blends title similarity (60%)
    with a duration score (40%) that is 1.0 inside the HIGH band and falls
    linearly to 0.0 at ``duration_falloff_ms``.
    """

    def __init__(self, tolerances: ConfidenceTolerances | None = None) -> None:
        """Initialize the classifier.

        Args:
            tolerances: Duration and title bands. Defaults are used if None.
        """
        self._tol = tolerances or ConfidenceTolerances()

    @property
    def tolerances(self) -> ConfidenceTolerances:
        return self._tol

    def evaluate(
        self,
        local: LocalTrackFile | None,
        provider: ProviderTrack | None,
    ) -> PairConfidence:
        """Classify and score one pair.

        Args:
            local: The local file, or None.
            provider: The catalog track, or None.

        Returns:
            PairConfidence. A pair missing either side is LOW with score 0.0.
        """
        if local is None or provider is None:
            return PairConfidence(level=ConfidenceLevel.LOW, score=0.0)

        title_sim = title_similarity(local.display_title, provider.title)
        delta = duration_delta_ms(local, provider)

        return PairConfidence(
            level=self.classify(title_sim, delta),
            score=self.score(title_sim, delta),
            title_similarity=title_sim,
            duration_delta_ms=delta,
        )

    def classify(self, title_sim: float, delta_ms: int | None) -> ConfidenceLevel:
        """Map a title similarity and a duration delta to a level."""
        title_high = title_sim >= self._tol.title_high
        if delta_ms is None:
            if title_high:
                return ConfidenceLevel.HIGH
        elif delta_ms <= self._tol.duration_high_ms and title_high:
            return ConfidenceLevel.HIGH

        if delta_ms is not None and delta_ms <= self._tol.duration_medium_ms:
            return ConfidenceLevel.MEDIUM
        if title_sim >= self._tol.title_moderate:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW

    def duration_score(self, delta_ms: int | None) -> float:
        """1.0 inside the HIGH band, linear falloff to 0.0, 0.5 if unknown."""
        if delta_ms is None:
            return NEUTRAL_DURATION_SCORE
        if delta_ms <= self._tol.duration_high_ms:
            return 1.0
        if delta_ms >= self._tol.duration_falloff_ms:
            return 0.0
        falloff_range = self._tol.duration_falloff_ms - self._tol.duration_high_ms
        return max(0.0, 1.0 - (delta_ms - self._tol.duration_high_ms) / falloff_range)

    def score(self, title_sim: float, delta_ms: int | None) -> float:
        """Weighted blend used for ranking pairs and strategies."""
        overall = title_sim * WEIGHT_PAIR_TITLE + self.duration_score(delta_ms) * WEIGHT_PAIR_DURATION
        return max(0.0, min(1.0, overall))
