"""Album candidate scoring -- how well a catalog release fits a local folder."""

from __future__ import annotations

from typing import Sequence

from tagmatch.core.string_similarity import name_similarity
from tagmatch.models.catalog import AlbumQuery, ProviderAlbum, ScoredCandidate
from tagmatch.utils.constants import (
    TRACK_COUNT_SCORES,
    WEIGHT_ALBUM,
    WEIGHT_ARTIST,
    WEIGHT_TRACK_COUNT,
)
from tagmatch.utils.logger import get_logger

logger = get_logger("core.album_scorer")


def track_count_score(expected: int | None, actual: int | None) -> float:
    """Score how close a catalog track count is to the local file count.

    Args:
        expected: Number of local files.
        actual: Track count reported by the catalog.
            A missing count is unknown and scores 0.0.

    Returns:
        1.0 for an exact match, 0.8 two apart, 0.5 five apart, 0.0 beyond.
    """
    if expected is None or actual is None:
        return 0.0
    return TRACK_COUNT_SCORES.get(abs(expected - actual), 0.0)


class AlbumCandidateScorer:
    """Calculates confidence scores for catalog album candidates.

    Scoring is based on three weighted factors:
    - Artist name similarity (30%)
    - Album name similarity (40%)
    - Track count closeness (30%)

    The scorer never decides whether a score is good enough; thresholding
    belongs to the auto mode controller.
    """

    def score(self, query: AlbumQuery, album: ProviderAlbum) -> float:
        """Calculate the overall score for a single candidate.

        Args:
            query: Artist/album/track count of the local folder.
            album: Candidate from a catalog search.

        Returns:
            Score from 0.0 to 1.0.
        """
        return self._score_parts(query, album, index=0).score

    def score_candidates(
        self,
        query: AlbumQuery,
        albums: Sequence[ProviderAlbum],
    ) -> list[ScoredCandidate]:
        """Score every candidate, keeping the catalog's original order.

        Args:
            query: Artist/album/track count of the local folder.
            albums: Candidates as returned by the catalog.

        Returns:
            One ScoredCandidate per album, in input order.
        """
        return [self._score_parts(query, album, index) for index, album in enumerate(albums)]

    @staticmethod
    def best_candidate(scored: Sequence[ScoredCandidate]) -> ScoredCandidate | None:
        """Pick the highest scoring candidate; ties go to the earliest one.

        Args:
            scored: Scored candidates, in catalog order.

        Returns:
            The best candidate, or None for an empty list.
        """
        best: ScoredCandidate | None = None
        for candidate in scored:
            if best is None or candidate.score > best.score:
                best = candidate
            elif candidate.score == best.score:
                logger.debug(
                    "Tie at %.4f between '%s' and '%s', keeping the earlier one",
                    candidate.score,
                    best.album.display_label,
                    candidate.album.display_label,
                )
        return best

    def _score_parts(self, query: AlbumQuery, album: ProviderAlbum, index: int) -> ScoredCandidate:
        artist_sim = name_similarity(query.artist, album.artist)
        album_sim = name_similarity(query.album, album.name)
        count_score = track_count_score(query.expected_track_count, album.track_count)

        overall = (
            artist_sim * WEIGHT_ARTIST
            + album_sim * WEIGHT_ALBUM
            + count_score * WEIGHT_TRACK_COUNT
        )
        overall = max(0.0, min(1.0, overall))

        logger.debug(
            "Score for '%s - %s' -> %s: artist=%.3f, album=%.3f, tracks=%.3f => overall=%.3f",
            query.artist,
            query.album,
            album.display_label,
            artist_sim,
            album_sim,
            count_score,
            overall,
        )

        return ScoredCandidate(
            album=album,
            score=overall,
            index=index,
            artist_similarity=artist_sim,
            album_similarity=album_sim,
            track_count_score=count_score,
        )
