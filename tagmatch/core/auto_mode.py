"""Auto mode controller -- the decision automaton for one album folder.

Pipeline:
1. Search: query the starting catalog and score every candidate
2. Select: auto-select the best candidate if it clears the threshold
3. Fallback: otherwise walk the fixed fallback chain, one catalog at a time
4. Match: pair local files with the selected album's tracks
5. Decide: auto-save if the winning pairing clears the threshold,
   otherwise defer everything that was evaluated to interactive review

Every state change is recorded with a rationale for later audit.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterable, Sequence

from tagmatch.core.album_scorer import AlbumCandidateScorer
from tagmatch.core.genre_merger import merge_genres
from tagmatch.core.match_confidence import MatchConfidence
from tagmatch.core.track_pairer import TrackPairer
from tagmatch.models.catalog import AlbumQuery, ProviderTrack, ScoredCandidate
from tagmatch.models.config import AutoModeConfig
from tagmatch.models.decision import (
    AlbumSelection,
    AutoModeOutcome,
    ReviewRequest,
    TaggingPlan,
    Transition,
)
from tagmatch.models.match_result import SortStrategyResult
from tagmatch.models.processing_state import AutoModeState
from tagmatch.models.track import LocalTrackFile
from tagmatch.providers.base import ProviderAdapter
from tagmatch.utils.constants import (
    FALLBACK_CHAINS,
    MAX_CONFIDENCE_THRESHOLD,
    MIN_CONFIDENCE_THRESHOLD,
)
from tagmatch.utils.errors import ProviderUnavailableError
from tagmatch.utils.logger import get_logger

logger = get_logger("core.auto_mode")

CancelCheck = Callable[[], bool]

# Number of runner-up candidates named in a rationale
_RATIONALE_RUNNERS_UP = 3


class _Trail:
    """Current state plus the transitions that led to it."""

    def __init__(self, transitions: Sequence[Transition] = (), state: AutoModeState = AutoModeState.IDLE) -> None:
        self.transitions: list[Transition] = list(transitions)
        self.state = state

    def move(self, to_state: AutoModeState, rationale: str) -> None:
        logger.info("%s -> %s: %s", self.state.value, to_state.value, rationale)
        self.transitions.append(Transition(self.state, to_state, rationale))
        self.state = to_state


def _describe(candidate: ScoredCandidate) -> str:
    return f"{candidate.album.display_label} score={candidate.score:.3f}"


def _runners_up(scored: Sequence[ScoredCandidate], chosen: ScoredCandidate | None) -> str:
    others = sorted(
        (c for c in scored if c is not chosen),
        key=lambda c: (-c.score, c.index),
    )[:_RATIONALE_RUNNERS_UP]
    if not others:
        return "none"
    return "; ".join(_describe(c) for c in others)


class AutoModeController:
    """Decides, album by album, whether tags can be written without asking.

    The controller keeps no state between runs; everything a run produces
    is returned in its AlbumSelection / AutoModeOutcome.
    """

    def __init__(
        self,
        providers: Iterable[ProviderAdapter],
        config: AutoModeConfig | None = None,
        scorer: AlbumCandidateScorer | None = None,
        pairer: TrackPairer | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            providers: Catalog adapters, keyed internally by ``catalog_name``.
            config: Auto mode settings. Defaults are used if None.
            scorer: Album candidate scorer.
            pairer: Track pairer. Built from the config tolerances if None.
        """
        self._config = config or AutoModeConfig()
        self._providers = {p.catalog_name: p for p in providers}
        self._scorer = scorer or AlbumCandidateScorer()
        self._pairer = pairer or TrackPairer(MatchConfidence(self._config.tolerances))

    @property
    def threshold(self) -> float:
        """Configured threshold, held to the supported range."""
        return min(max(self._config.confidence_threshold, MIN_CONFIDENCE_THRESHOLD), MAX_CONFIDENCE_THRESHOLD)

    def run(
        self,
        query: AlbumQuery,
        local_files: Sequence[LocalTrackFile],
        starting_catalog: str | None = None,
        cancel_check: CancelCheck | None = None,
    ) -> AutoModeOutcome:
        """Run album selection and track matching for one folder.

        Args:
            query: Artist and album the folder claims to be. A zero expected
                track count is replaced by the number of local files.
            local_files: Files from the folder scanner.
            starting_catalog: Catalog queried first (config default if None).
            cancel_check: Consulted between catalog attempts; returning True
                stops the fallback chain and defers.

        Returns:
            AutoModeOutcome in state COMPLETED.
        """
        if not local_files:
            trail = _Trail()
            trail.move(
                AutoModeState.DEFER_TO_INTERACTIVE,
                f"No local audio files to match; nothing was searched (threshold {self.threshold:.2f})",
            )
            selection = AlbumSelection(
                state=AutoModeState.DEFER_TO_INTERACTIVE,
                transitions=list(trail.transitions),
            )
            return self._defer(trail, selection, [], None)

        if not query.expected_track_count:
            query = replace(query, expected_track_count=len(local_files))

        selection = self.select_album(query, starting_catalog, cancel_check)
        return self.match_tracks(selection, local_files)

    def select_album(
        self,
        query: AlbumQuery,
        starting_catalog: str | None = None,
        cancel_check: CancelCheck | None = None,
    ) -> AlbumSelection:
        """Search catalogs along the fallback chain until a candidate clears the threshold.

        Args:
            query: Artist, album and expected track count.
            starting_catalog: Catalog queried first (config default if None).
            cancel_check: Consulted before each fallback attempt.

        Returns:
            AlbumSelection in state AUTO_SELECTED or DEFER_TO_INTERACTIVE.
        """
        starting = starting_catalog or self._config.starting_catalog
        threshold = self.threshold
        trail = _Trail()
        collected: list[ScoredCandidate] = []
        tried: list[str] = []
        current = starting

        while True:
            trail.move(
                AutoModeState.SEARCHING_ALBUM,
                f"Searching {current} for '{query.artist} - {query.album}' "
                f"({query.expected_track_count} local tracks)",
            )
            tried.append(current)
            scored, problem = self._search_catalog(current, query)
            collected.extend(scored)
            best = self._scorer.best_candidate(scored)

            if best is None:
                evaluated = f"{current}: no candidates" + (f" ({problem})" if problem else "")
            else:
                evaluated = f"{current}: {len(scored)} candidate(s), best {_describe(best)}"
            trail.move(AutoModeState.ALBUM_EVALUATED, evaluated)

            if best is not None and best.score >= threshold:
                trail.move(
                    AutoModeState.AUTO_SELECTED,
                    f"Selected {_describe(best)} from {current}: "
                    f"{best.score:.3f} >= threshold {threshold:.2f}. "
                    f"Rejected: {_runners_up(scored, best)}",
                )
                return AlbumSelection(
                    state=trail.state,
                    chosen=best,
                    candidates=collected,
                    catalogs_tried=tried,
                    transitions=trail.transitions,
                )

            best_score = f"{best.score:.3f}" if best else "n/a"
            if not self._config.fallback_enabled:
                trail.move(
                    AutoModeState.DEFER_TO_INTERACTIVE,
                    f"Best score on {current} is {best_score} < threshold {threshold:.2f} "
                    f"and fallback is disabled; {len(collected)} candidate(s) for review",
                )
                return self._selection_deferred(trail, collected, tried)

            next_catalog = self._next_catalog(current, starting, tried)
            if next_catalog is None:
                overall = self._scorer.best_candidate(collected)
                overall_text = _describe(overall) if overall else "no candidates at all"
                trail.move(
                    AutoModeState.DEFER_TO_INTERACTIVE,
                    f"Fallback chain exhausted after {', '.join(tried)}; best overall "
                    f"{overall_text} is below threshold {threshold:.2f}",
                )
                return self._selection_deferred(trail, collected, tried)

            trail.move(
                AutoModeState.AWAITING_FALLBACK,
                f"Best score on {current} is {best_score} < threshold {threshold:.2f}; "
                f"next catalog is {next_catalog}",
            )

            if cancel_check is not None and cancel_check():
                trail.move(
                    AutoModeState.DEFER_TO_INTERACTIVE,
                    f"Cancelled by caller before querying {next_catalog}; "
                    f"{len(collected)} candidate(s) for review",
                )
                return self._selection_deferred(trail, collected, tried, cancelled=True)

            current = next_catalog

    def match_tracks(
        self,
        selection: AlbumSelection,
        local_files: Sequence[LocalTrackFile],
    ) -> AutoModeOutcome:
        """Pair local files with the selected album and decide whether to auto-save.

        Args:
            selection: Result of ``select_album``.
            local_files: Files from the folder scanner.

        Returns:
            AutoModeOutcome in state COMPLETED.
        """
        trail = _Trail(selection.transitions, selection.state)
        chosen = selection.chosen
        if selection.state is not AutoModeState.AUTO_SELECTED or chosen is None:
            return self._defer(trail, selection, [], None)

        threshold = self.threshold
        trail.move(
            AutoModeState.TRACK_MATCHING,
            f"Fetching tracks of {chosen.album.display_label} and pairing "
            f"{len(local_files)} local file(s)",
        )
        tracks, problem = self._fetch_tracks(chosen)
        results = self._pairer.evaluate_all(local_files, tracks)
        winner = self._pairer.select_best(results)

        if winner is None or not winner.complete_pairs:
            reason = problem or "no track could be paired"
            trail.move(
                AutoModeState.DEFER_TO_INTERACTIVE,
                f"Track matching produced no pairs ({reason}); threshold {threshold:.2f}",
            )
            return self._defer(trail, selection, results, winner)

        summary = (
            f"winning strategy {winner.strategy}: {winner.high_count} HIGH pair(s), "
            f"aggregate {winner.percentage:.1f}%, {len(winner.unmatched_local)} unmatched file(s), "
            f"{len(winner.unmatched_provider)} unmatched catalog track(s)"
        )
        if winner.aggregate_confidence >= threshold:
            trail.move(
                AutoModeState.AUTO_SAVED,
                f"Auto-saving {chosen.album.display_label}: {summary}; "
                f"{winner.aggregate_confidence:.3f} >= threshold {threshold:.2f}",
            )
            plan = TaggingPlan(
                album=chosen.album,
                pairs=list(winner.pairs),
                genres=self._genres(local_files, chosen, tracks),
                save_cover=self._config.save_cover,
                strategy=winner.strategy,
            )
            trail.move(AutoModeState.COMPLETED, "Tagging plan handed to the tagging layer")
            return AutoModeOutcome(
                decision=AutoModeState.AUTO_SAVED,
                selection=selection,
                winner=winner,
                tagging_plan=plan,
                transitions=trail.transitions,
            )

        trail.move(
            AutoModeState.DEFER_TO_INTERACTIVE,
            f"{summary}; {winner.aggregate_confidence:.3f} < threshold {threshold:.2f}",
        )
        return self._defer(trail, selection, results, winner)

    # --- Helpers ---

    def _search_catalog(
        self,
        catalog: str,
        query: AlbumQuery,
    ) -> tuple[list[ScoredCandidate], str | None]:
        """Search one catalog; an unavailable catalog yields zero candidates."""
        adapter = self._providers.get(catalog)
        if adapter is None:
            logger.debug("No adapter registered for %s", catalog)
            return [], "no adapter registered"
        try:
            albums = adapter.search_albums(query.artist, query.album)
        except ProviderUnavailableError as e:
            logger.warning("%s unavailable, treating as zero candidates: %s", catalog, e)
            return [], f"unavailable: {e}"
        return self._scorer.score_candidates(query, albums), None

    def _fetch_tracks(self, chosen: ScoredCandidate) -> tuple[list[ProviderTrack], str | None]:
        adapter = self._providers.get(chosen.catalog)
        if adapter is None:
            return [], f"no adapter registered for {chosen.catalog}"
        try:
            return adapter.get_tracks(chosen.album.id), None
        except ProviderUnavailableError as e:
            logger.warning("Could not fetch tracks from %s: %s", chosen.catalog, e)
            return [], f"{chosen.catalog} unavailable: {e}"

    @staticmethod
    def _next_catalog(current: str, starting: str, tried: Sequence[str]) -> str | None:
        """Next untried catalog from the current catalog's chain (then the starting one's)."""
        for chain in (FALLBACK_CHAINS.get(current, ()), FALLBACK_CHAINS.get(starting, ())):
            for catalog in chain:
                if catalog not in tried:
                    return catalog
        return None

    def _genres(
        self,
        local_files: Sequence[LocalTrackFile],
        chosen: ScoredCandidate,
        tracks: Sequence[ProviderTrack],
    ) -> list[str]:
        existing = [genre for f in local_files for genre in f.genres]
        incoming = list(chosen.album.genres) or [genre for t in tracks for genre in t.genres]
        return merge_genres(existing, incoming, self._config.genre_mode_enum)

    @staticmethod
    def _selection_deferred(
        trail: _Trail,
        collected: list[ScoredCandidate],
        tried: list[str],
        cancelled: bool = False,
    ) -> AlbumSelection:
        return AlbumSelection(
            state=AutoModeState.DEFER_TO_INTERACTIVE,
            candidates=collected,
            catalogs_tried=tried,
            transitions=trail.transitions,
            cancelled=cancelled,
        )

    @staticmethod
    def _defer(
        trail: _Trail,
        selection: AlbumSelection,
        results: list[SortStrategyResult],
        winner: SortStrategyResult | None,
    ) -> AutoModeOutcome:
        """Build a deferred outcome carrying everything that was evaluated."""
        rationale = trail.transitions[-1].rationale if trail.transitions else ""
        review = ReviewRequest(
            candidates=list(selection.candidates),
            strategy_results=list(results),
            chosen=selection.chosen,
            rationale=rationale,
        )
        trail.move(AutoModeState.COMPLETED, "Handed to interactive review")
        return AutoModeOutcome(
            decision=AutoModeState.DEFER_TO_INTERACTIVE,
            selection=selection,
            winner=winner,
            review_request=review,
            transitions=trail.transitions,
        )
