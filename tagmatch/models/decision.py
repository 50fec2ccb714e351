"""Auto mode decision models -- what the automaton hands to its consumers."""

from __future__ import annotations

from dataclasses import dataclass, field

from tagmatch.models.catalog import ProviderAlbum, ScoredCandidate
from tagmatch.models.match_result import SortStrategyResult, TrackPair
from tagmatch.models.processing_state import AutoModeState


@dataclass(frozen=True)
class Transition:
    """One state change of the automaton, with the reason it happened."""

    from_state: AutoModeState
    to_state: AutoModeState
    rationale: str

    def as_dict(self) -> dict:
        return {
            "from": self.from_state.value,
            "to": self.to_state.value,
            "rationale": self.rationale,
        }


@dataclass
class AlbumSelection:
    """Result of the album search/fallback phase.

    Attributes:
        state: AUTO_SELECTED or DEFER_TO_INTERACTIVE.
        chosen: The selected candidate, or None when deferring.
        candidates: Every scored candidate from every catalog tried.
        catalogs_tried: Catalog names in the order they were queried.
        transitions: Audit trail of this phase.
        cancelled: True when the caller's cancellation check stopped the chain.
    """

    state: AutoModeState
    chosen: ScoredCandidate | None = None
    candidates: list[ScoredCandidate] = field(default_factory=list)
    catalogs_tried: list[str] = field(default_factory=list)
    transitions: list[Transition] = field(default_factory=list)
    cancelled: bool = False

    @property
    def chosen_catalog(self) -> str | None:
        return self.chosen.catalog if self.chosen else None

    @property
    def rationale(self) -> str:
        """Rationale of the last transition."""
        return self.transitions[-1].rationale if self.transitions else ""


@dataclass
class TaggingPlan:
    """Everything the tagging layer needs to persist an automatic decision.

    Attributes:
        album: The chosen catalog album.
        pairs: Winning track pairs; unmatched slots have a None side.
        genres: Genre list after applying the configured genre mode.
        save_cover: Whether cover art should be saved as well.
        strategy: Name of the winning sort strategy.
    """

    album: ProviderAlbum
    pairs: list[TrackPair]
    genres: list[str]
    save_cover: bool
    strategy: str


@dataclass
class ReviewRequest:
    """Everything the interactive review UI needs to show what was evaluated.

    Attributes:
        candidates: Every scored album candidate, from every catalog tried.
        strategy_results: Every sort strategy result (empty when the run
            never reached track matching).
        chosen: The album candidate that was auto-selected, if any.
        rationale: Why the automaton deferred.
    """

    candidates: list[ScoredCandidate]
    strategy_results: list[SortStrategyResult]
    chosen: ScoredCandidate | None
    rationale: str


@dataclass
class AutoModeOutcome:
    """Final result of one album's auto mode run.

    Attributes:
        decision: AUTO_SAVED or DEFER_TO_INTERACTIVE.
        state: Always COMPLETED once a run returns.
        selection: Album selection phase result.
        winner: Winning sort strategy result, if track matching ran.
        tagging_plan: Set when the decision is AUTO_SAVED.
        review_request: Set when the decision is DEFER_TO_INTERACTIVE.
        transitions: Full audit trail.
    """

    decision: AutoModeState
    state: AutoModeState = AutoModeState.COMPLETED
    selection: AlbumSelection | None = None
    winner: SortStrategyResult | None = None
    tagging_plan: TaggingPlan | None = None
    review_request: ReviewRequest | None = None
    transitions: list[Transition] = field(default_factory=list)

    @property
    def auto_saved(self) -> bool:
        return self.decision is AutoModeState.AUTO_SAVED

    @property
    def needs_review(self) -> bool:
        """True when the album was handed to interactive review."""
        return self.decision.needs_user_action()

    @property
    def rationale(self) -> str:
        """Rationale of the decision transition."""
        for transition in reversed(self.transitions):
            if transition.to_state.is_decision():
                return transition.rationale
        return ""
