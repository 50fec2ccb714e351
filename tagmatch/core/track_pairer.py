"""Track pairer -- pairs a folder's files with an album's catalog tracks.

Several sort strategies each propose a full 1:1 (partial) pairing; every
proposal is scored with MatchConfidence and the best one wins:

1. by_order: on-disk order against catalog order, position by position.
2. by_title: greedy assignment by descending title similarity.
3. by_duration: greedy assignment by ascending duration difference.
4. smart: pairs by the variation/movement number found in each title, for
   albums where titles share a long boilerplate prefix.

The greedy strategies are deliberately not an optimal bipartite matching.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Callable, Sequence

from tagmatch.core.match_confidence import MatchConfidence, duration_delta_ms
from tagmatch.core.string_similarity import title_similarity
from tagmatch.models.catalog import ProviderTrack
from tagmatch.models.match_result import (
    ConfidenceLevel,
    MatchBasis,
    SortStrategyResult,
    TrackPair,
)
from tagmatch.models.track import LocalTrackFile
from tagmatch.utils.constants import (
    STRATEGY_BY_DURATION,
    STRATEGY_BY_ORDER,
    STRATEGY_BY_TITLE,
    STRATEGY_PRIORITY,
    STRATEGY_SMART,
)
from tagmatch.utils.logger import get_logger

logger = get_logger("core.track_pairer")

# local index -> (provider index, basis)
Assignment = dict[int, tuple[int, MatchBasis]]

_ROMAN = r"m{0,3}(?:cm|cd|d?c{0,3})(?:xc|xl|l?x{0,3})(?:ix|iv|v?i{0,3})"

_KEYWORD_ORDINAL_RE = re.compile(
    r"\b(?:variations?|variatio|var|movements?|mvt|mov|no|nr|num|number|part|pt|act|scene|chapter)"
    r"\b\.?\s*(?P<num>\d+|" + _ROMAN + r")\b",
    re.IGNORECASE,
)
_LEADING_NUMBER_RE = re.compile(r"^\W*(?P<num>\d+)\b")
_LEADING_ROMAN_RE = re.compile(r"^\W*(?P<num>" + _ROMAN + r")\s*[.):]", re.IGNORECASE)

_ROMAN_VALUES = {"i": 1, "v": 5, "x": 10, "l": 50, "c": 100, "d": 500, "m": 1000}


def roman_to_int(numeral: str) -> int | None:
    """Convert a Roman numeral to an int, or None if it is not one."""
    numeral = numeral.lower()
    if not numeral or any(ch not in _ROMAN_VALUES for ch in numeral):
        return None
    total = 0
    for current, following in zip(numeral, numeral[1:] + " "):
        value = _ROMAN_VALUES[current]
        if following != " " and _ROMAN_VALUES[following] > value:
            total -= value
        else:
            total += value
    return total if total > 0 else None


def _ordinal_value(raw: str) -> int | None:
    if raw.isdigit():
        return int(raw)
    return roman_to_int(raw)


def _find_ordinal(text: str) -> int | None:
    """Find an ordinal at the start of ``text`` or after a keyword like "No."."""
    if not text:
        return None
    for pattern in (_LEADING_NUMBER_RE, _LEADING_ROMAN_RE, _KEYWORD_ORDINAL_RE):
        for match in pattern.finditer(text):
            value = _ordinal_value(match.group("num"))
            if value is not None:
                return value
    return None


def _common_word_prefix(titles: Sequence[list[str]]) -> int:
    """Number of leading words shared by every title in the group."""
    if len(titles) < 2:
        return 0
    shortest = min(len(words) for words in titles)
    count = 0
    while count < shortest and all(words[count] == titles[0][count] for words in titles):
        count += 1
    return count


def extract_ordinals(titles: Sequence[str]) -> list[int | None]:
    """Extract the distinguishing ordinal from each of a list of titles.

    Titles are grouped by their first word; within the largest group the
    word prefix shared by all titles (e.g. "Goldberg Variations, BWV 988:
    Variation") is skipped so the number that follows it is found first.

    Args:
        titles: Titles from one side (all local files, or all catalog tracks).

    Returns:
        One ordinal per title, None where none could be found.
    """
    words = [title.lower().split() for title in titles]
    first_words = Counter(w[0] for w in words if w)
    main_first = first_words.most_common(1)[0][0] if first_words else None
    group = [w for w in words if w and w[0] == main_first]
    prefix_len = _common_word_prefix(group)

    ordinals: list[int | None] = []
    for title, title_words in zip(titles, words):
        ordinal = None
        if prefix_len and title_words and title_words[0] == main_first:
            remainder = " ".join(title_words[prefix_len:])
            ordinal = _find_ordinal(remainder)
        if ordinal is None:
            ordinal = _find_ordinal(title)
        ordinals.append(ordinal)
    return ordinals


class TrackPairer:
    """Runs every sort strategy and picks the best pairing.

    Selection order: most HIGH confidence pairs, then the highest aggregate
    confidence, then the fixed strategy priority (by_order, by_title,
    by_duration, smart).
    """

    def __init__(self, confidence: MatchConfidence | None = None) -> None:
        """Initialize the pairer.

        Args:
            confidence: Pair classifier. A default MatchConfidence if None.
        """
        self._confidence = confidence or MatchConfidence()
        self._strategies: dict[str, Callable[[list[LocalTrackFile], Sequence[ProviderTrack]], Assignment]] = {
            STRATEGY_BY_ORDER: self._by_order,
            STRATEGY_BY_TITLE: self._by_title,
            STRATEGY_BY_DURATION: self._by_duration,
            STRATEGY_SMART: self._smart,
        }

    def pair(
        self,
        local_files: Sequence[LocalTrackFile],
        provider_tracks: Sequence[ProviderTrack],
    ) -> SortStrategyResult:
        """Return the winning pairing for a folder and an album.

        Args:
            local_files: Files from the folder scanner.
            provider_tracks: Tracks of the chosen album, in catalog order.

        Returns:
            The best SortStrategyResult. Empty when both inputs are empty.
        """
        results = self.evaluate_all(local_files, provider_tracks)
        best = self.select_best(results)
        if best is None:
            return SortStrategyResult(strategy=STRATEGY_BY_ORDER)
        return best

    def evaluate_all(
        self,
        local_files: Sequence[LocalTrackFile],
        provider_tracks: Sequence[ProviderTrack],
    ) -> list[SortStrategyResult]:
        """Run every strategy and return their results in priority order.

        Args:
            local_files: Files from the folder scanner (any order; they are
                sorted by enumeration index).
            provider_tracks: Tracks of the chosen album, in catalog order.

        Returns:
            One SortStrategyResult per strategy, or [] when both inputs are empty.
        """
        if not local_files and not provider_tracks:
            logger.debug("Nothing to pair: no local files and no catalog tracks")
            return []

        ordered_local = sorted(local_files, key=lambda f: f.enumeration_index)
        providers = list(provider_tracks)

        results = []
        for name in STRATEGY_PRIORITY:
            assignment = self._strategies[name](ordered_local, providers)
            result = self._build_result(name, ordered_local, providers, assignment)
            logger.debug(
                "Strategy %s: %d HIGH, %.1f%% aggregate over %d complete pairs",
                name,
                result.high_count,
                result.percentage,
                len(result.complete_pairs),
            )
            results.append(result)
        return results

    @staticmethod
    def select_best(results: Sequence[SortStrategyResult]) -> SortStrategyResult | None:
        """Pick the winning strategy result.

        Args:
            results: Strategy results, in priority order.

        Returns:
            The winner, or None for an empty list.
        """
        if not results:
            return None

        def rank(result: SortStrategyResult) -> tuple[int, float, int]:
            if result.strategy in STRATEGY_PRIORITY:
                priority = STRATEGY_PRIORITY.index(result.strategy)
            else:
                priority = len(STRATEGY_PRIORITY)
            return (result.high_count, result.aggregate_confidence, -priority)

        best = max(results, key=rank)
        tied = [
            r.strategy
            for r in results
            if r is not best
            and r.high_count == best.high_count
            and r.aggregate_confidence == best.aggregate_confidence
        ]
        if tied:
            logger.info(
                "Strategies %s tie with %s (%d HIGH, %.1f%%); %s wins on priority",
                ", ".join(tied),
                best.strategy,
                best.high_count,
                best.percentage,
                best.strategy,
            )
        return best

    # --- Strategies ---

    @staticmethod
    def _by_order(
        local_files: list[LocalTrackFile],
        providers: Sequence[ProviderTrack],
    ) -> Assignment:
        return {i: (i, MatchBasis.ORDER) for i in range(min(len(local_files), len(providers)))}

    def _by_title(
        self,
        local_files: list[LocalTrackFile],
        providers: Sequence[ProviderTrack],
    ) -> Assignment:
        ranking = []
        for li, local in enumerate(local_files):
            for pi, provider in enumerate(providers):
                sim = title_similarity(local.display_title, provider.title)
                ranking.append(((-sim, li, pi), li, pi))
        return self._greedy(ranking, len(local_files), len(providers), MatchBasis.TITLE)

    def _by_duration(
        self,
        local_files: list[LocalTrackFile],
        providers: Sequence[ProviderTrack],
    ) -> Assignment:
        ranking = []
        for li, local in enumerate(local_files):
            for pi, provider in enumerate(providers):
                delta = duration_delta_ms(local, provider)
                # Unknown durations rank after every known one
                key = (delta is None, delta or 0, li, pi)
                ranking.append((key, li, pi))
        return self._greedy(ranking, len(local_files), len(providers), MatchBasis.DURATION)

    @staticmethod
    def _smart(
        local_files: list[LocalTrackFile],
        providers: Sequence[ProviderTrack],
    ) -> Assignment:
        local_ords = extract_ordinals([f.display_title for f in local_files])
        provider_ords = extract_ordinals([t.title for t in providers])
        local_counts = Counter(o for o in local_ords if o is not None)
        provider_counts = Counter(o for o in provider_ords if o is not None)
        provider_by_ord = {
            o: pi for pi, o in enumerate(provider_ords) if o is not None and provider_counts[o] == 1
        }

        assignment: Assignment = {}
        used_providers: set[int] = set()
        for li, ordinal in enumerate(local_ords):
            if ordinal is None or local_counts[ordinal] != 1:
                continue
            pi = provider_by_ord.get(ordinal)
            if pi is not None:
                assignment[li] = (pi, MatchBasis.ORDINAL)
                used_providers.add(pi)

        # Missing or duplicated ordinals fall back to on-disk position
        free_local = [li for li in range(len(local_files)) if li not in assignment]
        free_providers = [pi for pi in range(len(providers)) if pi not in used_providers]
        for li, pi in zip(free_local, free_providers):
            assignment[li] = (pi, MatchBasis.ORDER)
        return assignment

    @staticmethod
    def _greedy(
        ranking: list[tuple[tuple, int, int]],
        local_count: int,
        provider_count: int,
        basis: MatchBasis,
    ) -> Assignment:
        """Repeatedly take the best-ranked pair whose sides are both free."""
        ranking.sort(key=lambda item: item[0])
        assignment: Assignment = {}
        used_providers: set[int] = set()
        limit = min(local_count, provider_count)
        for _key, li, pi in ranking:
            if len(assignment) == limit:
                break
            if li in assignment or pi in used_providers:
                continue
            assignment[li] = (pi, basis)
            used_providers.add(pi)
        return assignment

    # --- Evaluation ---

    def _build_result(
        self,
        strategy: str,
        local_files: list[LocalTrackFile],
        providers: Sequence[ProviderTrack],
        assignment: Assignment,
    ) -> SortStrategyResult:
        """Turn an assignment into TrackPairs covering every input exactly once."""
        pairs: list[TrackPair] = []
        used_providers: set[int] = set()

        for li, local in enumerate(local_files):
            if li in assignment:
                pi, basis = assignment[li]
                provider = providers[pi]
                used_providers.add(pi)
                conf = self._confidence.evaluate(local, provider)
                pairs.append(TrackPair(local, provider, conf.level, conf.score, basis))
            else:
                pairs.append(TrackPair(local, None))

        for pi, provider in enumerate(providers):
            if pi not in used_providers:
                pairs.append(TrackPair(None, provider))

        complete = [p for p in pairs if p.is_complete]
        high_count = sum(1 for p in complete if p.level is ConfidenceLevel.HIGH)
        aggregate = sum(p.score for p in complete) / len(complete) if complete else 0.0

        return SortStrategyResult(
            strategy=strategy,
            pairs=pairs,
            high_count=high_count,
            aggregate_confidence=aggregate,
        )
