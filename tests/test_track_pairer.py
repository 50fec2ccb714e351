"""Tests for TrackPairer -- sort strategies, selection, and ordinals."""

from __future__ import annotations

from pathlib import Path

import pytest

from tagmatch.core.track_pairer import TrackPairer, extract_ordinals, roman_to_int
from tagmatch.models.catalog import ProviderTrack
from tagmatch.models.match_result import ConfidenceLevel, MatchBasis, SortStrategyResult
from tagmatch.models.track import LocalTrackFile

HELP_TRACKS = [
    ("Help!", 138_000),
    ("The Night Before", 154_000),
    ("You've Got to Hide Your Love Away", 129_000),
]


def make_local(titles_durations, order=None) -> list[LocalTrackFile]:
    order = order if order is not None else range(len(titles_durations))
    files = []
    for index, source in enumerate(order):
        title, duration = titles_durations[source]
        files.append(
            LocalTrackFile(
                file_path=Path(f"/music/Help/{index + 1:02d}.flac"),
                enumeration_index=index,
                title=title,
                duration_ms=duration,
            )
        )
    return files


def make_remote(titles_durations) -> list[ProviderTrack]:
    return [
        ProviderTrack(id=f"t{i}", title=title, track_number=i + 1, duration_ms=duration)
        for i, (title, duration) in enumerate(titles_durations)
    ]


@pytest.fixture
def pairer() -> TrackPairer:
    return TrackPairer()


class TestPair:
    def test_identical_order_prefers_by_order(self, pairer):
        result = pairer.pair(make_local(HELP_TRACKS), make_remote(HELP_TRACKS))

        assert result.strategy == "by_order"
        assert result.high_count == 3
        assert result.percentage == pytest.approx(100.0)
        assert all(p.basis is MatchBasis.ORDER for p in result.pairs)

    def test_shuffled_files_prefer_by_title(self, pairer):
        local_files = make_local(HELP_TRACKS, order=[2, 0, 1])
        result = pairer.pair(local_files, make_remote(HELP_TRACKS))

        assert result.strategy == "by_title"
        assert result.high_count == 3
        for p in result.pairs:
            assert p.local.title == p.provider.title

    def test_more_local_files_than_tracks(self, pairer):
        titles = [(f"Song {chr(65 + i)}", 180_000 + i * 20_000) for i in range(10)]
        local_files = make_local(titles)
        result = pairer.pair(local_files, make_remote(titles[:8]))

        assert len(result.complete_pairs) == 8
        assert len(result.unmatched_local) == 2
        assert all(p.provider is None for p in result.pairs if not p.is_complete)
        assert {p.local.file_path for p in result.pairs if p.local} == {f.file_path for f in local_files}

    def test_more_tracks_than_local_files(self, pairer):
        result = pairer.pair(make_local(HELP_TRACKS[:2]), make_remote(HELP_TRACKS))

        assert len(result.complete_pairs) == 2
        assert [t.title for t in result.unmatched_provider] == ["You've Got to Hide Your Love Away"]

    def test_both_empty(self, pairer):
        result = pairer.pair([], [])
        assert result.pairs == []
        assert result.aggregate_confidence == 0.0

    def test_no_provider_tracks(self, pairer):
        result = pairer.pair(make_local(HELP_TRACKS), [])
        assert len(result.pairs) == 3
        assert result.complete_pairs == []
        assert result.aggregate_confidence == 0.0

    def test_local_files_sorted_by_enumeration_index(self, pairer):
        local_files = list(reversed(make_local(HELP_TRACKS)))
        result = pairer.pair(local_files, make_remote(HELP_TRACKS))
        assert result.strategy == "by_order"
        assert [p.local.enumeration_index for p in result.pairs] == [0, 1, 2]


class TestEvaluateAll:
    def test_one_result_per_strategy_in_priority_order(self, pairer):
        results = pairer.evaluate_all(make_local(HELP_TRACKS), make_remote(HELP_TRACKS))
        assert [r.strategy for r in results] == ["by_order", "by_title", "by_duration", "smart"]

    def test_empty_inputs(self, pairer):
        assert pairer.evaluate_all([], []) == []

    def test_every_input_appears_exactly_once(self, pairer):
        local_files = make_local(HELP_TRACKS, order=[1, 2, 0])
        remote = make_remote(HELP_TRACKS + [("Ticket to Ride", 190_000)])
        for result in pairer.evaluate_all(local_files, remote):
            locals_seen = [p.local.enumeration_index for p in result.pairs if p.local]
            remotes_seen = [p.provider.id for p in result.pairs if p.provider]
            assert sorted(locals_seen) == [0, 1, 2]
            assert sorted(remotes_seen) == ["t0", "t1", "t2", "t3"]

    def test_by_duration_pairs_closest_lengths(self, pairer):
        local_files = make_local([("Track 1", 129_500), ("Track 2", 138_400)])
        results = pairer.evaluate_all(local_files, make_remote(HELP_TRACKS))
        by_duration = next(r for r in results if r.strategy == "by_duration")
        paired = {p.local.title: p.provider.title for p in by_duration.complete_pairs}
        assert paired == {
            "Track 1": "You've Got to Hide Your Love Away",
            "Track 2": "Help!",
        }

    def test_deterministic(self, pairer):
        local_files = make_local(HELP_TRACKS, order=[2, 0, 1])
        remote = make_remote(HELP_TRACKS)
        first = [r.as_dict() for r in pairer.evaluate_all(local_files, remote)]
        second = [r.as_dict() for r in pairer.evaluate_all(local_files, remote)]
        assert first == second


class TestSmartStrategy:
    PREFIX = "Goldberg Variations, BWV 988:"

    def test_pairs_by_variation_number(self, pairer):
        local_files = make_local(
            [
                (f"{self.PREFIX} Variation 2", None),
                (f"{self.PREFIX} Variation 1", None),
                (f"{self.PREFIX} Variation 3", None),
            ]
        )
        remote = make_remote(
            [
                (f"{self.PREFIX} Variation 1. a 1 Clav.", None),
                (f"{self.PREFIX} Variation 2. a 1 Clav.", None),
                (f"{self.PREFIX} Variation 3. Canone all'Unisono", None),
            ]
        )
        results = pairer.evaluate_all(local_files, remote)
        smart = next(r for r in results if r.strategy == "smart")

        assert all(p.basis is MatchBasis.ORDINAL for p in smart.pairs)
        assert [(p.local.title[-1], p.provider.id) for p in smart.pairs] == [
            ("2", "t1"),
            ("1", "t0"),
            ("3", "t2"),
        ]

    def test_without_ordinals_falls_back_to_position(self, pairer):
        results = pairer.evaluate_all(make_local(HELP_TRACKS), make_remote(HELP_TRACKS))
        smart = next(r for r in results if r.strategy == "smart")
        assert all(p.basis is MatchBasis.ORDER for p in smart.pairs)


class TestSelectBest:
    def test_high_count_beats_aggregate(self):
        a = SortStrategyResult(strategy="by_order", high_count=2, aggregate_confidence=0.7)
        b = SortStrategyResult(strategy="by_title", high_count=3, aggregate_confidence=0.6)
        assert TrackPairer.select_best([a, b]) is b

    def test_aggregate_breaks_high_count_tie(self):
        a = SortStrategyResult(strategy="by_order", high_count=3, aggregate_confidence=0.7)
        b = SortStrategyResult(strategy="by_duration", high_count=3, aggregate_confidence=0.9)
        assert TrackPairer.select_best([a, b]) is b

    def test_priority_breaks_full_tie(self):
        a = SortStrategyResult(strategy="smart", high_count=3, aggregate_confidence=0.9)
        b = SortStrategyResult(strategy="by_title", high_count=3, aggregate_confidence=0.9)
        assert TrackPairer.select_best([a, b]) is b

    def test_empty(self):
        assert TrackPairer.select_best([]) is None


class TestOrdinals:
    def test_roman_to_int(self):
        assert roman_to_int("XIV") == 14
        assert roman_to_int("iv") == 4
        assert roman_to_int("abc") is None
        assert roman_to_int("") is None

    def test_extract_after_shared_prefix(self):
        titles = [
            "Goldberg Variations, BWV 988: Variation 1",
            "Goldberg Variations, BWV 988: Variation 2",
            "Goldberg Variations, BWV 988: Aria",
        ]
        assert extract_ordinals(titles) == [1, 2, None]

    def test_keywords_and_leading_numbers(self):
        assert extract_ordinals(["Symphony: Part IV", "03 - Something"]) == [4, 3]

    def test_plain_titles_have_no_ordinal(self):
        assert extract_ordinals(["Help!", "Yesterday"]) == [None, None]
