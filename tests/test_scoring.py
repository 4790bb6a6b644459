"""Tests for struggle scores and summary aggregation.

The kernel is detector-agnostic: every test passes the counting rule in
explicitly, either one-per-record (pattern path) or one-per-range
(classifier path).
"""

import pytest

from disfluency_analyzer.core.ir import (
    ClassifiedOccurrence,
    Pause,
    PatternOccurrence,
    TokenRange,
)
from disfluency_analyzer.core.scoring import (
    build_by_category,
    build_most_common_fillers,
    build_summary,
    category_weight,
    compute_struggle_score,
    round_half_up,
)


def count_one(occurrence):
    return 1


def count_ranges(occurrence):
    return len(occurrence.ranges)


def _occ(category, text, position=0):
    return PatternOccurrence(category=category, text=text, position=position, length=len(text))


def _pause(duration):
    return Pause(
        after_word="a", before_word="b", after_word_index=0, before_word_index=1,
        start=0.0, end=duration, duration=duration,
    )


class TestCategoryWeight:

    def test_known_category(self):
        assert category_weight("sound_repetitions") == 2

    def test_unknown_category_defaults_to_one(self):
        assert category_weight("mumbling") == 1

    def test_custom_table(self):
        assert category_weight("filler_words", {"filler_words": 3}) == 3


class TestRoundHalfUp:

    @pytest.mark.parametrize("value, digits, expected", [
        (6.25, 1, 6.3),
        (1.125, 2, 1.13),
        (2.675, 2, 2.68),
        (33.333333, 1, 33.3),
        (0.0, 1, 0.0),
    ])
    def test_ties_go_away_from_zero(self, value, digits, expected):
        assert round_half_up(value, digits) == expected


class TestComputeStruggleScore:

    def test_single_filler(self):
        # 1 × 1.0 / 3 words
        score = compute_struggle_score([_occ("filler_words", "Um")], 3, count_one)
        assert score == pytest.approx(33.3)

    def test_tie_rounds_up(self):
        # 1 / 16 words = 6.25
        assert compute_struggle_score([_occ("filler_words", "um")], 16, count_one) == 6.3

    def test_weights_are_applied(self):
        score = compute_struggle_score([_occ("sound_repetitions", "b- but")], 4, count_one)
        assert score == 50.0

    def test_no_occurrences(self):
        assert compute_struggle_score([], 10, count_one) == 0.0

    def test_no_words(self):
        assert compute_struggle_score([_occ("filler_words", "um")], 0, count_one) == 0.0

    def test_capped_at_100(self):
        occurrences = [_occ("partial_words", "gon-")] * 5
        assert compute_struggle_score(occurrences, 2, count_one) == 100.0

    def test_classifier_counting_uses_ranges(self):
        occ = ClassifiedOccurrence(
            "filler_words", "um", (TokenRange(0, 0), TokenRange(4, 4)),
        )
        assert compute_struggle_score([occ], 6, count_ranges) == pytest.approx(33.3)

    def test_unknown_category_counts_at_default_weight(self):
        assert compute_struggle_score([_occ("mumbling", "mm")], 4, count_one) == 25.0


class TestBuildByCategory:

    def test_counts_and_lowercase_examples(self):
        stats = build_by_category(
            [_occ("filler_words", "Um"), _occ("filler_words", "um"), _occ("filler_words", "Uh")],
            count_one,
        )
        assert stats["filler_words"].count == 3
        assert stats["filler_words"].examples == ["um", "uh"]

    def test_examples_capped_at_five(self):
        occurrences = [_occ("prolongations", "so" + "o" * i) for i in range(2, 9)]
        stats = build_by_category(occurrences, count_one)
        assert stats["prolongations"].count == 7
        assert len(stats["prolongations"].examples) == 5

    def test_first_seen_category_order(self):
        stats = build_by_category(
            [_occ("revisions", "a-- b"), _occ("filler_words", "um"), _occ("revisions", "c-- d")],
            count_one,
        )
        assert list(stats) == ["revisions", "filler_words"]


class TestBuildMostCommonFillers:

    def test_sorted_by_count(self):
        occurrences = (
            [_occ("filler_words", "uh")]
            + [_occ("filler_words", "Um")] * 3
            + [_occ("filler_words", "like")] * 2
        )
        assert build_most_common_fillers(occurrences, count_one) == {
            "um": 3, "like": 2, "uh": 1,
        }

    def test_ties_keep_first_seen_order(self):
        occurrences = [_occ("filler_words", "uh"), _occ("filler_words", "um")]
        assert list(build_most_common_fillers(occurrences, count_one)) == ["uh", "um"]

    def test_limited_to_ten(self):
        occurrences = [_occ("filler_words", "f{}".format(i)) for i in range(15)]
        assert len(build_most_common_fillers(occurrences, count_one)) == 10

    def test_ignores_other_categories(self):
        assert build_most_common_fillers([_occ("revisions", "a-- b")], count_one) == {}


class TestBuildSummary:

    def test_totals_and_rate(self):
        summary = build_summary(
            [_occ("filler_words", "Um"), _occ("word_repetitions", "I I")], 10, [], count_one,
        )
        assert summary.total_disfluencies == 2
        assert summary.disfluency_rate == 20.0
        assert summary.most_common_fillers == {"um": 1}

    def test_pauses_count_toward_total_and_by_category(self):
        summary = build_summary(
            [_occ("filler_words", "um")], 4, [_pause(1.5), _pause(2.0)], count_one,
        )
        assert summary.total_disfluencies == 3
        assert summary.disfluency_rate == 75.0
        assert summary.by_category["pauses"].count == 2
        assert summary.by_category["pauses"].examples == ["1.5s", "2.0s"]

    def test_total_matches_category_counts(self):
        summary = build_summary(
            [_occ("filler_words", "um"), _occ("prolongations", "sooo")],
            12,
            [_pause(1.0)],
            count_one,
        )
        assert summary.total_disfluencies == sum(
            s.count for s in summary.by_category.values()
        )

    def test_rate_tie_rounds_up(self):
        summary = build_summary([_occ("filler_words", "um")], 16, [], count_one)
        assert summary.disfluency_rate == 6.3

    def test_reported_pauses_merge_with_classified_pauses(self):
        classified = ClassifiedOccurrence(
            "pauses", "...", (TokenRange(2, 2), TokenRange(5, 5)),
        )
        summary = build_summary([classified], 10, [_pause(1.5)], count_ranges)

        assert summary.by_category["pauses"].count == 3
        assert summary.by_category["pauses"].examples == ["...", "1.5s"]
        assert summary.total_disfluencies == 3
        assert summary.total_disfluencies == sum(
            s.count for s in summary.by_category.values()
        )

    def test_empty_transcript(self):
        summary = build_summary([], 0, [], count_one)
        assert summary.total_disfluencies == 0
        assert summary.disfluency_rate == 0.0
        assert summary.by_category == {}
        assert summary.most_common_fillers == {}

    def test_classifier_counting(self):
        occ = ClassifiedOccurrence(
            "filler_words", "um", (TokenRange(0, 0), TokenRange(3, 3), TokenRange(7, 7)),
        )
        summary = build_summary([occ], 10, [], count_ranges)
        assert summary.total_disfluencies == 3
        assert summary.by_category["filler_words"].count == 3
        assert summary.most_common_fillers == {"um": 3}

    def test_to_dict_shape(self):
        data = build_summary([_occ("filler_words", "Um")], 3, [], count_one).to_dict()
        assert data == {
            "total_disfluencies": 1,
            "disfluency_rate": 33.3,
            "by_category": {"filler_words": {"count": 1, "examples": ["um"]}},
            "most_common_fillers": {"um": 1},
        }
