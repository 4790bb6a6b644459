"""Struggle scores and summary aggregation.

WHY: Dashboards need one comparable number per sentence and a compact
roll-up per transcript. Both detectors must compute these the same way,
even though they count occurrences differently.

HOW: Every function takes an ``occurrence_count`` callable. The pattern
detector counts 1 per record; the classifier detector counts the number
of token ranges in a record. The kernel never inspects which detector
it is serving.

RULES:
- struggle score = min(100, round(100 × Σ weight × count / words, 1))
- rounding sends ties away from zero (6.25 → 6.3), never to the even digit
- score is 0.0 when there are no occurrences or no words
- total_disfluencies includes pauses; by_category gets a synthesized
  ``pauses`` entry when pauses exist
- an existing ``pauses`` entry (reported by a classifier) is added to,
  never replaced
- examples: up to 5 distinct lowercase texts, first-seen order
- most_common_fillers: top 10 by count, ties in first-seen order
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Mapping, Sequence

from disfluency_analyzer.config import (
    CATEGORY_WEIGHTS,
    DEFAULT_CATEGORY_WEIGHT,
    FILLER_CATEGORY,
    MAX_CATEGORY_EXAMPLES,
    MAX_COMMON_FILLERS,
    PAUSE_CATEGORY,
)
from disfluency_analyzer.core.ir import CategoryStats, Occurrence, Pause, Summary

OccurrenceCounter = Callable[[Occurrence], int]


def round_half_up(value: float, digits: int) -> float:
    """Round to ``digits`` decimals with ties going away from zero.

    The float's shortest repr is rounded, so 2.675 becomes 2.68 even
    though its binary value sits just below 2.675.
    """
    exponent = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def category_weight(
    category: str,
    weights: Mapping[str, float] = CATEGORY_WEIGHTS,
) -> float:
    return weights.get(category, DEFAULT_CATEGORY_WEIGHT)


def compute_struggle_score(
    occurrences: Sequence[Occurrence],
    word_count: int,
    occurrence_count: OccurrenceCounter,
    weights: Mapping[str, float] = CATEGORY_WEIGHTS,
) -> float:
    """Weighted disfluency density of a sentence on a 0–100 scale."""
    if word_count <= 0 or not occurrences:
        return 0.0

    weighted_sum = sum(
        category_weight(o.category, weights) * occurrence_count(o)
        for o in occurrences
    )
    score = round_half_up(float(weighted_sum) / word_count * 100, 1)
    return min(score, 100.0)


def build_by_category(
    occurrences: Sequence[Occurrence],
    occurrence_count: OccurrenceCounter,
) -> dict[str, CategoryStats]:
    """Group occurrences by category in first-seen order."""
    result: dict[str, CategoryStats] = {}
    for occ in occurrences:
        stats = result.setdefault(occ.category, CategoryStats(count=0))
        stats.count += occurrence_count(occ)
        example = occ.text.lower()
        if example not in stats.examples and len(stats.examples) < MAX_CATEGORY_EXAMPLES:
            stats.examples.append(example)
    return result


def build_most_common_fillers(
    occurrences: Sequence[Occurrence],
    occurrence_count: OccurrenceCounter,
) -> dict[str, int]:
    counts: dict[str, int] = {}
    for occ in occurrences:
        if occ.category != FILLER_CATEGORY:
            continue
        key = occ.text.lower()
        counts[key] = counts.get(key, 0) + occurrence_count(occ)

    # sorted() is stable, so equal counts keep first-seen order
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return dict(ranked[:MAX_COMMON_FILLERS])


def build_summary(
    occurrences: Sequence[Occurrence],
    total_words: int,
    pauses: Sequence[Pause],
    occurrence_count: OccurrenceCounter,
) -> Summary:
    """Aggregate all occurrences and pauses of one transcript.

    Args:
        occurrences: Every occurrence across all sentences, in order.
        total_words: Word count summed over all sentences.
        pauses: Pauses to report; each counts as one disfluency.
        occurrence_count: The detector's counting rule.

    Returns:
        Summary with totals, rate per 100 words, per-category stats,
        and the most common fillers.
    """
    total = sum(occurrence_count(o) for o in occurrences) + len(pauses)
    rate = float(total) / total_words * 100 if total_words > 0 else 0.0

    by_category = build_by_category(occurrences, occurrence_count)
    if pauses:
        stats = by_category.setdefault(PAUSE_CATEGORY, CategoryStats(count=0))
        stats.count += len(pauses)
        for pause in pauses:
            if len(stats.examples) >= MAX_CATEGORY_EXAMPLES:
                break
            stats.examples.append(f"{pause.duration}s")

    return Summary(
        total_disfluencies=total,
        disfluency_rate=round_half_up(rate, 1),
        by_category=by_category,
        most_common_fillers=build_most_common_fillers(occurrences, occurrence_count),
    )
