"""Pattern-based disfluency detector.

WHY: Many disfluencies leave a recognizable surface form in a transcript
produced with a disfluency-preserving prompt: "um", "the the", "b- but",
"sooo", "going-- I", "gon-". Regular expressions find these instantly,
offline, and deterministically.

HOW: Each category has a rule that scans one sentence and yields
PatternOccurrence records (category, text, position, length). All rules
run independently, then a dedup pass keeps the earliest non-overlapping
matches. After all sentences are scored, pauses are spliced into the
sentence text as "[Pause Ns] " markers.

RULES:
- Rules run in a fixed order: revisions, sound repetitions, partial words,
  prolongations, word repetitions, fillers; on equal positions the
  earlier rule wins
- "like" and "right" are fillers only at sentence start before a comma
  or between commas
- A ≤2-letter fragment completed by the next word is a sound repetition,
  never a partial word
- Every record counts as exactly one occurrence
- Only pauses localized inside a sentence are reported
"""

from __future__ import annotations

import re
from typing import Callable, Iterator

from disfluency_analyzer.core.ir import (
    AnnotatedSentence,
    Occurrence,
    Pause,
    PatternOccurrence,
    WordTimestamp,
)
from disfluency_analyzer.core.pauses import inject_pauses
from disfluency_analyzer.core.segmentation import count_words
from disfluency_analyzer.detectors.base import BaseDetector

SIMPLE_FILLERS = ("um", "uh", "hmm", "basically", "actually", "literally")
MULTI_WORD_FILLERS = ("you know", "i mean")
CONTEXTUAL_FILLERS = ("like", "right")

_SIMPLE_FILLER_RES = [
    re.compile(r"\b" + re.escape(f) + r"\b", re.IGNORECASE)
    for f in MULTI_WORD_FILLERS + SIMPLE_FILLERS
]
_LEADING_FILLER_RES = [
    re.compile(r"\A" + f + r"(?=,)", re.IGNORECASE) for f in CONTEXTUAL_FILLERS
]
_COMMA_FILLER_RES = [
    re.compile(r",\s*(" + f + r")\s*,", re.IGNORECASE) for f in CONTEXTUAL_FILLERS
]

_WORD_REPETITION_RE = re.compile(r"\b(\w+)(\s+\1)+\b", re.IGNORECASE)
_SOUND_REPETITION_RE = re.compile(r"\b([a-zA-Z]{1,2})-\s+([a-zA-Z]+)\b")
_PROLONGATION_RE = re.compile(r"\b\w*([a-zA-Z])\1{2,}\w*\b")
_REVISION_RE = re.compile(r"\b(\w+)\s*--\s*(\w+)")
_PARTIAL_WORD_RE = re.compile(r"\b([a-zA-Z]+)-(?!-)(?=\s)")
_NEXT_WORD_RE = re.compile(r"\s+([a-zA-Z]+)\b")


def _is_stutter(fragment: str, word: str) -> bool:
    """True when ``word`` completes the ≤2-letter ``fragment``."""
    fragment, word = fragment.lower(), word.lower()
    return len(fragment) <= 2 and word.startswith(fragment) and len(fragment) < len(word)


def _whole_match(category: str, match: re.Match, group: int = 0) -> PatternOccurrence:
    return PatternOccurrence(
        category=category,
        text=match.group(group),
        position=match.start(group),
        length=len(match.group(group)),
    )


def detect_filler_words(sentence: str) -> Iterator[PatternOccurrence]:
    for pattern in _SIMPLE_FILLER_RES:
        for match in pattern.finditer(sentence):
            yield _whole_match("filler_words", match)
    for pattern in _LEADING_FILLER_RES:
        for match in pattern.finditer(sentence):
            yield _whole_match("filler_words", match)
    for pattern in _COMMA_FILLER_RES:
        for match in pattern.finditer(sentence):
            yield _whole_match("filler_words", match, group=1)


def detect_word_repetitions(sentence: str) -> Iterator[PatternOccurrence]:
    for match in _WORD_REPETITION_RE.finditer(sentence):
        yield _whole_match("word_repetitions", match)


def detect_sound_repetitions(sentence: str) -> Iterator[PatternOccurrence]:
    for match in _SOUND_REPETITION_RE.finditer(sentence):
        if _is_stutter(match.group(1), match.group(2)):
            yield _whole_match("sound_repetitions", match)


def detect_prolongations(sentence: str) -> Iterator[PatternOccurrence]:
    for match in _PROLONGATION_RE.finditer(sentence):
        yield _whole_match("prolongations", match)


def detect_revisions(sentence: str) -> Iterator[PatternOccurrence]:
    for match in _REVISION_RE.finditer(sentence):
        yield _whole_match("revisions", match)


def detect_partial_words(sentence: str) -> Iterator[PatternOccurrence]:
    for match in _PARTIAL_WORD_RE.finditer(sentence):
        fragment = match.group(1)
        next_word = _NEXT_WORD_RE.match(sentence, match.end())
        if next_word and _is_stutter(fragment, next_word.group(1)):
            continue
        yield PatternOccurrence(
            category="partial_words",
            text=fragment + "-",
            position=match.start(),
            length=len(fragment) + 1,
        )


CATEGORY_RULES: tuple[Callable[[str], Iterator[PatternOccurrence]], ...] = (
    detect_revisions,
    detect_sound_repetitions,
    detect_partial_words,
    detect_prolongations,
    detect_word_repetitions,
    detect_filler_words,
)


def deduplicate(occurrences: list[PatternOccurrence]) -> list[PatternOccurrence]:
    """Keep the earliest occurrences whose ranges do not overlap.

    Sorting is stable, so on equal positions the earlier-detected record
    wins. Kept ranges are disjoint and sorted, so checking the furthest
    kept end is enough.
    """
    kept: list[PatternOccurrence] = []
    kept_end = 0
    for occ in sorted(occurrences, key=lambda o: o.position):
        if kept and occ.position < kept_end:
            continue
        kept.append(occ)
        kept_end = max(kept_end, occ.end)
    return kept


def analyze_sentence(sentence: str) -> list[PatternOccurrence]:
    """Run every rule over one sentence and resolve overlaps."""
    found: list[PatternOccurrence] = []
    for rule in CATEGORY_RULES:
        found.extend(rule(sentence))
    return deduplicate(found)


class PatternDetector(BaseDetector):
    """Regex rules per category, with pauses spliced into sentence text."""

    @property
    def name(self) -> str:
        return "Pattern-based"

    def occurrence_count(self, occurrence: Occurrence) -> int:
        return 1

    def annotate_sentence(self, sentence: str) -> tuple[AnnotatedSentence, int]:
        occurrences: list[Occurrence] = list(analyze_sentence(sentence))
        return AnnotatedSentence(text=sentence, occurrences=occurrences), count_words(sentence)

    def finalize(
        self,
        sentences: list[AnnotatedSentence],
        pauses: list[Pause],
        text: str,
        words: list[WordTimestamp],
        word_counts: list[int],
    ) -> tuple[list[AnnotatedSentence], list[Pause]]:
        injected, localized = inject_pauses(sentences, pauses, text, words)
        for before, after, word_count in zip(sentences, injected, word_counts):
            if after is not before:
                after.struggle_score = self.score(after.occurrences, word_count)
        return injected, localized
