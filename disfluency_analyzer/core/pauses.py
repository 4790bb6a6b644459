"""Pause detection, text/word position reconciliation, and pause injection.

WHY: Pauses come from word timestamps (seconds, indexed over the whole
transcript) while occurrences live at character offsets inside single
sentences. Placing a pause into a sentence means reconciling those
coordinate spaces, and the timestamp words do not always match the
transcript text verbatim (punctuation differs).

HOW: detect_pauses() scans consecutive timestamp pairs for gaps at or
above the threshold. find_word_positions() and find_sentence_ranges()
locate strings in the transcript with a forward-only scan, falling back
to a punctuation-stripped match. inject_pauses() maps each pause gap into
the one sentence containing it and splices a "[Pause Ns] " marker there,
shifting later occurrences and adding a synthetic ``pauses`` occurrence.

RULES:
- A gap of exactly the threshold is a pause
- The position scan never backtracks; unmatched strings yield None
- A pause is kept only if both of its words resolve and its gap lies
  inside a single sentence
- Insertions within a sentence are applied in descending offset order
- Injection builds new sentences; the inputs are never mutated
"""

from __future__ import annotations

import logging
import string
from dataclasses import replace
from typing import Any, Mapping, Sequence, Tuple, Union

from disfluency_analyzer.config import PAUSE_CATEGORY, PAUSE_THRESHOLD_S
from disfluency_analyzer.core.ir import (
    AnnotatedSentence,
    Pause,
    PatternOccurrence,
    WordTimestamp,
)
from disfluency_analyzer.core.scoring import round_half_up

logger = logging.getLogger(__name__)

Span = Tuple[int, int]

# Gaps are compared after rounding away float noise (1.7 - 0.7 etc.).
_GAP_PRECISION = 6


def as_word_timestamps(
    words: Sequence[Union[WordTimestamp, Mapping[str, Any]]] | None,
) -> list[WordTimestamp]:
    """Accept WordTimestamp objects or raw ``{"word", "start", "end"}`` dicts."""
    if not words:
        return []
    return [
        w if isinstance(w, WordTimestamp) else WordTimestamp.from_dict(w)
        for w in words
    ]


def detect_pauses(
    words: Sequence[WordTimestamp],
    threshold: float = PAUSE_THRESHOLD_S,
) -> list[Pause]:
    """Find silences of at least ``threshold`` seconds between consecutive words.

    RULES:
    - Pairs missing the earlier word's end or the later word's start are skipped
    - start, end, and duration are rounded to 2 decimals, ties away from zero
    - Fewer than two words → no pauses
    """
    pauses: list[Pause] = []
    for i in range(len(words) - 1):
        prev_word, next_word = words[i], words[i + 1]
        if prev_word.end is None or next_word.start is None:
            continue

        gap = round(next_word.start - prev_word.end, _GAP_PRECISION)
        if gap < threshold:
            continue

        pauses.append(Pause(
            after_word=prev_word.word.strip(),
            before_word=next_word.word.strip(),
            after_word_index=i,
            before_word_index=i + 1,
            start=round_half_up(prev_word.end, 2),
            end=round_half_up(next_word.start, 2),
            duration=round_half_up(gap, 2),
        ))
    return pauses


def _locate(text: str, needle: str, cursor: int) -> Span | None:
    """Return the span of ``needle`` at or after ``cursor``, or None."""
    if not needle:
        return None
    idx = text.find(needle, cursor)
    if idx == -1:
        return None
    return idx, idx + len(needle)


def _scan_positions(text: str, needles: Sequence[str]) -> list[Span | None]:
    positions: list[Span | None] = []
    cursor = 0
    for raw in needles:
        needle = raw.strip()
        span = _locate(text, needle, cursor)
        if span is None:
            span = _locate(text, needle.strip(string.punctuation), cursor)
        positions.append(span)
        if span is not None:
            cursor = span[1]
    return positions


def find_word_positions(text: str, words: Sequence[WordTimestamp]) -> list[Span | None]:
    """Locate each timestamped word's character span in the transcript.

    Exact match first, then the word with leading/trailing punctuation
    stripped. The scan resumes after the last match, so a word that
    cannot be found does not move the cursor.
    """
    return _scan_positions(text, [w.word for w in words])


def find_sentence_ranges(text: str, sentences: Sequence[str]) -> list[Span | None]:
    """Locate each sentence's character span in the transcript."""
    return _scan_positions(text, sentences)


def _localize(
    pause: Pause,
    word_positions: Sequence[Span | None],
    sentence_ranges: Sequence[Span | None],
) -> tuple[int, int] | None:
    """Return ``(sentence_index, offset_in_sentence)`` for a pause, or None."""
    if pause.before_word_index >= len(word_positions):
        return None
    after_span = word_positions[pause.after_word_index]
    before_span = word_positions[pause.before_word_index]
    if after_span is None or before_span is None:
        return None

    gap_start, gap_end = after_span[1], before_span[0]
    if gap_end < gap_start:
        return None

    matches = [
        i for i, r in enumerate(sentence_ranges)
        if r is not None and r[0] < gap_start and gap_end < r[1]
    ]
    if len(matches) != 1:
        return None

    idx = matches[0]
    return idx, gap_end - sentence_ranges[idx][0]


def _snap_offset(offset: int, occurrences: Sequence[PatternOccurrence]) -> int:
    """Move an insertion point out of the middle of an occurrence."""
    for occ in occurrences:
        if occ.position < offset < occ.end:
            return occ.position
    return offset


def _splice_markers(
    sentence: AnnotatedSentence,
    insertions: Sequence[tuple[int, Pause]],
) -> AnnotatedSentence:
    occurrences = list(sentence.occurrences)
    points = sorted(
        ((_snap_offset(offset, occurrences), pause) for offset, pause in insertions),
        key=lambda item: item[0],
        reverse=True,
    )

    text = sentence.text
    for offset, pause in points:
        marker = pause.marker
        shift = len(marker)
        text = text[:offset] + marker + text[offset:]
        occurrences = [
            replace(o, position=o.position + shift) if o.position >= offset else o
            for o in occurrences
        ]
        occurrences.append(PatternOccurrence(
            category=PAUSE_CATEGORY,
            text=marker,
            position=offset,
            length=shift,
        ))

    occurrences.sort(key=lambda o: o.position)
    return AnnotatedSentence(
        text=text,
        occurrences=occurrences,
        struggle_score=sentence.struggle_score,
        tokens=sentence.tokens,
    )


def inject_pauses(
    sentences: Sequence[AnnotatedSentence],
    pauses: Sequence[Pause],
    text: str,
    words: Sequence[WordTimestamp],
) -> tuple[list[AnnotatedSentence], list[Pause]]:
    """Splice pause markers into the sentences that contain each pause.

    WHY: The pattern detector shows pauses inline, at the point in the
    sentence where the speaker went silent, alongside the other
    occurrences.

    HOW: Resolve word and sentence spans in the transcript, localize each
    pause gap to one sentence, then rebuild each affected sentence by
    applying its insertions from the highest offset down.

    RULES:
    - Returns (new sentences, pauses that were localized), both in order
    - Pauses that cannot be localized are dropped from the returned list
    - Occurrences at or after an insertion point shift by the marker length
    - An insertion point inside an occurrence moves to that occurrence's start
    """
    if not pauses or not sentences:
        return list(sentences), []

    word_positions = find_word_positions(text, words)
    sentence_ranges = find_sentence_ranges(text, [s.text for s in sentences])

    insertions: dict[int, list[tuple[int, Pause]]] = {}
    localized: list[Pause] = []
    for pause in pauses:
        target = _localize(pause, word_positions, sentence_ranges)
        if target is None:
            logger.debug(
                "Pause between %r and %r not localized to a sentence",
                pause.after_word, pause.before_word,
            )
            continue
        sentence_idx, offset = target
        insertions.setdefault(sentence_idx, []).append((offset, pause))
        localized.append(pause)

    injected = [
        _splice_markers(sentence, insertions[i]) if i in insertions else sentence
        for i, sentence in enumerate(sentences)
    ]
    return injected, localized


def strip_pause_markers(sentence: AnnotatedSentence) -> AnnotatedSentence:
    """Undo inject_pauses() for one sentence.

    Removes every synthetic ``pauses`` occurrence together with its marker
    text and shifts the remaining occurrences back.
    """
    markers = sorted(
        (o for o in sentence.occurrences if o.category == PAUSE_CATEGORY),
        key=lambda o: o.position,
        reverse=True,
    )
    text = sentence.text
    occurrences = [o for o in sentence.occurrences if o.category != PAUSE_CATEGORY]
    for marker in markers:
        text = text[:marker.position] + text[marker.end:]
        occurrences = [
            replace(o, position=o.position - marker.length) if o.position >= marker.end else o
            for o in occurrences
        ]
    return AnnotatedSentence(
        text=text,
        occurrences=occurrences,
        struggle_score=sentence.struggle_score,
        tokens=sentence.tokens,
    )
