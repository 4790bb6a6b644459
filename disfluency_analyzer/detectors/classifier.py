"""Classifier-based disfluency detector.

WHY: Some disfluencies have no reliable surface pattern, such as a revision
like "I was going, I went" or a filler "like" mid-clause. A language
model classifier catches these, but its output has to be anchored to
the sentence without trusting its verbatim text.

HOW: Each sentence is tokenized into index-tagged words and sent to a
classifier collaborator. The collaborator answers with
``{category: {text: [{"start": i, "end": j}, ...]}}``. Each
(category, text) pair becomes one ClassifiedOccurrence holding all of
its token ranges.

RULES:
- One record per (category, text); occurrence count is len(ranges)
- Categories whose value is not a mapping are ignored
- Entries with no usable range are ignored
- A null or missing end means a single-token range at start
- Ranges outside the sentence's tokens or with start > end are dropped
  (and logged at debug level), so a record can count fewer occurrences
  than the classifier reported
- Any collaborator failure means zero occurrences for that sentence
- Pauses are reported as a separate channel, never added to tokens
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol, Sequence

from disfluency_analyzer.core.ir import (
    AnnotatedSentence,
    ClassifiedOccurrence,
    Occurrence,
    Token,
    TokenRange,
)
from disfluency_analyzer.core.segmentation import tokenize
from disfluency_analyzer.detectors.base import BaseDetector


logger = logging.getLogger(__name__)


class DisfluencyClassifier(Protocol):
    """Anything that can classify an indexed token sequence.

    Returns ``category → {text → [{"start", "end"}]}`` or an empty mapping.
    """

    def classify(self, tokens: Sequence[Token]) -> Mapping[str, Any]:
        ...


def _parse_range(item: Any, token_count: int) -> TokenRange | None:
    if not isinstance(item, Mapping):
        return None
    start = item.get("start")
    end = item.get("end")
    if end is None:
        end = start
    if isinstance(start, bool) or isinstance(end, bool):
        return None
    if not isinstance(start, int) or not isinstance(end, int):
        return None
    if start < 0 or end >= token_count or start > end:
        return None
    return TokenRange(start=start, end=end)


def _resolve_text(text: Any, ranges: Sequence[TokenRange], tokens: Sequence[Token]) -> str:
    """Use the reported text, or rebuild it from the first range's tokens."""
    if isinstance(text, str) and text.strip():
        return text
    first = ranges[0]
    return " ".join(t.text for t in tokens[first.start:first.end + 1])


def parse_disfluencies(
    raw: Any,
    tokens: Sequence[Token],
) -> list[ClassifiedOccurrence]:
    """Normalize the collaborator's hierarchical answer into occurrences.

    Example:
        {"filler_words": {"um": [{"start": 0, "end": 0}, {"start": 5, "end": 5}]}}
        → [ClassifiedOccurrence("filler_words", "um", (0..0, 5..5))]
    """
    if not isinstance(raw, Mapping):
        return []

    occurrences: list[ClassifiedOccurrence] = []
    for category, entries in raw.items():
        if not isinstance(entries, Mapping):
            continue

        for text, ranges_data in entries.items():
            if isinstance(ranges_data, Mapping):
                ranges_data = [ranges_data]
            if not isinstance(ranges_data, list):
                continue

            ranges = []
            for item in ranges_data:
                parsed = _parse_range(item, len(tokens))
                if parsed is None:
                    logger.debug(
                        "Dropped %s range %r for %r (%d tokens)",
                        category, item, text, len(tokens),
                    )
                    continue
                ranges.append(parsed)
            if not ranges:
                continue

            occurrences.append(ClassifiedOccurrence(
                category=str(category),
                text=_resolve_text(text, ranges, tokens),
                ranges=tuple(ranges),
            ))
    return occurrences


class ClassifierDetector(BaseDetector):
    """Per-sentence classification through an external collaborator.

    Args:
        classifier: The collaborator to query. Defaults to an
            OpenAIClassifierClient built from the environment.
        pause_threshold: Minimum gap in seconds reported as a pause.
    """

    def __init__(
        self,
        classifier: DisfluencyClassifier | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        if classifier is None:
            from disfluency_analyzer.api.client import OpenAIClassifierClient
            classifier = OpenAIClassifierClient()
        self.classifier = classifier

    @property
    def name(self) -> str:
        return "Classifier-based"

    def occurrence_count(self, occurrence: Occurrence) -> int:
        return len(occurrence.ranges)  # type: ignore[union-attr]

    def analyze_sentence(self, sentence: str) -> tuple[list[Token], list[ClassifiedOccurrence]]:
        """Tokenize and classify one sentence.

        Returns:
            The sentence tokens and the parsed occurrences, empty when
            the collaborator fails in any way.
        """
        tokens = tokenize(sentence)
        if not tokens:
            return tokens, []

        try:
            raw = self.classifier.classify(tokens)
            return tokens, parse_disfluencies(raw, tokens)
        except Exception:
            logger.exception("Classification failed; sentence scored as fluent: %r", sentence)
            return tokens, []

    def annotate_sentence(self, sentence: str) -> tuple[AnnotatedSentence, int]:
        tokens, occurrences = self.analyze_sentence(sentence)
        annotated = AnnotatedSentence(
            text=sentence,
            occurrences=list(occurrences),
            tokens=tokens,
        )
        return annotated, len(tokens)
