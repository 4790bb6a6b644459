"""Abstract base detector.

WHY: The pattern and classifier detectors share the whole analysis
pipeline except per-sentence detection and how one record is counted.
This base class holds the shared pipeline so the strategy and CLI can
run any detector generically.

HOW: BaseDetector is an ABC. Subclasses implement ``name``,
``occurrence_count()`` and ``annotate_sentence()``. ``analyze()``
splits the transcript, detects pauses, annotates each sentence in
order, and builds the summary through the kernel, passing
``occurrence_count`` in as the counting rule.

RULES:
- ``analyze()`` accepts WordTimestamp objects or raw word dicts
- Sentences are processed independently and in transcript order
- ``finalize()`` may post-process sentences and choose which pauses are
  reported; the default reports every detected pause untouched

To add a new detector:
1. Create a new file in detectors/
2. Subclass BaseDetector
3. Implement name, occurrence_count() and annotate_sentence()
4. Register it in DETECTORS in detectors/__init__.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence, Union

from disfluency_analyzer.config import PAUSE_THRESHOLD_S
from disfluency_analyzer.core.ir import (
    AnalysisResult,
    AnnotatedSentence,
    Occurrence,
    Pause,
    WordTimestamp,
)
from disfluency_analyzer.core.pauses import as_word_timestamps, detect_pauses
from disfluency_analyzer.core.scoring import build_summary, compute_struggle_score
from disfluency_analyzer.core.segmentation import split_sentences

WordsInput = Sequence[Union[WordTimestamp, Mapping[str, Any]]]


class BaseDetector(ABC):
    """Shared transcript-level pipeline for every detector."""

    def __init__(self, pause_threshold: float = PAUSE_THRESHOLD_S) -> None:
        self.pause_threshold = pause_threshold

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable detector name, e.g. 'Pattern-based'."""

    @abstractmethod
    def occurrence_count(self, occurrence: Occurrence) -> int:
        """Number of disfluencies one occurrence record stands for."""

    @abstractmethod
    def annotate_sentence(self, sentence: str) -> tuple[AnnotatedSentence, int]:
        """Detect occurrences in one sentence.

        Returns:
            The annotated sentence (score not yet computed) and its
            word count.
        """

    def score(self, occurrences: Sequence[Occurrence], word_count: int) -> float:
        return compute_struggle_score(occurrences, word_count, self.occurrence_count)

    def finalize(
        self,
        sentences: list[AnnotatedSentence],
        pauses: list[Pause],
        text: str,
        words: list[WordTimestamp],
        word_counts: list[int],
    ) -> tuple[list[AnnotatedSentence], list[Pause]]:
        return sentences, pauses

    def analyze(self, text: str, words: WordsInput | None = None) -> AnalysisResult:
        """Annotate a transcript and summarize it.

        Args:
            text: Full transcript text.
            words: Word timestamps in transcript order, used for pauses.

        Returns:
            AnalysisResult with annotated sentences, reported pauses, and
            the summary.
        """
        timestamps = as_word_timestamps(words)
        pauses = detect_pauses(timestamps, self.pause_threshold)

        annotated: list[AnnotatedSentence] = []
        word_counts: list[int] = []
        all_occurrences: list[Occurrence] = []
        for sentence in split_sentences(text or ""):
            result, word_count = self.annotate_sentence(sentence)
            result.struggle_score = self.score(result.occurrences, word_count)
            annotated.append(result)
            word_counts.append(word_count)
            all_occurrences.extend(result.occurrences)

        annotated, reported_pauses = self.finalize(
            annotated, pauses, text or "", timestamps, word_counts
        )

        return AnalysisResult(
            annotated_sentences=annotated,
            pauses=reported_pauses,
            summary=build_summary(
                all_occurrences, sum(word_counts), reported_pauses, self.occurrence_count
            ),
        )
