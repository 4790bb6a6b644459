"""Disfluency transcription strategy: merges both detectors' results.

WHY: Callers want one response per transcript that shows the raw text,
the word timestamps, and both analyses side by side, so the pattern and
classifier views can be compared directly.

HOW: DisfluencyStrategy runs the pattern detector and (optionally) the
classifier detector over the same (text, words) input, independently,
and packs their ``to_dict()`` results into one payload.

RULES:
- Payload keys: mode, full_text, words, regex_analysis, llm_analysis
- regex_analysis / llm_analysis is None when that path is disabled
- The detectors never see each other's output
"""

from __future__ import annotations

from typing import Any, Mapping

from disfluency_analyzer.config import PAUSE_THRESHOLD_S
from disfluency_analyzer.core.pauses import as_word_timestamps
from disfluency_analyzer.detectors.base import WordsInput
from disfluency_analyzer.detectors.classifier import ClassifierDetector, DisfluencyClassifier
from disfluency_analyzer.detectors.pattern import PatternDetector


class DisfluencyStrategy:
    """Runs both detectors and merges their results into one payload.

    Args:
        classifier: Collaborator for the classifier path. Defaults to an
            OpenAIClassifierClient when the classifier path is enabled.
        include_pattern: Set False to skip the pattern path.
        include_classifier: Set False to skip the classifier path.
        pause_threshold: Minimum gap in seconds reported as a pause.
    """

    mode = "disfluency"

    def __init__(
        self,
        classifier: DisfluencyClassifier | None = None,
        include_pattern: bool = True,
        include_classifier: bool = True,
        pause_threshold: float = PAUSE_THRESHOLD_S,
    ) -> None:
        self.pattern_detector: PatternDetector | None = None
        if include_pattern:
            self.pattern_detector = PatternDetector(pause_threshold=pause_threshold)
        self.classifier_detector: ClassifierDetector | None = None
        if include_classifier:
            self.classifier_detector = ClassifierDetector(
                classifier=classifier, pause_threshold=pause_threshold
            )

    def analyze(self, text: str, words: WordsInput | None = None) -> dict[str, Any]:
        timestamps = as_word_timestamps(words)
        regex_analysis = None
        if self.pattern_detector is not None:
            regex_analysis = self.pattern_detector.analyze(text, timestamps).to_dict()
        llm_analysis = None
        if self.classifier_detector is not None:
            llm_analysis = self.classifier_detector.analyze(text, timestamps).to_dict()

        return {
            "mode": self.mode,
            "full_text": text,
            "words": [
                {"word": w.word, "start": w.start, "end": w.end} for w in timestamps
            ],
            "regex_analysis": regex_analysis,
            "llm_analysis": llm_analysis,
        }

    def analyze_transcription(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Analyze a verbose-JSON transcription response (``text`` + ``words``)."""
        return self.analyze(payload.get("text") or "", payload.get("words") or [])
