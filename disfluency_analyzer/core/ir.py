"""Intermediate representation dataclasses for disfluency analysis.

WHY: The kernel and both detectors pass the same handful of structures
around: word timestamps, pauses, tokens, occurrences, annotated
sentences, and summaries. Typed dataclasses make the three coordinate
spaces explicit (character offsets, token indices, seconds) and keep the
JSON shape in one place.

HOW: Value types (WordTimestamp, Pause, Token, TokenRange and the two
occurrence kinds) are frozen. Containers (AnnotatedSentence, Summary,
AnalysisResult) are built fresh per analysis call. Every type exposes
to_dict() producing the externally visible JSON shape.

RULES:
- PatternOccurrence is addressed by character offset into its sentence
- ClassifiedOccurrence is addressed by inclusive token-index ranges and
  aggregates every occurrence of one (category, text) pair
- Pause indices point into the transcript-level word list
- Times are float seconds rounded to 2 decimals
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from disfluency_analyzer.config import PAUSE_CATEGORY


@dataclass(frozen=True)
class WordTimestamp:
    """One timestamped word from the speech-to-text response.

    RULES:
    - word: raw text as reported, may carry punctuation or a leading space
    - start/end: float seconds, None when the engine omitted timing
    """

    word: str
    start: float | None = None
    end: float | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WordTimestamp:
        """Parse a verbose-JSON word entry (``{"word", "start", "end"}``)."""
        return cls(
            word=str(data.get("word") or ""),
            start=data.get("start"),
            end=data.get("end"),
        )


@dataclass(frozen=True)
class Pause:
    """A silence between two consecutive timestamped words.

    RULES:
    - after_word / before_word are stripped of surrounding whitespace
    - after_word_index + 1 == before_word_index
    - start is the end of the earlier word, end the start of the later one
    """

    after_word: str
    before_word: str
    after_word_index: int
    before_word_index: int
    start: float
    end: float
    duration: float

    @property
    def marker(self) -> str:
        """Literal text spliced into a sentence by pause injection."""
        return f"[Pause {self.duration}s] "

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": PAUSE_CATEGORY,
            "after_word": self.after_word,
            "before_word": self.before_word,
            "after_word_index": self.after_word_index,
            "before_word_index": self.before_word_index,
            "start": self.start,
            "end": self.end,
            "duration": self.duration,
        }


@dataclass(frozen=True)
class Token:
    """A whitespace-delimited word of a sentence with its 0-based index."""

    index: int
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "text": self.text}


@dataclass(frozen=True)
class TokenRange:
    """Inclusive token-index span; start == end for single tokens."""

    start: int
    end: int

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class PatternOccurrence:
    """One rule match inside a sentence.

    RULES:
    - position: character offset into the owning sentence text
    - text == sentence[position:position + length]
    """

    category: str
    text: str
    position: int
    length: int

    @property
    def end(self) -> int:
        return self.position + self.length

    def overlaps(self, other: PatternOccurrence) -> bool:
        return self.position < other.end and other.position < self.end

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "text": self.text,
            "position": self.position,
            "length": self.length,
        }


@dataclass(frozen=True)
class ClassifiedOccurrence:
    """All occurrences of one (category, text) pair reported by the classifier.

    RULES:
    - ranges is non-empty and may be non-contiguous
    - the occurrence count of this record is len(ranges)
    """

    category: str
    text: str
    ranges: tuple[TokenRange, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "text": self.text,
            "ranges": [r.to_dict() for r in self.ranges],
        }


Occurrence = Union[PatternOccurrence, ClassifiedOccurrence]


@dataclass
class AnnotatedSentence:
    """A sentence with its detected occurrences and struggle score.

    tokens is only populated on the classifier path.
    """

    text: str
    occurrences: list[Occurrence] = field(default_factory=list)
    struggle_score: float = 0.0
    tokens: list[Token] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"text": self.text}
        if self.tokens is not None:
            data["tokens"] = [t.to_dict() for t in self.tokens]
        data["disfluencies"] = [o.to_dict() for o in self.occurrences]
        data["struggle_score"] = self.struggle_score
        return data


@dataclass
class CategoryStats:
    """Per-category total and up to five lowercase example texts."""

    count: int
    examples: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, "examples": list(self.examples)}


@dataclass
class Summary:
    """Aggregate statistics over every sentence of one transcript.

    RULES:
    - total_disfluencies == sum of by_category counts (pauses included)
    - disfluency_rate is per 100 words, rounded to 1 decimal
    - most_common_fillers holds at most 10 entries, count descending
    """

    total_disfluencies: int = 0
    disfluency_rate: float = 0.0
    by_category: dict[str, CategoryStats] = field(default_factory=dict)
    most_common_fillers: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_disfluencies": self.total_disfluencies,
            "disfluency_rate": self.disfluency_rate,
            "by_category": {k: v.to_dict() for k, v in self.by_category.items()},
            "most_common_fillers": dict(self.most_common_fillers),
        }


@dataclass
class AnalysisResult:
    """The full output of one detector over one transcript."""

    annotated_sentences: list[AnnotatedSentence]
    pauses: list[Pause]
    summary: Summary

    def to_dict(self) -> dict[str, Any]:
        return {
            "annotated_sentences": [s.to_dict() for s in self.annotated_sentences],
            "pauses": [p.to_dict() for p in self.pauses],
            "summary": self.summary.to_dict(),
        }
