"""Sentence splitting, word counting, and token indexing.

WHY: Both detectors work one sentence at a time, and both need the same
notion of a sentence and of a word so their scores are comparable.

HOW: Sentences end after a run of ".", "!" or "?". Words and tokens are
whitespace-delimited; punctuation stays attached to its token so the
classifier sees the text exactly as transcribed.

RULES:
- Sentence boundaries follow ASCII terminal punctuation only
- Consecutive terminal marks ("?!", "...") stay with their sentence
- Sentences are stripped; empty pieces are discarded
- Token indices are 0-based and stable within a sentence
"""

from __future__ import annotations

import re

from disfluency_analyzer.core.ir import Token

# Zero-width boundary after the last mark of a terminal punctuation run.
_SENTENCE_BOUNDARY_RE = re.compile(r"(?<=[.!?])(?![.!?])")


def split_sentences(text: str) -> list[str]:
    """Split a transcript into ordered, stripped sentences.

    Text after the final terminal mark becomes its own sentence, so
    nothing the speaker said is lost.
    """
    pieces = _SENTENCE_BOUNDARY_RE.split(text)
    return [p.strip() for p in pieces if p.strip()]


def count_words(sentence: str) -> int:
    return len(sentence.split())


def tokenize(sentence: str) -> list[Token]:
    """Tokenize a sentence into index-tagged whitespace-delimited words.

    Example:
        "Um, I was" → [Token(0, "Um,"), Token(1, "I"), Token(2, "was")]
    """
    return [Token(index=i, text=word) for i, word in enumerate(sentence.split())]
