"""Shared test fixtures for the disfluency_analyzer test suite.

WHY: Several test modules need the same timestamped transcripts and a
stand-in for the classifier collaborator. Centralizing them here keeps
the timing data consistent across kernel, detector, and strategy tests.

HOW: Word lists mirror the verbose-JSON shape returned by speech-to-text
engines (``{"word", "start", "end"}``). FakeClassifier records every
call and answers from a queue or a fixed mapping, so no test touches the
network.

RULES:
- "was" → "thinking." is the only gap ≥ 1.0s in PAUSED_WORDS (1.5s)
- FakeClassifier can raise to simulate a failing collaborator
"""

from typing import Any, Dict, List

import pytest

FLUENT_WORDS: List[Dict[str, Any]] = [
    {"word": "I",         "start": 0.0, "end": 0.2},
    {"word": "was",       "start": 0.3, "end": 0.5},
    {"word": "thinking.", "start": 0.6, "end": 1.0},
]

PAUSED_WORDS: List[Dict[str, Any]] = [
    {"word": "I",         "start": 0.0, "end": 0.2},
    {"word": "was",       "start": 0.3, "end": 0.5},
    {"word": "thinking.", "start": 2.0, "end": 2.5},
]

# "Um, I was, uh, thinking." with a 1.2s gap between "was," and "uh,"
FILLER_PAUSE_TEXT = "Um, I was, uh, thinking."
FILLER_PAUSE_WORDS: List[Dict[str, Any]] = [
    {"word": "Um,",       "start": 0.0, "end": 0.3},
    {"word": "I",         "start": 0.4, "end": 0.5},
    {"word": "was,",      "start": 0.6, "end": 0.8},
    {"word": "uh,",       "start": 2.0, "end": 2.2},
    {"word": "thinking.", "start": 2.3, "end": 2.8},
]

# Two sentences; the only long gap falls between them.
BOUNDARY_PAUSE_TEXT = "I went home. Then I left."
BOUNDARY_PAUSE_WORDS: List[Dict[str, Any]] = [
    {"word": "I",     "start": 0.0, "end": 0.2},
    {"word": "went",  "start": 0.3, "end": 0.5},
    {"word": "home.", "start": 0.6, "end": 0.8},
    {"word": "Then",  "start": 2.0, "end": 2.2},
    {"word": "I",     "start": 2.3, "end": 2.4},
    {"word": "left.", "start": 2.5, "end": 2.8},
]


class FakeClassifier:
    """In-memory DisfluencyClassifier.

    Answers with ``responses`` in order (the last one repeats), or raises
    ``error`` when set. A response that is an exception instance is raised
    for that call only. Every call's token list is kept in ``calls``.
    """

    def __init__(self, responses=None, error=None):
        self.responses = list(responses) if responses is not None else [{}]
        self.error = error
        self.calls = []
        self.entered = False
        self.exited = False

    def classify(self, tokens):
        self.calls.append(list(tokens))
        if self.error is not None:
            raise self.error
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    def __enter__(self):
        self.entered = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.exited = True


@pytest.fixture
def fluent_words():
    return [dict(w) for w in FLUENT_WORDS]


@pytest.fixture
def paused_words():
    return [dict(w) for w in PAUSED_WORDS]


@pytest.fixture
def filler_pause_words():
    return [dict(w) for w in FILLER_PAUSE_WORDS]


@pytest.fixture
def boundary_pause_words():
    return [dict(w) for w in BOUNDARY_PAUSE_WORDS]


@pytest.fixture
def fake_classifier():
    return FakeClassifier()


@pytest.fixture
def filler_pause_text():
    return FILLER_PAUSE_TEXT


@pytest.fixture
def boundary_pause_text():
    return BOUNDARY_PAUSE_TEXT


@pytest.fixture
def make_classifier():
    """Factory for FakeClassifier instances with custom responses."""
    return FakeClassifier
