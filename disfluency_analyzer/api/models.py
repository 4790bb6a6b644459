"""Prompt, JSON schemas, and response parsing for the classifier collaborator.

WHY: The chat completions endpoint returns a generic envelope whose
message content is itself a JSON string written by the model. Both
layers need validating before the detector sees them, and the prompt
that defines the answer format belongs next to the code that parses it.

HOW: DISFLUENCY_ANALYSIS_PROMPT describes the categories and the range
format. COMPLETION_SCHEMA and CLASSIFICATION_SCHEMA are checked with
jsonschema. ChatCompletion.from_dict() and parse_classification() turn
raw payloads into typed values or raise ClassifierResponseError.

RULES:
- The prompt never mentions pauses; those are computed locally
- Only the envelope is schema-checked strictly; category contents are
  left to the detector so one bad category does not discard the rest
- A missing "disfluencies" member means no disfluencies
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Sequence

import jsonschema

from disfluency_analyzer.core.ir import Token

DISFLUENCY_ANALYSIS_PROMPT = """\
You are a speech disfluency analyzer. You receive a sentence where each word is prefixed
with its index like [0]word [1]word. Identify and return all disfluencies in the following format.

Return JSON: {"disfluencies": {"category": {"text": [ranges]}, ...}}

- Group by category, then by the exact disfluency text as it appears (without index prefixes).
- Each occurrence is a range object {"start": N, "end": M} where start and end are token indices.
- Single-word disfluencies appearing at indices 0 and 5: "um": [{"start": 0, "end": 0}, {"start": 5, "end": 5}]
- Multi-word disfluencies spanning indices 1-2: "I I": [{"start": 1, "end": 2}]

Categories (use these exact strings):
- "filler_words": um, uh, hmm, like (filler), you know, I mean, basically, actually, literally
- "consecutive_word_repetitions": same word repeated consecutively ("I I", "the the").
  Non-consecutive repetitions are not disfluencies.
- "sound_repetitions": stuttered beginnings before the completed word. Includes single
  stutters ("b- but", "wh- what") and repeated stutters ("a- a- a- another").
- "prolongations": repeated characters ("sooo", "wellll")
- "revisions": sentence is corrected by the speaker ("I was going, I went")
- "partial_words": incomplete words ending with a hyphen where the speaker does NOT
  complete the word ("gon-", "thi-"). If the completed word follows, classify as
  sound_repetitions instead.

If none found, return {"disfluencies": {}}.

Example input: [0]Um, [1]I [2]I [3]was [4]thinking.
Example output: {"disfluencies": {
  "filler_words": {"Um,": [{"start": 0, "end": 0}]},
  "consecutive_word_repetitions": {"I I": [{"start": 1, "end": 2}]}
}}

Example input: [0]This [1]is [2]a- [3]a- [4]a- [5]another [6]test.
Example output: {"disfluencies": {
  "sound_repetitions": {"a- a- a- another": [{"start": 2, "end": 5}]}
}}
"""

COMPLETION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["choices"],
    "properties": {
        "model": {"type": "string"},
        "choices": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["message"],
                "properties": {
                    "message": {
                        "type": "object",
                        "required": ["content"],
                        "properties": {"content": {"type": "string"}},
                    },
                },
            },
        },
    },
}

CLASSIFICATION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "disfluencies": {"type": "object"},
    },
}


class ClassifierResponseError(ValueError):
    """Raised when a completion or its JSON content is malformed."""


def render_indexed_sentence(tokens: Sequence[Token]) -> str:
    """Render tokens as ``"[0]Um, [1]I [2]was"`` for the user message."""
    return " ".join(f"[{t.index}]{t.text}" for t in tokens)


@dataclass
class ChatCompletion:
    """The parts of a chat completions response the classifier uses."""

    content: str
    model: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> ChatCompletion:
        try:
            jsonschema.validate(instance=data, schema=COMPLETION_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ClassifierResponseError(f"Unexpected completion payload: {e.message}") from e
        return cls(
            content=data["choices"][0]["message"]["content"],
            model=data.get("model"),
        )


def parse_classification(content: str) -> dict[str, Any]:
    """Parse the model's JSON answer and return its ``disfluencies`` mapping.

    Raises:
        ClassifierResponseError: If the content is not JSON or not an
            object with an object-valued ``disfluencies`` member.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ClassifierResponseError(f"Classifier returned non-JSON content: {e}") from e

    try:
        jsonschema.validate(instance=data, schema=CLASSIFICATION_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ClassifierResponseError(f"Unexpected classification payload: {e.message}") from e

    return data.get("disfluencies") or {}
