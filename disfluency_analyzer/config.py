"""Configuration constants, category weights, and .env loading.

WHY: Centralizes every tunable value (pause threshold, category
weights, classifier endpoint defaults) so they are easy to find and
override without touching analysis logic.

HOW: python-dotenv loads the .env file on import. Constants are
module-level data. The weight table is wrapped in a read-only mapping
built once at import and passed by reference to the kernel.

RULES:
- CATEGORY_WEIGHTS is never mutated; unknown categories weigh
  DEFAULT_CATEGORY_WEIGHT
- PAUSE_THRESHOLD_S is inclusive: a gap of exactly the threshold is a pause
- The API key is loaded from the environment, never hardcoded
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os
from types import MappingProxyType
from typing import Mapping

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Categories and severity weights
# ---------------------------------------------------------------------------

FILLER_CATEGORY = "filler_words"
PAUSE_CATEGORY = "pauses"

CATEGORY_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "filler_words": 1,
    "word_repetitions": 1.5,
    "consecutive_word_repetitions": 1.5,
    "sound_repetitions": 2,
    "prolongations": 1.5,
    "revisions": 1.5,
    "partial_words": 2,
    "pauses": 1.5,
})
"""Severity weight per category. Both repetition spellings are listed:
the pattern detector reports ``word_repetitions`` while the classifier
prompt asks for ``consecutive_word_repetitions``."""

DEFAULT_CATEGORY_WEIGHT = 1
"""Weight applied to any category missing from CATEGORY_WEIGHTS."""

MAX_CATEGORY_EXAMPLES = 5
MAX_COMMON_FILLERS = 10

# ---------------------------------------------------------------------------
# Pause detection
# ---------------------------------------------------------------------------

PAUSE_THRESHOLD_S = float(os.getenv("DISFLUENCY_PAUSE_THRESHOLD_S", "1.0"))

# ---------------------------------------------------------------------------
# Classifier collaborator defaults
# ---------------------------------------------------------------------------

OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
OPENAI_CHAT_MODEL = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o")
CLASSIFIER_TIMEOUT_S = float(os.getenv("CLASSIFIER_TIMEOUT_S", "60"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def load_api_key() -> str:
    """Load the OpenAI API key from the environment.

    WHY: The classifier collaborator needs a key for every request.
    Loading it from the environment (via .env) keeps it out of source.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("OPENAI_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "OpenAI API key not configured. "
            "Add OPENAI_API_KEY to the .env file or the environment."
        )
    return key
