"""Classifier collaborator package: HTTP access to the labeling model.

WHY: The classifier detector needs an external model to label indexed
tokens. This package hides the transport, auth, prompt, and response
validation behind a single classify() call.

HOW: client.py holds OpenAIClassifierClient (httpx), models.py holds the
prompt, the jsonschema schemas, and typed response parsing.

RULES:
- All HTTP calls go through OpenAIClassifierClient
- Authentication is via Bearer token from config
- classify() returns {} on any failure instead of raising
"""

from disfluency_analyzer.api.client import ClassifierAPIError, OpenAIClassifierClient
from disfluency_analyzer.api.models import ClassifierResponseError

__all__ = ["ClassifierAPIError", "ClassifierResponseError", "OpenAIClassifierClient"]
