"""Detector registry for the two interchangeable disfluency detectors.

WHY: The strategy and CLI need a single lookup to find a detector by
name, so both paths can be run, compared, or selected from the command
line.

HOW: DETECTORS maps string keys to detector *classes* (not instances).
Callers instantiate as needed: ``detector = DETECTORS["pattern"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags)
- Values are BaseDetector subclasses (not instances)
- "pattern" needs no network; "classifier" needs a collaborator
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from disfluency_analyzer.detectors.classifier import ClassifierDetector
from disfluency_analyzer.detectors.pattern import PatternDetector

if TYPE_CHECKING:
    from disfluency_analyzer.detectors.base import BaseDetector

DETECTORS: dict[str, type[BaseDetector]] = {
    "pattern": PatternDetector,
    "classifier": ClassifierDetector,
}
