"""Shared analysis kernel used by every detector.

WHY: Both detectors need identical sentence splitting, pause detection,
scoring, and summaries so their results can be compared side by side.

HOW: ir.py defines the data structures, segmentation.py splits and
tokenizes, pauses.py handles timing and pause injection, scoring.py
computes struggle scores and summaries.

RULES:
- Kernel functions are pure; they never mutate their inputs
- Detector-specific counting is injected, never branched on here
"""
