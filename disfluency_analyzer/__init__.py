"""Disfluency Analyzer: per-sentence disfluency annotation for transcripts.

WHY: Coaching and quality dashboards need to know where a speaker
hesitated, stuttered, or filled silence, not just what they said. This
package turns a transcript plus word timestamps into annotated sentences,
pauses, and aggregate statistics.

HOW: A shared analysis kernel (core/) handles sentence splitting, pause
detection, scoring, and summaries. Two detectors (detectors/) find
occurrences per sentence: one rule-based, one driven by an external
classifier (api/). The strategy module merges both results.

RULES:
- Analysis is a pure, synchronous transformation: (text, words) → result
- Both detectors share the kernel; only occurrence counting differs
- No analysis step is fatal; every str input yields a well-formed result
"""

__version__ = "0.1.0"
