"""Command-line interface for the Disfluency Analyzer.

WHY: Users need a simple way to analyze a transcription they already
have (a verbose-JSON speech-to-text response with text and word
timestamps) without writing code. The CLI wires together input
loading, both detectors, and result saving behind a single command.

HOW: Uses argparse to accept the input file, detector selection, pause
threshold, and output location. Runs the DisfluencyStrategy and writes
the merged payload as JSON. Status messages go to stderr; the result
goes to a file next to the input (or --output / --output-dir), or to
stdout with --stdout.

RULES:
- Positional argument: input verbose-JSON file path
- --detectors: comma-separated detector keys (default: all registered)
- Output naming: {stem}-disfluency.json, numeric suffix for conflicts
  (-disfluency-2.json)
- Status output goes to stderr (not stdout)
- Unreadable input or a missing API key exits with code 1
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from disfluency_analyzer.api.client import OpenAIClassifierClient
from disfluency_analyzer.config import LOG_LEVEL, PAUSE_THRESHOLD_S
from disfluency_analyzer.detectors import DETECTORS
from disfluency_analyzer.strategy import DisfluencyStrategy

OUTPUT_SUFFIX = "-disfluency.json"


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding a numeric suffix on conflict.

    RULES:
    - First attempt: {stem}{suffix} (e.g. interview-disfluency.json)
    - Conflict: insert a counter before the extension
      (e.g. interview-disfluency-2.json)
    - Counter starts at 2 and increments
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _load_transcription(path: Path) -> dict[str, Any]:
    """Read a verbose-JSON transcription file.

    Raises:
        ValueError: If the file is not a JSON object with a string "text".
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not isinstance(data.get("text"), str):
        raise ValueError(
            "{} is not a transcription: expected a JSON object with a "
            "'text' string and an optional 'words' list".format(path.name)
        )
    words = data.get("words")
    if words is not None and not isinstance(words, list):
        raise ValueError("'words' in {} must be a list".format(path.name))
    return data


def _parse_detectors(value: Optional[str]) -> List[str]:
    if not value:
        return list(DETECTORS)
    keys = [k.strip() for k in value.split(",") if k.strip()]
    unknown = [k for k in keys if k not in DETECTORS]
    if unknown:
        raise ValueError(
            "Unknown detector(s): {}. Available: {}".format(
                ", ".join(unknown), ", ".join(sorted(DETECTORS))
            )
        )
    return keys


def run(args: argparse.Namespace) -> int:
    """Run one analysis. Returns the process exit code."""
    input_path = Path(args.input_file)
    try:
        detectors = _parse_detectors(args.detectors)
        payload = _load_transcription(input_path)
    except (OSError, ValueError) as e:
        print("Error: {}".format(e), file=sys.stderr)
        return 1

    words = payload.get("words") or []
    _status("Analyzing {} ({} words, detectors: {})...".format(
        input_path.name, len(words), ", ".join(detectors)
    ))

    include_classifier = "classifier" in detectors
    try:
        classifier = OpenAIClassifierClient() if include_classifier else None
    except ValueError as e:
        print("Error: {}".format(e), file=sys.stderr)
        return 1

    strategy = DisfluencyStrategy(
        classifier=classifier,
        include_pattern="pattern" in detectors,
        include_classifier=include_classifier,
        pause_threshold=args.pause_threshold,
    )
    if classifier is not None:
        with classifier:
            result = strategy.analyze_transcription(payload)
    else:
        result = strategy.analyze_transcription(payload)

    content = json.dumps(result, indent=2, ensure_ascii=False)
    if args.stdout:
        print(content)
        return 0

    if args.output:
        out_path = Path(args.output)
    else:
        output_dir = Path(args.output_dir) if args.output_dir else input_path.parent
        output_dir.mkdir(parents=True, exist_ok=True)
        out_path = _resolve_output_path(input_path.stem, OUTPUT_SUFFIX, output_dir)

    out_path.write_text(content, encoding="utf-8")
    _status("Saved: {}".format(out_path))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="disfluency_analyzer",
        description="Annotate a verbose-JSON transcription with disfluencies "
                    "(fillers, repetitions, stutters, prolongations, revisions, "
                    "partial words, and pauses).",
    )

    parser.add_argument(
        "input_file",
        help="Path to a verbose-JSON transcription ({\"text\": ..., \"words\": [...]}).",
    )

    parser.add_argument(
        "--detectors",
        default=None,
        help="Comma-separated list of detectors. "
             "Available: {}. Default: all.".format(", ".join(sorted(DETECTORS))),
    )

    parser.add_argument(
        "--pause-threshold",
        type=float,
        default=PAUSE_THRESHOLD_S,
        help="Minimum silence in seconds counted as a pause (default: %(default)s).",
    )

    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "--output",
        default=None,
        help="Exact path of the JSON result file.",
    )
    output.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save the result (default: same as input file).",
    )
    output.add_argument(
        "--stdout",
        action="store_true",
        help="Print the JSON result to stdout instead of saving it.",
    )

    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: %(default)s).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m disfluency_analyzer`` and the console script.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    sys.exit(run(args))


if __name__ == "__main__":
    main()
