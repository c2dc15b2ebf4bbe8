"""
Command-line front end.

Reads a submission JSON object (from a file, or stdin with ``-``), runs it and
prints exactly one JSON object to stdout: the result on success, or
``{"ok": false, "error": ...}`` when the run could not proceed.

Example:
  python -m playground submission.json --tmpdir /var/tmp/playground
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .config import configure_logging, get_settings
from .errors import PlaygroundError
from .models import Submission
from .runner import SubmissionRunner


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run an untrusted submission inside a network-isolated container."
    )
    parser.add_argument(
        "submission",
        help="Path to submission JSON file, or '-' to read from stdin.",
    )
    parser.add_argument(
        "--tmpdir",
        default=None,
        help="Base directory for staging directories (default: system temp).",
    )
    parser.add_argument(
        "--pull-timeout-ms",
        type=int,
        default=None,
        help="Time budget for pulling the image.",
    )
    parser.add_argument(
        "--runtime",
        default=None,
        help="Container runtime executable (default: docker).",
    )
    parser.add_argument(
        "--merge-streams",
        action="store_true",
        help="Capture stderr through stdout to keep exact interleaving.",
    )
    return parser.parse_args(argv)


def read_submission_text(path_or_dash: str) -> str:
    if path_or_dash == "-":
        data = sys.stdin.read()
        if not data.strip():
            raise PlaygroundError("stdin is empty")
        return data

    path = Path(path_or_dash)
    if not path.is_file():
        raise PlaygroundError(f"file not found: {path_or_dash}")
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PlaygroundError(f"failed reading file {path_or_dash}: {exc}") from exc


def json_print(payload: dict[str, Any]) -> None:
    sys.stdout.write(json.dumps(payload, ensure_ascii=False))
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)
    if args.runtime:
        settings = replace(settings, runtime=args.runtime)

    try:
        try:
            submission = Submission.model_validate_json(read_submission_text(args.submission))
        except ValidationError as exc:
            raise PlaygroundError(f"invalid submission: {exc}") from exc

        runner = SubmissionRunner(settings=settings, merge_streams=args.merge_streams or None)
        result = runner.run(
            submission,
            temp_root=args.tmpdir,
            pull_timeout_ms=args.pull_timeout_ms,
        )
    except PlaygroundError as exc:
        json_print({"ok": False, "error": str(exc), "type": type(exc).__name__})
        return 1

    json_print(result.model_dump(mode="json", by_alias=True))
    return 0
