#!/usr/bin/env python3
"""
Build a knockout bracket from a saved fixture snapshot.

Reads a JSON file holding fixture payloads in the feed's nested shape
(either a bare list or an object with a "response" list), runs the bracket
engine over it, and prints the rounds as text or JSON.

Usage:
    python scripts/build_bracket.py snapshot.json
    python scripts/build_bracket.py snapshot.json --json
    python scripts/build_bracket.py snapshot.json --rounds "Round of 16,Final"
"""

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from futbracket.assembler import assemble
from futbracket.config import settings
from futbracket.models import Bracket, PositionedTie
from futbracket.parsers import parse_fixtures

LOG_FORMATS = {
    "console": "%(asctime)s [%(levelname)s] %(message)s",
    "json": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
}

logging.basicConfig(
    level=settings.log_level,
    format=LOG_FORMATS.get(settings.log_format, LOG_FORMATS["console"]),
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def load_payloads(path: Path) -> list[dict]:
    """Load fixture payloads from a snapshot file."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("response", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a list of fixtures")
    return data


def format_tie(positioned: PositionedTie) -> str:
    tie = positioned.tie
    marker = "" if tie.finished or tie.is_placeholder else " *"
    return (
        f"  [col {positioned.slot.column}] "
        f"{tie.left.name} {tie.left_aggregate} - {tie.right_aggregate} {tie.right.name}"
        f"{marker}"
    )


def print_bracket(bracket: Bracket) -> None:
    if bracket.is_empty:
        print("No knockout bracket for this competition.")
        return

    for bracket_round in bracket.rounds:
        print(f"{bracket_round.round.key} (rank {bracket_round.round.rank})")
        for positioned in bracket_round.top:
            print(format_tie(positioned))
        if bracket_round.bottom:
            print("  ---")
            for positioned in bracket_round.bottom:
                print(format_tie(positioned))
        print()

    if bracket.diagnostics.has_warnings:
        print(f"Diagnostics: {bracket.diagnostics.to_dict()}")


def main():
    parser = argparse.ArgumentParser(description="Build a knockout bracket from a fixture snapshot")
    parser.add_argument("snapshot", type=Path, help="JSON file with fixture payloads")
    parser.add_argument(
        "--rounds",
        type=str,
        default=None,
        help="Comma-separated round labels (default: labels found in the snapshot)",
    )
    parser.add_argument("--json", action="store_true", help="Print the bracket as JSON")
    args = parser.parse_args()

    result = parse_fixtures(load_payloads(args.snapshot))
    logger.info(
        "Parsed %d fixtures (%d rejected) from %s",
        len(result.fixtures), len(result.errors), args.snapshot,
    )

    labels = (
        [label.strip() for label in args.rounds.split(",") if label.strip()]
        if args.rounds
        else result.round_labels
    )
    bracket = assemble(result.fixtures, labels)

    if args.json:
        print(json.dumps(bracket.to_dict(), indent=2))
    else:
        print_bracket(bracket)


if __name__ == "__main__":
    main()
