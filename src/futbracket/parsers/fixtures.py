"""
Fixture payload parsing.

The fetch layer hands over fixtures in the feed's nested JSON shape:

    {
        "fixture": {"id": 1001, "status": {"short": "FT"}},
        "league":  {"round": "Round of 16 - 1st Leg"},
        "teams":   {"home": {"id": 42, "name": "Arsenal", "logo": "..."},
                    "away": {"id": 541, "name": "Real Madrid", "logo": "..."}},
        "goals":   {"home": 3, "away": 1}
    }

This module turns those payloads into typed Fixture records so the engine
never touches dictionaries. Missing goals and status are fine (scheduled
fixtures have neither); a payload without a fixture ID, round label or
integer team IDs cannot be placed in a bracket and is rejected.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from futbracket.match_statuses import normalize_status
from futbracket.models import Fixture, Team

logger = logging.getLogger(__name__)

# ASCII digits only; str.isdigit() also accepts superscripts int() rejects
_INTEGER = re.compile(r"-?[0-9]+")


class FixtureParseError(Exception):
    """Raised when a fixture payload cannot be parsed."""
    pass


@dataclass
class FixtureParseResult:
    """
    Outcome of parsing a batch of payloads.

    Attributes:
        fixtures: Successfully parsed fixtures, in input order
        errors: One message per rejected payload
    """
    fixtures: list[Fixture] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def round_labels(self) -> list[str]:
        """Distinct round labels of the parsed fixtures, first-seen order."""
        return list(dict.fromkeys(f.round for f in self.fixtures))


def _section(payload: dict, name: str) -> dict:
    value = payload.get(name)
    return value if isinstance(value, dict) else {}


def _as_int(value: Any) -> Optional[int]:
    """Coerce ints and integer strings; anything else becomes None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if _INTEGER.fullmatch(text):
            return int(text)
    return None


def _parse_team(payload: Any, side: str) -> Team:
    if not isinstance(payload, dict):
        raise FixtureParseError(f"Missing {side} team")
    team_id = _as_int(payload.get("id"))
    if team_id is None:
        raise FixtureParseError(f"{side} team has no integer id: {payload.get('id')!r}")
    return Team(
        id=team_id,
        name=str(payload.get("name") or ""),
        logo=str(payload.get("logo") or ""),
    )


def parse_fixture(payload: dict) -> Fixture:
    """
    Parse one feed payload into a Fixture.

    Args:
        payload: Nested fixture dict as returned by the feed

    Returns:
        Fixture record

    Raises:
        FixtureParseError: If the fixture ID, round label or a team ID is missing
    """
    if not isinstance(payload, dict):
        raise FixtureParseError(f"Expected a dict, got {type(payload).__name__}")

    fixture_section = _section(payload, "fixture")
    fixture_id = _as_int(fixture_section.get("id"))
    if fixture_id is None:
        raise FixtureParseError("Fixture has no integer id")

    round_label = _section(payload, "league").get("round")
    if not isinstance(round_label, str) or not round_label.strip():
        raise FixtureParseError(f"Fixture {fixture_id} has no round label")

    teams = _section(payload, "teams")
    goals = _section(payload, "goals")
    status = _section(fixture_section, "status").get("short")

    return Fixture(
        id=fixture_id,
        round=round_label.strip(),
        home=_parse_team(teams.get("home"), "home"),
        away=_parse_team(teams.get("away"), "away"),
        home_goals=_as_int(goals.get("home")),
        away_goals=_as_int(goals.get("away")),
        status=normalize_status(status) if isinstance(status, str) else None,
    )


def parse_fixtures(payloads: Iterable[dict]) -> FixtureParseResult:
    """
    Parse a batch of payloads, skipping the ones that cannot be parsed.

    A bad record never aborts the batch; it is logged and listed in
    ``errors`` instead.
    """
    result = FixtureParseResult()
    for index, payload in enumerate(payloads):
        try:
            result.fixtures.append(parse_fixture(payload))
        except FixtureParseError as e:
            message = f"Payload {index}: {e}"
            logger.warning("Skipping fixture payload: %s", message)
            result.errors.append(message)
    return result
