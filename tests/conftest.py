"""
Pytest configuration and fixtures.

This file is automatically loaded by pytest and provides
shared fixture builders for all tests. Sample competition data lives
here and in the tests, never in the engine.
"""

import itertools

import pytest

from futbracket.config import Settings
from futbracket.models import Fixture, Team


def make_team(team_id: int, name: str = "") -> Team:
    """Team with a readable default name."""
    return Team(id=team_id, name=name or f"Team {team_id}", logo=f"https://logos/{team_id}.png")


@pytest.fixture
def team():
    """Factory for Team records."""
    return make_team


@pytest.fixture
def make_fixture():
    """
    Factory for Fixture records.

    Teams may be given as Team objects or bare IDs. Fixture IDs are
    allocated sequentially unless one is passed explicitly.
    """
    counter = itertools.count(1)

    def _make(
        round_label,
        home,
        away,
        home_goals=None,
        away_goals=None,
        status="FT",
        fixture_id=None,
    ) -> Fixture:
        return Fixture(
            id=fixture_id if fixture_id is not None else next(counter),
            round=round_label,
            home=home if isinstance(home, Team) else make_team(home),
            away=away if isinstance(away, Team) else make_team(away),
            home_goals=home_goals,
            away_goals=away_goals,
            status=status,
        )

    return _make


@pytest.fixture
def two_legs(make_fixture):
    """
    Build both legs of a tie.

    ``first`` is the leg-1 score with ``a`` at home, ``second`` the leg-2
    score with ``b`` at home.
    """
    def _make(round_label, a, b, first=(1, 0), second=(0, 1)) -> list[Fixture]:
        return [
            make_fixture(f"{round_label} - 1st Leg", a, b, *first),
            make_fixture(f"{round_label} - 2nd Leg", b, a, *second),
        ]

    return _make


@pytest.fixture
def engine_settings():
    """Settings with defaults, independent of the developer's environment."""
    return Settings(
        _env_file=None,
        fallback_round_count=4,
        placeholder_team_name="TBD",
    )
