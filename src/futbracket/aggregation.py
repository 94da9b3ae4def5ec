"""
Tie aggregation: merges the legs of a knockout pairing into one result.

A two-legged tie shows up in the feed as two unrelated fixtures, with the
home and away sides swapped between legs:

    Leg 1:  Arsenal (42)      3 - 1  Real Madrid (541)
    Leg 2:  Real Madrid (541) 0 - 2  Arsenal (42)

Aggregation groups a round's fixtures by the unordered pair of team IDs
and sums goals by team identity, never by home/away column:

    Tie:    Arsenal (42)      5 - 1  Real Madrid (541)

The team with the smaller ID is always the tie's ``left`` side, so the
result is the same whichever leg the feed lists first.

Deduplication happens at two levels:
- dedupe_fixtures(): the same fixture ID reported more than once across
  fetches collapses to one record before aggregation
- distinct(): residual ties for the same team pair collapse to the first
  one seen before positioning
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from futbracket.models import Fixture, RoundKey, Team, Tie
from futbracket.rounds import matches_round

logger = logging.getLogger(__name__)


@dataclass
class _TieAccumulator:
    """Running totals for one team pair while a round is aggregated."""
    left: Team
    right: Team
    left_goals: int = 0
    right_goals: int = 0
    fixture_ids: list[int] = field(default_factory=list)
    all_finished: bool = True

    def add(self, fixture: Fixture) -> None:
        home_goals = fixture.home_goals or 0
        away_goals = fixture.away_goals or 0

        # Goals follow the team, not the column
        if fixture.home.id == self.left.id:
            self.left_goals += home_goals
            self.right_goals += away_goals
        else:
            self.left_goals += away_goals
            self.right_goals += home_goals

        self.fixture_ids.append(fixture.id)
        self.all_finished = self.all_finished and fixture.is_finished

    def to_tie(self) -> Tie:
        return Tie(
            left=self.left,
            right=self.right,
            left_aggregate=self.left_goals,
            right_aggregate=self.right_goals,
            fixture_ids=tuple(self.fixture_ids),
            finished=self.all_finished,
        )


def aggregate(fixtures: Iterable[Fixture], round_key: RoundKey) -> list[Tie]:
    """
    Aggregate a round's fixtures into one tie per team pair.

    Every fixture passed in that belongs to the round is trusted to be a
    genuine leg; a pair with three fixtures sums all three. Fixtures where
    a team plays itself carry no pairing and are skipped.

    Args:
        fixtures: Fixture snapshot (may contain other rounds)
        round_key: Round to aggregate

    Returns:
        Ties in order of each pair's first appearance in ``fixtures``

    Examples:
        # Single-leg knockout: aggregate equals the one score
        aggregate([final_fixture], RoundKey("Final", 100))
    """
    groups: dict[frozenset[int], _TieAccumulator] = {}

    for fixture in fixtures:
        if not matches_round(fixture, round_key):
            continue
        if fixture.home.id == fixture.away.id:
            logger.debug(
                "Skipping fixture %s: team %s listed on both sides",
                fixture.id, fixture.home.id,
            )
            continue

        pair = fixture.team_ids
        acc = groups.get(pair)
        if acc is None:
            # Orientation is fixed once per pair and reused for every leg
            if fixture.home.id < fixture.away.id:
                left, right = fixture.home, fixture.away
            else:
                left, right = fixture.away, fixture.home
            acc = _TieAccumulator(left=left, right=right)
            groups[pair] = acc
        acc.add(fixture)

    ties = [acc.to_tie() for acc in groups.values()]
    logger.debug("Round %r: %d ties", round_key.key, len(ties))
    return ties


def distinct(ties: Iterable[Tie]) -> list[Tie]:
    """
    Drop ties whose unordered team pair was already seen.

    The first tie for each pair wins and order is otherwise preserved, so
    applying this twice gives the same result as applying it once.
    """
    seen: set[frozenset[int]] = set()
    unique: list[Tie] = []
    for tie in ties:
        if tie.team_ids in seen:
            continue
        seen.add(tie.team_ids)
        unique.append(tie)
    return unique


def dedupe_fixtures(fixtures: Iterable[Fixture]) -> tuple[list[Fixture], int]:
    """
    Collapse repeated reports of the same fixture ID.

    When the same fixture arrives more than once (overlapping fetches),
    a finished report replaces an unfinished one; otherwise the first
    report is kept. The surviving record stays at the position of the
    first report.

    Returns:
        (deduplicated fixtures, number of reports dropped)
    """
    kept: dict[int, Fixture] = {}
    dropped = 0

    for fixture in fixtures:
        existing = kept.get(fixture.id)
        if existing is None:
            kept[fixture.id] = fixture
            continue
        dropped += 1
        if fixture.is_finished and not existing.is_finished:
            kept[fixture.id] = fixture

    if dropped:
        logger.warning("Collapsed %d duplicate fixture reports", dropped)

    return list(kept.values()), dropped
