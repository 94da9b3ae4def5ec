"""
Typed data model for the bracket engine.

All records are frozen dataclasses: fixtures come in read-only from the
fetch layer, and everything derived from them (ties, slots, rounds, the
bracket itself) is immutable value data rebuilt from scratch on every
snapshot.

Flow:
    Fixture (x N)  ->  Tie (one per team pair per round)
                   ->  PositionedTie (tie + BracketSlot)
                   ->  BracketRound (top / bottom halves)
                   ->  Bracket
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from futbracket.match_statuses import is_finished


@dataclass(frozen=True)
class Team:
    """
    A team as reported by a fixture.

    Attributes:
        id: Stable feed ID. The only key used for grouping and ordering.
        name: Display name
        logo: Logo URL or asset reference
    """
    id: int
    name: str
    logo: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "logo": self.logo}


@dataclass(frozen=True)
class Fixture:
    """
    One played or scheduled match.

    Attributes:
        id: Unique fixture ID from the feed
        round: Free-text round label, e.g. "Round of 16 - 1st Leg"
        home: Home team
        away: Away team
        home_goals: Goals by the home team (None before kick-off)
        away_goals: Goals by the away team (None before kick-off)
        status: Short status code ("FT", "NS", ...) if the feed supplied one
    """
    id: int
    round: str
    home: Team
    away: Team
    home_goals: Optional[int] = None
    away_goals: Optional[int] = None
    status: Optional[str] = None

    @property
    def team_ids(self) -> frozenset[int]:
        return frozenset((self.home.id, self.away.id))

    @property
    def is_finished(self) -> bool:
        return is_finished(self.status)


@dataclass(frozen=True)
class RoundKey:
    """
    A classified knockout round.

    Attributes:
        key: Round label with any leg suffix removed, e.g. "Round of 16"
        rank: Ordinal stage depth (higher = later, 100 = Final)
        labels: Every raw label that normalised to this key, in first-seen order
    """
    key: str
    rank: int
    labels: tuple[str, ...] = ()

    @property
    def is_final(self) -> bool:
        return self.rank >= 100


@dataclass(frozen=True)
class Tie:
    """
    Aggregate result of one knockout pairing.

    Orientation is canonical: ``left`` is always the team with the smaller
    ID, regardless of who was at home in either leg.

    Attributes:
        left: Team with the smaller ID
        right: Team with the larger ID
        left_aggregate: Goals scored by ``left`` across all legs
        right_aggregate: Goals scored by ``right`` across all legs
        fixture_ids: IDs of the fixtures summarised by this tie
        finished: True when every contributing fixture has a final score
        is_placeholder: True for synthetic "TBD vs TBD" ties
    """
    left: Team
    right: Team
    left_aggregate: int = 0
    right_aggregate: int = 0
    fixture_ids: tuple[int, ...] = ()
    finished: bool = False
    is_placeholder: bool = False

    @property
    def team_ids(self) -> frozenset[int]:
        return frozenset((self.left.id, self.right.id))

    @property
    def pair_key(self) -> tuple[int, int]:
        return (self.left.id, self.right.id)

    @property
    def legs(self) -> int:
        return len(self.fixture_ids)

    @property
    def leader(self) -> Optional[Team]:
        """Team ahead on aggregate, or None when level."""
        if self.left_aggregate > self.right_aggregate:
            return self.left
        if self.right_aggregate > self.left_aggregate:
            return self.right
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "left": self.left.to_dict(),
            "right": self.right.to_dict(),
            "left_aggregate": self.left_aggregate,
            "right_aggregate": self.right_aggregate,
            "fixture_ids": list(self.fixture_ids),
            "finished": self.finished,
            "placeholder": self.is_placeholder,
        }


@dataclass(frozen=True)
class BracketSlot:
    """A (round, column) cell in the 4-column bracket grid."""
    round_index: int
    column: int

    def __post_init__(self) -> None:
        if not 0 <= self.column <= 3:
            raise ValueError(f"Column {self.column} out of range (0-3)")


@dataclass(frozen=True)
class PositionedTie:
    """A tie (real or placeholder) with its grid slot."""
    tie: Tie
    slot: BracketSlot

    def to_dict(self) -> dict[str, Any]:
        payload = self.tie.to_dict()
        payload["round_index"] = self.slot.round_index
        payload["column"] = self.slot.column
        return payload


@dataclass(frozen=True)
class BracketRound:
    """
    One bracket column pair.

    The Final only has a top half; its bottom list is always empty.
    """
    round: RoundKey
    top: tuple[PositionedTie, ...] = ()
    bottom: tuple[PositionedTie, ...] = ()

    @property
    def ties(self) -> tuple[PositionedTie, ...]:
        return self.top + self.bottom

    def to_dict(self) -> dict[str, Any]:
        return {
            "round": self.round.key,
            "rank": self.round.rank,
            "top": [p.to_dict() for p in self.top],
            "bottom": [p.to_dict() for p in self.bottom],
        }


@dataclass(frozen=True)
class BracketDiagnostics:
    """
    Record of every place the engine quietly degraded its input.

    Attributes:
        fallback_used: No round reached the Round of 16, so the first
            rounds of the knockout set were used instead
        dropped_final_ties: Extra Final ties discarded (only one is kept)
        overflow_ties: Ties that did not fit in a 4-column round-half
        duplicate_fixture_reports: Repeated fixture IDs collapsed before
            aggregation
        excluded_labels: Round labels that were not bracket rounds
        synthesized_rounds: Stages the feed has not listed, added as empty
            rounds so the bracket reaches the Final
    """
    fallback_used: bool = False
    dropped_final_ties: tuple[Tie, ...] = ()
    overflow_ties: tuple[Tie, ...] = ()
    duplicate_fixture_reports: int = 0
    excluded_labels: tuple[str, ...] = ()
    synthesized_rounds: tuple[str, ...] = ()

    @property
    def has_warnings(self) -> bool:
        return bool(
            self.fallback_used
            or self.dropped_final_ties
            or self.overflow_ties
            or self.duplicate_fixture_reports
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "fallback_used": self.fallback_used,
            "dropped_final_ties": [t.pair_key for t in self.dropped_final_ties],
            "overflow_ties": [t.pair_key for t in self.overflow_ties],
            "duplicate_fixture_reports": self.duplicate_fixture_reports,
            "excluded_labels": list(self.excluded_labels),
            "synthesized_rounds": list(self.synthesized_rounds),
        }


@dataclass(frozen=True)
class Bracket:
    """
    Full engine output: ordered rounds, earliest stage first.

    A bracket with no rounds is a valid "no bracket" result.
    """
    rounds: tuple[BracketRound, ...] = ()
    diagnostics: BracketDiagnostics = field(default_factory=BracketDiagnostics)

    @property
    def is_empty(self) -> bool:
        return not self.rounds

    @property
    def final(self) -> Optional[BracketRound]:
        if not self.rounds or not self.rounds[-1].round.is_final:
            return None
        return self.rounds[-1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "rounds": [r.to_dict() for r in self.rounds],
            "diagnostics": self.diagnostics.to_dict(),
        }
