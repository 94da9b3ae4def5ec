"""
Bracket positioning: half splitting, feeder reordering and grid slots.

The bracket is drawn as a fixed 4-column grid. Each round is split into a
top half and a bottom half, and each half occupies a fixed set of columns
depending on how many ties it holds:

    4 ties  ->  columns [0, 1, 2, 3]      (e.g. Round of 16 half)
    2 ties  ->  columns [1, 3]            (Quarter-final half)
    1 tie   ->  column  [2]               (Semi-final half, Final)

For the connector lines to make sense, each tie has to sit next to the
later-round tie it feeds. Feed order is not guaranteed to match bracket
order, so reorder() works from participant overlap instead: a Round of 16
tie between teams {A, B} feeds the Quarter-final tie whose teams include
both A and B.

    QF:    [ {A, C} ]          [ {E, G} ]
    R16:   [ {A, B}, {C, D} ]  [ {E, F}, {G, H} ]
"""

import math
from typing import Iterable, Optional, Sequence

from futbracket.models import BracketSlot, PositionedTie, Team, Tie
from futbracket.rounds import RANK_QUARTER, RANK_SEMI

GRID_COLUMNS = 4

# Columns occupied by a round-half, keyed by its tie count
SLOT_COLUMNS = {
    4: [0, 1, 2, 3],
    2: [1, 3],
    1: [2],
}

# Placeholder sides get negative IDs so left.id < right.id still holds
PLACEHOLDER_LEFT_ID = -2
PLACEHOLDER_RIGHT_ID = -1


def slot_columns(count: int) -> list[int]:
    """
    Get the grid columns used by a round-half with ``count`` ties.

    Examples:
        >>> slot_columns(4)
        [0, 1, 2, 3]
        >>> slot_columns(2)
        [1, 3]
        >>> slot_columns(1)
        [2]
        >>> slot_columns(3)
        [0, 1, 2]
    """
    if count in SLOT_COLUMNS:
        return list(SLOT_COLUMNS[count])
    return list(range(min(max(count, 0), GRID_COLUMNS)))


def expected_half_size(rank: int) -> int:
    """
    Number of ties a round-half should show for a round of this rank.

    Semi-finals and the Final show one tie per half, Quarter-finals two,
    and every earlier round fills the grid with four.
    """
    if rank >= RANK_SEMI:
        return 1
    if rank >= RANK_QUARTER:
        return 2
    return GRID_COLUMNS


def natural_order(ties: Iterable[Tie]) -> list[Tie]:
    """Sort ties by left team ID, then right team ID."""
    return sorted(ties, key=lambda t: t.pair_key)


def _bucket_index(
    team_ids: frozenset[int],
    bucket_sets: Sequence[frozenset[int]],
) -> Optional[int]:
    for index, bucket in enumerate(bucket_sets):
        if team_ids <= bucket:
            return index
    for index, bucket in enumerate(bucket_sets):
        if team_ids & bucket:
            return index
    return None


def reorder(current: Sequence[Tie], following: Optional[Sequence[Tie]]) -> list[Tie]:
    """
    Order a round's ties so feeders sit next to the tie they produced.

    Each tie in ``following`` defines a bucket. A current tie goes into the
    first bucket whose team set contains both of its teams, or failing
    that, the first bucket sharing a team with it (the tie's winner).
    Buckets are flattened in ``following`` order, each sorted by left team
    ID. Ties that feed nothing (e.g. the next round is not drawn yet) come
    last in natural order.

    Without a following round the natural order is returned.

    Args:
        current: Ties of the round being positioned
        following: Ties of the next round, already in bracket order

    Returns:
        Reordered list containing every tie of ``current`` exactly once
    """
    if not following:
        return natural_order(current)

    bucket_sets = [t.team_ids for t in following]
    buckets: list[list[Tie]] = [[] for _ in bucket_sets]
    unmatched: list[Tie] = []

    for tie in current:
        index = _bucket_index(tie.team_ids, bucket_sets)
        if index is None:
            unmatched.append(tie)
        else:
            buckets[index].append(tie)

    ordered: list[Tie] = []
    for bucket in buckets:
        ordered.extend(natural_order(bucket))
    ordered.extend(natural_order(unmatched))
    return ordered


def split_half(ties: Sequence[Tie]) -> tuple[list[Tie], list[Tie]]:
    """
    Split ties into top and bottom halves, in order.

    The top half gets the extra tie when the count is odd.

    Examples:
        split_half([t1, t2, t3])  ->  ([t1, t2], [t3])
        split_half([t1, t2])      ->  ([t1], [t2])
    """
    cut = math.ceil(len(ties) / 2)
    return list(ties[:cut]), list(ties[cut:])


def position(
    ties: Sequence[Tie],
    following: Optional[Sequence[Tie]] = None,
) -> tuple[list[Tie], list[Tie]]:
    """Reorder a round against the next round and split it into halves."""
    return split_half(reorder(ties, following))


def placeholder_tie(name: str = "TBD") -> Tie:
    """Build a synthetic "TBD vs TBD", 0-0 tie."""
    return Tie(
        left=Team(id=PLACEHOLDER_LEFT_ID, name=name),
        right=Team(id=PLACEHOLDER_RIGHT_ID, name=name),
        is_placeholder=True,
    )


def pad_half(
    ties: Sequence[Tie],
    expected: int,
    placeholder_name: str = "TBD",
) -> tuple[list[Tie], list[Tie]]:
    """
    Fit a round-half to its expected size.

    Missing ties are filled with placeholders at the end. Ties beyond the
    grid width cannot be drawn and are returned separately.

    Returns:
        (ties to draw, ties that overflowed the grid)
    """
    expected = max(1, min(expected, GRID_COLUMNS))
    capacity = max(expected, min(len(ties), GRID_COLUMNS))

    drawn = list(ties[:capacity])
    overflow = list(ties[capacity:])
    while len(drawn) < expected:
        drawn.append(placeholder_tie(placeholder_name))
    return drawn, overflow


def assign_slots(ties: Sequence[Tie], round_index: int) -> tuple[PositionedTie, ...]:
    """
    Attach a BracketSlot to every tie of a round-half.

    Args:
        ties: Round-half ties in drawing order (at most 4)
        round_index: Index of the round in the bracket, earliest first
    """
    columns = slot_columns(len(ties))
    return tuple(
        PositionedTie(tie=tie, slot=BracketSlot(round_index=round_index, column=column))
        for tie, column in zip(ties, columns)
    )
