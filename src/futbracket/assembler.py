"""
Bracket assembly: composes classification, aggregation and positioning.

This is the single entry point the rendering layer calls. It takes the
fixture snapshot and the round labels seen in it, and returns a complete
Bracket:

1. **Round selection**: labels are classified and the knockout rounds
   ordered earliest first (rounds.select_rounds). Every stage from the
   earliest selected round up to the Final is drawn; stages the feed has
   not listed yet are added as empty rounds.

2. **Aggregation**: each round's fixtures become one tie per team pair
   (aggregation.aggregate), with duplicate reports collapsed.

3. **Ordering**: rounds are ordered from the Final backwards, each one
   reordered against the already-ordered round after it so every tie sits
   beside the tie it feeds (positioning.reorder).

4. **Layout**: every round is split into top/bottom halves, padded with
   placeholder ties to its expected size, and given grid slots.

The engine is a pure function of its inputs. It never raises for sparse or
malformed data; every place it quietly degrades is logged and recorded in
Bracket.diagnostics.

Usage:
    from futbracket.assembler import assemble

    bracket = assemble(fixtures)
    if bracket.is_empty:
        ...  # render the empty state
"""

import logging
from typing import Iterable, Optional

from futbracket.aggregation import aggregate, dedupe_fixtures, distinct
from futbracket.config import Settings, get_settings
from futbracket.models import (
    Bracket,
    BracketDiagnostics,
    BracketRound,
    Fixture,
    RoundKey,
    Tie,
)
from futbracket.positioning import (
    GRID_COLUMNS,
    assign_slots,
    expected_half_size,
    pad_half,
    reorder,
    split_half,
)
from futbracket.rounds import ROUND_NAMES, select_rounds

logger = logging.getLogger(__name__)


def round_labels_from(fixtures: Iterable[Fixture]) -> list[str]:
    """Distinct round labels of a fixture snapshot, in first-seen order."""
    seen: set[str] = set()
    labels: list[str] = []
    for fixture in fixtures:
        if fixture.round and fixture.round not in seen:
            seen.add(fixture.round)
            labels.append(fixture.round)
    return labels


def _fill_missing_rounds(rounds: list[RoundKey]) -> tuple[list[RoundKey], tuple[str, ...]]:
    """
    Add every stage between the earliest selected round and the Final.

    A feed that has only published the Round of 16 and Quarter-finals still
    gets Semi-final and Final columns, drawn as placeholders.

    Returns:
        (rounds ordered earliest first, keys of the rounds that were added)
    """
    present = {r.rank for r in rounds}
    lowest = min(present)
    added = [
        RoundKey(key=name, rank=rank)
        for rank, name in ROUND_NAMES.items()
        if rank > lowest and rank not in present
    ]
    if not added:
        return rounds, ()

    logger.debug(
        "Adding unlisted rounds after %r: %s",
        rounds[0].key, ", ".join(r.key for r in added),
    )
    # sorted() is stable, so listed rounds keep their order within a rank
    filled = sorted(rounds + added, key=lambda r: r.rank)
    return filled, tuple(r.key for r in added)


def _order_rounds(
    fixtures: list[Fixture],
    rounds: list[RoundKey],
) -> tuple[list[list[Tie]], list[Tie]]:
    """
    Aggregate and order every round, walking from the Final backwards.

    Returns:
        (ordered ties per round, extra Final ties that were dropped)
    """
    ordered: list[list[Tie]] = [[] for _ in rounds]
    dropped_final: list[Tie] = []
    following: Optional[list[Tie]] = None
    last_index = len(rounds) - 1

    for index in range(last_index, -1, -1):
        round_key = rounds[index]
        ties = reorder(distinct(aggregate(fixtures, round_key)), following)

        if index == last_index and len(ties) > 1:
            dropped_final = ties[1:]
            ties = ties[:1]
            logger.warning(
                "Final %r has %d ties; keeping %s and dropping %d",
                round_key.key, len(ties) + len(dropped_final),
                ties[0].pair_key, len(dropped_final),
            )

        ordered[index] = ties
        following = ties

    return ordered, dropped_final


def assemble(
    fixtures: Iterable[Fixture],
    round_labels: Optional[Iterable[str]] = None,
    settings: Optional[Settings] = None,
) -> Bracket:
    """
    Build the full bracket for a fixture snapshot.

    Args:
        fixtures: Every fixture of the competition known to the caller
        round_labels: Round labels observed in the competition. When None
            they are taken from ``fixtures``.
        settings: Engine settings (defaults to the cached settings)

    Returns:
        Bracket with rounds ordered earliest first. A bracket with zero
        rounds means there is nothing to draw.

    Examples:
        bracket = assemble(fixtures, ["Round of 16", "Quarter-finals",
                                      "Semi-finals", "Final"])
        bracket.rounds[0].top      # 4 positioned Round of 16 ties
        bracket.final.top[0].tie   # the Final (or a TBD placeholder)
    """
    settings = settings or get_settings()
    snapshot = list(fixtures)
    labels = round_labels_from(snapshot) if round_labels is None else list(round_labels)

    unique_fixtures, duplicate_reports = dedupe_fixtures(snapshot)

    excluded: list[str] = []
    rounds, fallback_used = select_rounds(
        labels,
        fallback_count=settings.fallback_round_count,
        excluded=excluded,
    )
    excluded_labels = tuple(dict.fromkeys(excluded))

    if not rounds:
        logger.debug("No knockout rounds among %d labels", len(labels))
        return Bracket(
            diagnostics=BracketDiagnostics(
                duplicate_fixture_reports=duplicate_reports,
                excluded_labels=excluded_labels,
            )
        )

    rounds, synthesized = _fill_missing_rounds(rounds)

    ordered, dropped_final = _order_rounds(unique_fixtures, rounds)

    bracket_rounds: list[BracketRound] = []
    overflow: list[Tie] = []
    last_index = len(rounds) - 1

    for index, (round_key, ties) in enumerate(zip(rounds, ordered)):
        expected = expected_half_size(round_key.rank)

        if index == last_index:
            top, bottom = list(ties), []
        else:
            top, bottom = split_half(ties)

        top, top_overflow = pad_half(top, expected, settings.placeholder_team_name)
        overflow.extend(top_overflow)
        if index != last_index:
            bottom, bottom_overflow = pad_half(
                bottom, expected, settings.placeholder_team_name
            )
            overflow.extend(bottom_overflow)

        bracket_rounds.append(
            BracketRound(
                round=round_key,
                top=assign_slots(top, index),
                bottom=assign_slots(bottom, index),
            )
        )
        logger.debug(
            "Round %d %r: %d real ties, halves %d/%d",
            index, round_key.key, len(ties), len(top), len(bottom),
        )

    if overflow:
        logger.warning(
            "%d ties do not fit the %d-column grid and were dropped",
            len(overflow), GRID_COLUMNS,
        )

    return Bracket(
        rounds=tuple(bracket_rounds),
        diagnostics=BracketDiagnostics(
            fallback_used=fallback_used,
            dropped_final_ties=tuple(dropped_final),
            overflow_ties=tuple(overflow),
            duplicate_fixture_reports=duplicate_reports,
            excluded_labels=excluded_labels,
            synthesized_rounds=synthesized,
        ),
    )
