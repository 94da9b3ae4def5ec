"""
Round label classification and bracket round selection.

Round labels arrive as free text from the feed ("Round of 16 - 1st Leg",
"1/8-finals", "Semi-finals", "Group B", ...). Each label is mapped to an
ordinal rank where a higher rank is a later stage:

    Final           100
    Semi-finals      90
    Quarter-finals   80
    Round of 16      70   (also "Play-offs" and "1/8")
    Round of 32      60
    Round of 64      50
    anything else     0   (group stage / unranked, never in the bracket)

These functions are used by:
- The assembler (choosing and ordering the bracket rounds)
- Tie aggregation (deciding whether a fixture belongs to a round)
"""

import logging
import re
from typing import Iterable, Optional

from futbracket.models import Fixture, RoundKey

logger = logging.getLogger(__name__)


RANK_FINAL = 100
RANK_SEMI = 90
RANK_QUARTER = 80
RANK_ROUND_OF_16 = 70
RANK_ROUND_OF_32 = 60
RANK_ROUND_OF_64 = 50
RANK_UNRANKED = 0

# Display keys for rounds the feed has not listed yet
ROUND_NAMES: dict[int, str] = {
    RANK_ROUND_OF_64: "Round of 64",
    RANK_ROUND_OF_32: "Round of 32",
    RANK_ROUND_OF_16: "Round of 16",
    RANK_QUARTER: "Quarter-finals",
    RANK_SEMI: "Semi-finals",
    RANK_FINAL: "Final",
}

# Checked in order; the first rule with a matching marker wins.
# "final" is checked last because "Semi-finals", "Quarter-finals" and
# "1/8-finals" all contain it.
RANK_RULES: list[tuple[int, tuple[str, ...]]] = [
    (RANK_SEMI, ("semi", "1/2")),
    (RANK_QUARTER, ("quarter", "1/4")),
    (RANK_ROUND_OF_16, ("round of 16", "playoff", "play-off", "1/8")),
    (RANK_ROUND_OF_32, ("round of 32", "1/16")),
    (RANK_ROUND_OF_64, ("round of 64", "1/32")),
    (RANK_FINAL, ("grand final", "final")),
]

# Labels carrying any of these markers are never bracket rounds
EXCLUDED_MARKERS = ("group", "3rd place", "third place")

# Matches trailing leg decorations: "- 1st Leg", "2nd leg", "Leg 1", "(First Leg)"
_LEG_SUFFIX = re.compile(
    r"[\s\-–(]*(?:(?:1st|2nd|first|second)\s+leg|leg\s*[12])\)?\s*$",
    re.IGNORECASE,
)


def classify(label: str) -> int:
    """
    Map a round label to its knockout rank.

    Args:
        label: Raw round label from the feed

    Returns:
        Rank integer, 0 when the label is not a recognised knockout stage

    Examples:
        >>> classify("Final")
        100
        >>> classify("Semi-finals - 2nd Leg")
        90
        >>> classify("1/8-finals")
        70
        >>> classify("Group A")
        0
    """
    lower = (label or "").lower()
    for rank, markers in RANK_RULES:
        if any(marker in lower for marker in markers):
            return rank
    return RANK_UNRANKED


def normalize_label(label: str) -> str:
    """
    Strip leg decorations so every leg of a round shares one key.

    Examples:
        >>> normalize_label("Round of 16 - 1st Leg")
        'Round of 16'
        >>> normalize_label("Final")
        'Final'
    """
    stripped = _LEG_SUFFIX.sub("", (label or "").strip())
    return stripped.strip() or (label or "").strip()


def is_excluded(label: str) -> bool:
    """True for group-stage and third-place labels."""
    lower = (label or "").lower()
    return any(marker in lower for marker in EXCLUDED_MARKERS)


def matches_round(fixture: Fixture, round_key: RoundKey) -> bool:
    """
    Check whether a fixture belongs to a round.

    The round key must appear (case-insensitively) inside the fixture's
    label, and the fixture's label must classify to the same rank. The
    rank check stops the "Final" key from swallowing "Semi-finals", and
    third-place fixtures never match.
    """
    label = fixture.round or ""
    if is_excluded(label):
        return False
    if round_key.key.lower() not in label.lower():
        return False
    return classify(label) == round_key.rank


def select_rounds(
    labels: Iterable[str],
    fallback_count: int = 4,
    excluded: Optional[list[str]] = None,
) -> tuple[list[RoundKey], bool]:
    """
    Choose and order the rounds that make up the bracket.

    Every distinct label is normalised and classified. Group-stage,
    third-place and unranked labels are dropped, and the rest are sorted
    earliest stage first. If none of the remaining rounds reaches the
    Round of 16, only the first ``fallback_count`` rounds are kept so
    smaller cups still get a bracket.

    Args:
        labels: Round labels observed across the fixture snapshot
        fallback_count: Rounds kept when the fallback applies
        excluded: Optional list that receives every dropped label

    Returns:
        (ordered round keys, whether the fallback was applied)
    """
    by_key: dict[str, RoundKey] = {}
    order: list[str] = []

    for label in labels:
        if label is None:
            continue
        if is_excluded(label):
            if excluded is not None:
                excluded.append(label)
            continue
        rank = classify(label)
        if rank == RANK_UNRANKED:
            if excluded is not None:
                excluded.append(label)
            continue

        key = normalize_label(label)
        lookup = key.lower()
        existing = by_key.get(lookup)
        if existing is None:
            by_key[lookup] = RoundKey(key=key, rank=rank, labels=(label,))
            order.append(lookup)
        elif label not in existing.labels:
            by_key[lookup] = RoundKey(
                key=existing.key,
                rank=existing.rank,
                labels=existing.labels + (label,),
            )

    # sorted() is stable, so equal ranks keep first-seen order
    rounds = sorted((by_key[k] for k in order), key=lambda r: r.rank)

    if rounds and not any(r.rank >= RANK_ROUND_OF_16 for r in rounds):
        logger.warning(
            "No round reaches the Round of 16; keeping first %d of %d rounds",
            min(fallback_count, len(rounds)), len(rounds),
        )
        return rounds[:fallback_count], True

    return rounds, False
