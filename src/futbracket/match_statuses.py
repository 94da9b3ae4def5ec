"""Shared fixture-status definitions and helpers.

Status values are the short codes reported by the fixture feed
(e.g. "FT", "1H", "NS"). This module is the single source of truth for
which codes count as finished; every other code leaves a tie in progress.
"""

from __future__ import annotations

from typing import Optional

# Canonical status groups.
FIXTURE_STATUS_GROUPS: dict[str, tuple[str, ...]] = {
    # Full time, including extra time and penalty shoot-outs.
    "finished": ("FT", "AET", "PEN"),
}


def get_status_group(group_name: str) -> tuple[str, ...]:
    """Return a named status group, raising KeyError for unknown names."""
    return FIXTURE_STATUS_GROUPS[group_name]


def normalize_status(raw_status: Optional[str]) -> Optional[str]:
    """Upper-case and strip a raw status code, mapping blanks to None."""
    if raw_status is None:
        return None
    status = raw_status.strip().upper()
    return status or None


def is_finished(status: Optional[str]) -> bool:
    """True when the status code means the fixture has a final score."""
    return normalize_status(status) in get_status_group("finished")
