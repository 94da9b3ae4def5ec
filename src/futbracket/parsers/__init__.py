"""
Parsers for fetch-layer data.

This module contains parsers for:
- Fixture payloads (nested feed JSON into typed Fixture records)
"""

from futbracket.parsers.fixtures import (
    FixtureParseError,
    FixtureParseResult,
    parse_fixture,
    parse_fixtures,
)

__all__ = [
    "FixtureParseError",
    "FixtureParseResult",
    "parse_fixture",
    "parse_fixtures",
]
