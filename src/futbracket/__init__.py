"""
futbracket - Knockout bracket engine for football competitions

Turns a flat snapshot of cup fixtures into an ordered, positioned
elimination bracket: rounds classified and ordered, two-legged ties merged
into aggregate results, and every tie placed in a fixed 4-column grid.

Main components:
- rounds: Round label classification and bracket round selection
- aggregation: Two-legged tie aggregation and deduplication
- positioning: Half splitting, feeder reordering and grid slots
- assembler: Composes the above into a Bracket
- parsers: Adapters from fetch-layer payloads to typed fixtures
"""

from futbracket.assembler import assemble
from futbracket.models import Bracket, Fixture, Team, Tie

__version__ = "1.0.0"

__all__ = [
    "assemble",
    "Bracket",
    "Fixture",
    "Team",
    "Tie",
]
