"""Bracket construction.

Exports:
- build_bracket: Shuffle and lay out a single-elimination bracket
- advance_winner: Move a winner into the next round
"""

from tourney.bracket.tree import (
    BracketPlan,
    PlannedMatch,
    advance_winner,
    build_bracket,
    complete_bye,
    index_slots,
    matches_in_round,
    parent_position,
    total_rounds,
)

__all__ = [
    "BracketPlan",
    "PlannedMatch",
    "advance_winner",
    "build_bracket",
    "complete_bye",
    "index_slots",
    "matches_in_round",
    "parent_position",
    "total_rounds",
]
