"""Single-elimination bracket construction and advancement.

Pure functions over plain objects; persistence lives in
``tourney.services.bracket``.

Layout:
    Round ``r`` has ``ceil(n / 2**r)`` matches, numbered by
    ``bracket_position`` from 1. The match at position ``k`` feeds position
    ``ceil(k / 2)`` of the next round, into slot 1 when ``k`` is odd and
    slot 2 when it is even. When a round has an odd number of entrants the
    last position gets a bye: round-1 byes are completed on creation, and a
    later-round match with only one feeder completes as soon as its single
    entrant arrives.
"""

from __future__ import annotations

import math
import random
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from tourney.utils.errors import ValidationError

MIN_PARTICIPANTS = 2

PENDING = "pending"
COMPLETED = "completed"


class BracketSlot(Protocol):
    """Attributes the advancement logic reads and writes.

    Both ``PlannedMatch`` and the ``Match`` model satisfy it.
    """

    round: int
    bracket_position: int
    player1_id: str | None
    player2_id: str | None
    winner_id: str | None
    is_bye: bool
    status: str
    completed_at: datetime | None


@dataclass
class PlannedMatch:
    """A match in a freshly built bracket, before persistence."""

    round: int
    bracket_position: int
    match_number: int
    player1_id: str | None = None
    player2_id: str | None = None
    winner_id: str | None = None
    is_bye: bool = False
    status: str = PENDING
    completed_at: datetime | None = None


@dataclass
class BracketPlan:
    total_rounds: int
    matches: list[PlannedMatch] = field(default_factory=list)

    def round(self, number: int) -> list[PlannedMatch]:
        return [m for m in self.matches if m.round == number]


def total_rounds(participant_count: int) -> int:
    """``ceil(log2(n))`` for n >= 2."""
    return (participant_count - 1).bit_length()


def matches_in_round(participant_count: int, round_number: int) -> int:
    return math.ceil(participant_count / 2**round_number)


def parent_position(position: int) -> tuple[int, int]:
    """Return ``(parent_position, slot)`` for a match position."""
    return (position + 1) // 2, 1 if position % 2 else 2


def validate_participants(participant_ids: Sequence[str]) -> None:
    if len(participant_ids) < MIN_PARTICIPANTS:
        raise ValidationError(
            "At least 2 participants are required to generate a bracket",
            {"participants": len(participant_ids)},
        )
    counts = Counter(participant_ids)
    duplicates = sorted(p for p, c in counts.items() if c > 1)
    if duplicates:
        raise ValidationError(
            "Participants must be unique",
            {"duplicates": duplicates},
        )


def build_bracket(
    participant_ids: Sequence[str],
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> BracketPlan:
    """Shuffle participants and lay out every round of the bracket.

    Args:
        participant_ids: Entrants, at least two, no repeats
        rng: Random source for the shuffle
        now: Completion time stamped on byes

    Returns:
        BracketPlan with round-1 pairings filled in and byes advanced

    Raises:
        ValidationError: If there are fewer than two or repeated entrants
    """
    validate_participants(participant_ids)

    seeds = list(participant_ids)
    (rng or random.Random()).shuffle(seeds)

    n = len(seeds)
    plan = BracketPlan(total_rounds=total_rounds(n))

    match_number = 0
    for round_number in range(1, plan.total_rounds + 1):
        count = matches_in_round(n, round_number)
        previous = matches_in_round(n, round_number - 1)
        for position in range(1, count + 1):
            match_number += 1
            match = PlannedMatch(
                round=round_number,
                bracket_position=position,
                match_number=match_number,
            )
            if round_number == 1:
                match.player1_id = seeds[2 * position - 2]
                if 2 * position - 1 < n:
                    match.player2_id = seeds[2 * position - 1]
                else:
                    match.is_bye = True
            elif 2 * position > previous:
                # Only one feeder can ever reach this match
                match.is_bye = True
            plan.matches.append(match)

    slots = index_slots(plan.matches)
    for match in plan.round(1):
        if match.is_bye:
            complete_bye(slots, match, now)

    return plan


def index_slots(matches: Iterable[BracketSlot]) -> dict[tuple[int, int], BracketSlot]:
    return {(m.round, m.bracket_position): m for m in matches}


def complete_bye(
    slots: Mapping[tuple[int, int], BracketSlot],
    match: BracketSlot,
    now: datetime | None = None,
) -> list[BracketSlot]:
    """Complete a bye with its lone entrant and advance them."""
    entrant = match.player1_id or match.player2_id
    match.winner_id = entrant
    match.status = COMPLETED
    match.completed_at = now
    return [match] + advance_winner(slots, match, now)


def advance_winner(
    slots: Mapping[tuple[int, int], BracketSlot],
    match: BracketSlot,
    now: datetime | None = None,
) -> list[BracketSlot]:
    """Place ``match.winner_id`` into the next round.

    Cascades through byes. Returns every match that changed, excluding
    ``match`` itself. Winning the final changes nothing.
    """
    if match.winner_id is None:
        raise ValueError("match has no winner to advance")

    position, slot = parent_position(match.bracket_position)
    parent = slots.get((match.round + 1, position))
    if parent is None:
        return []

    if slot == 1:
        parent.player1_id = match.winner_id
    else:
        parent.player2_id = match.winner_id

    if parent.is_bye:
        return complete_bye(slots, parent, now)
    return [parent]
