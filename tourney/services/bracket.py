"""Bracket persistence and match progression service."""

import random
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tourney.bracket.tree import advance_winner, build_bracket, index_slots
from tourney.logging_config import get_logger
from tourney.middleware.prometheus import record_bracket_generated, record_match_completed
from tourney.models.event import BracketType, Event, EventStatus
from tourney.models.match import Match, MatchStatus
from tourney.services.event import EventService
from tourney.services.ticket import TicketService
from tourney.utils.errors import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from tourney.utils.permissions import Identity, can_manage_event

logger = get_logger(__name__)


class BracketService:
    """Service for bracket generation and match results."""

    def __init__(self, db: AsyncSession, rng: random.Random | None = None):
        self.db = db
        self.rng = rng
        self.events = EventService(db)
        self.tickets = TicketService(db)

    async def generate_bracket(
        self,
        event_id: str,
        participant_ids: list[str],
    ) -> list[Match]:
        """Replace the event's matches with a freshly shuffled bracket.

        Args:
            event_id: Event ID
            participant_ids: Entrants, at least two

        Returns:
            All matches of the new bracket, ordered by match number

        Raises:
            ValidationError: If fewer than two or repeated participants
            StorageError: If the matches could not be written
        """
        now = datetime.now(timezone.utc)
        plan = build_bracket(participant_ids, rng=self.rng, now=now)

        try:
            await self.db.execute(delete(Match).where(Match.event_id == event_id))

            matches = [
                Match(
                    event_id=event_id,
                    round=planned.round,
                    match_number=planned.match_number,
                    bracket_position=planned.bracket_position,
                    player1_id=planned.player1_id,
                    player2_id=planned.player2_id,
                    winner_id=planned.winner_id,
                    is_bye=planned.is_bye,
                    status=planned.status,
                    completed_at=planned.completed_at,
                )
                for planned in plan.matches
            ]
            self.db.add_all(matches)
            await self.db.flush()
        except SQLAlchemyError as e:
            logger.error("bracket_write_failed", event_id=event_id, error=str(e))
            raise StorageError("Failed to save bracket", {"event_id": event_id}) from e

        record_bracket_generated(len(participant_ids))
        logger.info(
            "bracket_generated",
            event_id=event_id,
            participants=len(participant_ids),
            total_rounds=plan.total_rounds,
            matches=len(matches),
        )
        return matches

    async def generate_event_bracket(
        self,
        actor: Identity,
        event_id: str,
        participant_ids: list[str] | None = None,
    ) -> list[Match]:
        """Generate the bracket for an event whose registration has closed.

        Uses the event roster when ``participant_ids`` is None.

        Raises:
            NotFoundError: If the event does not exist
            AuthorizationError: If the actor does not manage the event
            InvalidStateError: If the event is not live or not single elimination
            ValidationError: If fewer than two participants
        """
        event = await self._get_managed_event(actor, event_id)

        if event.status != EventStatus.LIVE.value:
            raise InvalidStateError(
                "Registration must be closed (event live) before generating a bracket",
                {"event_id": event_id, "status": event.status},
            )
        if event.bracket_type != BracketType.SINGLE_ELIMINATION.value:
            raise InvalidStateError(
                "Only single elimination brackets can be generated",
                {"event_id": event_id, "bracket_type": event.bracket_type},
            )

        if participant_ids is None:
            participant_ids = await self.tickets.roster(event_id)

        return await self.generate_bracket(event_id, participant_ids)

    async def get_matches(self, event_id: str) -> list[Match]:
        result = await self.db.execute(
            select(Match)
            .where(Match.event_id == event_id)
            .order_by(Match.round.asc(), Match.match_number.asc())
        )
        return list(result.scalars().all())

    async def get_bracket(self, event_id: str) -> dict[str, Any]:
        """Event bracket grouped for display.

        Raises:
            NotFoundError: If the event does not exist
        """
        event = await self.events.get_event(event_id)
        matches = await self.get_matches(event_id)
        return {
            "event_id": event.id,
            "bracket_type": event.bracket_type,
            "rounds": max((m.round for m in matches), default=0),
            "matches": matches,
        }

    async def start_match(self, actor: Identity, event_id: str, match_id: str) -> Match:
        """Move a match from pending to in progress."""
        await self._get_managed_event(actor, event_id)
        match = await self._get_match(event_id, match_id)

        if match.status != MatchStatus.PENDING.value:
            raise InvalidStateError(
                "Only pending matches can be started",
                {"match_id": match_id, "status": match.status},
            )
        if not (match.player1_id and match.player2_id):
            raise InvalidStateError(
                "Match is waiting for participants",
                {"match_id": match_id},
            )

        match.status = MatchStatus.IN_PROGRESS.value
        await self.db.flush()
        logger.info("match_started", event_id=event_id, match_id=match_id)
        return match

    async def report_result(
        self,
        actor: Identity,
        event_id: str,
        match_id: str,
        winner_id: str | None = None,
        player1_score: int | None = None,
        player2_score: int | None = None,
    ) -> list[Match]:
        """Record a match result and advance the winner.

        Args:
            actor: Caller identity; must manage the event
            event_id: Event ID
            match_id: Match ID
            winner_id: Winner, one of the two players
            player1_score: Optional score
            player2_score: Optional score

        Returns:
            The completed match followed by every match the winner moved into

        Raises:
            NotFoundError: If the event or match does not exist
            AuthorizationError: If the actor does not manage the event
            InvalidStateError: If the match is completed or not yet paired
            ValidationError: If the winner cannot be determined
        """
        await self._get_managed_event(actor, event_id)
        matches = await self.get_matches(event_id)
        match = next((m for m in matches if m.id == match_id), None)
        if match is None:
            raise NotFoundError("Match", match_id)

        if match.status == MatchStatus.COMPLETED.value:
            raise InvalidStateError(
                "Match is already completed",
                {"match_id": match_id},
            )
        if not (match.player1_id and match.player2_id):
            raise InvalidStateError(
                "Match is waiting for participants",
                {"match_id": match_id},
            )

        winner = _resolve_winner(match, winner_id, player1_score, player2_score)
        now = datetime.now(timezone.utc)

        match.player1_score = player1_score
        match.player2_score = player2_score
        match.winner_id = winner
        match.status = MatchStatus.COMPLETED.value
        match.completed_at = now

        changed = advance_winner(index_slots(matches), match, now)
        await self.db.flush()

        record_match_completed()
        for advanced in changed:
            if advanced.status == MatchStatus.COMPLETED.value:
                record_match_completed(bye=True)

        logger.info(
            "match_completed",
            event_id=event_id,
            match_id=match_id,
            winner_id=winner,
            advanced_to=[m.id for m in changed],
        )
        return [match, *changed]

    async def _get_managed_event(self, actor: Identity, event_id: str) -> Event:
        event = await self.events.get_event(event_id)
        if not can_manage_event(actor, event.organizer_id):
            raise AuthorizationError(
                "Not authorized to manage this event",
                {"event_id": event_id},
            )
        return event

    async def _get_match(self, event_id: str, match_id: str) -> Match:
        result = await self.db.execute(
            select(Match).where(Match.id == match_id, Match.event_id == event_id)
        )
        match = result.scalar_one_or_none()
        if match is None:
            raise NotFoundError("Match", match_id)
        return match


def _resolve_winner(
    match: Match,
    winner_id: str | None,
    player1_score: int | None,
    player2_score: int | None,
) -> str:
    """Pick the winner from an explicit id or from the scores."""
    players = (match.player1_id, match.player2_id)
    has_scores = player1_score is not None and player2_score is not None

    by_score = None
    if has_scores and player1_score != player2_score:
        by_score = players[0] if player1_score > player2_score else players[1]

    if winner_id is not None:
        if winner_id not in players:
            raise ValidationError(
                "Winner must be one of the match participants",
                {"winner_id": winner_id},
            )
        if by_score is not None and by_score != winner_id:
            raise ValidationError(
                "Winner does not match the reported scores",
                {"winner_id": winner_id},
            )
        return winner_id

    if not has_scores:
        raise ValidationError(
            "winner_id or both scores are required",
            {"winner_id": "required without scores"},
        )
    if by_score is None:
        raise ValidationError(
            "Scores are tied; a winner is required",
            {"player1_score": player1_score, "player2_score": player2_score},
        )
    return by_score
