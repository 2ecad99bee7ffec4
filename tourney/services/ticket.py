"""Ticket ledger service."""

import secrets
import time
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourney.logging_config import get_logger
from tourney.models.event import Event
from tourney.models.ticket import Ticket, TicketStatus

logger = get_logger(__name__)


def generate_placeholder_ref(participant_id: str) -> str:
    """Payment reference used until the provider assigns a real one.

    Format: ``pending_<epoch-ms>_<participant-id>_<8 hex>``.
    """
    return f"pending_{int(time.time() * 1000)}_{participant_id}_{secrets.token_hex(4)}"


@dataclass
class ParticipantTicket:
    """A ticket together with the event it admits to."""

    ticket: Ticket
    event_title: str
    event_game: str


class TicketService:
    """Service for ticket ledger operations.

    Never commits; callers own the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_event_and_participant(
        self,
        event_id: str,
        participant_id: str,
    ) -> Ticket | None:
        """Get the participant's non-cancelled ticket for an event."""
        result = await self.db.execute(
            select(Ticket).where(
                Ticket.event_id == event_id,
                Ticket.participant_id == participant_id,
                Ticket.status != TicketStatus.CANCELLED.value,
            )
        )
        return result.scalars().first()

    async def create_ticket(
        self,
        event_id: str,
        participant_id: str,
        amount: Decimal | None = None,
        external_payment_ref: str | None = None,
    ) -> Ticket:
        """Insert a pending ticket.

        Args:
            event_id: Event the ticket admits to
            participant_id: Ticket holder
            amount: Price, None for free events
            external_payment_ref: Provider reference; a placeholder is
                generated when omitted

        Returns:
            Created Ticket object

        Raises:
            IntegrityError: If the participant already holds a live ticket
                or the reference is taken
        """
        ticket = Ticket(
            event_id=event_id,
            participant_id=participant_id,
            status=TicketStatus.PENDING.value,
            amount=amount,
            external_payment_ref=external_payment_ref
            or generate_placeholder_ref(participant_id),
        )
        self.db.add(ticket)
        await self.db.flush()
        return ticket

    async def update_status(
        self,
        ticket_id: str,
        status: TicketStatus | str,
        paid_at: datetime | None = None,
    ) -> Ticket | None:
        """Overwrite a ticket's status and paid_at.

        Returns:
            Updated Ticket, or None when no ticket has that id
        """
        ticket = await self.db.get(Ticket, ticket_id)
        if ticket is None:
            return None

        ticket.status = TicketStatus(status).value
        ticket.paid_at = paid_at
        await self.db.flush()
        return ticket

    async def find_by_payment_reference(self, external_payment_ref: str) -> Ticket | None:
        result = await self.db.execute(
            select(Ticket).where(Ticket.external_payment_ref == external_payment_ref)
        )
        return result.scalar_one_or_none()

    async def list_by_participant(self, participant_id: str) -> list[ParticipantTicket]:
        """Participant's tickets with event title and game, newest first."""
        result = await self.db.execute(
            select(Ticket, Event.title, Event.game)
            .join(Event, Event.id == Ticket.event_id)
            .where(Ticket.participant_id == participant_id)
            .order_by(Ticket.purchased_at.desc())
        )
        return [
            ParticipantTicket(ticket=ticket, event_title=title, event_game=game)
            for ticket, title, game in result.all()
        ]

    async def list_by_event(self, event_id: str) -> list[Ticket]:
        result = await self.db.execute(
            select(Ticket)
            .where(Ticket.event_id == event_id)
            .order_by(Ticket.purchased_at.desc())
        )
        return list(result.scalars().all())

    async def recent_tickets(self, event_id: str, limit: int = 5) -> list[Ticket]:
        result = await self.db.execute(
            select(Ticket)
            .where(Ticket.event_id == event_id)
            .order_by(Ticket.purchased_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_paid(self, event_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Ticket)
            .where(
                Ticket.event_id == event_id,
                Ticket.status == TicketStatus.PAID.value,
            )
        )
        return result.scalar_one()

    async def roster(self, event_id: str) -> list[str]:
        """Participants eligible for the bracket, in registration order.

        Paid tickets count, and so do pending tickets without an amount
        since free events have no payment step.
        """
        result = await self.db.execute(
            select(Ticket.participant_id)
            .where(
                Ticket.event_id == event_id,
                or_(
                    Ticket.status == TicketStatus.PAID.value,
                    and_(
                        Ticket.status == TicketStatus.PENDING.value,
                        Ticket.amount.is_(None),
                    ),
                ),
            )
            .order_by(Ticket.purchased_at.asc())
        )
        return list(result.scalars().all())
