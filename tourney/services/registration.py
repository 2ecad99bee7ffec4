"""Registration protocol: capacity gate plus ticket issue, in one transaction."""

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tourney.config import get_settings
from tourney.logging_config import get_logger
from tourney.middleware.prometheus import record_registration
from tourney.models.event import Event, EventStatus
from tourney.models.ticket import Ticket
from tourney.services.ticket import TicketService
from tourney.utils.errors import (
    AlreadyRegisteredError,
    EventFullError,
    InvalidStateError,
    NotFoundError,
)

settings = get_settings()
logger = get_logger(__name__)


class RegistrationService:
    """Registers participants for events.

    The seat is claimed with a single conditional UPDATE whose affected-row
    count is the capacity gate. That statement also takes the event's row
    lock, so the duplicate check and ticket insert that follow are
    serialised per event until the caller's transaction ends. The partial
    unique index on tickets backs up the duplicate check.
    """

    def __init__(self, db: AsyncSession, tickets: TicketService | None = None):
        self.db = db
        self.tickets = tickets or TicketService(db)

    async def register_participant(self, event_id: str, participant_id: str) -> Ticket:
        """Register a participant and issue a pending ticket.

        Args:
            event_id: Event to join
            participant_id: Joining participant

        Returns:
            The new pending Ticket

        Raises:
            NotFoundError: If the event does not exist
            InvalidStateError: If the event is not open for registration
            EventFullError: If no seat is left
            AlreadyRegisteredError: If the participant holds a live ticket
        """
        claimed = await self._claim_seat(event_id)
        if not claimed:
            await self._raise_unavailable(event_id)

        existing = await self.tickets.find_by_event_and_participant(event_id, participant_id)
        if existing is not None:
            record_registration("already_registered")
            raise AlreadyRegisteredError(event_id, participant_id)

        event = await self._load_event(event_id)
        amount = settings.default_ticket_amount if event.requires_payment else None

        try:
            ticket = await self.tickets.create_ticket(
                event_id=event_id,
                participant_id=participant_id,
                amount=amount,
            )
        except IntegrityError as e:
            logger.warning(
                "registration_unique_violation",
                event_id=event_id,
                participant_id=participant_id,
                error=str(e.orig),
            )
            record_registration("already_registered")
            raise AlreadyRegisteredError(event_id, participant_id) from e

        record_registration("registered")
        logger.info(
            "participant_registered",
            event_id=event_id,
            participant_id=participant_id,
            ticket_id=ticket.id,
            current_teams=event.current_teams,
            max_teams=event.max_teams,
        )
        return ticket

    async def _claim_seat(self, event_id: str) -> bool:
        result = await self.db.execute(
            update(Event)
            .where(
                Event.id == event_id,
                Event.status == EventStatus.PUBLISHED.value,
                or_(
                    Event.max_teams.is_(None),
                    Event.current_teams < Event.max_teams,
                ),
            )
            .values(current_teams=Event.current_teams + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def _load_event(self, event_id: str) -> Event | None:
        # The conditional UPDATE bypasses the identity map
        result = await self.db.execute(
            select(Event)
            .where(Event.id == event_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _raise_unavailable(self, event_id: str) -> None:
        """Explain why no seat could be claimed."""
        event = await self._load_event(event_id)
        if event is None:
            record_registration("not_found")
            raise NotFoundError("Event", event_id)

        if event.status != EventStatus.PUBLISHED.value:
            record_registration("invalid_state")
            raise InvalidStateError(
                "Event is not accepting registrations",
                {"event_id": event_id, "status": event.status},
            )

        record_registration("full")
        raise EventFullError(event_id, event.max_teams)
