"""Event registry service."""

from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourney.logging_config import get_logger
from tourney.models.event import Event, EventStatus
from tourney.models.match import Match
from tourney.models.ticket import Ticket
from tourney.schemas.requests import (
    CreateEventRequest,
    EventFields,
    UpdateEventRequest,
)
from tourney.services.registration import RegistrationService
from tourney.utils.errors import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from tourney.utils.permissions import (
    Identity,
    Permission,
    can_manage_event,
    can_view_draft,
    require_permission,
)

logger = get_logger(__name__)

# Columns an organizer may edit; status is handled separately
EDITABLE_FIELDS = tuple(EventFields.model_fields)


def _validate(model: type, data: Any):
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_errors(e.errors()) from e


class EventService:
    """Service for event registry operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_public(self) -> list[Event]:
        """All non-draft events, newest first."""
        result = await self.db.execute(
            select(Event)
            .where(Event.status != EventStatus.DRAFT.value)
            .order_by(Event.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_by_organizer(self, organizer_id: str) -> list[Event]:
        result = await self.db.execute(
            select(Event)
            .where(Event.organizer_id == organizer_id)
            .order_by(Event.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_event(self, event_id: str) -> Event:
        """Get event by ID.

        Raises:
            NotFoundError: If the event does not exist
        """
        event = await self.db.get(Event, event_id)
        if event is None:
            raise NotFoundError("Event", event_id)
        return event

    async def get_visible_event(self, event_id: str, viewer: Identity | None) -> Event:
        """Like ``get_event``, but a draft is reported missing to outsiders."""
        event = await self.get_event(event_id)
        if event.status == EventStatus.DRAFT.value and not can_view_draft(
            viewer, event.organizer_id
        ):
            raise NotFoundError("Event", event_id)
        return event

    async def create_event(
        self,
        actor: Identity,
        fields: CreateEventRequest | dict[str, Any],
    ) -> Event:
        """Create a published event owned by the actor.

        Args:
            actor: Caller identity; needs CREATE_EVENT
            fields: Event fields, validated if passed as a dict

        Returns:
            Created Event object

        Raises:
            AuthorizationError: If the actor may not create events
            ValidationError: If a field is invalid
        """
        require_permission(actor, Permission.CREATE_EVENT)
        data = _validate(CreateEventRequest, fields)

        event = Event(
            organizer_id=actor.user_id,
            title=data.title,
            description=data.description,
            game=data.game,
            start_time=data.start_time,
            end_time=data.end_time,
            bracket_type=data.bracket_type.value,
            organizer_checkout_url=data.organizer_checkout_url,
            max_teams=data.max_teams,
            current_teams=0,
            status=EventStatus.PUBLISHED.value,
        )
        self.db.add(event)
        await self.db.flush()

        logger.info(
            "event_created",
            event_id=event.id,
            organizer_id=actor.user_id,
            max_teams=event.max_teams,
        )
        return event

    async def update_event(
        self,
        actor: Identity,
        event_id: str,
        patch: UpdateEventRequest | dict[str, Any],
    ) -> Event:
        """Apply a partial update.

        The merged result must satisfy the same constraints as creation.
        ``start_time`` is only required to be in the future when it is part
        of the patch, so events already underway can still be edited.

        Raises:
            NotFoundError: If the event does not exist
            AuthorizationError: If the actor does not manage the event
            ValidationError: If the patch or the merged result is invalid
        """
        event = await self.get_event(event_id)
        self._authorize(actor, event)

        changes = _validate(UpdateEventRequest, patch).changes()
        status = changes.pop("status", None)

        merged = {name: getattr(event, name) for name in EDITABLE_FIELDS}
        merged.update(changes)
        validated = _validate(EventFields, merged)

        if validated.max_teams is not None and validated.max_teams < event.current_teams:
            raise ValidationError(
                "max_teams cannot be lower than the number of registered teams",
                {"max_teams": f"must be at least {event.current_teams}"},
            )

        for name in changes:
            value = getattr(validated, name)
            setattr(event, name, getattr(value, "value", value))
        if status is not None:
            event.status = EventStatus(status).value

        await self.db.flush()

        logger.info(
            "event_updated",
            event_id=event.id,
            actor_id=actor.user_id,
            fields=sorted(changes) + (["status"] if status is not None else []),
        )
        return event

    async def delete_event(self, actor: Identity, event_id: str) -> None:
        """Delete an event together with its tickets and matches.

        Raises:
            NotFoundError: If the event does not exist
            AuthorizationError: If the actor does not manage the event
        """
        event = await self.get_event(event_id)
        self._authorize(actor, event)

        await self.db.execute(delete(Match).where(Match.event_id == event_id))
        await self.db.execute(delete(Ticket).where(Ticket.event_id == event_id))
        await self.db.delete(event)
        await self.db.flush()

        logger.info("event_deleted", event_id=event_id, actor_id=actor.user_id)

    async def register_participant(self, event_id: str, participant_id: str) -> Ticket:
        """See ``RegistrationService.register_participant``."""
        return await RegistrationService(self.db).register_participant(
            event_id, participant_id
        )

    def _authorize(self, actor: Identity, event: Event) -> None:
        if not can_manage_event(actor, event.organizer_id):
            raise AuthorizationError(
                "Not authorized to manage this event",
                {"event_id": event.id},
            )
