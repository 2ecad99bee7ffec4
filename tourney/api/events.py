"""Event API endpoints: registry, registration and bracket."""

from fastapi import APIRouter, status

from tourney.api.deps import CurrentIdentity, DbSession, OptionalIdentity
from tourney.schemas import (
    ERROR_RESPONSES,
    BracketGeneratedResponse,
    BracketResponse,
    CreateEventRequest,
    EventListResponse,
    EventMutationResponse,
    EventResponse,
    GenerateBracketRequest,
    JoinEventResponse,
    MatchListResponse,
    MatchResponse,
    MatchResultRequest,
    ParticipantListResponse,
    ParticipantResponse,
    SuccessResponse,
    TicketResponse,
    UpdateEventRequest,
)
from tourney.services.bracket import BracketService
from tourney.services.event import EventService
from tourney.services.ticket import TicketService
from tourney.utils.permissions import Permission, require_permission


router = APIRouter(prefix="/events", tags=["Events"])


# =============================================================================
# Registry
# =============================================================================


@router.get("", response_model=EventListResponse)
async def list_events(db: DbSession):
    """List all public (non-draft) events, newest first."""
    events = await EventService(db).list_public()
    return EventListResponse(
        events=[EventResponse.model_validate(e) for e in events],
    )


@router.get(
    "/{event_id}",
    response_model=EventResponse,
    responses={404: ERROR_RESPONSES[404]},
)
async def get_event(event_id: str, identity: OptionalIdentity, db: DbSession):
    """Get an event. Drafts are only visible to callers who manage them."""
    event = await EventService(db).get_visible_event(event_id, identity)
    return EventResponse.model_validate(event)


@router.post(
    "",
    response_model=EventMutationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={code: ERROR_RESPONSES[code] for code in (400, 401, 403)},
)
async def create_event(
    request: CreateEventRequest,
    identity: CurrentIdentity,
    db: DbSession,
):
    """Create an event. Requires the organizer or admin role.

    The event is published immediately with no registered teams.
    """
    event = await EventService(db).create_event(identity, request)
    return EventMutationResponse(
        message="Event created successfully",
        event=EventResponse.model_validate(event),
    )


@router.patch(
    "/{event_id}",
    response_model=EventMutationResponse,
    responses={code: ERROR_RESPONSES[code] for code in (400, 401, 403, 404)},
)
async def update_event(
    event_id: str,
    request: UpdateEventRequest,
    identity: CurrentIdentity,
    db: DbSession,
):
    """Partially update an event. Owner or admin only."""
    event = await EventService(db).update_event(identity, event_id, request)
    return EventMutationResponse(
        message="Event updated successfully",
        event=EventResponse.model_validate(event),
    )


@router.delete(
    "/{event_id}",
    response_model=SuccessResponse,
    responses={code: ERROR_RESPONSES[code] for code in (401, 403, 404)},
)
async def delete_event(event_id: str, identity: CurrentIdentity, db: DbSession):
    """Delete an event with its tickets and matches. Owner or admin only."""
    await EventService(db).delete_event(identity, event_id)
    return SuccessResponse(message="Event deleted successfully")


# =============================================================================
# Registration
# =============================================================================


@router.post(
    "/{event_id}/join",
    response_model=JoinEventResponse,
    status_code=status.HTTP_201_CREATED,
    responses={code: ERROR_RESPONSES[code] for code in (400, 401, 403, 404, 409)},
)
async def join_event(event_id: str, identity: CurrentIdentity, db: DbSession):
    """Register the caller for an event.

    Issues a pending ticket. Paid events also return the organizer's
    checkout URL; the ticket turns paid when the provider's webhook
    arrives.
    """
    require_permission(identity, Permission.JOIN_EVENT)

    service = EventService(db)
    ticket = await service.register_participant(event_id, identity.user_id)
    event = await service.get_event(event_id)

    return JoinEventResponse(
        ticket=TicketResponse.model_validate(ticket),
        checkout_url=event.organizer_checkout_url,
    )


@router.get(
    "/{event_id}/participants",
    response_model=ParticipantListResponse,
    responses={404: ERROR_RESPONSES[404]},
)
async def list_participants(event_id: str, identity: OptionalIdentity, db: DbSession):
    await EventService(db).get_visible_event(event_id, identity)
    tickets = await TicketService(db).list_by_event(event_id)
    return ParticipantListResponse(
        event_id=event_id,
        participants=[ParticipantResponse.model_validate(t) for t in tickets],
    )


# =============================================================================
# Bracket
# =============================================================================


@router.post(
    "/{event_id}/matches",
    response_model=BracketGeneratedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={code: ERROR_RESPONSES[code] for code in (400, 401, 403, 404)},
)
async def generate_bracket(
    event_id: str,
    identity: CurrentIdentity,
    db: DbSession,
    request: GenerateBracketRequest | None = None,
):
    """Generate (or regenerate) the event's bracket.

    The event must be live. Without a body the event roster is used.
    Regenerating replaces every existing match.
    """
    participant_ids = request.participant_ids if request else None
    matches = await BracketService(db).generate_event_bracket(
        identity, event_id, participant_ids
    )
    return BracketGeneratedResponse(
        event_id=event_id,
        total_rounds=max(m.round for m in matches),
        matches=[MatchResponse.model_validate(m) for m in matches],
    )


@router.get(
    "/{event_id}/matches",
    response_model=MatchListResponse,
    responses={code: ERROR_RESPONSES[code] for code in (401, 404)},
)
async def list_matches(event_id: str, identity: CurrentIdentity, db: DbSession):
    await EventService(db).get_visible_event(event_id, identity)
    matches = await BracketService(db).get_matches(event_id)
    return MatchListResponse(
        event_id=event_id,
        matches=[MatchResponse.model_validate(m) for m in matches],
    )


@router.get(
    "/{event_id}/bracket",
    response_model=BracketResponse,
    responses={404: ERROR_RESPONSES[404]},
)
async def get_bracket(event_id: str, identity: OptionalIdentity, db: DbSession):
    await EventService(db).get_visible_event(event_id, identity)
    bracket = await BracketService(db).get_bracket(event_id)
    return BracketResponse(
        event_id=bracket["event_id"],
        bracket_type=bracket["bracket_type"],
        rounds=bracket["rounds"],
        matches=[MatchResponse.model_validate(m) for m in bracket["matches"]],
    )


@router.post(
    "/{event_id}/matches/{match_id}/start",
    response_model=MatchResponse,
    responses={code: ERROR_RESPONSES[code] for code in (400, 401, 403, 404)},
)
async def start_match(
    event_id: str,
    match_id: str,
    identity: CurrentIdentity,
    db: DbSession,
):
    match = await BracketService(db).start_match(identity, event_id, match_id)
    return MatchResponse.model_validate(match)


@router.post(
    "/{event_id}/matches/{match_id}/result",
    response_model=MatchListResponse,
    responses={code: ERROR_RESPONSES[code] for code in (400, 401, 403, 404)},
)
async def report_result(
    event_id: str,
    match_id: str,
    request: MatchResultRequest,
    identity: CurrentIdentity,
    db: DbSession,
):
    """Record a result; returns the match and every match the winner entered."""
    changed = await BracketService(db).report_result(
        identity,
        event_id,
        match_id,
        winner_id=request.winner_id,
        player1_score=request.player1_score,
        player2_score=request.player2_score,
    )
    return MatchListResponse(
        event_id=event_id,
        matches=[MatchResponse.model_validate(m) for m in changed],
    )
