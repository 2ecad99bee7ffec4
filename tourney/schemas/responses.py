"""API response schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from tourney.schemas.common import BaseSchema


# =============================================================================
# Event Responses
# =============================================================================


class EventResponse(BaseSchema):
    """Event detail."""

    id: str
    organizer_id: str
    title: str
    description: str | None = None
    game: str
    start_time: datetime
    end_time: datetime
    bracket_type: str
    organizer_checkout_url: str | None = None
    max_teams: int | None = None
    current_teams: int
    status: str
    created_at: datetime
    updated_at: datetime


class EventListResponse(BaseModel):
    events: list[EventResponse]


class EventMutationResponse(BaseModel):
    message: str
    event: EventResponse


# =============================================================================
# Ticket Responses
# =============================================================================


class TicketResponse(BaseSchema):
    """Ticket as returned to its holder."""

    id: str
    event_id: str
    participant_id: str
    status: str
    external_payment_ref: str | None = None
    amount: Decimal | None = None
    purchased_at: datetime
    paid_at: datetime | None = None


class JoinEventResponse(BaseModel):
    message: str = "Successfully registered for event"
    ticket: TicketResponse
    checkout_url: str | None = Field(
        default=None,
        description="Where to pay, when the event is paid",
    )


class UserTicketResponse(TicketResponse):
    """Ticket with the event it belongs to."""

    event_title: str
    event_game: str


class UserTicketListResponse(BaseModel):
    tickets: list[UserTicketResponse]


class ParticipantResponse(BaseSchema):
    id: str
    participant_id: str
    status: str
    purchased_at: datetime


class ParticipantListResponse(BaseModel):
    event_id: str
    participants: list[ParticipantResponse]


# =============================================================================
# Match Responses
# =============================================================================


class MatchResponse(BaseSchema):
    id: str
    event_id: str
    round: int
    match_number: int
    bracket_position: int
    player1_id: str | None = None
    player2_id: str | None = None
    player1_score: int | None = None
    player2_score: int | None = None
    winner_id: str | None = None
    is_bye: bool = False
    status: str
    scheduled_time: datetime | None = None
    completed_at: datetime | None = None


class MatchListResponse(BaseModel):
    event_id: str
    matches: list[MatchResponse]


class BracketGeneratedResponse(BaseModel):
    message: str = "Bracket generated successfully"
    event_id: str
    total_rounds: int
    matches: list[MatchResponse]


class BracketResponse(BaseModel):
    event_id: str
    bracket_type: str
    rounds: int
    matches: list[MatchResponse]


# =============================================================================
# Webhook Responses
# =============================================================================


class PaymentWebhookResponse(BaseModel):
    success: bool = True
    message: str
    ticket_id: str
    status: str
    processed_at: datetime | None = None


# =============================================================================
# Dashboard Responses
# =============================================================================


class OrganizerInfo(BaseModel):
    id: str
    role: str


class DashboardEvent(EventResponse):
    participant_count: int
    recent_tickets: list[TicketResponse]


class DashboardSummary(BaseModel):
    total_events: int
    total_participants: int
    active_events: int
    completed_events: int


class DashboardResponse(BaseModel):
    organizer: OrganizerInfo
    events: list[DashboardEvent]
    summary: DashboardSummary


# =============================================================================
# Health Responses
# =============================================================================


class HealthCheckResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    services: dict[str, str]
