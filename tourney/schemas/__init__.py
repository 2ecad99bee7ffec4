"""Pydantic schemas for the HTTP boundary."""

from tourney.schemas.common import (
    ERROR_RESPONSES,
    BaseSchema,
    ErrorDetail,
    ErrorResponse,
    SuccessResponse,
)
from tourney.schemas.requests import (
    CreateEventRequest,
    EventFields,
    GenerateBracketRequest,
    MatchResultRequest,
    PaymentWebhookRequest,
    UpdateEventRequest,
)
from tourney.schemas.responses import (
    BracketGeneratedResponse,
    BracketResponse,
    DashboardResponse,
    EventListResponse,
    EventMutationResponse,
    EventResponse,
    HealthCheckResponse,
    JoinEventResponse,
    MatchListResponse,
    MatchResponse,
    ParticipantListResponse,
    ParticipantResponse,
    PaymentWebhookResponse,
    TicketResponse,
    UserTicketListResponse,
)

__all__ = [
    # Common
    "BaseSchema",
    "ErrorDetail",
    "ErrorResponse",
    "ERROR_RESPONSES",
    "SuccessResponse",
    # Requests
    "EventFields",
    "CreateEventRequest",
    "UpdateEventRequest",
    "GenerateBracketRequest",
    "MatchResultRequest",
    "PaymentWebhookRequest",
    # Responses
    "EventResponse",
    "EventListResponse",
    "EventMutationResponse",
    "TicketResponse",
    "JoinEventResponse",
    "UserTicketListResponse",
    "ParticipantListResponse",
    "ParticipantResponse",
    "MatchResponse",
    "MatchListResponse",
    "BracketGeneratedResponse",
    "BracketResponse",
    "PaymentWebhookResponse",
    "DashboardResponse",
    "HealthCheckResponse",
]
