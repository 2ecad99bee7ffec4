"""Database models."""

from tourney.models.base import Base, TimestampMixin, UUIDMixin
from tourney.models.event import (
    ACTIVE_EVENT_STATUSES,
    BracketType,
    Event,
    EventStatus,
)
from tourney.models.match import Match, MatchStatus
from tourney.models.ticket import Ticket, TicketStatus

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Event
    "Event",
    "EventStatus",
    "BracketType",
    "ACTIVE_EVENT_STATUSES",
    # Ticket
    "Ticket",
    "TicketStatus",
    # Match
    "Match",
    "MatchStatus",
]
