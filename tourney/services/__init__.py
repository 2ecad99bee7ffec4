"""Business logic services."""

from tourney.services.bracket import BracketService
from tourney.services.dashboard import DashboardService
from tourney.services.event import EventService
from tourney.services.notifications import PaymentNotifier
from tourney.services.payment import PaymentReconciliationService, ReconciliationResult
from tourney.services.registration import RegistrationService
from tourney.services.ticket import ParticipantTicket, TicketService

__all__ = [
    "BracketService",
    "DashboardService",
    "EventService",
    "ParticipantTicket",
    "PaymentNotifier",
    "PaymentReconciliationService",
    "ReconciliationResult",
    "RegistrationService",
    "TicketService",
]
