"""Organizer dashboard aggregation."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tourney.models.event import ACTIVE_EVENT_STATUSES, EventStatus
from tourney.services.event import EventService
from tourney.services.ticket import TicketService
from tourney.utils.permissions import Identity, Permission, require_permission

RECENT_TICKETS_LIMIT = 5


class DashboardService:
    """Builds the organizer dashboard view."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.events = EventService(db)
        self.tickets = TicketService(db)

    async def organizer_dashboard(self, actor: Identity) -> dict[str, Any]:
        """Events owned by the actor with participant counts and a summary.

        Raises:
            AuthorizationError: If the actor lacks VIEW_DASHBOARD
        """
        require_permission(actor, Permission.VIEW_DASHBOARD)

        events = await self.events.list_by_organizer(actor.user_id)

        rows = []
        for event in events:
            rows.append({
                "event": event,
                "participant_count": await self.tickets.count_paid(event.id),
                "recent_tickets": await self.tickets.recent_tickets(
                    event.id, limit=RECENT_TICKETS_LIMIT
                ),
            })

        summary = {
            "total_events": len(events),
            "total_participants": sum(row["participant_count"] for row in rows),
            "active_events": sum(1 for e in events if e.status in ACTIVE_EVENT_STATUSES),
            "completed_events": sum(
                1 for e in events if e.status == EventStatus.COMPLETED.value
            ),
        }

        return {
            "organizer": {"id": actor.user_id, "role": actor.role.value},
            "events": rows,
            "summary": summary,
        }
