"""Organizer dashboard API."""

from fastapi import APIRouter

from tourney.api.deps import CurrentIdentity, DbSession
from tourney.schemas import ERROR_RESPONSES, DashboardResponse, EventResponse, TicketResponse
from tourney.schemas.responses import DashboardEvent, DashboardSummary, OrganizerInfo
from tourney.services.dashboard import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get(
    "",
    response_model=DashboardResponse,
    responses={code: ERROR_RESPONSES[code] for code in (401, 403)},
)
async def get_dashboard(identity: CurrentIdentity, db: DbSession):
    """Organizer's events with paid participant counts and recent tickets."""
    data = await DashboardService(db).organizer_dashboard(identity)

    return DashboardResponse(
        organizer=OrganizerInfo(**data["organizer"]),
        events=[
            DashboardEvent(
                **EventResponse.model_validate(row["event"]).model_dump(),
                participant_count=row["participant_count"],
                recent_tickets=[
                    TicketResponse.model_validate(t) for t in row["recent_tickets"]
                ],
            )
            for row in data["events"]
        ],
        summary=DashboardSummary(**data["summary"]),
    )
