"""Ticket API endpoints."""

from fastapi import APIRouter, Query

from tourney.api.deps import CurrentIdentity, DbSession
from tourney.schemas import ERROR_RESPONSES, TicketResponse, UserTicketListResponse
from tourney.schemas.responses import UserTicketResponse
from tourney.services.ticket import TicketService
from tourney.utils.errors import AuthorizationError
from tourney.utils.permissions import Permission

router = APIRouter(prefix="/tickets", tags=["Tickets"])


@router.get(
    "",
    response_model=UserTicketListResponse,
    responses={code: ERROR_RESPONSES[code] for code in (401, 403)},
)
async def list_tickets(
    identity: CurrentIdentity,
    db: DbSession,
    user_id: str | None = Query(default=None, description="Another participant (admin only)"),
):
    """List the caller's tickets, newest first.

    Admins may pass ``user_id`` to view another participant's tickets.
    """
    target = user_id or identity.user_id
    if target != identity.user_id and not identity.can(Permission.VIEW_ANY_TICKETS):
        raise AuthorizationError(
            "Not authorized to view other users' tickets",
            {"user_id": target},
        )

    rows = await TicketService(db).list_by_participant(target)
    return UserTicketListResponse(
        tickets=[
            UserTicketResponse(
                **TicketResponse.model_validate(row.ticket).model_dump(),
                event_title=row.event_title,
                event_game=row.event_game,
            )
            for row in rows
        ],
    )
