"""API routers."""

from tourney.api.dashboard import router as dashboard_router
from tourney.api.events import router as events_router
from tourney.api.tickets import router as tickets_router
from tourney.api.webhooks import router as webhooks_router

__all__ = [
    "dashboard_router",
    "events_router",
    "tickets_router",
    "webhooks_router",
]
