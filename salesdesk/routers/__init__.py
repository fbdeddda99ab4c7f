"""API routers."""

from salesdesk.routers.auth import router as auth_router
from salesdesk.routers.contacts import router as contacts_router
from salesdesk.routers.conversations import router as conversations_router
from salesdesk.routers.pages import router as pages_router
from salesdesk.routers.team import router as team_router
from salesdesk.routers.tickets import router as tickets_router
from salesdesk.routers.webhooks import router as webhooks_router

__all__ = [
    "auth_router",
    "contacts_router",
    "conversations_router",
    "pages_router",
    "team_router",
    "tickets_router",
    "webhooks_router",
]
