"""Summary payloads for the dashboard landing routes."""

from pydantic import BaseModel

from salesdesk.schemas.auth import Identity


class DashboardOverview(BaseModel):
    operator: Identity
    conversation_count: int
    open_count: int
    resolved_count: int
    contact_count: int
    ticket_count: int


class AdminOverview(BaseModel):
    operator: Identity
    member_count: int


class LoginPage(BaseModel):
    provider: str
    authenticated: bool = False
    email_format: str | None = None
