"""Pydantic schemas for the conversation inbox and thread view."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from salesdesk.schemas.records import Message, Ticket


class ConversationPreview(BaseModel):
    """Inbox row for one thread, joined against its tickets."""

    thread_id: str
    latest_message: str | None = None
    latest_time: datetime | None = None
    message_count: int
    customer_email: str | None = None
    ticket_number: str | None = None
    status: str | None = None
    ticket_id: str | None = None
    all_tickets: list[Ticket] = Field(default_factory=list)


class ConversationListResponse(BaseModel):
    items: list[ConversationPreview]
    total: int
    selected_thread_id: str | None = None


class ThreadResponse(BaseModel):
    conversation: ConversationPreview
    messages: list[Message]


class ReplyRequest(BaseModel):
    text: str = Field(..., max_length=10000)


class StatusToggleResponse(BaseModel):
    thread_id: str
    previous_status: str
    status: str
    ticket_created: bool
    ticket_number: str | None = None
