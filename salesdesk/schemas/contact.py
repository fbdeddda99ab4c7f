"""Pydantic schemas for derived contacts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from salesdesk.enums import ContactProvenance


class Contact(BaseModel):
    """
    A deduplicated customer identity.

    Derived from messages and tickets on every rebuild, never persisted.
    ``emails[0]`` is the primary email and the merge key (lowercased).
    """

    display_name: str
    emails: list[str]
    phones: list[str] = Field(default_factory=list)
    thread_ids: list[str] = Field(default_factory=list)
    ticket_ids: list[str] = Field(default_factory=list)
    total_message_count: int = 0
    last_active: datetime | None = None
    provenance: ContactProvenance = ContactProvenance.CHAT

    @property
    def primary_email(self) -> str:
        return self.emails[0] if self.emails else ""


class ContactListResponse(BaseModel):
    items: list[Contact]
    total: int
