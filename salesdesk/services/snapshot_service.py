"""In-memory snapshot of messages and tickets, and the views derived from it."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from salesdesk.core.config import settings
from salesdesk.schemas.contact import Contact
from salesdesk.schemas.conversation import ConversationPreview
from salesdesk.schemas.records import Message, Ticket
from salesdesk.services import contact_service, conversation_service
from salesdesk.services.backend_client import BackendClient, BackendError

logger = logging.getLogger(__name__)

TICKET_COLUMNS = "ticket_id, user_email, status, ticket_number"


def _parse_rows(model, rows: list[dict[str, Any]], table: str) -> list:
    parsed = []
    for row in rows:
        try:
            parsed.append(model.model_validate(row))
        except ValidationError:
            logger.warning("Skipping malformed %s row", table)
    return parsed


class DashboardSnapshot:
    """
    Everything the dashboard shows is derived from one fetched snapshot.

    A change notification re-fetches the affected record set in full and
    rebuilds conversations and contacts; nothing is updated incrementally.
    Read failures leave that record set empty rather than raising, and the
    next ``ensure_loaded`` fetches it again.
    """

    def __init__(self, backend: BackendClient):
        self.backend = backend
        self.messages: list[Message] = []
        self.tickets: list[Ticket] = []
        self.loaded = False
        self._stale: set[str] = set()
        self._conversations: list[ConversationPreview] = []
        self._contacts: list[Contact] = []

    async def fetch_messages(self) -> list[Message]:
        try:
            rows = await self.backend.select_all(
                settings.BACKEND_MESSAGES_TABLE,
                page_size=settings.BACKEND_PAGE_SIZE,
                order="created_at.asc",
            )
        except BackendError as e:
            logger.warning(f"Message fetch failed, showing empty inbox: {e.message}")
            self._stale.add(settings.BACKEND_MESSAGES_TABLE)
            return []
        self._stale.discard(settings.BACKEND_MESSAGES_TABLE)
        return _parse_rows(Message, rows, settings.BACKEND_MESSAGES_TABLE)

    async def fetch_tickets(self) -> list[Ticket]:
        try:
            rows = await self.backend.select(
                settings.BACKEND_TICKETS_TABLE, columns=TICKET_COLUMNS
            )
        except BackendError as e:
            logger.warning(f"Ticket fetch failed, showing no tickets: {e.message}")
            self._stale.add(settings.BACKEND_TICKETS_TABLE)
            return []
        self._stale.discard(settings.BACKEND_TICKETS_TABLE)
        return _parse_rows(Ticket, rows, settings.BACKEND_TICKETS_TABLE)

    def rebuild(self) -> None:
        self._conversations = conversation_service.build_conversations(self.messages, self.tickets)
        self._contacts = contact_service.build_contacts(self.messages, self.tickets)

    async def refresh(self, table: str | None = None) -> None:
        """Re-fetch one record set by backend table name, or everything."""
        if table == settings.BACKEND_MESSAGES_TABLE:
            self.messages = await self.fetch_messages()
        elif table == settings.BACKEND_TICKETS_TABLE:
            self.tickets = await self.fetch_tickets()
        else:
            self.messages = await self.fetch_messages()
            self.tickets = await self.fetch_tickets()
        self.loaded = True
        self.rebuild()
        logger.info(
            "Dashboard snapshot rebuilt",
            extra={
                "table": table or "all",
                "message_count": len(self.messages),
                "ticket_count": len(self.tickets),
            },
        )

    @property
    def stale_tables(self) -> frozenset[str]:
        """Record sets whose last fetch failed."""
        return frozenset(self._stale)

    async def ensure_loaded(self) -> None:
        """Load on first use, then retry any record set whose last fetch failed."""
        if not self.loaded or len(self._stale) > 1:
            await self.refresh()
        elif self._stale:
            await self.refresh(next(iter(self._stale)))

    def conversations(self) -> list[ConversationPreview]:
        return list(self._conversations)

    def contacts(self) -> list[Contact]:
        return list(self._contacts)

    def get_conversation(self, thread_id: str) -> ConversationPreview | None:
        return next((c for c in self._conversations if c.thread_id == thread_id), None)

    def thread(self, thread_id: str) -> list[Message]:
        return conversation_service.thread_messages(self.messages, thread_id)
