"""Conversation inbox: thread previews joined against tickets."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Sequence

from salesdesk.enums import ConversationFilter, TicketStatus
from salesdesk.schemas.conversation import ConversationPreview
from salesdesk.schemas.records import Message, Ticket
from salesdesk.services.contact_service import group_messages_by_thread
from salesdesk.utils.extraction import extract_standard_emails


def internal_email_for_thread(thread_id: str) -> str:
    """Placeholder address used for tickets created on un-ticketed threads."""
    return f"user_{thread_id}@internal"


@dataclass
class _ThreadSummary:
    messages: list[Message] = field(default_factory=list)
    latest: datetime | None = None
    emails: list[str] = field(default_factory=list)


def _summarize(messages: Sequence[Message]) -> _ThreadSummary:
    summary = _ThreadSummary()
    for message in messages:
        summary.messages.append(message)
        if message.timestamp and (summary.latest is None or message.timestamp > summary.latest):
            summary.latest = message.timestamp
        for email in extract_standard_emails(message.text):
            if email not in summary.emails:
                summary.emails.append(email)
    return summary


def match_tickets(thread_id: str, emails: Sequence[str], tickets: Sequence[Ticket]) -> list[Ticket]:
    """
    Tickets for a thread: those whose customer email appears in the thread,
    then those filed under the thread's placeholder address. De-duplicated by
    ticket id, discovery order kept.
    """
    matched: list[Ticket] = []
    seen: set[str | None] = set()

    def check(email: str) -> None:
        for ticket in tickets:
            if not ticket.customer_email or ticket.customer_email.lower() != email.lower():
                continue
            if ticket.ticket_id in seen:
                continue
            matched.append(ticket)
            seen.add(ticket.ticket_id)

    for email in emails:
        check(email)
    check(internal_email_for_thread(thread_id))
    return matched


def build_preview(thread_id: str, messages: Sequence[Message], tickets: Sequence[Ticket]) -> ConversationPreview:
    summary = _summarize(messages)
    matched = match_tickets(thread_id, summary.emails, tickets)
    internal_email = internal_email_for_thread(thread_id)
    primary = matched[0] if matched else None

    if primary is not None:
        customer_email = primary.customer_email or internal_email
    else:
        customer_email = summary.emails[0] if summary.emails else internal_email

    last_message = summary.messages[-1] if summary.messages else None
    return ConversationPreview(
        thread_id=thread_id,
        latest_message=last_message.text if last_message else None,
        latest_time=summary.latest,
        message_count=len(summary.messages),
        customer_email=customer_email,
        ticket_number=primary.ticket_number if primary else None,
        status=(primary.status if primary else None) or TicketStatus.OPEN.value,
        ticket_id=primary.ticket_id if primary else None,
        all_tickets=matched,
    )


def build_conversations(messages: Iterable[Message], tickets: Sequence[Ticket]) -> list[ConversationPreview]:
    """Previews for every thread, most recent first."""
    previews = [
        build_preview(thread_id, thread_messages, tickets)
        for thread_id, thread_messages in group_messages_by_thread(messages).items()
    ]
    previews.sort(key=lambda p: (p.latest_time is not None, p.latest_time or datetime.min), reverse=True)
    return previews


def filter_conversations(
    previews: Iterable[ConversationPreview],
    status_filter: ConversationFilter = ConversationFilter.ALL,
    query: str | None = None,
) -> list[ConversationPreview]:
    """Status tab, then case-insensitive search across thread, email, text and tickets."""
    items = list(previews)
    if status_filter == ConversationFilter.NEW:
        items = [p for p in items if not p.status or p.status == TicketStatus.OPEN.value]
    elif status_filter == ConversationFilter.RESOLVED:
        items = [p for p in items if p.status == TicketStatus.RESOLVED.value]

    if not query:
        return items
    q = query.lower()

    def matches(preview: ConversationPreview) -> bool:
        fields = [
            preview.thread_id,
            preview.customer_email,
            preview.latest_message,
            preview.ticket_number,
            preview.ticket_id,
        ]
        for ticket in preview.all_tickets:
            fields.extend([ticket.ticket_number, ticket.ticket_id])
        return any(value and q in value.lower() for value in fields)

    return [p for p in items if matches(p)]


def find_exact_ticket_match(
    previews: Iterable[ConversationPreview],
    query: str | None,
) -> ConversationPreview | None:
    """The conversation owning a ticket whose number or id equals the query."""
    if not query:
        return None
    q = query.lower().strip()
    if not q:
        return None
    for preview in previews:
        candidates = [preview.ticket_number, preview.ticket_id]
        for ticket in preview.all_tickets:
            candidates.extend([ticket.ticket_number, ticket.ticket_id])
        if any(value and value.lower() == q for value in candidates):
            return preview
    return None


def thread_messages(messages: Iterable[Message], thread_id: str) -> list[Message]:
    """A thread's messages in chronological order."""
    selected = [m for m in messages if m.thread_id == thread_id]
    # Stable sort keeps backend order for equal or missing timestamps.
    return sorted(selected, key=lambda m: (m.timestamp is not None, m.timestamp or datetime.min))
