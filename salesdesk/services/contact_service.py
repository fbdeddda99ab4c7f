"""Contact resolution: merge chat threads and tickets into deduplicated contacts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

from salesdesk.enums import ContactProvenance
from salesdesk.schemas.contact import Contact
from salesdesk.schemas.records import Message, Ticket
from salesdesk.utils.extraction import (
    extract_emails,
    extract_explicit_name,
    extract_phones,
    is_placeholder_name,
    name_from_email,
)

logger = logging.getLogger(__name__)

# Substrings marking synthesized placeholder addresses and sample domains.
INTERNAL_EMAIL_MARKER = "@internal"
SAMPLE_EMAIL_MARKER = "@example"
EXCLUDED_EMAIL_MARKERS = (INTERNAL_EMAIL_MARKER, SAMPLE_EMAIL_MARKER)


@dataclass
class ThreadEvidence:
    """What one thread says about who the customer is."""

    thread_id: str
    emails: list[str]
    phones: list[str]
    explicit_name: str | None
    message_count: int
    last_active: datetime | None


def group_messages_by_thread(messages: Iterable[Message]) -> dict[str, list[Message]]:
    """Thread id -> messages in input order. Blank thread ids are skipped."""
    threads: dict[str, list[Message]] = {}
    for message in messages:
        if not message.thread_id or not message.thread_id.strip():
            continue
        threads.setdefault(message.thread_id, []).append(message)
    return threads


def is_excluded_email(email: str) -> bool:
    return any(marker in email for marker in EXCLUDED_EMAIL_MARKERS)


def collect_thread_evidence(thread_id: str, messages: Sequence[Message]) -> ThreadEvidence:
    """Run the extractors over one thread."""
    all_text = "\n".join(message.text or "" for message in messages)
    emails = [
        email
        for email in extract_emails(all_text)
        if not is_excluded_email(email) and "." in email
    ]
    return ThreadEvidence(
        thread_id=thread_id,
        emails=emails,
        phones=extract_phones(all_text),
        explicit_name=extract_explicit_name(messages),
        message_count=len(messages),
        last_active=messages[-1].timestamp if messages else None,
    )


def ticket_email_set(tickets: Iterable[Ticket]) -> set[str]:
    """Lowercased customer emails of real (non-placeholder) tickets."""
    return {
        ticket.customer_email.lower()
        for ticket in tickets
        if ticket.customer_email and INTERNAL_EMAIL_MARKER not in ticket.customer_email
    }


def _is_later(candidate: datetime | None, current: datetime | None) -> bool:
    if candidate is None:
        return False
    if current is None:
        return True
    return candidate > current


class ContactBook:
    """Contacts keyed by lowercased primary email, built by repeated upserts."""

    def __init__(self) -> None:
        self._by_email: dict[str, Contact] = {}

    def __contains__(self, email: str) -> bool:
        return email.lower() in self._by_email

    def __len__(self) -> int:
        return len(self._by_email)

    def get(self, email: str) -> Contact | None:
        return self._by_email.get(email.lower())

    def upsert(
        self,
        *,
        email: str,
        name: str,
        phones: Sequence[str],
        thread_id: str | None,
        message_count: int,
        last_active: datetime | None,
        is_ticket: bool,
        ticket_id: str | None = None,
    ) -> Contact:
        """
        Merge one observation of ``email`` into the book.

        Thread ids and phones are unioned, message counts summed, the later
        activity timestamp kept, provenance only ever upgraded to ticket. The
        stored name is replaced only by a non-placeholder name that is either
        replacing a placeholder or longer than the stored one.
        """
        key = email.lower()
        existing = self._by_email.get(key)

        if existing is None:
            contact = Contact(
                display_name=name,
                emails=[key],
                phones=list(dict.fromkeys(phones)),
                thread_ids=[thread_id] if thread_id else [],
                ticket_ids=[ticket_id] if ticket_id else [],
                total_message_count=message_count,
                last_active=last_active,
                provenance=ContactProvenance.TICKET if is_ticket else ContactProvenance.CHAT,
            )
            self._by_email[key] = contact
            return contact

        if thread_id and thread_id not in existing.thread_ids:
            existing.thread_ids.append(thread_id)
        if ticket_id and ticket_id not in existing.ticket_ids:
            existing.ticket_ids.append(ticket_id)
        existing.total_message_count += message_count
        if _is_later(last_active, existing.last_active):
            existing.last_active = last_active
        for phone in phones:
            if phone not in existing.phones:
                existing.phones.append(phone)
        if is_ticket:
            existing.provenance = ContactProvenance.TICKET
        if not is_placeholder_name(name) and (
            is_placeholder_name(existing.display_name)
            or len(existing.display_name) < len(name)
        ):
            existing.display_name = name
        return existing

    def values(self) -> list[Contact]:
        return list(self._by_email.values())


def merge_thread(book: ContactBook, evidence: ThreadEvidence, ticket_emails: set[str]) -> None:
    """Upsert every email found in a thread; each gets the thread id."""
    for email in evidence.emails:
        book.upsert(
            email=email,
            name=evidence.explicit_name or name_from_email(email),
            phones=evidence.phones,
            thread_id=evidence.thread_id,
            message_count=evidence.message_count,
            last_active=evidence.last_active,
            is_ticket=email.lower() in ticket_emails,
        )


def add_ticket_only_contacts(book: ContactBook, tickets: Iterable[Ticket]) -> int:
    """
    Synthesize contacts for ticket emails never seen in chat.

    Zero messages, no phones, no timestamp. Returns how many were added.
    """
    added = 0
    for ticket in tickets:
        email = ticket.customer_email
        if not email or INTERNAL_EMAIL_MARKER in email or "." not in email:
            continue
        if email in book:
            continue
        book.upsert(
            email=email,
            name=name_from_email(email.lower()),
            phones=[],
            thread_id=None,
            message_count=0,
            last_active=None,
            is_ticket=True,
            ticket_id=ticket.ticket_id,
        )
        added += 1
    return added


def sort_contacts(contacts: Iterable[Contact]) -> list[Contact]:
    """
    Most recently active first. Contacts without any activity timestamp come
    after every timestamped one, busiest first.
    """
    timestamped = [c for c in contacts if c.last_active is not None]
    untimed = [c for c in contacts if c.last_active is None]
    timestamped.sort(key=lambda c: c.last_active, reverse=True)
    untimed.sort(key=lambda c: c.total_message_count, reverse=True)
    return timestamped + untimed


def build_contacts(messages: Iterable[Message], tickets: Sequence[Ticket]) -> list[Contact]:
    """
    Full rebuild of the contact list from a snapshot of messages and tickets.

    Idempotent: the same inputs always yield the same contacts. A thread with
    no extractable email contributes nothing, even if a ticket exists for it;
    ticket emails are only added when absent from chat-derived contacts.
    """
    ticket_emails = ticket_email_set(tickets)
    book = ContactBook()

    for thread_id, thread_messages in group_messages_by_thread(messages).items():
        evidence = collect_thread_evidence(thread_id, thread_messages)
        merge_thread(book, evidence, ticket_emails)

    added = add_ticket_only_contacts(book, tickets)
    contacts = [c for c in book.values() if c.primary_email and not is_excluded_email(c.primary_email)]

    logger.debug(
        "Built contacts",
        extra={"contact_count": len(contacts), "ticket_only_count": added},
    )
    return sort_contacts(contacts)


def search_contacts(contacts: Iterable[Contact], query: str | None) -> list[Contact]:
    """Case-insensitive substring match on name, emails, phones and thread ids."""
    contacts = list(contacts)
    if not query:
        return contacts
    q = query.lower()
    return [
        c
        for c in contacts
        if q in c.display_name.lower()
        or any(q in email for email in c.emails)
        or any(q in phone for phone in c.phones)
        or any(q in thread_id.lower() for thread_id in c.thread_ids)
    ]
