"""Operator commands on conversations: reply and ticket status toggle."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone

from salesdesk.core.config import settings
from salesdesk.core.structured_logging import build_log_context
from salesdesk.enums import MessageRole, TicketStatus
from salesdesk.schemas.auth import Identity
from salesdesk.schemas.conversation import ConversationPreview, StatusToggleResponse
from salesdesk.schemas.records import Message
from salesdesk.services.backend_client import BackendClient, BackendError
from salesdesk.services.conversation_service import internal_email_for_thread

logger = logging.getLogger(__name__)


class InboxServiceError(Exception):
    """Base exception for inbox command errors."""

    pass


class EmptyReplyError(InboxServiceError):
    """Reply text is blank."""

    pass


class ReplyFailedError(InboxServiceError):
    """Backend rejected the reply."""

    pass


class StatusUpdateError(InboxServiceError):
    """Backend rejected the ticket status change."""

    pass


def generate_ticket_number() -> str:
    """Short human-facing ticket number, e.g. ST-4821. Not guaranteed unique."""
    return f"ST-{random.randint(1000, 9999)}"


async def send_reply(
    backend: BackendClient,
    *,
    thread_id: str,
    text: str,
    identity: Identity,
) -> Message:
    """Append an assistant message to a thread. No retry on failure."""
    body = text.strip()
    if not body:
        raise EmptyReplyError("Reply text is empty")

    row = {
        "user_id": thread_id,
        "message": body,
        "role": MessageRole.ASSISTANT.value,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    try:
        created = await backend.insert(settings.BACKEND_MESSAGES_TABLE, row)
    except BackendError as e:
        logger.warning(
            f"Reply failed: {e.message}",
            extra=build_log_context(operator=identity.email, thread_id=thread_id),
        )
        raise ReplyFailedError(e.message) from e

    logger.info(
        "Reply sent",
        extra=build_log_context(operator=identity.email, thread_id=thread_id),
    )
    return Message.model_validate({**row, **created})


async def toggle_status(
    backend: BackendClient,
    *,
    conversation: ConversationPreview,
    identity: Identity,
) -> StatusToggleResponse:
    """
    Flip a conversation's ticket between open and resolved.

    A thread with no ticket gets one created with the new status, filed under
    the conversation's customer email (or its placeholder address).
    """
    current = TicketStatus.RESOLVED if conversation.status == TicketStatus.RESOLVED.value else TicketStatus.OPEN
    new_status = current.toggled()
    log_context = build_log_context(operator=identity.email, thread_id=conversation.thread_id)

    logger.info(
        f"Toggling status from {current.value} to {new_status.value}",
        extra=log_context,
    )

    try:
        if conversation.ticket_id:
            await backend.update(
                settings.BACKEND_TICKETS_TABLE,
                {"status": new_status.value},
                match={"ticket_id": conversation.ticket_id},
            )
            ticket_number = conversation.ticket_number
            created = False
        else:
            ticket_number = generate_ticket_number()
            await backend.insert(
                settings.BACKEND_TICKETS_TABLE,
                {
                    "user_email": conversation.customer_email
                    or internal_email_for_thread(conversation.thread_id),
                    "status": new_status.value,
                    "ticket_number": ticket_number,
                },
            )
            created = True
    except BackendError as e:
        logger.error(f"Error toggling status: {e.message}", extra=log_context)
        raise StatusUpdateError(e.message or "Unknown error") from e

    return StatusToggleResponse(
        thread_id=conversation.thread_id,
        previous_status=current.value,
        status=new_status.value,
        ticket_created=created,
        ticket_number=ticket_number,
    )
