"""Conversation inbox, thread view, reply and ticket status APIs."""

from fastapi import APIRouter, Depends, HTTPException

from salesdesk.core.config import settings
from salesdesk.core.deps import (
    get_backend,
    get_current_identity,
    get_loaded_snapshot,
    require_csrf_header,
)
from salesdesk.enums import ConversationFilter
from salesdesk.schemas.auth import Identity
from salesdesk.schemas.conversation import (
    ConversationListResponse,
    ConversationPreview,
    ReplyRequest,
    StatusToggleResponse,
    ThreadResponse,
)
from salesdesk.schemas.records import Message
from salesdesk.services import conversation_service, inbox_service
from salesdesk.services.backend_client import BackendClient
from salesdesk.services.snapshot_service import DashboardSnapshot

router = APIRouter(
    prefix="/api/conversations",
    tags=["conversations"],
    dependencies=[Depends(get_current_identity)],
)


def _get_conversation_or_404(snapshot: DashboardSnapshot, thread_id: str) -> ConversationPreview:
    conversation = snapshot.get_conversation(thread_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


@router.get("", response_model=ConversationListResponse)
def list_conversations(
    filter: ConversationFilter = ConversationFilter.ALL,
    q: str | None = None,
    snapshot: DashboardSnapshot = Depends(get_loaded_snapshot),
) -> ConversationListResponse:
    """
    Inbox rows, most recent first.

    ``selected_thread_id`` is set when ``q`` exactly names a ticket number or
    id, so the client can open that thread directly.
    """
    conversations = snapshot.conversations()
    items = conversation_service.filter_conversations(conversations, filter, q)
    exact = conversation_service.find_exact_ticket_match(conversations, q)
    return ConversationListResponse(
        items=items,
        total=len(items),
        selected_thread_id=exact.thread_id if exact else None,
    )


@router.get("/{thread_id}", response_model=ThreadResponse)
def get_thread(
    thread_id: str,
    snapshot: DashboardSnapshot = Depends(get_loaded_snapshot),
) -> ThreadResponse:
    """A conversation with its messages in chronological order."""
    conversation = _get_conversation_or_404(snapshot, thread_id)
    return ThreadResponse(conversation=conversation, messages=snapshot.thread(thread_id))


@router.post(
    "/{thread_id}/reply",
    response_model=Message,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
async def send_reply(
    thread_id: str,
    body: ReplyRequest,
    identity: Identity = Depends(get_current_identity),
    backend: BackendClient = Depends(get_backend),
    snapshot: DashboardSnapshot = Depends(get_loaded_snapshot),
) -> Message:
    """Post an assistant reply into a thread."""
    _get_conversation_or_404(snapshot, thread_id)
    try:
        message = await inbox_service.send_reply(
            backend, thread_id=thread_id, text=body.text, identity=identity
        )
    except inbox_service.EmptyReplyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except inbox_service.ReplyFailedError as e:
        raise HTTPException(status_code=502, detail=f"Failed to send reply: {e}")

    await snapshot.refresh(settings.BACKEND_MESSAGES_TABLE)
    return message


@router.post(
    "/{thread_id}/status",
    response_model=StatusToggleResponse,
    dependencies=[Depends(require_csrf_header)],
)
async def toggle_status(
    thread_id: str,
    identity: Identity = Depends(get_current_identity),
    backend: BackendClient = Depends(get_backend),
    snapshot: DashboardSnapshot = Depends(get_loaded_snapshot),
) -> StatusToggleResponse:
    """Resolve or reopen a conversation's ticket, creating one if needed."""
    conversation = _get_conversation_or_404(snapshot, thread_id)
    try:
        result = await inbox_service.toggle_status(
            backend, conversation=conversation, identity=identity
        )
    except inbox_service.StatusUpdateError as e:
        raise HTTPException(status_code=502, detail=f"Failed to update status: {e}")

    await snapshot.refresh(settings.BACKEND_TICKETS_TABLE)
    return result

