"""Webhooks router - change notifications from the data backend."""

import hmac
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from salesdesk.core.config import settings
from salesdesk.core.deps import get_snapshot
from salesdesk.core.websocket import manager
from salesdesk.services.snapshot_service import DashboardSnapshot

router = APIRouter()
logger = logging.getLogger(__name__)

WEBHOOK_SECRET_HEADER = "X-Webhook-Secret"

WATCHED_EVENTS = {"INSERT", "UPDATE", "DELETE"}


def verify_webhook_secret(request: Request) -> None:
    """
    Compare the shared secret header in constant time.

    Raises:
        HTTPException 503: No secret configured
        HTTPException 403: Missing or wrong secret
    """
    expected = settings.BACKEND_WEBHOOK_SECRET
    if not expected:
        logger.warning("Backend webhook received but BACKEND_WEBHOOK_SECRET is not set")
        raise HTTPException(status_code=503, detail="Webhook not configured")

    provided = request.headers.get(WEBHOOK_SECRET_HEADER, "")
    if not hmac.compare_digest(provided.encode(), expected.encode()):
        logger.warning("Backend webhook invalid secret")
        raise HTTPException(status_code=403, detail="Invalid webhook secret")


@router.post("/backend-changes", dependencies=[Depends(verify_webhook_secret)])
async def receive_backend_change(
    request: Request,
    snapshot: DashboardSnapshot = Depends(get_snapshot),
):
    """
    Receive a database change event for the messages or tickets table.

    Payload shape: ``{"type": "INSERT", "table": "chat_logs", "record": {...}}``.
    The affected table is re-fetched in full and every open dashboard is told
    to reload. Events for other tables are acknowledged and ignored.
    """
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid payload")

    table = payload.get("table")
    event_type = str(payload.get("type") or "").upper()
    watched_tables = {settings.BACKEND_MESSAGES_TABLE, settings.BACKEND_TICKETS_TABLE}

    if table not in watched_tables:
        return {"status": "ignored", "reason": "table not watched"}
    if event_type and event_type not in WATCHED_EVENTS:
        return {"status": "ignored", "reason": "event type not watched"}

    await snapshot.refresh(table)
    await manager.broadcast({"type": "refresh", "table": table})
    logger.info(f"Backend change applied: {event_type or 'UNKNOWN'} on {table}")
    return {"status": "ok", "table": table}
