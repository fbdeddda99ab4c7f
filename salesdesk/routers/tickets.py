"""Ticket listing."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from salesdesk.core.deps import get_current_identity, get_loaded_snapshot
from salesdesk.enums import TicketStatus
from salesdesk.schemas.records import Ticket
from salesdesk.services.snapshot_service import DashboardSnapshot

router = APIRouter(
    prefix="/api/tickets",
    tags=["tickets"],
    dependencies=[Depends(get_current_identity)],
)


class TicketListResponse(BaseModel):
    items: list[Ticket]
    total: int


@router.get("", response_model=TicketListResponse)
def list_tickets(
    status: TicketStatus | None = None,
    snapshot: DashboardSnapshot = Depends(get_loaded_snapshot),
) -> TicketListResponse:
    """All tickets in the snapshot, optionally by status."""
    items = snapshot.tickets
    if status is not None:
        items = [t for t in items if (t.status or TicketStatus.OPEN.value) == status.value]
    return TicketListResponse(items=items, total=len(items))
