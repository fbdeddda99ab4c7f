"""Contact directory derived from chat threads and tickets."""

from fastapi import APIRouter, Depends

from salesdesk.core.deps import get_current_identity, get_loaded_snapshot
from salesdesk.schemas.contact import ContactListResponse
from salesdesk.services import contact_service
from salesdesk.services.snapshot_service import DashboardSnapshot

router = APIRouter(
    prefix="/api/contacts",
    tags=["contacts"],
    dependencies=[Depends(get_current_identity)],
)


@router.get("", response_model=ContactListResponse)
def list_contacts(
    q: str | None = None,
    snapshot: DashboardSnapshot = Depends(get_loaded_snapshot),
) -> ContactListResponse:
    """Resolved contacts, most recently active first, optionally searched."""
    items = contact_service.search_contacts(snapshot.contacts(), q)
    return ContactListResponse(items=items, total=len(items))
