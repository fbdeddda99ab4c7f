"""Landing routes guarded by the auth gate."""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse, RedirectResponse

from salesdesk.core.auth_session import AuthSession
from salesdesk.core.config import settings
from salesdesk.core.deps import get_auth_session, get_backend, get_current_identity, get_loaded_snapshot
from salesdesk.enums import Role, TicketStatus
from salesdesk.schemas.auth import Identity
from salesdesk.schemas.contact import ContactListResponse
from salesdesk.schemas.dashboard import AdminOverview, DashboardOverview, LoginPage
from salesdesk.services import contact_service, team_service
from salesdesk.services.backend_client import BackendClient
from salesdesk.services.snapshot_service import DashboardSnapshot

router = APIRouter()


@router.get("/", response_model=DashboardOverview)
@router.get("/dashboard", response_model=DashboardOverview)
def dashboard(
    identity: Identity = Depends(get_current_identity),
    snapshot: DashboardSnapshot = Depends(get_loaded_snapshot),
) -> DashboardOverview:
    """Inbox counters for the signed-in operator."""
    conversations = snapshot.conversations()
    resolved = sum(1 for c in conversations if c.status == TicketStatus.RESOLVED.value)
    return DashboardOverview(
        operator=identity,
        conversation_count=len(conversations),
        open_count=len(conversations) - resolved,
        resolved_count=resolved,
        contact_count=len(snapshot.contacts()),
        ticket_count=len(snapshot.tickets),
    )


@router.get("/contacts", response_model=ContactListResponse, dependencies=[Depends(get_current_identity)])
def contacts_page(
    q: str | None = None,
    snapshot: DashboardSnapshot = Depends(get_loaded_snapshot),
) -> ContactListResponse:
    items = contact_service.search_contacts(snapshot.contacts(), q)
    return ContactListResponse(items=items, total=len(items))


@router.get("/admin", response_model=AdminOverview)
async def admin(
    identity: Identity = Depends(get_current_identity),
    backend: BackendClient = Depends(get_backend),
):
    """Admin landing; other roles are sent back to the dashboard."""
    if identity.role != Role.ADMIN:
        return RedirectResponse(url="/", status_code=307)
    members = await team_service.list_members(backend)
    return AdminOverview(operator=identity, member_count=len(members))


@router.get("/login", response_model=LoginPage)
def login_page() -> LoginPage:
    """What the login screen should offer. Authenticated visitors never get here."""
    if settings.uses_identity_provider:
        return LoginPage(provider=settings.AUTH_PROVIDER)
    return LoginPage(
        provider=settings.AUTH_PROVIDER,
        email_format=f"first.last@{settings.COMPANY_EMAIL_DOMAIN}",
    )


@router.get("/unauthorized")
def unauthorized(session: AuthSession = Depends(get_auth_session)) -> Response:
    """Access denied by domain policy; the rejected session is signed out."""
    response = JSONResponse(
        {"detail": "Access denied. Your account is not permitted to use this dashboard."},
        status_code=403,
    )
    session.sign_out(response)
    return response
