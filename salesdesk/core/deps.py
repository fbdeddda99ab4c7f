"""FastAPI dependencies for authentication, authorization, and backend access."""

from fastapi import Depends, HTTPException, Request

from salesdesk.core.auth_session import AuthSession, build_auth_session
from salesdesk.enums import Role
from salesdesk.schemas.auth import Identity
from salesdesk.services.backend_client import BackendClient
from salesdesk.services.snapshot_service import DashboardSnapshot


CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


def get_backend(request: Request) -> BackendClient:
    """Backend client created at startup."""
    return request.app.state.backend


def get_snapshot(request: Request) -> DashboardSnapshot:
    """Dashboard snapshot shared by all requests in this process."""
    return request.app.state.snapshot


async def get_loaded_snapshot(snapshot: DashboardSnapshot = Depends(get_snapshot)) -> DashboardSnapshot:
    """Snapshot, fetched on first use."""
    await snapshot.ensure_loaded()
    return snapshot


def get_auth_session(request: Request) -> AuthSession:
    """
    Session attached by the auth gate middleware.

    Built on demand for requests the middleware did not see.
    """
    session = getattr(request.state, "auth_session", None)
    if session is None:
        session = build_auth_session(request)
        request.state.auth_session = session
    return session


def get_current_identity(session: AuthSession = Depends(get_auth_session)) -> Identity:
    """
    Authenticated operator.

    Raises:
        HTTPException 401: No valid session
        HTTPException 403: Session rejected by domain policy
    """
    if session.access_denied():
        raise HTTPException(status_code=403, detail="Email domain not allowed")
    identity = session.current_user()
    if identity is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return identity


def require_roles(allowed_roles: list[Role]):
    """
    Dependency factory for role-based authorization.

    Usage:
        @router.post("/invite", dependencies=[Depends(require_roles([Role.ADMIN]))])
    """
    def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in allowed_roles:
            raise HTTPException(
                status_code=403,
                detail=f"Role '{identity.role.value}' not authorized for this action",
            )
        return identity
    return dependency


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on mutations.

    Raises:
        HTTPException 403: Missing or invalid CSRF header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise HTTPException(
            status_code=403,
            detail=f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'",
        )
