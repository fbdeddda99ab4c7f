"""Authentication router: built-in login, logout and current identity."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from salesdesk.core.auth_session import COOKIE_NAME, AuthSession
from salesdesk.core.config import settings
from salesdesk.core.deps import get_auth_session, get_backend, get_current_identity
from salesdesk.core.rate_limit import limiter
from salesdesk.core.security import create_session_token
from salesdesk.schemas.auth import Identity, LoginRequest, LoginResponse, LogoutResponse, MeResponse
from salesdesk.services import auth_service
from salesdesk.services.backend_client import BackendClient

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(f"{settings.RATE_LIMIT_AUTH}/minute")
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    backend: BackendClient = Depends(get_backend),
) -> LoginResponse:
    """
    Email/password login.

    On success sets the signed, HTTP-only session cookie. Unavailable when
    sessions come from the identity provider.
    """
    if settings.uses_identity_provider:
        raise HTTPException(status_code=400, detail="Sign in through the identity provider")

    try:
        identity = await auth_service.authenticate(backend, body.email, body.password)
    except auth_service.LoginError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    token = create_session_token(email=identity.email, name=identity.name, role=identity.role.value)
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_EXPIRES_HOURS * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path="/",
    )
    logger.info("Login succeeded", extra={"operator": identity.email})
    return LoginResponse(email=identity.email, name=identity.name, role=identity.role)


@router.post("/logout", response_model=LogoutResponse)
def logout(
    response: Response,
    session: AuthSession = Depends(get_auth_session),
) -> LogoutResponse:
    """Clear the session. Always succeeds, with or without a session."""
    redirect_url = session.sign_out(response)
    return LogoutResponse(redirect_url=redirect_url)


@router.get("/me", response_model=MeResponse)
def get_me(
    identity: Identity = Depends(get_current_identity),
    session: AuthSession = Depends(get_auth_session),
) -> MeResponse:
    """
    Current authenticated operator.

    Used by the frontend to bootstrap auth state on page load.
    """
    return MeResponse(
        email=identity.email,
        name=identity.name,
        role=identity.role,
        provider=session.provider.value,
    )
