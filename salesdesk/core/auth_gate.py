"""Route gate: who may reach which path, and sliding session refresh."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from salesdesk.core.auth_session import COOKIE_NAME, AuthSession, CookieAuthSession, build_auth_session
from salesdesk.core.config import settings
from salesdesk.core.security import create_session_token

LOGIN_PATH = "/login"
HOME_PATH = "/"
UNAUTHORIZED_PATH = "/unauthorized"

PROTECTED_PAGE_ROUTES = ("/", "/dashboard", "/contacts", "/admin")
PROTECTED_API_PREFIX = "/api/"

# Paths that manage the session themselves.
SESSION_MANAGED_PREFIXES = ("/auth/", UNAUTHORIZED_PATH)


@dataclass(frozen=True)
class GateDecision:
    action: str  # allow | redirect | unauthorized | forbidden
    location: str | None = None


ALLOW = GateDecision("allow")


def is_protected_page(path: str) -> bool:
    return any(path == route or path.startswith(f"{route}/") for route in PROTECTED_PAGE_ROUTES)


def is_protected_api(path: str) -> bool:
    return path.startswith(PROTECTED_API_PREFIX)


def evaluate(path: str, session: AuthSession) -> GateDecision:
    """
    Decide what happens to a request before it reaches a router.

    - Unauthenticated API call: 401
    - Unauthenticated page visit: redirect to the login page
    - Authenticated but disallowed (identity provider domain policy):
      403 for API calls, redirect to the unauthorized page otherwise
    - Authenticated visit to the login page: redirect home
    """
    protected_api = is_protected_api(path)
    protected_page = is_protected_page(path)

    if session.access_denied() and (protected_api or protected_page):
        if protected_api:
            return GateDecision("forbidden")
        return GateDecision("redirect", UNAUTHORIZED_PATH)

    authenticated = session.current_user() is not None

    if path == LOGIN_PATH:
        return GateDecision("redirect", HOME_PATH) if authenticated else ALLOW

    if (protected_api or protected_page) and not authenticated:
        if protected_api:
            return GateDecision("unauthorized")
        return GateDecision("redirect", LOGIN_PATH)

    return ALLOW


def _set_refreshed_cookie(response: Response, session: CookieAuthSession) -> None:
    identity = session.current_user()
    if identity is None:
        return
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


async def auth_gate_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """HTTP middleware: attach the session, gate the path, refresh on activity."""
    session = build_auth_session(request)
    request.state.auth_session = session

    decision = evaluate(request.url.path, session)
    if decision.action == "unauthorized":
        return JSONResponse({"detail": "Unauthorized"}, status_code=401)
    if decision.action == "forbidden":
        return JSONResponse({"detail": "Email domain not allowed"}, status_code=403)
    if decision.action == "redirect":
        return RedirectResponse(url=decision.location, status_code=307)

    response = await call_next(request)

    if isinstance(session, CookieAuthSession) and not request.url.path.startswith(SESSION_MANAGED_PREFIXES):
        _set_refreshed_cookie(response, session)
    return response
