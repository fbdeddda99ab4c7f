"""
Per-request authentication session.

An ``AuthSession`` is built once per request from its cookies/headers and
passed explicitly to whatever needs the operator's identity. Two sources
exist: the signed cookie issued by this service's login endpoint, and a
session token issued by an external identity provider.
"""

from __future__ import annotations

import logging
from typing import Protocol

from fastapi import Response
from fastapi.requests import HTTPConnection

from salesdesk.core.config import settings
from salesdesk.core.security import decode_session_token
from salesdesk.enums import AuthProvider, Role
from salesdesk.schemas.auth import Identity
from salesdesk.services.identity_provider import PROVIDER_SESSION_COOKIE, verify_provider_token
from salesdesk.services.team_service import validate_email_domain

logger = logging.getLogger(__name__)

# Cookie and header names
COOKIE_NAME = "salesdesk_session"


class AuthSession(Protocol):
    provider: AuthProvider

    def current_user(self) -> Identity | None:
        """The authenticated identity, or None."""
        ...

    def access_denied(self) -> bool:
        """Authenticated, but not allowed to use the dashboard."""
        ...

    def sign_out(self, response: Response) -> str | None:
        """Clear session state on ``response``; returns an optional redirect URL."""
        ...


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )


class CookieAuthSession:
    """Session carried in this service's signed cookie."""

    provider = AuthProvider.LOCAL

    def __init__(self, token: str | None):
        self.token = token
        self._identity: Identity | None = None
        self._decoded = False

    def current_user(self) -> Identity | None:
        if self._decoded:
            return self._identity
        self._decoded = True
        if not self.token:
            return None
        try:
            payload = decode_session_token(self.token)
        except Exception:
            # Corrupt or expired signature is the same as no session.
            return None
        role = payload.get("role")
        if not role or not Role.has_value(role) or not payload.get("email"):
            return None
        self._identity = Identity(
            email=payload["email"],
            name=payload.get("name") or payload["email"],
            role=Role(role),
        )
        return self._identity

    def access_denied(self) -> bool:
        return False

    def sign_out(self, response: Response) -> str | None:
        clear_session_cookie(response)
        return None


class IdentityProviderSession:
    """Session token issued by the external identity provider."""

    provider = AuthProvider.IDENTITY_PROVIDER

    def __init__(self, token: str | None, signing_key=None):
        self.token = token
        self.signing_key = signing_key
        self._identity: Identity | None = None
        self._denied = False
        self._verified = False

    def _verify(self) -> None:
        if self._verified:
            return
        self._verified = True
        if not self.token:
            return
        try:
            info = verify_provider_token(self.token, signing_key=self.signing_key)
        except ValueError as e:
            logger.info(f"Rejected provider session: {e}")
            return
        try:
            validate_email_domain(info.email)
        except ValueError:
            self._denied = True
            return
        self._identity = Identity(email=info.email, name=info.name, role=info.role)

    def current_user(self) -> Identity | None:
        self._verify()
        return self._identity

    def access_denied(self) -> bool:
        self._verify()
        return self._denied

    def sign_out(self, response: Response) -> str | None:
        response.delete_cookie(PROVIDER_SESSION_COOKIE, path="/")
        return settings.IDP_SIGN_OUT_URL or None


def _bearer_token(request: HTTPConnection) -> str | None:
    header = request.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value:
        return value.strip()
    return None


def build_auth_session(request: HTTPConnection) -> AuthSession:
    """Session for a request or websocket, according to the configured AUTH_PROVIDER."""
    if settings.uses_identity_provider:
        token = request.cookies.get(PROVIDER_SESSION_COOKIE) or _bearer_token(request)
        return IdentityProviderSession(token)
    return CookieAuthSession(request.cookies.get(COOKIE_NAME))
