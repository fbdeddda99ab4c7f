"""Security utilities for session tokens and the built-in credential check."""

import re
from datetime import datetime, timedelta, timezone

import jwt

from salesdesk.core.config import settings


# =============================================================================
# Session Token (JWT in cookie)
# =============================================================================

def create_session_token(email: str, name: str, role: str) -> str:
    """
    Create signed session JWT.

    Always signs with current secret (JWT_SECRET).
    Token carries the operator identity and role; expiry is fixed at
    SESSION_EXPIRES_HOURS from now.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": email,
        "email": email,
        "name": name,
        "role": role,
        "iat": now,
        "exp": now + timedelta(hours=settings.SESSION_EXPIRES_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def decode_session_token(token: str) -> dict:
    """
    Decode and verify session JWT.

    Tries current secret first, then previous (for rotation support).

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets
    """
    last_error = None
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(token, secret, algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            last_error = e
            continue
    raise last_error  # type: ignore


def refresh_session_token(token: str) -> str:
    """
    Re-issue a still-valid session token with a fresh expiry.

    Raises:
        jwt.InvalidTokenError: If the token no longer verifies
    """
    payload = decode_session_token(token)
    return create_session_token(
        email=payload["email"],
        name=payload.get("name", ""),
        role=payload.get("role", settings.DEFAULT_LOGIN_ROLE),
    )


# =============================================================================
# Built-in credential check
# =============================================================================

def _login_email_pattern() -> re.Pattern[str]:
    return re.compile(
        rf"^[a-zA-Z]+\.[a-zA-Z]+@{re.escape(settings.COMPANY_EMAIL_DOMAIN)}$"
    )


def validate_login_email(email: str) -> bool:
    """Only firstname.lastname@<company-domain> addresses may log in."""
    return bool(_login_email_pattern().match(email))


def expected_password(email: str) -> str:
    """
    Password derived from the email: first four letters of the first name,
    capitalized, followed by LOGIN_PASSWORD_SUFFIX.

    arghya.choudhury@frostrek.com -> Argh@123

    This is a placeholder scheme, not real authentication.
    """
    first_name = email.split("@")[0].split(".")[0]
    prefix = first_name[:4]
    return f"{prefix[:1].upper()}{prefix[1:].lower()}{settings.LOGIN_PASSWORD_SUFFIX}"


def validate_login_password(email: str, password: str) -> bool:
    return password == expected_password(email)


def display_name_from_login_email(email: str) -> str:
    """first.last@domain -> 'First Last'."""
    parts = email.split("@")[0].split(".")
    first = parts[0][:1].upper() + parts[0][1:]
    last = parts[1][:1].upper() + parts[1][1:] if len(parts) > 1 and parts[1] else ""
    return f"{first} {last}".strip()
