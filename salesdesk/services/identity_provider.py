"""Identity provider session token verification."""

from functools import lru_cache

import jwt
from pydantic import BaseModel

from salesdesk.core.config import settings
from salesdesk.enums import Role

# Cookie the provider's frontend SDK sets for same-site requests.
PROVIDER_SESSION_COOKIE = "__session"


class ProviderUserInfo(BaseModel):
    """Verified user info extracted from a provider session token."""

    sub: str  # Provider's unique user identifier
    email: str  # Normalized to lowercase
    name: str
    role: Role


@lru_cache(maxsize=4)
def _jwks_client(jwks_url: str) -> jwt.PyJWKClient:
    # PyJWKClient caches fetched keys itself; one client per URL.
    return jwt.PyJWKClient(jwks_url)


def _claim_role(claims: dict) -> Role:
    for container in (claims, claims.get("metadata") or {}, claims.get("public_metadata") or {}):
        value = container.get("role") if isinstance(container, dict) else None
        if value and Role.has_value(value):
            return Role(value)
    return Role(settings.DEFAULT_LOGIN_ROLE)


def verify_provider_token(token: str, signing_key=None) -> ProviderUserInfo:
    """
    Verify a provider-issued session JWT.

    Signature is checked against the provider's JWKS (RS256); issuer and
    audience are enforced when configured. ``signing_key`` bypasses the JWKS
    lookup.

    Raises:
        ValueError: If the token is invalid or carries no email
    """
    try:
        key = signing_key
        if key is None:
            if not settings.IDP_JWKS_URL:
                raise ValueError("Identity provider JWKS URL not configured")
            key = _jwks_client(settings.IDP_JWKS_URL).get_signing_key_from_jwt(token).key
        options = {"verify_aud": bool(settings.IDP_AUDIENCE)}
        claims = jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            issuer=settings.IDP_ISSUER or None,
            audience=settings.IDP_AUDIENCE or None,
            options=options,
        )
    except (jwt.InvalidTokenError, jwt.PyJWKClientError) as e:
        raise ValueError(f"Invalid provider token: {e}") from e

    email = claims.get("email") or claims.get("primary_email")
    if not email:
        raise ValueError("Provider token carries no email")

    return ProviderUserInfo(
        sub=str(claims.get("sub", "")),
        email=email.lower(),
        name=claims.get("name") or email.split("@")[0],
        role=_claim_role(claims),
    )
