"""Tests for identity-provider sessions (RS256 tokens, domain policy, sign-out)."""

import time

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import Response

from salesdesk.core.auth_gate import evaluate
from salesdesk.core.auth_session import IdentityProviderSession
from salesdesk.core.config import settings
from salesdesk.enums import AuthProvider, Role
from salesdesk.services.identity_provider import PROVIDER_SESSION_COOKIE, verify_provider_token


@pytest.fixture(scope="module")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def public_key(private_key):
    return private_key.public_key()


def provider_token(private_key, **claims) -> str:
    now = int(time.time())
    payload = {"sub": "user_123", "email": "Dana.Lee@Acme.com", "iat": now, "exp": now + 300}
    payload.update(claims)
    return jwt.encode(payload, private_key, algorithm="RS256")


def test_verify_extracts_lowercased_email_and_default_role(private_key, public_key):
    info = verify_provider_token(provider_token(private_key), signing_key=public_key)
    assert info.email == "dana.lee@acme.com"
    assert info.name == "Dana.Lee"
    assert info.role == Role(settings.DEFAULT_LOGIN_ROLE)


def test_role_read_from_public_metadata(private_key, public_key):
    token = provider_token(private_key, name="Dana Lee", public_metadata={"role": "sales"})
    info = verify_provider_token(token, signing_key=public_key)
    assert info.role == Role.SALES
    assert info.name == "Dana Lee"


def test_expired_token_is_rejected(private_key, public_key):
    token = provider_token(private_key, exp=int(time.time()) - 10)
    with pytest.raises(ValueError):
        verify_provider_token(token, signing_key=public_key)


def test_token_signed_by_other_key_is_rejected(private_key):
    other = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    with pytest.raises(ValueError):
        verify_provider_token(provider_token(private_key), signing_key=other.public_key())


def test_issuer_enforced_when_configured(private_key, public_key, monkeypatch):
    monkeypatch.setattr(settings, "IDP_ISSUER", "https://idp.example")
    with pytest.raises(ValueError):
        verify_provider_token(provider_token(private_key, iss="https://evil.example"), signing_key=public_key)
    info = verify_provider_token(provider_token(private_key, iss="https://idp.example"), signing_key=public_key)
    assert info.sub == "user_123"


def test_token_without_email_is_rejected(private_key, public_key):
    token = provider_token(private_key, email=None)
    with pytest.raises(ValueError):
        verify_provider_token(token, signing_key=public_key)


def test_session_allows_permitted_domain(private_key, public_key, monkeypatch):
    monkeypatch.setattr(settings, "ALLOWED_EMAIL_DOMAINS", "acme.com")
    session = IdentityProviderSession(provider_token(private_key), signing_key=public_key)

    assert session.provider == AuthProvider.IDENTITY_PROVIDER
    assert not session.access_denied()
    assert session.current_user().email == "dana.lee@acme.com"
    assert evaluate("/dashboard", session).action == "allow"


def test_session_denied_for_other_domain(private_key, public_key, monkeypatch):
    monkeypatch.setattr(settings, "ALLOWED_EMAIL_DOMAINS", "frostrek.com")
    session = IdentityProviderSession(provider_token(private_key), signing_key=public_key)

    assert session.access_denied()
    assert session.current_user() is None
    decision = evaluate("/contacts", session)
    assert (decision.action, decision.location) == ("redirect", "/unauthorized")
    assert evaluate("/api/contacts", session).action == "forbidden"


def test_invalid_session_is_signed_out_not_denied(public_key):
    session = IdentityProviderSession("garbage", signing_key=public_key)
    assert not session.access_denied()
    assert session.current_user() is None
    assert evaluate("/dashboard", session).location == "/login"


def test_sign_out_clears_provider_cookie_and_returns_redirect(public_key, monkeypatch):
    monkeypatch.setattr(settings, "IDP_SIGN_OUT_URL", "https://idp.example/sign-out")
    response = Response()
    redirect = IdentityProviderSession(None, signing_key=public_key).sign_out(response)

    assert redirect == "https://idp.example/sign-out"
    assert f'{PROVIDER_SESSION_COOKIE}=""' in response.headers["set-cookie"]
