"""Tests for built-in login, session tokens, logout and /auth/me."""

import jwt
import pytest
from httpx import AsyncClient

from salesdesk.core.auth_session import COOKIE_NAME
from salesdesk.core.config import settings
from salesdesk.core.security import (
    create_session_token,
    decode_session_token,
    display_name_from_login_email,
    expected_password,
    refresh_session_token,
    validate_login_email,
)
from salesdesk.enums import Role
from salesdesk.services import auth_service

from conftest import FakeBackend


# =============================================================================
# Credential scheme
# =============================================================================


def test_login_email_format():
    assert validate_login_email("arghya.choudhury@frostrek.com")
    assert not validate_login_email("arghya@frostrek.com")
    assert not validate_login_email("arghya.choudhury@gmail.com")
    assert not validate_login_email("arghya.choudhury2@frostrek.com")


def test_expected_password_from_first_name():
    assert expected_password("arghya.choudhury@frostrek.com") == "Argh@123"
    assert expected_password("JO.smith@frostrek.com") == "Jo@123"


def test_display_name_from_login_email():
    assert display_name_from_login_email("arghya.choudhury@frostrek.com") == "Arghya Choudhury"


# =============================================================================
# Session tokens
# =============================================================================


def test_session_token_roundtrip_carries_identity():
    token = create_session_token(email="a.b@frostrek.com", name="A B", role="sales")
    payload = decode_session_token(token)
    assert payload["email"] == "a.b@frostrek.com"
    assert payload["role"] == "sales"
    assert payload["exp"] - payload["iat"] == settings.SESSION_EXPIRES_HOURS * 3600


def test_previous_secret_still_verifies(monkeypatch):
    old = create_session_token(email="a.b@frostrek.com", name="A B", role="admin")
    monkeypatch.setattr(settings, "JWT_SECRET_PREVIOUS", settings.JWT_SECRET)
    monkeypatch.setattr(settings, "JWT_SECRET", "rotated-secret")

    assert decode_session_token(old)["email"] == "a.b@frostrek.com"
    refreshed = refresh_session_token(old)
    assert jwt.decode(refreshed, "rotated-secret", algorithms=["HS256"])["role"] == "admin"


def test_unknown_secret_is_rejected():
    token = jwt.encode({"email": "x@y.z", "role": "admin"}, "someone-else", algorithm="HS256")
    with pytest.raises(jwt.InvalidTokenError):
        decode_session_token(token)


# =============================================================================
# Login service
# =============================================================================


async def test_authenticate_uses_profile_role(backend: FakeBackend):
    identity = await auth_service.authenticate(backend, "sam.sales@frostrek.com", "Sam@123")
    assert identity.role == Role.SALES
    assert identity.name == "Sam Sales"


async def test_authenticate_defaults_role_without_profile(backend: FakeBackend):
    identity = await auth_service.authenticate(backend, "new.person@frostrek.com", "New@123")
    assert identity.role == Role(settings.DEFAULT_LOGIN_ROLE)


async def test_authenticate_defaults_role_when_profiles_unreadable(backend: FakeBackend):
    backend.fail["profiles"] = "boom"
    identity = await auth_service.authenticate(backend, "sam.sales@frostrek.com", "Sam@123")
    assert identity.role == Role(settings.DEFAULT_LOGIN_ROLE)


@pytest.mark.parametrize(
    "email,password,status",
    [
        (None, "x", 400),
        ("sam.sales@frostrek.com", "", 400),
        ("sam@frostrek.com", "Sam@123", 400),
        ("sam.sales@frostrek.com", "wrong", 401),
    ],
)
async def test_authenticate_rejections(backend: FakeBackend, email, password, status):
    with pytest.raises(auth_service.LoginError) as exc:
        await auth_service.authenticate(backend, email, password)
    assert exc.value.status_code == status


# =============================================================================
# Endpoints
# =============================================================================


async def test_login_sets_session_cookie(client: AsyncClient):
    response = await client.post(
        "/auth/login",
        json={"email": "arghya.choudhury@frostrek.com", "password": "Argh@123"},
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Arghya Choudhury"
    set_cookie = response.headers["set-cookie"]
    assert f"{COOKIE_NAME}=" in set_cookie
    assert "httponly" in set_cookie.lower()


async def test_login_wrong_password(client: AsyncClient):
    response = await client.post(
        "/auth/login",
        json={"email": "arghya.choudhury@frostrek.com", "password": "nope"},
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


async def test_login_bad_format_mentions_expected_shape(client: AsyncClient):
    response = await client.post("/auth/login", json={"email": "arghya@frostrek.com", "password": "x"})
    assert response.status_code == 400
    assert "first.last@frostrek.com" in response.json()["detail"]


async def test_me_requires_session(client: AsyncClient):
    response = await client.get("/auth/me")
    assert response.status_code == 401


async def test_me_returns_identity(authed_client: AsyncClient):
    response = await authed_client.get("/auth/me")
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "arghya.choudhury@frostrek.com"
    assert data["role"] == "admin"
    assert data["provider"] == "local"


async def test_logout_clears_cookie(authed_client: AsyncClient):
    response = await authed_client.post("/auth/logout")
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert f'{COOKIE_NAME}=""' in response.headers["set-cookie"]


async def test_logout_without_session_still_succeeds(client: AsyncClient):
    response = await client.post("/auth/logout")
    assert response.status_code == 200
