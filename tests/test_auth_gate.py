"""Tests for the route gate and sliding session refresh."""

from dataclasses import dataclass

from httpx import AsyncClient

from salesdesk.core.auth_gate import evaluate
from salesdesk.core.auth_session import COOKIE_NAME
from salesdesk.enums import AuthProvider, Role
from salesdesk.schemas.auth import Identity


@dataclass
class StubSession:
    identity: Identity | None = None
    denied: bool = False
    provider: AuthProvider = AuthProvider.LOCAL

    def current_user(self):
        return self.identity

    def access_denied(self):
        return self.denied

    def sign_out(self, response):
        return None


OPERATOR = Identity(email="a.b@frostrek.com", name="A B", role=Role.SALES)


def test_unauthenticated_page_redirects_to_login():
    for path in ("/", "/dashboard", "/contacts", "/admin", "/admin/team"):
        decision = evaluate(path, StubSession())
        assert (decision.action, decision.location) == ("redirect", "/login"), path


def test_unauthenticated_api_is_401():
    assert evaluate("/api/conversations", StubSession()).action == "unauthorized"


def test_public_paths_are_allowed():
    for path in ("/login", "/health", "/webhooks/backend-changes", "/auth/login", "/unauthorized"):
        assert evaluate(path, StubSession()).action == "allow", path


def test_authenticated_login_visit_goes_home():
    decision = evaluate("/login", StubSession(identity=OPERATOR))
    assert (decision.action, decision.location) == ("redirect", "/")


def test_authenticated_protected_paths_are_allowed():
    session = StubSession(identity=OPERATOR)
    assert evaluate("/dashboard", session).action == "allow"
    assert evaluate("/api/contacts", session).action == "allow"


def test_denied_session_goes_to_unauthorized_page_or_403():
    session = StubSession(denied=True)
    decision = evaluate("/dashboard", session)
    assert (decision.action, decision.location) == ("redirect", "/unauthorized")
    assert evaluate("/api/contacts", session).action == "forbidden"
    assert evaluate("/unauthorized", session).action == "allow"


async def test_gate_redirects_page_without_following(client: AsyncClient):
    response = await client.get("/dashboard")
    assert response.status_code == 307
    assert response.headers["location"] == "/login"


async def test_gate_rejects_api_with_401(client: AsyncClient):
    response = await client.get("/api/contacts")
    assert response.status_code == 401


async def test_gate_sends_signed_in_user_home_from_login(authed_client: AsyncClient):
    response = await authed_client.get("/login")
    assert response.status_code == 307
    assert response.headers["location"] == "/"


async def test_activity_refreshes_session_cookie(authed_client: AsyncClient):
    response = await authed_client.get("/api/tickets")
    assert response.status_code == 200
    assert f"{COOKIE_NAME}=" in response.headers["set-cookie"]


async def test_garbage_cookie_counts_as_signed_out(client: AsyncClient):
    client.cookies.set(COOKIE_NAME, "not-a-jwt")
    response = await client.get("/api/contacts")
    assert response.status_code == 401
