"""
Test configuration and fixtures.

Provides:
- In-memory fake of the data backend (same interface as BackendClient)
- Session cookie minting for authenticated tests
- HTTPX AsyncClient with proper headers
"""
import os
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

# Rate limiting off for tests; must be set before the app is imported
os.environ["TESTING"] = "1"

from salesdesk.main import app
from salesdesk.core.auth_session import COOKIE_NAME
from salesdesk.core.deps import get_backend, get_snapshot
from salesdesk.core.security import create_session_token
from salesdesk.enums import Role
from salesdesk.services.backend_client import BackendError
from salesdesk.services.snapshot_service import DashboardSnapshot


BASE_TIME = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def at(minutes: int) -> str:
    """ISO timestamp ``minutes`` after BASE_TIME, as the backend returns it."""
    return (BASE_TIME + timedelta(minutes=minutes)).isoformat()


# =============================================================================
# Fake backend
# =============================================================================

class FakeBackend:
    """
    Rows held in memory per table.

    Honors the parts of the query contract the service relies on:
    ``order`` (single column), ``eq.`` filters, limit/offset paging.
    ``fail`` maps a table name (or "invite") to an error message to raise.
    """

    def __init__(self, tables: dict[str, list[dict[str, Any]]] | None = None):
        self.tables: dict[str, list[dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.fail: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []
        self.invites: list[dict[str, Any]] = []
        self.closed = False

    def _check(self, key: str) -> None:
        if key in self.fail:
            raise BackendError(self.fail[key], status_code=500)

    async def select(self, table, *, columns="*", order=None, filters=None, limit=None, offset=None):
        self.calls.append(("select", table))
        self._check(table)
        rows = list(self.tables.get(table, []))
        for column, expression in (filters or {}).items():
            value = expression.split(".", 1)[1]
            rows = [r for r in rows if str(r.get(column)) == value]
        if order:
            column, _, direction = order.partition(".")
            rows.sort(key=lambda r: str(r.get(column) or ""), reverse=direction == "desc")
        start = offset or 0
        end = start + limit if limit is not None else None
        return [dict(r) for r in rows[start:end]]

    async def select_all(self, table, *, page_size, columns="*", order=None):
        rows = []
        offset = 0
        while True:
            page = await self.select(table, columns=columns, order=order, limit=page_size, offset=offset)
            rows.extend(page)
            if len(page) < page_size:
                return rows
            offset += page_size

    async def insert(self, table, row):
        self.calls.append(("insert", table))
        self._check(table)
        stored = dict(row)
        if table == "tickets":
            stored.setdefault("ticket_id", f"T{len(self.tables.get(table, [])) + 100}")
        else:
            stored.setdefault("id", len(self.tables.get(table, [])) + 1000)
        self.tables.setdefault(table, []).append(stored)
        return dict(stored)

    async def update(self, table, values, *, match):
        self.calls.append(("update", table))
        self._check(table)
        updated = []
        for row in self.tables.get(table, []):
            if all(str(row.get(k)) == str(v) for k, v in match.items()):
                row.update(values)
                updated.append(dict(row))
        return updated

    async def invite_user_by_email(self, email, *, data, redirect_to=None):
        self.calls.append(("invite", email))
        self._check("invite")
        self.invites.append({"email": email, "data": data, "redirect_to": redirect_to})
        return {"id": "invited-user", "email": email}

    async def aclose(self):
        self.closed = True


def sample_tables() -> dict[str, list[dict[str, Any]]]:
    """A small inbox: two customers, one ticket resolved, one thread untracked."""
    return {
        "chat_logs": [
            {"id": 1, "user_id": "thread-a", "role": "user", "message": "Hi, my name is Arjun Mehta", "created_at": at(0)},
            {"id": 2, "user_id": "thread-a", "role": "assistant", "message": "Hello Arjun! How can I help?", "created_at": at(1)},
            {"id": 3, "user_id": "thread-a", "role": "user", "message": "Mail me at arjun@acme.com", "created_at": at(2)},
            {"id": 4, "user_id": "thread-b", "role": "user", "message": "sam@acme.com here, call 555-123-4567", "created_at": at(10)},
            {"id": 5, "user_id": "thread-c", "role": "user", "message": "just browsing", "created_at": at(5)},
        ],
        "tickets": [
            {"ticket_id": "T1", "user_email": "arjun@acme.com", "status": "resolved", "ticket_number": "ST-1001"},
            {"ticket_id": "T2", "user_email": "lee@globex.com", "status": "open", "ticket_number": "ST-1002"},
        ],
        "profiles": [
            {"id": "p1", "email": "anna.admin@frostrek.com", "role": "admin", "status": "active"},
            {"id": "p2", "email": "sam.sales@frostrek.com", "role": "sales", "status": None},
        ],
    }


@pytest.fixture(scope="function")
def backend() -> FakeBackend:
    return FakeBackend(sample_tables())


@pytest.fixture(scope="function")
def snapshot(backend: FakeBackend) -> DashboardSnapshot:
    return DashboardSnapshot(backend)


# =============================================================================
# Auth Fixtures
# =============================================================================

def session_cookie(role: Role = Role.ADMIN, email: str = "arghya.choudhury@frostrek.com") -> dict[str, str]:
    token = create_session_token(email=email, name="Arghya Choudhury", role=role.value)
    return {COOKIE_NAME: token}


# =============================================================================
# Client Fixtures
# =============================================================================

def _override(backend: FakeBackend, snapshot: DashboardSnapshot) -> None:
    app.dependency_overrides[get_backend] = lambda: backend
    app.dependency_overrides[get_snapshot] = lambda: snapshot


@pytest.fixture(scope="function")
async def client(backend: FakeBackend, snapshot: DashboardSnapshot) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated AsyncClient."""
    _override(backend, snapshot)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def authed_client(backend: FakeBackend, snapshot: DashboardSnapshot) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient with an admin session cookie and CSRF header."""
    _override(backend, snapshot)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        cookies=session_cookie(Role.ADMIN),
        headers={"X-Requested-With": "XMLHttpRequest"},  # CSRF header
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def sales_client(backend: FakeBackend, snapshot: DashboardSnapshot) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient with a sales session cookie and CSRF header."""
    _override(backend, snapshot)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        cookies=session_cookie(Role.SALES, email="sam.sales@frostrek.com"),
        headers={"X-Requested-With": "XMLHttpRequest"},
    ) as c:
        yield c
    app.dependency_overrides.clear()
