"""Tests for the backend REST client against a mocked transport."""

import json

import httpx
import pytest

from salesdesk.services.backend_client import BackendClient, BackendError


def make_client(handler) -> BackendClient:
    return BackendClient("http://backend.test/", "service-key", transport=httpx.MockTransport(handler))


async def test_select_sends_service_key_and_query_params():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"ticket_id": "T1"}])

    client = make_client(handler)
    rows = await client.select("tickets", columns="ticket_id", order="created_at.asc", filters={"status": "eq.open"})
    await client.aclose()

    assert rows == [{"ticket_id": "T1"}]
    request = seen[0]
    assert request.url.path == "/rest/v1/tickets"
    assert request.url.params["select"] == "ticket_id"
    assert request.url.params["order"] == "created_at.asc"
    assert request.url.params["status"] == "eq.open"
    assert request.headers["apikey"] == "service-key"
    assert request.headers["authorization"] == "Bearer service-key"


async def test_select_all_pages_until_short_page():
    data = [{"id": i} for i in range(5)]
    offsets = []

    def handler(request: httpx.Request) -> httpx.Response:
        offset = int(request.url.params["offset"])
        limit = int(request.url.params["limit"])
        offsets.append(offset)
        return httpx.Response(200, json=data[offset:offset + limit])

    client = make_client(handler)
    rows = await client.select_all("chat_logs", page_size=2, order="created_at.asc")
    await client.aclose()

    assert rows == data
    assert offsets == [0, 2, 4]


async def test_error_response_raises_backend_error_with_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Invalid API key"})

    client = make_client(handler)
    with pytest.raises(BackendError) as exc:
        await client.select("tickets")
    await client.aclose()

    assert exc.value.status_code == 401
    assert exc.value.message == "Invalid API key"


async def test_transport_error_raises_backend_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = make_client(handler)
    with pytest.raises(BackendError) as exc:
        await client.select("tickets")
    await client.aclose()

    assert exc.value.status_code is None
    assert "ConnectError" in exc.value.message


async def test_insert_asks_for_representation():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json=[{"id": 7, **json.loads(request.content)}])

    client = make_client(handler)
    created = await client.insert("chat_logs", {"user_id": "t1", "message": "hi"})
    await client.aclose()

    assert created == {"id": 7, "user_id": "t1", "message": "hi"}
    assert seen[0].method == "POST"
    assert seen[0].headers["prefer"] == "return=representation"


async def test_update_matches_with_eq_filter():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"ticket_id": "T1", "status": "resolved"}])

    client = make_client(handler)
    rows = await client.update("tickets", {"status": "resolved"}, match={"ticket_id": "T1"})
    await client.aclose()

    assert rows == [{"ticket_id": "T1", "status": "resolved"}]
    assert seen[0].method == "PATCH"
    assert seen[0].url.params["ticket_id"] == "eq.T1"
    assert json.loads(seen[0].content) == {"status": "resolved"}


async def test_invite_posts_email_role_claim_and_redirect():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "u1"})

    client = make_client(handler)
    await client.invite_user_by_email("new@frostrek.com", data={"role": "sales"}, redirect_to="http://app.test")
    await client.aclose()

    request = seen[0]
    assert request.url.path == "/auth/v1/invite"
    assert request.url.params["redirect_to"] == "http://app.test"
    assert json.loads(request.content) == {"email": "new@frostrek.com", "data": {"role": "sales"}}
