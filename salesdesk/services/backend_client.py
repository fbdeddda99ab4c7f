"""HTTP client for the hosted data backend (PostgREST-style query API + auth admin)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1"
AUTH_ADMIN_INVITE_PATH = "/auth/v1/invite"


class BackendError(Exception):
    """A backend request failed (transport error or non-2xx response)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(data, dict):
        for key in ("message", "msg", "error_description", "error"):
            if data.get(key):
                return str(data[key])
    return f"HTTP {response.status_code}"


class BackendClient:
    """
    Thin async wrapper over the backend's REST contract.

    No retries and no explicit timeouts beyond httpx defaults; callers decide
    whether a failure is surfaced or treated as an empty result.
    """

    def __init__(
        self,
        base_url: str,
        service_key: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Content-Type": "application/json",
        }
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Backend %s %s failed: %s", method, url, exc.__class__.__name__)
            raise BackendError(f"Connection error: {exc.__class__.__name__}") from exc
        if not 200 <= response.status_code < 300:
            raise BackendError(_error_message(response), status_code=response.status_code)
        return response

    # -------------------------------------------------------------------------
    # Query API
    # -------------------------------------------------------------------------

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        order: str | None = None,
        filters: dict[str, str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Read rows from a record set.

        ``order`` uses the backend's syntax ("created_at.asc"); ``filters`` maps
        column to operator expression ("eq.open").
        """
        params: dict[str, Any] = {"select": columns}
        if order:
            params["order"] = order
        if filters:
            params.update(filters)
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            params["offset"] = offset
        response = await self._request("GET", f"{REST_PREFIX}/{table}", params=params)
        data = response.json()
        return data if isinstance(data, list) else []

    async def select_all(
        self,
        table: str,
        *,
        page_size: int,
        columns: str = "*",
        order: str | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch pages sequentially until a short page signals the end."""
        rows: list[dict[str, Any]] = []
        offset = 0
        while True:
            page = await self.select(
                table, columns=columns, order=order, limit=page_size, offset=offset
            )
            rows.extend(page)
            if len(page) < page_size:
                return rows
            offset += page_size

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        response = await self._request(
            "POST",
            f"{REST_PREFIX}/{table}",
            json=row,
            headers={"Prefer": "return=representation"},
        )
        data = response.json() if response.content else []
        if isinstance(data, list):
            return data[0] if data else dict(row)
        return data

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        *,
        match: dict[str, str],
    ) -> list[dict[str, Any]]:
        """Update rows where every ``match`` column equals its value."""
        params = {column: f"eq.{value}" for column, value in match.items()}
        response = await self._request(
            "PATCH",
            f"{REST_PREFIX}/{table}",
            params=params,
            json=values,
            headers={"Prefer": "return=representation"},
        )
        data = response.json() if response.content else []
        return data if isinstance(data, list) else [data]

    # -------------------------------------------------------------------------
    # Auth admin
    # -------------------------------------------------------------------------

    async def invite_user_by_email(
        self,
        email: str,
        *,
        data: dict[str, Any],
        redirect_to: str | None = None,
    ) -> dict[str, Any]:
        """Send the backend's email invitation, carrying ``data`` as user claims."""
        params = {"redirect_to": redirect_to} if redirect_to else None
        response = await self._request(
            "POST",
            AUTH_ADMIN_INVITE_PATH,
            params=params,
            json={"email": email, "data": data},
        )
        return response.json() if response.content else {}
