"""Backend for a Supabase/PostgREST REST endpoint."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from learnpath.config import (
    LEARNPATH_FETCH_TIMEOUT_S,
    LEARNPATH_SUPABASE_KEY,
    LEARNPATH_SUPABASE_URL,
    LEARNPATH_USER_AGENT,
)
from learnpath.exceptions import RecordNotFoundError
from learnpath.http_utils import request_with_retries
from learnpath.persistence.base import Filters, Row, Table

logger = logging.getLogger(__name__)

_REST_PREFIX = "/rest/v1"


class PostgrestBackend:
    """PersistenceBackend over PostgREST.

    Use as an async context manager, or call ``aclose`` when done::

        async with PostgrestBackend.from_env() as backend:
            rows = await backend.select(Table.PATHS, filters={"id": path_id})
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = LEARNPATH_FETCH_TIMEOUT_S,
    ) -> None:
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "User-Agent": LEARNPATH_USER_AGENT,
        }
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/") + _REST_PREFIX,
            headers=headers,
            timeout=httpx.Timeout(timeout_s),
        )

    @classmethod
    def from_env(cls) -> PostgrestBackend:
        return cls(LEARNPATH_SUPABASE_URL, LEARNPATH_SUPABASE_KEY)

    async def __aenter__(self) -> PostgrestBackend:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def select(
        self,
        table: Table,
        *,
        filters: Filters | None = None,
        order_by: str | None = None,
        single: bool = False,
    ) -> Any:
        params = {"select": "*", **_filter_params(filters)}
        if order_by:
            params["order"] = f"{order_by}.asc"
        if single:
            params["limit"] = "1"
        response = await request_with_retries(self._client, "GET", f"/{table.value}", params=params)
        rows = response.json()
        if single:
            return rows[0] if rows else None
        return rows

    async def insert(self, table: Table, rows: Sequence[Row]) -> list[Row]:
        if not rows:
            return []
        response = await request_with_retries(
            self._client,
            "POST",
            f"/{table.value}",
            json=list(rows),
            headers={"Prefer": "return=representation"},
        )
        return response.json()

    async def update(self, table: Table, row_id: str, values: Row) -> None:
        response = await request_with_retries(
            self._client,
            "PATCH",
            f"/{table.value}",
            params={"id": f"eq.{row_id}"},
            json=values,
            headers={"Prefer": "return=representation"},
        )
        if not response.json():
            raise RecordNotFoundError(f"No row {row_id} in {table.value}")

    async def upsert(self, table: Table, rows: Sequence[Row]) -> list[Row]:
        if not rows:
            return []
        response = await request_with_retries(
            self._client,
            "POST",
            f"/{table.value}",
            json=list(rows),
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        )
        return response.json()

    async def delete(self, table: Table, *, filters: Filters) -> int:
        if not filters:
            # PostgREST rejects unfiltered deletes; refuse before sending.
            raise ValueError("delete requires at least one filter")
        response = await request_with_retries(
            self._client,
            "DELETE",
            f"/{table.value}",
            params=_filter_params(filters),
            headers={"Prefer": "return=representation"},
        )
        removed = len(response.json())
        logger.debug("Deleted %d row(s) from %s", removed, table.value)
        return removed


def _filter_params(filters: Filters | None) -> dict[str, str]:
    """Encode equality filters as PostgREST query parameters."""
    params: dict[str, str] = {}
    for key, value in (filters or {}).items():
        if value is None:
            params[key] = "is.null"
        elif isinstance(value, bool):
            params[key] = f"eq.{str(value).lower()}"
        else:
            params[key] = f"eq.{value}"
    return params
