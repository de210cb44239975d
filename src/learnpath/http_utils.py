"""HTTP utilities for talking to the REST store with retry logic."""

from __future__ import annotations

import asyncio
from typing import Any, Final

import httpx

from learnpath.config import LEARNPATH_FETCH_BACKOFF_S, LEARNPATH_FETCH_MAX_RETRIES
from learnpath.exceptions import PersistenceError

RETRY_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})

# Only requests that can be replayed safely are retried. Inserts carry no
# idempotency key, so a retried POST could store the same rows twice.
IDEMPOTENT_METHODS: Final[frozenset[str]] = frozenset({"GET", "PATCH", "DELETE"})


async def request_with_retries(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    params: dict[str, str] | None = None,
    json: Any = None,
    headers: dict[str, str] | None = None,
    max_retries: int = LEARNPATH_FETCH_MAX_RETRIES,
    backoff_s: float = LEARNPATH_FETCH_BACKOFF_S,
) -> httpx.Response:
    """Send a request, retrying transient failures of idempotent methods.

    Args:
        client: Shared httpx.AsyncClient (connection pooling).
        method: HTTP method.
        url: Absolute or client-relative URL.
        params: Query parameters.
        json: JSON body.
        headers: Extra request headers.
        max_retries: Retries after the first attempt for idempotent methods.
        backoff_s: Base delay, doubled after every attempt.

    Returns:
        The successful response.

    Raises:
        PersistenceError: On a non-retryable error status, or once all retries
            are exhausted.
    """
    attempts = max_retries + 1 if method.upper() in IDEMPOTENT_METHODS else 1
    last_exc: Exception | None = None

    for attempt in range(attempts):
        try:
            response = await client.request(method, url, params=params, json=json, headers=headers)
        except httpx.RequestError as exc:
            last_exc = exc
        else:
            if response.status_code in RETRY_STATUS_CODES:
                last_exc = PersistenceError(f"HTTP {response.status_code} from {method} {url}")
            elif response.status_code >= 400:
                raise PersistenceError(_error_message(response))
            else:
                return response

        if attempt < attempts - 1:
            await asyncio.sleep(backoff_s * (2**attempt))

    raise PersistenceError(f"{method} {url} failed: {last_exc}")


def _error_message(response: httpx.Response) -> str:
    """Extract the PostgREST error message from an error response."""
    detail = response.text
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        detail = payload["message"]
        if payload.get("code"):
            detail = f"{payload['code']}: {detail}"
    return f"HTTP {response.status_code}: {detail}"
