"""
HTTP helpers.

This module centralizes the minimal HTTP client logic used by ingestion clients.

Design goals:
- Small surface area (build a client, GET, decode JSON).
- Deterministic defaults (explicit timeout + User-Agent on every client).
- Do NOT raise on non-2xx: the ParkAPI client classifies status codes itself.
"""

from __future__ import annotations

from typing import Any

import httpx

DEFAULT_USER_AGENT = "parkwatch/0.1.0 (+https://local)"


def build_async_client(
    *,
    timeout_seconds: float = 15,
    user_agent: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the project defaults.

    `transport` is mainly a test seam (`httpx.MockTransport`).
    """
    headers = {"User-Agent": user_agent or DEFAULT_USER_AGENT}
    return httpx.AsyncClient(timeout=timeout_seconds, headers=headers, transport=transport)


async def get(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """GET `url` and return the response regardless of status.

    Raises:
        httpx.RequestError: On transport errors (no response obtained).
    """
    return await client.get(url, params=params, headers=headers)


def decode_json(resp: httpx.Response) -> Any:
    """Decode the response body as JSON.

    Raises:
        ValueError: If the body is empty or not valid JSON.
    """
    if not resp.content:
        raise ValueError("empty response body")
    return resp.json()
