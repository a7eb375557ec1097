"""HTTP helpers shared by the outbound clients."""

from __future__ import annotations

from typing import Any

import httpx


def build_async_client(
    *,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an ``AsyncClient`` with an explicit deadline for every request."""
    return httpx.AsyncClient(timeout=httpx.Timeout(timeout), transport=transport)


def extract_error_detail(response: httpx.Response) -> Any:
    """Return the upstream error payload in the most useful form available.

    Graph API failures carry an ``error`` object; other services may answer
    with arbitrary JSON or plain text.
    """
    try:
        body: Any = response.json()
    except ValueError:
        return {"raw": response.text[:500]}
    if isinstance(body, dict) and "error" in body:
        return body["error"]
    return body


def describe_transport_error(exc: httpx.HTTPError) -> str:
    """Render a transport failure, which often has an empty message."""
    message = str(exc)
    if message:
        return f"{exc.__class__.__name__}: {message}"
    return exc.__class__.__name__


__all__ = ["build_async_client", "describe_transport_error", "extract_error_detail"]
