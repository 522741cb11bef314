"""HTTP client factory for the Orca AI HUNT API."""

import httpx

from orca_mcp.settings import Settings


def create_hunt_client(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Build an AsyncClient bound to the configured Orca AI endpoint.

    The key travels in the ``x-api-key`` header, not as a bearer token.
    ``transport`` lets tests plug in an ``httpx.MockTransport``.
    """
    return httpx.AsyncClient(
        base_url=settings.api_url,
        timeout=settings.timeout_seconds,
        headers={
            "x-api-key": settings.api_token,
            "Content-Type": "application/json",
        },
        transport=transport,
    )
