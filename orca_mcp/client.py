"""
HUNT API client wrapper for the Orca AI service.

Every outbound call goes through ``execute``, which applies the bounded 5xx
retry policy. ``search`` shapes the HUNT request, translates HTTP failures
into the ``orca_mcp.errors`` taxonomy and parses the payload.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import httpx
from pydantic import ValidationError

from orca_mcp.errors import (
    AuthenticationFailureError,
    BadRequestError,
    HuntApiError,
    NetworkError,
    RateLimitedError,
    UpstreamServerError,
)
from orca_mcp.http_client import create_hunt_client
from orca_mcp.models import HuntSearchResult
from orca_mcp.retry import retry_async
from orca_mcp.settings import DEFAULT_MAX_RETRIES, Settings

logger = logging.getLogger(__name__)

HUNT_API_VERSION = "v0.2"
HUNT_ENDPOINT = f"/{HUNT_API_VERSION}/hunt"


def _require_non_blank(value: str, field_name: str) -> str:
    """Reject blank arguments; the value itself is passed through untouched."""
    if not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string.")
    return value


def _body_snippet(response: httpx.Response) -> str:
    snippet = response.text.strip()
    if len(snippet) > 512:
        snippet = f"{snippet[:512]}..."
    return snippet


def _upstream_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return None


def _translate_status_error(exc: httpx.HTTPStatusError) -> HuntApiError:
    response = exc.response
    status = response.status_code
    logger.warning(
        "HUNT API responded with error",
        extra={
            "method": exc.request.method,
            "path": exc.request.url.path,
            "status_code": status,
            "content": _body_snippet(response),
        },
    )
    if status == 401:
        return AuthenticationFailureError(
            "Authentication failed. Please verify your API key is correct and has proper permissions."
        )
    if status == 400:
        return BadRequestError(_upstream_message(response) or "Bad request parameters")
    if status == 429:
        return RateLimitedError("Rate limit exceeded. Please wait before making another request.")

    message = f"HUNT API error ({status}): {_body_snippet(response) or 'no body provided.'}"
    if status >= 500:
        return UpstreamServerError(message)
    return HuntApiError(message)


@dataclass(slots=True)
class HuntApiClient:
    """Typed wrapper around an AsyncClient bound to one configuration."""

    _client: httpx.AsyncClient
    max_retries: int = DEFAULT_MAX_RETRIES
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> "HuntApiClient":
        """Factory that builds the client from Settings."""
        return cls(
            create_hunt_client(settings, transport=transport),
            max_retries=settings.max_retries,
            sleep=sleep,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP resources."""
        await self._client.aclose()

    async def __aenter__(self) -> "HuntApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def execute(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
    ) -> httpx.Response:
        """
        Send one logical request, retrying 5xx responses.

        Raises ``httpx.HTTPStatusError`` for error statuses (the last one once
        retries are spent) and ``httpx.RequestError`` for transport failures.
        """

        async def _attempt() -> httpx.Response:
            response = await self._client.request(method, path, json=json)
            response.raise_for_status()
            return response

        return await retry_async(_attempt, max_retries=self.max_retries, sleep=self.sleep)

    async def search(self, query: str, next_token: str | None = None) -> HuntSearchResult:
        """Run a HUNT search and return the parsed page of results."""
        query_value = _require_non_blank(query, "query")
        payload: dict[str, str] = {"query": query_value}
        if next_token:
            payload["nextToken"] = next_token

        logger.debug(
            "Running HUNT search",
            extra={"endpoint": HUNT_ENDPOINT, "paginated": bool(next_token)},
        )
        try:
            response = await self.execute("POST", HUNT_ENDPOINT, json=payload)
        except httpx.HTTPStatusError as exc:
            raise _translate_status_error(exc) from exc
        except httpx.TimeoutException as exc:
            logger.error("HUNT API request timed out", extra={"endpoint": HUNT_ENDPOINT})
            raise NetworkError(f"HUNT API request timed out (POST {HUNT_ENDPOINT}).") from exc
        except httpx.RequestError as exc:
            logger.error(
                "HUNT API request failed",
                extra={"endpoint": HUNT_ENDPOINT},
                exc_info=exc,
            )
            raise NetworkError(f"HUNT API request failed (POST {HUNT_ENDPOINT}): {exc!s}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("HUNT API returned invalid JSON", extra={"endpoint": HUNT_ENDPOINT})
            raise HuntApiError(f"HUNT API returned invalid JSON during POST {HUNT_ENDPOINT}.") from exc

        if isinstance(data, dict):
            data.setdefault("query", query_value)
        try:
            return HuntSearchResult.model_validate(data)
        except ValidationError as exc:
            logger.error("HUNT API returned an unexpected payload", extra={"endpoint": HUNT_ENDPOINT})
            raise HuntApiError(f"HUNT API returned an unexpected payload: {exc.error_count()} invalid field(s).") from exc
