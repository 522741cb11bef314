"""MCP tool registrations for the Orca AI server."""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, TypeVar

import httpx
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext
from fastmcp.tools.tool import ToolResult
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from orca_mcp.client import HuntApiClient
from orca_mcp.errors import (
    ArgumentValidationError,
    ConfigurationAbsentError,
    HuntApiError,
    OrcaMcpError,
    ToolDisabledError,
    UnknownToolError,
)
from orca_mcp.formatting import format_context, format_hunt_results
from orca_mcp.models import HuntSearchResult
from orca_mcp.settings import ENV_TOOLS_HUNT, Settings, aresolve_settings

logger = logging.getLogger(__name__)

DETECT_CONTEXT_TOOL = "detect_orca_context"
HUNT_TOOL = "get_hunt_results"

DETECT_CONTEXT_DESCRIPTION = (
    "Detect current Orca AI configuration and context. Use this tool without parameters "
    "to check if Orca AI is configured properly, including API URL, timeouts, retries, "
    "and enabled features like HUNT search."
)
HUNT_DESCRIPTION = (
    "Search across datasets using Orca AI's HUNT API for people, companies, and entities. "
    "Provide a 'query' string (required) for the search term. Optionally include "
    "'nextToken' string for pagination. Example arguments: {'query': 'example company'}."
)

HUNT_OUTPUT_SCHEMA: dict[str, Any] = HuntSearchResult.model_json_schema(
    by_alias=True,
    mode="serialization",
)

ModelT = TypeVar("ModelT", bound=BaseModel)


class DetectContextArguments(BaseModel):
    model_config = ConfigDict(extra="forbid")


class HuntArguments(BaseModel):
    """Search arguments; values are forwarded upstream exactly as given."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    query: str = Field(min_length=1)
    next_token: str | None = Field(default=None, alias="nextToken")

    @field_validator("query")
    @classmethod
    def _reject_blank_query(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be blank")
        return value


@dataclass(frozen=True, slots=True)
class ToolContext:
    """Per-call view of the configuration and the client bound to it."""

    settings: Settings | None
    client: HuntApiClient | None


@dataclass(frozen=True, slots=True)
class ToolResponse:
    text: str
    is_error: bool = False
    structured: dict[str, Any] | None = None


def advertised_tools(settings: Settings | None) -> list[str]:
    """Tool names to expose for the given configuration."""
    if settings is None:
        return [DETECT_CONTEXT_TOOL]
    tools = [DETECT_CONTEXT_TOOL]
    if settings.hunt_enabled:
        tools.append(HUNT_TOOL)
    return tools


def _parse_arguments(model: type[ModelT], arguments: Mapping[str, Any]) -> ModelT:
    try:
        return model.model_validate(dict(arguments))
    except ValidationError as exc:
        details = ", ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'arguments'}: {error['msg']}"
            for error in exc.errors()
        )
        raise ArgumentValidationError(f"Invalid arguments: {details}") from exc


def _log_tool_event(tool_name: str, event: str, **fields: object) -> None:
    logger.info(
        "orca_tool_event",
        extra={"tool": tool_name, "event": event, **fields},
    )


class OrcaToolService:
    """
    Lists and executes the Orca tools.

    Nothing is cached between calls: every listing and every execution
    resolves the configuration again and builds a fresh ``ToolContext``.
    """

    def __init__(
        self,
        *,
        cwd: Path | str | None = None,
        environ: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._cwd = cwd
        self._environ = environ
        self._transport = transport
        self._sleep = sleep
        self._handlers: dict[str, Callable[[ToolContext, Mapping[str, Any]], Awaitable[ToolResponse]]] = {
            DETECT_CONTEXT_TOOL: self._detect_context,
            HUNT_TOOL: self._get_hunt_results,
        }

    async def resolve(self) -> Settings | None:
        return await aresolve_settings(self._cwd, self._environ)

    async def list_tools(self) -> list[str]:
        return advertised_tools(await self.resolve())

    @asynccontextmanager
    async def open_context(self) -> AsyncIterator[ToolContext]:
        """Resolve settings and bind a client for the duration of one call."""
        settings = await self.resolve()
        if settings is None:
            yield ToolContext(settings=None, client=None)
            return
        async with HuntApiClient.from_settings(
            settings,
            transport=self._transport,
            sleep=self._sleep,
        ) as client:
            yield ToolContext(settings=settings, client=client)

    async def call_tool(self, name: str, arguments: Mapping[str, Any] | None = None) -> ToolResponse:
        """Execute a tool; failures come back as an error response, never raised."""
        try:
            handler = self._handlers.get(name)
            if handler is None:
                raise UnknownToolError(f"Unknown tool: {name}")
            async with self.open_context() as context:
                response = await handler(context, arguments or {})
        except HuntApiError as exc:
            logger.warning("%s failed due to API error", name, exc_info=True)
            _log_tool_event(name, "api_error", error=str(exc))
            return ToolResponse(f"Error: {exc}", is_error=True)
        except OrcaMcpError as exc:
            logger.warning("%s rejected: %s", name, exc)
            _log_tool_event(name, "rejected", error=str(exc))
            return ToolResponse(f"Error: {exc}", is_error=True)
        except Exception as exc:  # noqa: BLE001
            logger.exception("%s failed unexpectedly", name)
            _log_tool_event(name, "unexpected_error", error=str(exc))
            return ToolResponse(f"Error: Unexpected error: {exc}", is_error=True)

        _log_tool_event(name, "success")
        return response

    async def _detect_context(self, context: ToolContext, arguments: Mapping[str, Any]) -> ToolResponse:
        _parse_arguments(DetectContextArguments, arguments)
        return ToolResponse(format_context(context.settings))

    async def _get_hunt_results(self, context: ToolContext, arguments: Mapping[str, Any]) -> ToolResponse:
        if context.settings is None or context.client is None:
            raise ConfigurationAbsentError(
                f"Configuration not loaded. Run {DETECT_CONTEXT_TOOL} first."
            )
        if not context.settings.hunt_enabled:
            raise ToolDisabledError(
                f"{HUNT_TOOL} is disabled by configuration (tools.hunt / {ENV_TOOLS_HUNT})."
            )
        parsed = _parse_arguments(HuntArguments, arguments)
        result = await context.client.search(parsed.query, parsed.next_token)
        _log_tool_event(
            HUNT_TOOL,
            "search_completed",
            documents=len(result.hunt_documents),
            has_next_page=bool(result.next_token),
        )
        return ToolResponse(format_hunt_results(result), structured=result.to_payload())


class ConfiguredToolsMiddleware(Middleware):
    """Hides tools the current configuration does not enable."""

    def __init__(self, service: OrcaToolService) -> None:
        self._service = service

    async def on_list_tools(
        self,
        context: MiddlewareContext,
        call_next: CallNext,
    ) -> Any:
        tools = await call_next(context)
        advertised = set(await self._service.list_tools())
        return [tool for tool in tools if tool.name in advertised]


def register_orca_tools(mcp: FastMCP, service: OrcaToolService) -> None:
    """Register the Orca tools and the listing filter on ``mcp``."""

    async def _respond(tool_name: str, arguments: dict[str, Any]) -> ToolResponse:
        response = await service.call_tool(tool_name, arguments)
        if response.is_error:
            raise ToolError(response.text)
        return response

    @mcp.tool(name=DETECT_CONTEXT_TOOL, description=DETECT_CONTEXT_DESCRIPTION)
    async def detect_orca_context() -> str:
        """Report the resolved Orca AI configuration."""
        response = await _respond(DETECT_CONTEXT_TOOL, {})
        return response.text

    @mcp.tool(name=HUNT_TOOL, description=HUNT_DESCRIPTION, output_schema=HUNT_OUTPUT_SCHEMA)
    async def get_hunt_results(
        query: Annotated[str, Field(description="The search query (person name, company, etc.)")],
        nextToken: Annotated[  # noqa: N803
            str | None,
            Field(description="Pagination token for next page"),
        ] = None,
    ) -> ToolResult:
        """Run a HUNT search; the text summary is paired with the raw page."""
        arguments: dict[str, Any] = {"query": query}
        if nextToken is not None:
            arguments["nextToken"] = nextToken
        response = await _respond(HUNT_TOOL, arguments)
        return ToolResult(content=response.text, structured_content=response.structured)

    mcp.add_middleware(ConfiguredToolsMiddleware(service))
    logger.info("Orca MCP tools registered.")
