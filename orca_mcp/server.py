"""
Core server bootstrap for the Orca AI MCP server.

Wires up the FastMCP instance, registers the Orca tools and runs the stdio
transport.
"""

import logging

from fastmcp import FastMCP

from orca_mcp.tools import OrcaToolService, register_orca_tools

SERVER_NAME = "orca-ai-mcp"
SERVER_VERSION = "1.0.0"


class ServerApp:
    """Holds the FastMCP app and the tool service behind it."""

    def __init__(self, service: OrcaToolService | None = None) -> None:
        self._logger = logging.getLogger(__name__)
        self._service = service or OrcaToolService()
        self._mcp_app = FastMCP(
            name=SERVER_NAME,
            version=SERVER_VERSION,
            instructions=(
                "Search people, companies, and entities across datasets with Orca AI HUNT. "
                "Call detect_orca_context first to check the configuration."
            ),
        )
        register_orca_tools(self._mcp_app, self._service)

    def serve_forever(self) -> None:
        """Run the FastMCP stdio server until the client disconnects."""
        self._logger.info("Starting stdio transport", extra={"server": SERVER_NAME})
        self._mcp_app.run(transport="stdio")

    @property
    def mcp(self) -> FastMCP:
        """Expose the configured FastMCP instance."""
        return self._mcp_app


def build_server(service: OrcaToolService | None = None) -> ServerApp:
    """Factory used by main.py to create the configured server instance."""
    return ServerApp(service)
