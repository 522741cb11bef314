"""Entry point for the Orca AI MCP server."""

import logging
import os
import sys

from dotenv import load_dotenv

from orca_mcp.server import build_server


def _configure_logging() -> None:
    # stdout carries the MCP protocol; logs must stay on stderr.
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )


def main() -> None:
    """Bootstrap and run the stdio server."""
    load_dotenv()
    _configure_logging()
    logger = logging.getLogger("orca-ai-mcp")
    server = build_server()

    try:
        logger.info("Orca AI MCP server running on stdio")
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutdown requested (Ctrl+C).")
    except Exception:
        logger.exception("Server stopped due to an unexpected error.")
        raise
    finally:
        logger.info("Server shutdown complete.")


if __name__ == "__main__":
    main()
