#!/usr/bin/env python3
"""
MCP Server for incident.io.
Exposes incident.io API operations to Claude via Model Context Protocol.
"""

import asyncio
import json
import logging
import sys
from typing import Any, Optional

from dotenv import load_dotenv
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from api_client import IncidentIOClient
from catalog import TOOLS
from errors import ConfigurationError, ToolError
from router import ToolRouter
from settings import DEFAULT_LOG_LEVEL, Settings, load_settings

SERVER_NAME = "incidentio-mcp"
SERVER_VERSION = "1.0.0"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger(SERVER_NAME)


async def list_tools() -> list[Tool]:
    """List available incident.io tools."""
    logger.info("List tools")
    return TOOLS


async def handle_call_tool(
    router: ToolRouter, name: str, arguments: Optional[dict[str, Any]]
) -> list[TextContent]:
    """
    Route a tool call through the router and wrap the API response.

    ToolErrors are logged and re-raised; the MCP SDK turns them into an
    error result for this call without stopping the server.
    """
    logger.info("Call tool: %s", name)
    logger.debug("Arguments: %s", json.dumps(arguments) if arguments else "no args")

    try:
        result = await router.call(name, arguments)
    except ToolError as e:
        logger.warning("Tool %s failed: %s", name, e)
        raise

    return [TextContent(
        type="text",
        text=json.dumps(result, indent=2)
    )]


def create_app(router: ToolRouter) -> Server:
    """Create the MCP server instance with handlers bound to the router."""
    app = Server(SERVER_NAME, version=SERVER_VERSION)

    app.list_tools()(list_tools)

    # Required fields are checked by the router, which names the lookup tool to use
    @app.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        return await handle_call_tool(router, name, arguments)

    return app


async def serve(settings: Settings) -> None:
    """Run the MCP server on stdio until the client disconnects."""
    async with IncidentIOClient(settings) as client:
        app = create_app(ToolRouter(client))
        async with stdio_server() as (read_stream, write_stream):
            logger.info("incident.io MCP server running, waiting for client connection")
            logger.info("API Base URL: %s", settings.base_url)
            logger.info("API Key configured: %s", "Yes" if settings.api_key else "No")
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options()
            )
        logger.info("Client disconnected")


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    # stdout carries the MCP protocol, so logs go to stderr
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def main() -> None:
    """Load configuration and run the server. Exits non-zero on startup failure."""
    load_dotenv()
    configure_logging()

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error("Error: %s", e)
        sys.exit(1)

    configure_logging(settings.log_level)

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
