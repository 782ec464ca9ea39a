#!/usr/bin/env python3
"""
Trackfusion MCP Server

Exposes Trackfusion projects, tasks, habits, items, journal, spending,
people, exercise and portfolio data as MCP tools over stdio.

Usage:
    trackfusion-mcp
    python -m trackfusion

Environment:
    TRACKFUSION_API_KEY  - API key (required)
    TRACKFUSION_API_URL  - API base URL (default: production endpoint)
"""
import asyncio
import logging
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .api.base import TrackfusionError
from .api.client import TrackfusionClient
from .config import ConfigError, configure_logging, load_config
from .tools import TOOLS, handle_tool_call

SERVER_NAME = "trackfusion"

logger = logging.getLogger(__name__)


class ToolCallError(Exception):
    """Raised from call_tool so the SDK flags the result as an error."""


def create_server(client: TrackfusionClient) -> Server:
    """Build an MCP server whose tools call through ``client``."""
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [Tool(**tool) for tool in TOOLS]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        logger.info("Tool call: %s", name)
        try:
            text = await handle_tool_call(client, name, arguments)
        except (TrackfusionError, ValueError) as e:
            logger.warning("Tool %s failed: %s", name, e)
            raise ToolCallError(f"Error: {e}") from e
        return [TextContent(type="text", text=text)]

    return server


async def serve(client: TrackfusionClient) -> None:
    server = create_server(client)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main() -> None:
    configure_logging()
    try:
        config = load_config()
    except ConfigError as e:
        print(e, file=sys.stderr)
        sys.exit(1)

    logger.info("Trackfusion MCP server starting (api=%s)", config.base_url)
    try:
        asyncio.run(serve(TrackfusionClient(config)))
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    main()
