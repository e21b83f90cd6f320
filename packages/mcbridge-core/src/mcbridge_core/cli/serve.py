"""MCP server CLI command.

This module provides the command that runs the tool server:
- serve: Discover actions and publish them over MCP stdio

Stdout carries the MCP transport, so all logging goes to stderr.
"""

import asyncio
import logging

import typer

from mcbridge_core.cli.factory import create_bridge
from mcbridge_core.config import Settings
from mcbridge_core.mcp.server import create_mcp_server

logger = logging.getLogger(__name__)


def serve(
    location: list[str] = typer.Option(
        None,
        "--location",
        "-l",
        help="Discovery location (package or directory); repeatable",
    ),
) -> None:
    """
    Run the MCP tool server over stdio.

    Without a host-supplied bot session, action tools and state queries
    answer service_unavailable.
    """
    settings = Settings()

    async def _serve():
        bridge, scheduler = create_bridge(settings, locations=location or None)
        mcp = create_mcp_server(bridge)
        logger.info(f"Serving {len(bridge.list_tools())} tools over stdio")
        try:
            await mcp.run_async(transport="stdio")
        finally:
            await scheduler.aclose()

    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        logger.info("Server stopped")
