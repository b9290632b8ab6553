"""
MCP server wiring for the Zendesk MCP Server.

Registers the tool catalog with the MCP low-level server and serves it
over stdio.
"""

import logging

import anyio
import click
from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from . import __version__
from .config import AppConfig
from .tools import ToolDispatcher
from .zendesk_client import ZendeskClient


logger = logging.getLogger(__name__)


def create_server(dispatcher: ToolDispatcher, name: str = "zendesk-server") -> Server:
    """
    Instantiate a Server and register the tool handlers.

    Args:
        dispatcher: Dispatcher that executes tool calls.
        name: Server name announced to clients.

    Returns:
        Configured MCP Server.
    """
    server = Server(name, version=__version__)

    @server.list_tools()
    async def _list_tools() -> list[types.Tool]:
        return [types.Tool(**tool.to_dict()) for tool in dispatcher.list_tools()]

    @server.call_tool(validate_input=False)
    async def _call_tool(name: str, arguments: dict | None) -> types.CallToolResult:
        result = await dispatcher.call(name, arguments)
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=result.text)],
            isError=result.is_error,
        )

    return server


async def serve(config: AppConfig) -> None:
    """
    Open the Zendesk client and serve tools over stdio until the client disconnects.

    Args:
        config: Validated application configuration.
    """
    async with ZendeskClient(config.zendesk) as client:
        server = create_server(ToolDispatcher(client), config.server_name)
        logger.debug(f"Using Zendesk API at {config.zendesk.base_url}")
        async with stdio_server() as (read, write):
            click.echo("Zendesk MCP Server running on stdio", err=True)
            await server.run(read, write, server.create_initialization_options())


def run_server(config: AppConfig) -> None:
    """Run the MCP server with stdio transport."""
    anyio.run(serve, config)
