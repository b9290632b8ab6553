"""Tests for MCP server wiring."""

import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from mcp import types

from zendesk_mcp.config import AppConfig, ZendeskConfig
from zendesk_mcp.models import SearchResult, Ticket
from zendesk_mcp.server import create_server, serve
from zendesk_mcp.tools import TOOLS, ToolDispatcher
from zendesk_mcp.zendesk_client import ZendeskClient


@pytest.fixture
def client() -> AsyncMock:
    """Create a stubbed Zendesk client."""
    return AsyncMock(spec=ZendeskClient)


@pytest.fixture
def server(client):
    return create_server(ToolDispatcher(client), "test-server")


async def call_tool(server, name: str, arguments: dict) -> types.CallToolResult:
    """Send a tools/call request through the registered MCP handler."""
    handler = server.request_handlers[types.CallToolRequest]
    response = await handler(
        types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name=name, arguments=arguments),
        )
    )
    return response.root


class TestCreateServer:
    """Tests for create_server."""

    def test_server_name(self, server):
        assert server.name == "test-server"

    def test_registers_handlers(self, server):
        """Test list and call handlers are registered."""
        assert types.ListToolsRequest in server.request_handlers
        assert types.CallToolRequest in server.request_handlers

    @pytest.mark.asyncio
    async def test_list_tools(self, server):
        """Test the catalog is exposed with schemas."""
        handler = server.request_handlers[types.ListToolsRequest]
        response = await handler(types.ListToolsRequest(method="tools/list"))

        tools = response.root.tools
        assert [t.name for t in tools] == [t.name for t in TOOLS]
        assert tools[0].inputSchema["required"] == ["query"]


class TestCallTool:
    """Tests for tools/call through the MCP handler."""

    @pytest.mark.asyncio
    async def test_success_envelope(self, server, client):
        """Test a successful call returns one text block of pretty JSON."""
        client.search_tickets.return_value = SearchResult[Ticket](
            results=[Ticket(id=7, subject="Hello")],
            count=1,
        )

        result = await call_tool(server, "search_tickets", {"query": "status:open"})

        assert result.isError is False
        assert len(result.content) == 1
        block = result.content[0]
        assert block.type == "text"
        assert block.text.startswith("{\n  ")
        assert json.loads(block.text)["tickets"][0]["id"] == 7

    @pytest.mark.asyncio
    async def test_unknown_tool(self, server):
        result = await call_tool(server, "nope", {})

        assert result.isError is True
        assert result.content[0].text == "Error: Unknown tool: nope"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name,arguments", [
        ("search_tickets", {"query": 5}),
        ("get_ticket", {"ticket_id": "abc"}),
        ("search_articles", {"query": "x", "per_page": 500}),
        ("get_article", {}),
    ])
    async def test_malformed_arguments_use_error_text(self, server, client, name, arguments):
        """Test bad arguments reach the dispatcher and come back as Error: text."""
        result = await call_tool(server, name, arguments)

        assert result.isError is True
        assert len(result.content) == 1
        assert result.content[0].text.startswith("Error: ")
        client.search_tickets.assert_not_awaited()
        client.get_ticket.assert_not_awaited()


class TestServe:
    """Tests for the stdio serving loop."""

    @pytest.mark.asyncio
    async def test_announces_startup_on_stderr(self, capsys):
        """Test the startup line is printed regardless of log level."""
        @asynccontextmanager
        async def fake_stdio():
            yield (MagicMock(), MagicMock())

        fake_server = MagicMock()
        fake_server.run = AsyncMock()

        config = AppConfig(
            zendesk=ZendeskConfig(subdomain="acme", email="a@acme.com", api_token="t"),
            log_level="WARNING",
        )
        with patch("zendesk_mcp.server.stdio_server", fake_stdio), \
                patch("zendesk_mcp.server.create_server", return_value=fake_server):
            await serve(config)

        captured = capsys.readouterr()
        assert "Zendesk MCP Server running on stdio" in captured.err
        assert captured.out == ""
        fake_server.run.assert_awaited_once()
