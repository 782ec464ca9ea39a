"""
Tests for the MCP server wiring.
Drives the registered request handlers directly, without a stdio transport.
"""

import pytest
from mcp import types

from conftest import json_response
from trackfusion.server import SERVER_NAME, create_server
from trackfusion.tools import TOOLS


async def call_tool(server, name: str, arguments: dict) -> types.CallToolResult:
    handler = server.request_handlers[types.CallToolRequest]
    request = types.CallToolRequest(
        method="tools/call",
        params=types.CallToolRequestParams(name=name, arguments=arguments),
    )
    return (await handler(request)).root


@pytest.fixture
def server(client):
    return create_server(client)


class TestListTools:
    @pytest.mark.asyncio
    async def test_lists_all_tools(self, server):
        handler = server.request_handlers[types.ListToolsRequest]
        result = (await handler(types.ListToolsRequest(method="tools/list"))).root

        assert server.name == SERVER_NAME
        assert [tool.name for tool in result.tools] == [tool["name"] for tool in TOOLS]
        assert all(tool.inputSchema["type"] == "object" for tool in result.tools)


class TestCallTool:
    @pytest.mark.asyncio
    async def test_success_returns_text(self, api, server):
        api.script = [json_response({"projects": []})]

        result = await call_tool(server, "list_projects", {})

        assert not result.isError
        assert result.content[0].text == "No projects found."

    @pytest.mark.asyncio
    async def test_api_error_is_flagged_with_message(self, api, server):
        api.script = [json_response({"error": "Invalid API key"}, 401)]

        result = await call_tool(server, "list_projects", {})

        assert result.isError
        assert "Error: Invalid API key" in result.content[0].text
