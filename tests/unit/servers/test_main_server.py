"""Tests for the main MCP server implementation."""

import json
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from unittest.mock import MagicMock, patch

import pytest
from fastmcp import Client, FastMCP
from fastmcp.client import FastMCPTransport
from starlette.requests import Request

from mcp_issueboard.board.lifecycle import IssueLifecycleCoordinator
from mcp_issueboard.servers.board import board_mcp
from mcp_issueboard.servers.context import MainAppContext
from mcp_issueboard.servers.main import IssueBoardMCP, health_check, main_lifespan

READ_TOOLS = {
    "board_list_issues",
    "board_get_issue",
    "board_list_sprints",
    "board_get_user",
    "board_get_project",
    "board_list_project_members",
}
WRITE_TOOLS = {
    "board_create_issue",
    "board_update_issue",
    "board_update_issues",
    "board_reorder_issue",
    "board_delete_issue",
    "board_delete_issues",
    "board_create_sprint",
    "board_add_project_member",
}


def _make_server(app_context):
    @asynccontextmanager
    async def test_lifespan(app: FastMCP) -> AsyncGenerator[dict, None]:
        yield {"app_lifespan_context": app_context}

    test_mcp = IssueBoardMCP(name="TestIssueBoard", lifespan=test_lifespan)
    test_mcp.mount("board", board_mcp)
    return test_mcp


async def _tool_names(app_context):
    server = _make_server(app_context)
    async with Client(transport=FastMCPTransport(server)) as client:
        tools = await client.list_tools()
    return {tool.name for tool in tools}


@pytest.mark.anyio
async def test_health_check():
    response = await health_check(MagicMock(spec=Request))
    assert response.status_code == 200
    assert json.loads(response.body) == {"status": "ok"}


@pytest.mark.anyio
async def test_list_tools_all_enabled():
    names = await _tool_names(MainAppContext(coordinator=MagicMock()))
    assert names == READ_TOOLS | WRITE_TOOLS


@pytest.mark.anyio
async def test_list_tools_read_only_hides_write_tools():
    names = await _tool_names(MainAppContext(coordinator=MagicMock(), read_only=True))
    assert names == READ_TOOLS


@pytest.mark.anyio
async def test_list_tools_enabled_tools_filter():
    app_context = MainAppContext(
        coordinator=MagicMock(),
        enabled_tools=["board_get_issue", "board_create_issue", "unknown_tool"],
    )
    names = await _tool_names(app_context)
    assert names == {"board_get_issue", "board_create_issue"}


@pytest.mark.anyio
async def test_list_tools_without_board():
    assert await _tool_names(MainAppContext(coordinator=None)) == set()


@pytest.mark.anyio
async def test_main_lifespan_builds_coordinator():
    with patch.dict(os.environ, {"DEFAULT_REPORTER_ID": "user-1"}, clear=True):
        async with main_lifespan(MagicMock()) as state:
            app_context = state["app_lifespan_context"]

    assert isinstance(app_context.coordinator, IssueLifecycleCoordinator)
    assert app_context.coordinator.identity_provider is None
    assert app_context.board_config.default_reporter_id == "user-1"
    assert app_context.read_only is False
    assert app_context.enabled_tools is None


@pytest.mark.anyio
async def test_main_lifespan_reads_server_modes():
    env = {"READ_ONLY_MODE": "true", "ENABLED_TOOLS": "board_get_issue"}
    with patch.dict(os.environ, env, clear=True):
        async with main_lifespan(MagicMock()) as state:
            app_context = state["app_lifespan_context"]

    assert app_context.read_only is True
    assert app_context.enabled_tools == ["board_get_issue"]


@pytest.mark.anyio
async def test_main_lifespan_with_invalid_config(caplog):
    with patch.dict(os.environ, {"IDENTITY_PAGE_SIZE": "many"}, clear=True):
        async with main_lifespan(MagicMock()) as state:
            app_context = state["app_lifespan_context"]

    assert app_context.coordinator is None
    assert "Failed to load issue board configuration" in caplog.text


@pytest.mark.anyio
async def test_main_lifespan_with_missing_seed_file(tmp_path):
    missing = tmp_path / "missing.json"
    with patch.dict(os.environ, {"ISSUEBOARD_SEED_FILE": str(missing)}, clear=True):
        async with main_lifespan(MagicMock()) as state:
            assert state["app_lifespan_context"].coordinator is None


@pytest.mark.anyio
async def test_main_lifespan_with_seed_file(tmp_path):
    seed = tmp_path / "board.json"
    seed.write_text(
        json.dumps(
            {
                "users": [{"id": "user-1", "name": "Ada"}],
                "sprints": [],
                "issues": [{"id": "issue-1", "key": "ISSUE-1", "name": "Seeded"}],
            }
        )
    )
    with patch.dict(os.environ, {"ISSUEBOARD_SEED_FILE": str(seed)}, clear=True):
        async with main_lifespan(MagicMock()) as state:
            coordinator = state["app_lifespan_context"].coordinator

    assert coordinator.get_issue("issue-1").name == "Seeded"
