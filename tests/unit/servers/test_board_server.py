"""Unit tests for the issue board FastMCP server implementation."""

import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import pytest
from fastmcp import Client, FastMCP
from fastmcp.client import FastMCPTransport
from fastmcp.exceptions import ToolError

from mcp_issueboard.board.config import BoardConfig
from mcp_issueboard.board.lifecycle import IssueLifecycleCoordinator
from mcp_issueboard.board.stores import (
    MemoryIssueStore,
    MemoryMemberStore,
    MemoryProjectStore,
    MemorySprintStore,
    MemoryUserStore,
)
from mcp_issueboard.servers.board import board_mcp
from mcp_issueboard.servers.context import MainAppContext
from mcp_issueboard.servers.main import IssueBoardMCP
from tests.fixtures.board_mocks import (
    MOCK_ISSUES,
    MOCK_MEMBERS,
    MOCK_PROJECTS,
    MOCK_SPRINTS,
    MOCK_USERS,
)


@pytest.fixture
def board_coordinator():
    """A coordinator over the sample board."""
    return IssueLifecycleCoordinator(
        MemoryIssueStore(MOCK_ISSUES),
        MemorySprintStore(MOCK_SPRINTS),
        MemoryUserStore(MOCK_USERS),
        config=BoardConfig(default_reporter_id="user-1"),
        projects=MemoryProjectStore(MOCK_PROJECTS),
        members=MemoryMemberStore(MOCK_MEMBERS),
    )


def _make_server(coordinator, read_only=False):
    @asynccontextmanager
    async def test_lifespan(app: FastMCP) -> AsyncGenerator[dict, None]:
        yield {
            "app_lifespan_context": MainAppContext(
                coordinator=coordinator, read_only=read_only
            )
        }

    test_mcp = IssueBoardMCP(name="TestIssueBoard", lifespan=test_lifespan)
    test_mcp.mount("board", board_mcp)
    return test_mcp


@pytest.fixture
async def board_client(board_coordinator):
    """Create a FastMCP client over a writable test server."""
    server = _make_server(board_coordinator)
    async with Client(transport=FastMCPTransport(server)) as client_instance:
        yield client_instance


@pytest.fixture
async def read_only_client(board_coordinator):
    """Create a FastMCP client over a read-only test server."""
    server = _make_server(board_coordinator, read_only=True)
    async with Client(transport=FastMCPTransport(server)) as client_instance:
        yield client_instance


@pytest.fixture
async def no_board_client():
    """Create a client for a server whose issue board failed to load."""
    server = _make_server(None)
    async with Client(transport=FastMCPTransport(server)) as client_instance:
        yield client_instance


def _content(response):
    assert isinstance(response, list)
    assert len(response) > 0
    text_content = response[0]
    assert text_content.type == "text"
    return json.loads(text_content.text)


@pytest.mark.anyio
async def test_list_issues(board_client):
    """Test that issues come back nested under their parents."""
    content = _content(await board_client.call_tool("board_list_issues", {}))

    roots = {issue["id"]: issue for issue in content["issues"]}
    assert set(roots) == {"issue-1", "issue-4"}
    (child,) = roots["issue-1"]["children"]
    assert child["id"] == "issue-2"
    assert child["parent"]["id"] == "issue-1"
    assert child["children"][0]["id"] == "issue-3"
    assert roots["issue-1"]["assignee"]["name"] == "Ada Lovelace"
    assert roots["issue-1"]["sprintIsActive"] is True
    assert roots["issue-4"]["assignee"] is None
    assert "total" not in content


@pytest.mark.anyio
async def test_list_issues_by_creator_paginates(board_client):
    content = _content(
        await board_client.call_tool(
            "board_list_issues", {"user_id": "user-1", "limit": 1, "page": 2}
        )
    )
    assert content["total"] == 3
    assert [issue["id"] for issue in content["issues"]] == ["issue-2"]


@pytest.mark.anyio
async def test_get_issue(board_client):
    content = _content(
        await board_client.call_tool("board_get_issue", {"issue_id": "issue-2"})
    )
    issue = content["issue"]
    assert issue["key"] == "ISSUE-2"
    assert issue["parent"]["id"] == "issue-1"
    assert [child["id"] for child in issue["children"]] == ["issue-3"]


@pytest.mark.anyio
async def test_get_deleted_issue_returns_null(board_client):
    content = _content(
        await board_client.call_tool("board_get_issue", {"issue_id": "issue-5"})
    )
    assert content == {"issue": None}


@pytest.mark.anyio
async def test_create_issue(board_client):
    content = _content(
        await board_client.call_tool(
            "board_create_issue",
            {
                "name": "Add coupon field",
                "type": "TASK",
                "sprint_id": "sprint-active",
                "user_id": "user-2",
            },
        )
    )
    issue = content["issue"]
    assert issue["key"] == "ISSUE-6"
    assert issue["status"] == "TODO"
    assert issue["sprintPosition"] == 4.0
    assert issue["boardPosition"] == 3.0
    assert issue["reporterId"] == "user-1"
    assert issue["creatorId"] == "user-2"


@pytest.mark.anyio
async def test_create_issue_in_unknown_sprint(board_client):
    with pytest.raises(ToolError):
        await board_client.call_tool(
            "board_create_issue",
            {"name": "Lost", "type": "BUG", "sprint_id": "sprint-missing"},
        )


@pytest.mark.anyio
async def test_update_issue_moves_to_backlog(board_client, board_coordinator):
    content = _content(
        await board_client.call_tool(
            "board_update_issue",
            {"issue_id": "issue-3", "fields": {"sprintId": None, "status": "DONE"}},
        )
    )
    issue = content["issue"]
    assert issue["sprintId"] is None
    assert issue["status"] == "DONE"
    assert issue["sprintPosition"] == 2.0
    assert issue["boardPosition"] == -1.0
    assert board_coordinator.issues.get("issue-3").sprint_id is None


@pytest.mark.anyio
async def test_update_issue_rejects_cycle(board_client):
    with pytest.raises(ToolError):
        await board_client.call_tool(
            "board_update_issue",
            {"issue_id": "issue-1", "fields": {"parentId": "issue-3"}},
        )


@pytest.mark.anyio
async def test_update_issues(board_client):
    content = _content(
        await board_client.call_tool(
            "board_update_issues",
            {
                "issue_ids": ["issue-1", "issue-4", "missing"],
                "fields": {"assigneeId": "user-2"},
            },
        )
    )
    assert [issue["id"] for issue in content["issues"]] == ["issue-1", "issue-4"]
    assert all(issue["assignee"]["id"] == "user-2" for issue in content["issues"])


@pytest.mark.anyio
async def test_reorder_issue(board_client):
    content = _content(
        await board_client.call_tool(
            "board_reorder_issue",
            {"issue_id": "issue-3", "before_id": "issue-1", "after_id": "issue-2"},
        )
    )
    assert content["issue"]["sprintPosition"] == 1.5


@pytest.mark.anyio
async def test_delete_issue(board_client, board_coordinator):
    content = _content(
        await board_client.call_tool("board_delete_issue", {"issue_id": "issue-4"})
    )
    assert content["success"] is True
    assert content["issue"]["isDeleted"] is True
    assert content["issue"]["sprintId"] == "DELETED-SPRINT-ID"
    assert board_coordinator.get_issue("issue-4") is None


@pytest.mark.anyio
async def test_delete_unknown_issue(board_client):
    with pytest.raises(ToolError):
        await board_client.call_tool("board_delete_issue", {"issue_id": "missing"})


@pytest.mark.anyio
async def test_delete_issues(board_client, board_coordinator):
    content = _content(
        await board_client.call_tool(
            "board_delete_issues", {"issue_ids": ["issue-4", "issue-5", "missing"]}
        )
    )
    assert content == {"success": True, "deleted": 2}
    assert board_coordinator.issues.get("issue-5") is None


@pytest.mark.anyio
async def test_list_sprints(board_client):
    content = _content(await board_client.call_tool("board_list_sprints", {}))
    assert [sprint["id"] for sprint in content["sprints"]] == [
        "sprint-active",
        "sprint-pending",
    ]


@pytest.mark.anyio
async def test_create_sprint(board_client):
    content = _content(
        await board_client.call_tool("board_create_sprint", {"user_id": "user-1"})
    )
    assert content["sprint"]["name"] == "SPRINT-3"
    assert content["sprint"]["status"] == "PENDING"


@pytest.mark.anyio
async def test_get_user_by_id_and_email(board_client):
    by_id = _content(
        await board_client.call_tool("board_get_user", {"user_id": "user-2"})
    )
    assert by_id["user"]["name"] == "Grace Hopper"

    by_email = _content(
        await board_client.call_tool("board_get_user", {"email": "ada@example.com"})
    )
    assert by_email["user"]["id"] == "user-1"

    unknown = _content(
        await board_client.call_tool("board_get_user", {"user_id": "user-unknown"})
    )
    assert unknown == {"user": None}


@pytest.mark.anyio
async def test_get_user_requires_id_or_email(board_client):
    with pytest.raises(ToolError):
        await board_client.call_tool("board_get_user", {})


@pytest.mark.anyio
async def test_get_project(board_client):
    content = _content(await board_client.call_tool("board_get_project", {}))
    assert content["project"]["key"] == "JIRA-CLONE"
    assert content["project"]["defaultAssignee"] == "user-1"

    other = _content(
        await board_client.call_tool("board_get_project", {"key": "OTHER"})
    )
    assert other == {"project": None}


@pytest.mark.anyio
async def test_list_project_members(board_client):
    content = _content(
        await board_client.call_tool(
            "board_list_project_members", {"project_id": "project-1"}
        )
    )
    assert [member["id"] for member in content["members"]] == ["user-2", "user-1"]
    assert content["members"][0]["avatar"] == "https://img.example.com/grace.png"


@pytest.mark.anyio
async def test_list_members_of_unknown_project(board_client):
    with pytest.raises(ToolError):
        await board_client.call_tool(
            "board_list_project_members", {"project_id": "no-such-project"}
        )


@pytest.mark.anyio
async def test_add_project_member(board_client, board_coordinator):
    content = _content(
        await board_client.call_tool(
            "board_add_project_member",
            {"project_id": "project-1", "user_id": "user-7"},
        )
    )
    assert content["member"]["userId"] == "user-7"
    assert content["member"]["projectId"] == "project-1"
    assert len(board_coordinator.members) == len(MOCK_MEMBERS) + 1


@pytest.mark.anyio
async def test_add_member_refused_in_read_only_mode(
    read_only_client, board_coordinator
):
    with pytest.raises(ToolError):
        await read_only_client.call_tool(
            "board_add_project_member",
            {"project_id": "project-1", "user_id": "user-7"},
        )
    assert len(board_coordinator.members) == len(MOCK_MEMBERS)


@pytest.mark.anyio
async def test_write_tools_refused_in_read_only_mode(
    read_only_client, board_coordinator
):
    with pytest.raises(ToolError):
        await read_only_client.call_tool(
            "board_create_issue", {"name": "Blocked", "type": "TASK"}
        )
    assert board_coordinator.issues.get("issue-6") is None
    assert len(board_coordinator.issues.find_many()) == len(MOCK_ISSUES)


@pytest.mark.anyio
async def test_read_tools_work_in_read_only_mode(read_only_client):
    content = _content(
        await read_only_client.call_tool("board_get_issue", {"issue_id": "issue-1"})
    )
    assert content["issue"]["id"] == "issue-1"


@pytest.mark.anyio
async def test_tools_without_board(no_board_client):
    with pytest.raises(ToolError):
        await no_board_client.call_tool("board_get_issue", {"issue_id": "issue-1"})
