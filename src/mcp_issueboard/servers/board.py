"""Issue board FastMCP server instance and tool definitions."""

import json
import logging
from typing import Annotated, Any, Literal

from fastmcp import Context, FastMCP
from pydantic import Field

from mcp_issueboard.exceptions import IssueBoardError
from mcp_issueboard.models.board import IssueStatus, IssueType
from mcp_issueboard.models.board.payloads import (
    IssueBulkUpdate,
    IssueCreate,
    IssueUpdate,
)
from mcp_issueboard.servers.dependencies import get_board_coordinator
from mcp_issueboard.utils.decorators import check_write_access

logger = logging.getLogger("mcp-issueboard.server.board")

board_mcp = FastMCP(
    name="Issue Board MCP Service",
    instructions=(
        "Provides tools for managing issues, sprints and project members "
        "on the issue board."
    ),
)


def _dumps(result: dict[str, Any]) -> str:
    return json.dumps(result, indent=2, ensure_ascii=False)


def _failed(action: str, error: IssueBoardError) -> ValueError:
    logger.error(f"Failed to {action}: {error}")
    return ValueError(f"Failed to {action}: {error}")


@board_mcp.tool(tags={"board", "read"})
async def list_issues(
    ctx: Context,
    user_id: Annotated[
        str | None,
        Field(
            description="Only list issues created by this user, newest first",
            default=None,
        ),
    ] = None,
    limit: Annotated[
        int | None,
        Field(
            description="Page size when listing a user's issues", default=None, ge=1
        ),
    ] = None,
    page: Annotated[
        int | None,
        Field(description="1-based page number (requires limit)", default=None, ge=1),
    ] = None,
) -> str:
    """List live issues nested under their parents.

    Args:
        ctx: The FastMCP context.
        user_id: Optional creator filter.
        limit: Optional page size.
        page: Optional page number.

    Returns:
        JSON string with the top-level issues, a total when filtered by
        creator and any hierarchy warnings.
    """
    coordinator = await get_board_coordinator(ctx)
    result = coordinator.list_issues(creator_id=user_id, limit=limit, page=page)
    return _dumps(result.to_simplified_dict())


@board_mcp.tool(tags={"board", "read"})
async def get_issue(
    ctx: Context,
    issue_id: Annotated[str, Field(description="The issue id")],
) -> str:
    """Get one issue with its parent and direct children.

    Args:
        ctx: The FastMCP context.
        issue_id: The issue id.

    Returns:
        JSON string with the issue, or null when it does not exist.
    """
    coordinator = await get_board_coordinator(ctx)
    view = coordinator.get_issue(issue_id)
    return _dumps({"issue": view.to_simplified_dict() if view else None})


@board_mcp.tool(tags={"board", "write"})
@check_write_access
async def create_issue(
    ctx: Context,
    name: Annotated[str, Field(description="Issue title")],
    type: Annotated[IssueType, Field(description="Issue type")],
    status: Annotated[
        IssueStatus | None,
        Field(description="Initial status (defaults to TODO)", default=None),
    ] = None,
    sprint_id: Annotated[
        str | None,
        Field(description="Sprint to add the issue to (omit for backlog)", default=None),
    ] = None,
    parent_id: Annotated[
        str | None, Field(description="Parent issue id", default=None)
    ] = None,
    assignee_id: Annotated[
        str | None, Field(description="User id of the assignee", default=None)
    ] = None,
    reporter_id: Annotated[
        str | None, Field(description="User id of the reporter", default=None)
    ] = None,
    sprint_color: Annotated[
        str | None, Field(description="Display color of the sprint", default=None)
    ] = None,
    user_id: Annotated[
        str | None, Field(description="User id of the creator", default=None)
    ] = None,
) -> str:
    """Create an issue at the bottom of its sprint backlog.

    Args:
        ctx: The FastMCP context.
        name: Issue title.
        type: Issue type.
        status: Initial status.
        sprint_id: Destination sprint.
        parent_id: Parent issue.
        assignee_id: Assignee user id.
        reporter_id: Reporter user id.
        sprint_color: Sprint color.
        user_id: Creator user id.

    Returns:
        JSON string with the created issue.

    Raises:
        ValueError: If in read-only mode or the request is invalid.
    """
    coordinator = await get_board_coordinator(ctx)
    payload = IssueCreate(
        name=name,
        type=type,
        status=status,
        sprint_id=sprint_id,
        parent_id=parent_id,
        assignee_id=assignee_id,
        reporter_id=reporter_id,
        sprint_color=sprint_color,
        user_id=user_id,
    )
    try:
        issue = coordinator.create_issue(payload)
    except IssueBoardError as e:
        raise _failed("create issue", e) from e
    return _dumps({"issue": issue.to_simplified_dict()})


@board_mcp.tool(tags={"board", "write"})
@check_write_access
async def update_issue(
    ctx: Context,
    issue_id: Annotated[str, Field(description="The issue id")],
    fields: Annotated[
        dict[str, Any],
        Field(
            description=(
                "Fields to change, e.g. {'status': 'IN_PROGRESS'} or "
                "{'sprintId': null}. assigneeId, parentId and sprintId may be "
                "set to null to clear them."
            )
        ),
    ],
) -> str:
    """Apply a partial update to an issue.

    Args:
        ctx: The FastMCP context.
        issue_id: The issue id.
        fields: Changed fields.

    Returns:
        JSON string with the updated issue and its resolved assignee.

    Raises:
        ValueError: If in read-only mode or the update is invalid.
    """
    coordinator = await get_board_coordinator(ctx)
    payload = IssueUpdate.model_validate(fields)
    try:
        view = coordinator.update_issue(issue_id, payload)
    except IssueBoardError as e:
        raise _failed(f"update issue {issue_id}", e) from e
    return _dumps({"issue": view.to_simplified_dict()})


@board_mcp.tool(tags={"board", "write"})
@check_write_access
async def update_issues(
    ctx: Context,
    issue_ids: Annotated[list[str], Field(description="Ids of the issues to update")],
    fields: Annotated[
        dict[str, Any],
        Field(
            description=(
                "Fields to apply to every issue: type, status, assigneeId, "
                "reporterId, parentId, sprintId or isDeleted"
            )
        ),
    ],
) -> str:
    """Apply the same update to several issues.

    Args:
        ctx: The FastMCP context.
        issue_ids: The issue ids.
        fields: Changed fields.

    Returns:
        JSON string with the updated issues.

    Raises:
        ValueError: If in read-only mode or the update is invalid.
    """
    coordinator = await get_board_coordinator(ctx)
    payload = IssueBulkUpdate.model_validate({**fields, "ids": issue_ids})
    try:
        views = coordinator.update_issues(payload)
    except IssueBoardError as e:
        raise _failed("update issues", e) from e
    return _dumps({"issues": [view.to_simplified_dict() for view in views]})


@board_mcp.tool(tags={"board", "write"})
@check_write_access
async def reorder_issue(
    ctx: Context,
    issue_id: Annotated[str, Field(description="The issue to move")],
    before_id: Annotated[
        str | None,
        Field(description="Issue that should end up directly above", default=None),
    ] = None,
    after_id: Annotated[
        str | None,
        Field(description="Issue that should end up directly below", default=None),
    ] = None,
    field: Annotated[
        Literal["sprint_position", "board_position"],
        Field(
            description="Ordering to change: the sprint backlog or the board column",
            default="sprint_position",
        ),
    ] = "sprint_position",
) -> str:
    """Move an issue between two neighbours of the same ordering.

    Args:
        ctx: The FastMCP context.
        issue_id: The issue to move.
        before_id: Neighbour above.
        after_id: Neighbour below.
        field: Ordering to change.

    Returns:
        JSON string with the moved issue.

    Raises:
        ValueError: If in read-only mode or the neighbours are invalid.
    """
    coordinator = await get_board_coordinator(ctx)
    try:
        issue = coordinator.reorder_issue(
            issue_id, before_id=before_id, after_id=after_id, field=field
        )
    except IssueBoardError as e:
        raise _failed(f"reorder issue {issue_id}", e) from e
    return _dumps({"issue": issue.to_simplified_dict()})


@board_mcp.tool(tags={"board", "write"})
@check_write_access
async def delete_issue(
    ctx: Context,
    issue_id: Annotated[str, Field(description="The issue id")],
) -> str:
    """Soft delete an issue.

    Args:
        ctx: The FastMCP context.
        issue_id: The issue id.

    Returns:
        JSON string indicating success.

    Raises:
        ValueError: If in read-only mode or the issue does not exist.
    """
    coordinator = await get_board_coordinator(ctx)
    try:
        issue = coordinator.delete_issue(issue_id)
    except IssueBoardError as e:
        raise _failed(f"delete issue {issue_id}", e) from e
    return _dumps(
        {
            "success": True,
            "message": f"Issue {issue.key} has been deleted.",
            "issue": issue.to_simplified_dict(),
        }
    )


@board_mcp.tool(tags={"board", "write"})
@check_write_access
async def delete_issues(
    ctx: Context,
    issue_ids: Annotated[
        list[str], Field(description="Ids of the issues to remove permanently")
    ],
) -> str:
    """Permanently remove issues.

    Args:
        ctx: The FastMCP context.
        issue_ids: The issue ids.

    Returns:
        JSON string with the number of removed issues.

    Raises:
        ValueError: If in read-only mode.
    """
    coordinator = await get_board_coordinator(ctx)
    removed = coordinator.delete_issues(issue_ids)
    return _dumps({"success": True, "deleted": removed})


@board_mcp.tool(tags={"board", "read"})
async def list_sprints(
    ctx: Context,
    user_id: Annotated[
        str | None,
        Field(description="Only list sprints created by this user", default=None),
    ] = None,
) -> str:
    """List active and pending sprints, oldest first.

    Args:
        ctx: The FastMCP context.
        user_id: Optional creator filter.

    Returns:
        JSON string with the sprints.
    """
    coordinator = await get_board_coordinator(ctx)
    sprints = coordinator.list_sprints(creator_id=user_id)
    return _dumps({"sprints": [sprint.to_simplified_dict() for sprint in sprints]})


@board_mcp.tool(tags={"board", "write"})
@check_write_access
async def create_sprint(
    ctx: Context,
    user_id: Annotated[str, Field(description="User id of the sprint creator")],
) -> str:
    """Create the user's next pending sprint.

    Args:
        ctx: The FastMCP context.
        user_id: Creator user id.

    Returns:
        JSON string with the new sprint.

    Raises:
        ValueError: If in read-only mode or no user is given.
    """
    coordinator = await get_board_coordinator(ctx)
    sprint = coordinator.create_sprint(user_id)
    return _dumps({"sprint": sprint.to_simplified_dict()})


@board_mcp.tool(tags={"board", "read"})
async def get_user(
    ctx: Context,
    user_id: Annotated[
        str | None, Field(description="The user id", default=None)
    ] = None,
    email: Annotated[
        str | None, Field(description="Look the user up by email", default=None)
    ] = None,
) -> str:
    """Get a user's identity by id or email.

    Args:
        ctx: The FastMCP context.
        user_id: The user id.
        email: The user's email.

    Returns:
        JSON string with the user, or null when unknown.

    Raises:
        ValueError: If neither user_id nor email is given.
    """
    if not user_id and not email:
        raise ValueError("Either user_id or email must be provided.")
    coordinator = await get_board_coordinator(ctx)
    if user_id:
        user = coordinator.get_user(user_id)
    else:
        user = coordinator.find_user_by_email(email)
    return _dumps({"user": user.to_simplified_dict() if user else None})


@board_mcp.tool(tags={"board", "read"})
async def get_project(
    ctx: Context,
    key: Annotated[
        str | None,
        Field(
            description="Project key; the board's configured project when omitted",
            default=None,
        ),
    ] = None,
) -> str:
    """Get the project that owns the board.

    Args:
        ctx: The FastMCP context.
        key: Optional project key.

    Returns:
        JSON string with the project, or null when no project has the key.
    """
    coordinator = await get_board_coordinator(ctx)
    project = coordinator.get_project(key)
    return _dumps({"project": project.to_simplified_dict() if project else None})


@board_mcp.tool(tags={"board", "read"})
async def list_project_members(
    ctx: Context,
    project_id: Annotated[str, Field(description="The project id")],
) -> str:
    """List the identities of a project's members.

    Args:
        ctx: The FastMCP context.
        project_id: The project id.

    Returns:
        JSON string with the member identities.

    Raises:
        ValueError: If the project does not exist.
    """
    coordinator = await get_board_coordinator(ctx)
    try:
        members = coordinator.list_project_members(project_id)
    except IssueBoardError as e:
        raise _failed("list project members", e) from e
    return _dumps({"members": [member.to_simplified_dict() for member in members]})


@board_mcp.tool(tags={"board", "write"})
@check_write_access
async def add_project_member(
    ctx: Context,
    project_id: Annotated[str, Field(description="The project id")],
    user_id: Annotated[str, Field(description="The user to add to the project")],
) -> str:
    """Add a user to a project.

    Args:
        ctx: The FastMCP context.
        project_id: The project id.
        user_id: The user id.

    Returns:
        JSON string with the membership.

    Raises:
        ValueError: If in read-only mode or the project does not exist.
    """
    coordinator = await get_board_coordinator(ctx)
    try:
        member = coordinator.add_project_member(project_id, user_id)
    except IssueBoardError as e:
        raise _failed("add project member", e) from e
    return _dumps({"member": member.to_simplified_dict()})
