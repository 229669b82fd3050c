"""Dependency provider for the issue board coordinator.

Provides get_board_coordinator for use in tool functions.
"""

from __future__ import annotations

import logging

from fastmcp import Context

from mcp_issueboard.board.lifecycle import IssueLifecycleCoordinator
from mcp_issueboard.servers.context import MainAppContext

logger = logging.getLogger("mcp-issueboard.server.dependencies")


def get_app_context(ctx: Context) -> MainAppContext | None:
    """Return the application context stored by the server lifespan."""
    lifespan_ctx = ctx.request_context.lifespan_context  # type: ignore
    if isinstance(lifespan_ctx, MainAppContext):
        return lifespan_ctx
    if isinstance(lifespan_ctx, dict):
        return lifespan_ctx.get("app_lifespan_context")
    return None


async def get_board_coordinator(ctx: Context) -> IssueLifecycleCoordinator:
    """Returns the IssueLifecycleCoordinator built by the server lifespan.

    Args:
        ctx: The FastMCP context.

    Returns:
        The shared IssueLifecycleCoordinator instance.

    Raises:
        ValueError: If the coordinator is not available.
    """
    app_ctx = get_app_context(ctx)
    if app_ctx is not None and app_ctx.coordinator is not None:
        return app_ctx.coordinator

    logger.error("Issue board coordinator not found in lifespan context.")
    raise ValueError(
        "Issue board is not configured or available. Check the server logs."
    )
