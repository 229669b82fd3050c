"""Main FastMCP server setup for the issue board."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastmcp import FastMCP
from fastmcp.tools import Tool as FastMCPTool
from mcp.types import Tool as MCPTool
from starlette.requests import Request
from starlette.responses import JSONResponse

from mcp_issueboard.board.config import BoardConfig
from mcp_issueboard.board.lifecycle import IssueLifecycleCoordinator
from mcp_issueboard.utils.io import is_read_only_mode
from mcp_issueboard.utils.logging import log_board_config
from mcp_issueboard.utils.tools import get_enabled_tools, should_include_tool

from .board import board_mcp
from .context import MainAppContext

logger = logging.getLogger("mcp-issueboard.server.main")


async def health_check(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


@asynccontextmanager
async def main_lifespan(app: FastMCP[MainAppContext]) -> AsyncIterator[dict]:
    logger.info("Main issue board MCP server lifespan starting...")
    read_only = is_read_only_mode()
    enabled_tools = get_enabled_tools()

    coordinator: IssueLifecycleCoordinator | None = None
    board_config: BoardConfig | None = None
    try:
        board_config = BoardConfig.from_env()
        log_board_config(logger, board_config)
        coordinator = IssueLifecycleCoordinator.from_config(board_config)
        logger.info("Issue board coordinator ready.")
    except (ValueError, OSError) as e:
        logger.error(f"Failed to load issue board configuration: {e}", exc_info=True)

    app_context = MainAppContext(
        coordinator=coordinator,
        board_config=board_config,
        read_only=read_only,
        enabled_tools=enabled_tools,
    )
    logger.info(f"Read-only mode: {'ENABLED' if read_only else 'DISABLED'}")
    logger.info(f"Enabled tools filter: {enabled_tools or 'All tools enabled'}")
    yield {"app_lifespan_context": app_context}
    logger.info("Main issue board MCP server lifespan shutting down.")


class IssueBoardMCP(FastMCP[MainAppContext]):
    """Custom FastMCP server class for the issue board with tool filtering."""

    async def _mcp_list_tools(self) -> list[MCPTool]:
        # Filter tools based on enabled_tools, read_only mode and coordinator availability.
        req_context = self._mcp_server.request_context
        if req_context is None or req_context.lifespan_context is None:
            logger.warning("Lifespan context not available during _mcp_list_tools call.")
            return []

        lifespan_ctx = req_context.lifespan_context
        app_lifespan_state: MainAppContext | None = (
            lifespan_ctx.get("app_lifespan_context")
            if isinstance(lifespan_ctx, dict)
            else lifespan_ctx
        )
        read_only = getattr(app_lifespan_state, "read_only", False)
        enabled_tools_filter = getattr(app_lifespan_state, "enabled_tools", None)
        board_available = getattr(app_lifespan_state, "coordinator", None) is not None
        logger.debug(
            f"_mcp_list_tools: read_only={read_only}, enabled_tools_filter={enabled_tools_filter}"
        )

        all_tools: dict[str, FastMCPTool] = await self.get_tools()
        logger.debug(
            f"Aggregated {len(all_tools)} tools before filtering: {list(all_tools.keys())}"
        )

        filtered_tools: list[MCPTool] = []
        for registered_name, tool_obj in all_tools.items():
            tool_tags = tool_obj.tags

            if not should_include_tool(registered_name, enabled_tools_filter):
                logger.debug(f"Excluding tool '{registered_name}' (not enabled)")
                continue

            if read_only and "write" in tool_tags:
                logger.debug(
                    f"Excluding tool '{registered_name}' due to read-only mode and 'write' tag"
                )
                continue

            if "board" in tool_tags and not board_available:
                logger.debug(
                    f"Excluding tool '{registered_name}' as the issue board is unavailable."
                )
                continue

            filtered_tools.append(tool_obj.to_mcp_tool(name=registered_name))

        logger.debug(
            f"_mcp_list_tools: Total tools after filtering: {len(filtered_tools)}"
        )
        return filtered_tools


main_mcp = IssueBoardMCP(name="Issue Board MCP", lifespan=main_lifespan)
main_mcp.mount("board", board_mcp)


@main_mcp.custom_route("/healthz", methods=["GET"], include_in_schema=False)
async def _health_check_route(request: Request) -> JSONResponse:
    return await health_check(request)
