"""Tool-related utility functions for MCP Issue Board."""

import logging
import os

logger = logging.getLogger("mcp-issueboard.utils.tools")


def get_enabled_tools() -> list[str] | None:
    """Get the list of enabled tools from the ENABLED_TOOLS variable.

    The variable holds a comma-separated list of tool names, for example
    ``ENABLED_TOOLS="board_list_issues, board_get_issue"``.

    Returns:
        List of enabled tool names, or None when the variable is unset or
        holds no names
    """
    enabled_tools_str = os.getenv("ENABLED_TOOLS")
    if not enabled_tools_str:
        logger.debug("ENABLED_TOOLS environment variable not set or empty.")
        return None

    tools = [tool.strip() for tool in enabled_tools_str.split(",")]
    tools = [tool for tool in tools if tool]

    logger.debug(f"Parsed enabled tools from environment: {tools}")
    return tools or None


def should_include_tool(tool_name: str, enabled_tools: list[str] | None) -> bool:
    """Check if a tool should be included based on the enabled tools list.

    Args:
        tool_name: The registered name of the tool
        enabled_tools: List of enabled tool names, or None to include all tools

    Returns:
        True if the tool should be included, False otherwise
    """
    if enabled_tools is None:
        return True
    should_include = tool_name in enabled_tools
    logger.debug(f"Tool '{tool_name}' included: {should_include}")
    return should_include
