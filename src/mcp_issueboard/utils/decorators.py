import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from fastmcp import Context

logger = logging.getLogger("mcp-issueboard.utils.decorators")

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def check_write_access(func: F) -> F:
    """
    Decorator for FastMCP tools that refuses the call in read-only mode.

    Assumes the decorated function is async and takes `ctx: Context` as its
    first argument.

    Raises:
        ValueError: When the server runs in read-only mode
    """

    @wraps(func)
    async def wrapper(ctx: Context, *args: Any, **kwargs: Any) -> Any:
        lifespan_ctx = ctx.request_context.lifespan_context
        app_lifespan_ctx = (
            lifespan_ctx.get("app_lifespan_context")
            if isinstance(lifespan_ctx, dict)
            else lifespan_ctx
        )

        if getattr(app_lifespan_ctx, "read_only", False):
            tool_name = func.__name__
            action_description = tool_name.replace("_", " ")
            logger.warning(f"Attempted to call tool '{tool_name}' in read-only mode.")
            raise ValueError(f"Cannot {action_description} in read-only mode.")

        return await func(ctx, *args, **kwargs)

    return wrapper  # type: ignore
