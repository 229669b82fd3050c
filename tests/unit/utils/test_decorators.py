from unittest.mock import MagicMock

import pytest

from mcp_issueboard.servers.context import MainAppContext
from mcp_issueboard.utils.decorators import check_write_access


class DummyContext:
    def __init__(self, lifespan_context):
        self.request_context = MagicMock()
        self.request_context.lifespan_context = lifespan_context


def _app_context(read_only):
    return MainAppContext(coordinator=MagicMock(), read_only=read_only)


@check_write_access
async def create_sprint(ctx, user_id):
    return f"sprint for {user_id}"


@pytest.mark.anyio
async def test_check_write_access_blocks_in_read_only():
    ctx = DummyContext({"app_lifespan_context": _app_context(read_only=True)})
    with pytest.raises(ValueError, match="Cannot create sprint in read-only mode"):
        await create_sprint(ctx, "user-1")


@pytest.mark.anyio
async def test_check_write_access_allows_in_writable():
    ctx = DummyContext({"app_lifespan_context": _app_context(read_only=False)})
    assert await create_sprint(ctx, "user-1") == "sprint for user-1"


@pytest.mark.anyio
async def test_check_write_access_with_direct_lifespan_context():
    ctx = DummyContext(_app_context(read_only=True))
    with pytest.raises(ValueError, match="read-only mode"):
        await create_sprint(ctx, "user-1")


@pytest.mark.anyio
async def test_check_write_access_without_app_context():
    ctx = DummyContext({})
    assert await create_sprint(ctx, "user-2") == "sprint for user-2"


def test_check_write_access_keeps_tool_name():
    assert create_sprint.__name__ == "create_sprint"
