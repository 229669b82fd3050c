"""Shared fixtures for the issue board engine tests."""

import pytest

from mcp_issueboard.board.config import BoardConfig
from mcp_issueboard.board.lifecycle import IssueLifecycleCoordinator
from mcp_issueboard.board.stores import (
    MemoryIssueStore,
    MemoryMemberStore,
    MemoryProjectStore,
    MemorySprintStore,
    MemoryStores,
    MemoryUserStore,
)
from tests.fixtures.board_mocks import (
    MOCK_ISSUES,
    MOCK_MEMBERS,
    MOCK_PROJECTS,
    MOCK_SPRINTS,
    MOCK_USERS,
)


@pytest.fixture
def board_config():
    """Board configuration with default reporter and creator."""
    return BoardConfig(
        default_reporter_id="user-1",
        default_creator_id="user-2",
    )


@pytest.fixture
def stores():
    """In-memory stores preloaded with the sample board."""
    return MemoryStores(
        issues=MemoryIssueStore(MOCK_ISSUES),
        sprints=MemorySprintStore(MOCK_SPRINTS),
        users=MemoryUserStore(MOCK_USERS),
        projects=MemoryProjectStore(MOCK_PROJECTS),
        members=MemoryMemberStore(MOCK_MEMBERS),
    )


@pytest.fixture
def coordinator(stores, board_config):
    """A coordinator over the sample board without an identity provider."""
    return IssueLifecycleCoordinator(
        stores.issues,
        stores.sprints,
        stores.users,
        config=board_config,
        projects=stores.projects,
        members=stores.members,
    )
