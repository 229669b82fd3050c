"""
Test fixtures for model testing.
"""

from typing import Any

import pytest

from tests.fixtures.board_mocks import MOCK_ISSUES, MOCK_SPRINTS, MOCK_USERS


@pytest.fixture
def issue_data() -> dict[str, Any]:
    """Return a stored issue record with a parent."""
    return dict(MOCK_ISSUES[1])


@pytest.fixture
def deleted_issue_data() -> dict[str, Any]:
    """Return a soft-deleted issue record."""
    return dict(MOCK_ISSUES[4])


@pytest.fixture
def sprint_data() -> dict[str, Any]:
    """Return a stored sprint record."""
    return dict(MOCK_SPRINTS[0])


@pytest.fixture
def user_data() -> dict[str, Any]:
    """Return a local user record."""
    return dict(MOCK_USERS[1])
