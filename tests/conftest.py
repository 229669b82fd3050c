"""
Root pytest configuration file for MCP Issue Board tests.
"""

import os
from unittest.mock import patch

import pytest

# Variables read by the server lifespan and the board configuration.
BOARD_ENV_VARS = (
    "READ_ONLY_MODE",
    "ENABLED_TOOLS",
    "ISSUEBOARD_SEED_FILE",
    "DEFAULT_REPORTER_ID",
    "DEFAULT_CREATOR_ID",
    "CLERK_API_URL",
    "CLERK_SECRET_KEY",
    "IDENTITY_PAGE_SIZE",
    "IDENTITY_CACHE_TTL",
    "IDENTITY_TIMEOUT",
    "IDENTITY_SSL_VERIFY",
)


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def clean_board_env():
    """Remove board settings inherited from the developer's environment."""
    with patch.dict(os.environ):
        for name in BOARD_ENV_VARS:
            os.environ.pop(name, None)
        yield
