"""Tests for the I/O utilities module."""

import os
from unittest.mock import patch

import pytest

from mcp_issueboard.utils.io import is_env_truthy, is_read_only_mode


def test_is_read_only_mode_default():
    """Test that is_read_only_mode returns False by default."""
    with patch.dict(os.environ, clear=True):
        assert is_read_only_mode() is False


@pytest.mark.parametrize("value", ["true", "TRUE", "1", "yes", "y", "on"])
def test_is_read_only_mode_truthy(value):
    """Test that is_read_only_mode accepts the usual truthy spellings."""
    with patch.dict(os.environ, {"READ_ONLY_MODE": value}):
        assert is_read_only_mode() is True


@pytest.mark.parametrize("value", ["false", "0", "no", "off", ""])
def test_is_read_only_mode_falsy(value):
    """Test that anything else leaves read-only mode off."""
    with patch.dict(os.environ, {"READ_ONLY_MODE": value}):
        assert is_read_only_mode() is False


def test_is_env_truthy_default():
    """Test that the default is used when the variable is unset."""
    with patch.dict(os.environ, clear=True):
        assert is_env_truthy("BOARD_FLAG", "yes") is True
        assert is_env_truthy("BOARD_FLAG") is False
