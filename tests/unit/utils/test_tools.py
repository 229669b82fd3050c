"""Tests for tool utility functions."""

import os
from unittest.mock import patch

import pytest

from mcp_issueboard.utils.tools import get_enabled_tools, should_include_tool


def test_get_enabled_tools_not_set():
    with patch.dict(os.environ, {}, clear=True):
        assert get_enabled_tools() is None


@pytest.mark.parametrize("value", ["", "   ", ",,,,", " , , , "])
def test_get_enabled_tools_without_names(value):
    """Test that values holding no tool names mean all tools."""
    with patch.dict(os.environ, {"ENABLED_TOOLS": value}, clear=True):
        assert get_enabled_tools() is None


def test_get_enabled_tools_single_tool():
    with patch.dict(os.environ, {"ENABLED_TOOLS": "board_get_issue"}, clear=True):
        assert get_enabled_tools() == ["board_get_issue"]


def test_get_enabled_tools_strips_whitespace():
    with patch.dict(
        os.environ,
        {"ENABLED_TOOLS": " board_list_issues , board_get_issue ,, "},
        clear=True,
    ):
        assert get_enabled_tools() == ["board_list_issues", "board_get_issue"]


def test_should_include_tool_none_enabled():
    assert should_include_tool("board_create_issue", None) is True


def test_should_include_tool_enabled():
    enabled = ["board_list_issues", "board_get_issue"]
    assert should_include_tool("board_get_issue", enabled) is True
    assert should_include_tool("board_delete_issue", enabled) is False
