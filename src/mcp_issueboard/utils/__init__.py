"""
Utility functions for MCP Issue Board.
This package provides date parsing, logging setup and server mode helpers.
"""

from .date import parse_date, utc_now
from .io import is_read_only_mode
from .logging import log_board_config, mask_sensitive, setup_logging
from .tools import get_enabled_tools, should_include_tool

__all__ = [
    "get_enabled_tools",
    "is_read_only_mode",
    "log_board_config",
    "mask_sensitive",
    "parse_date",
    "setup_logging",
    "should_include_tool",
    "utc_now",
]
