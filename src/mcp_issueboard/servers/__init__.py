"""Server implementations for MCP Issue Board."""

from .board import board_mcp
from .main import main_mcp

__all__ = ["board_mcp", "main_mcp"]
