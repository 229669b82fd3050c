from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mcp_issueboard.board.config import BoardConfig
    from mcp_issueboard.board.lifecycle import IssueLifecycleCoordinator


@dataclass(frozen=True)
class MainAppContext:
    """
    Context holding the issue board coordinator built at server startup,
    together with the configuration it was built from.
    """

    coordinator: IssueLifecycleCoordinator | None = None
    board_config: BoardConfig | None = None
    read_only: bool = False
    enabled_tools: list[str] | None = None
