"""Issue board engine for mcp_issueboard.

This module provides position allocation, identity resolution, hierarchy
composition and the lifecycle coordinator that ties them to the stores.
"""

from .config import BoardConfig
from .hierarchy import HierarchyComposer, HierarchyComposition
from .identity import resolve, resolve_from_sources
from .lifecycle import IssueLifecycleCoordinator, IssueListResult
from .positions import compute_between_position, compute_insert_position
from .sources import ClerkIdentitySource, LocalIdentitySource
from .stores import (
    MemoryIssueStore,
    MemoryMemberStore,
    MemoryProjectStore,
    MemorySprintStore,
    MemoryStores,
    MemoryUserStore,
)

__all__ = [
    "BoardConfig",
    "ClerkIdentitySource",
    "HierarchyComposer",
    "HierarchyComposition",
    "IssueLifecycleCoordinator",
    "IssueListResult",
    "LocalIdentitySource",
    "MemoryIssueStore",
    "MemoryMemberStore",
    "MemoryProjectStore",
    "MemorySprintStore",
    "MemoryStores",
    "MemoryUserStore",
    "compute_between_position",
    "compute_insert_position",
    "resolve",
    "resolve_from_sources",
]
