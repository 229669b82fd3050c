"""
Pydantic models for issue board records and views.

This package provides type-safe models for issues, sprints and user
identities, including conversion methods from stored records to structured
models and simplified dictionaries for API responses.
"""

from .base import ApiModel, TimestampMixin

# Issue board models
from .board import (
    LIVE_SPRINT_STATUSES,
    HierarchyIntegrityWarning,
    Issue,
    IssueStatus,
    IssueType,
    IssueView,
    Sprint,
    SprintStatus,
    UserIdentity,
)
from .constants import (  # noqa: F401 - Keep constants available
    DELETED_SPRINT_ID,
    EMPTY_STRING,
    ISSUE_DEFAULT_ID,
    ISSUE_DEFAULT_KEY,
    ISSUE_KEY_PREFIX,
    SPRINT_DEFAULT_ID,
    SPRINT_NAME_PREFIX,
    UNKNOWN,
    UNPLACED_POSITION,
)

__all__ = [
    # Base models
    "ApiModel",
    "TimestampMixin",
    # Constants
    "DELETED_SPRINT_ID",
    "EMPTY_STRING",
    "ISSUE_DEFAULT_ID",
    "ISSUE_DEFAULT_KEY",
    "ISSUE_KEY_PREFIX",
    "SPRINT_DEFAULT_ID",
    "SPRINT_NAME_PREFIX",
    "UNKNOWN",
    "UNPLACED_POSITION",
    # Issue board models
    "HierarchyIntegrityWarning",
    "Issue",
    "IssueStatus",
    "IssueType",
    "IssueView",
    "LIVE_SPRINT_STATUSES",
    "Sprint",
    "SprintStatus",
    "UserIdentity",
]
