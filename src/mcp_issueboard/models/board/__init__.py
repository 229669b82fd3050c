"""
Issue board data models.

This package provides Pydantic models for issues, sprints, the project and
its members, user identities and the composed issue views returned to clients.
"""

from .agile import Sprint
from .common import (
    LIVE_SPRINT_STATUSES,
    IssueStatus,
    IssueType,
    SprintStatus,
    UserIdentity,
)
from .issue import Issue
from .project import Project, ProjectMember
from .view import HierarchyIntegrityWarning, IssueView

__all__ = [
    "Issue",
    "IssueStatus",
    "IssueType",
    "IssueView",
    "HierarchyIntegrityWarning",
    "LIVE_SPRINT_STATUSES",
    "Project",
    "ProjectMember",
    "Sprint",
    "SprintStatus",
    "UserIdentity",
]
