"""
Issue board project models.

This module provides the Pydantic models for the board's project and its
member list.
"""

import logging
from datetime import datetime
from typing import Any

from ..base import ApiModel, TimestampMixin
from ..constants import PROJECT_DEFAULT_ID, UNKNOWN

logger = logging.getLogger(__name__)


class Project(ApiModel, TimestampMixin):
    """
    Model representing the project that owns the board.
    """

    id: str = PROJECT_DEFAULT_ID
    key: str = UNKNOWN
    name: str = UNKNOWN
    default_assignee_id: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any], **kwargs: Any) -> "Project":
        """
        Create a Project from a stored project record.

        Args:
            data: The project record (camelCase keys)

        Returns:
            A Project instance
        """
        if not data or not isinstance(data, dict):
            return cls()

        return cls(
            id=str(data.get("id", PROJECT_DEFAULT_ID)),
            key=str(data.get("key") or UNKNOWN),
            name=str(data.get("name") or UNKNOWN),
            default_assignee_id=data.get("defaultAssignee") or None,
            created_at=cls.coerce_timestamp(data.get("createdAt")),
        )

    def to_simplified_dict(self) -> dict[str, Any]:
        """Convert to simplified dictionary for API response."""
        return {
            "id": self.id,
            "key": self.key,
            "name": self.name,
            "defaultAssignee": self.default_assignee_id,
            "createdAt": self.format_timestamp(self.created_at),
        }


class ProjectMember(ApiModel):
    """
    Model linking a user to a project.
    """

    id: str = PROJECT_DEFAULT_ID
    user_id: str = ""
    project_id: str = ""

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], **kwargs: Any
    ) -> "ProjectMember":
        """
        Create a ProjectMember from a stored membership record.

        Args:
            data: The membership record ({id, userId, projectId})

        Returns:
            A ProjectMember instance
        """
        if not data or not isinstance(data, dict):
            return cls()

        return cls(
            id=str(data.get("id", PROJECT_DEFAULT_ID)),
            user_id=str(data.get("userId") or ""),
            project_id=str(data.get("projectId") or ""),
        )

    def to_simplified_dict(self) -> dict[str, Any]:
        """Convert to simplified dictionary for API response."""
        return {"id": self.id, "userId": self.user_id, "projectId": self.project_id}
