"""
Issue board issue models.

This module provides the Pydantic model for issue records.
"""

import logging
from datetime import datetime
from typing import Any

from ..base import ApiModel, TimestampMixin
from ..constants import (
    DELETED_SPRINT_ID,
    EMPTY_STRING,
    ISSUE_DEFAULT_ID,
    ISSUE_DEFAULT_KEY,
    ISSUE_KEY_PREFIX,
    UNPLACED_POSITION,
)
from .common import IssueStatus, IssueType

logger = logging.getLogger(__name__)


def _optional_str(value: Any) -> str | None:
    if value is None or value == EMPTY_STRING:
        return None
    return str(value)


def _position(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return UNPLACED_POSITION


class Issue(ApiModel, TimestampMixin):
    """
    Model representing an issue record.

    Positions are only meaningful inside their own ordering: board_position
    within a status column of a sprint, sprint_position within a sprint
    backlog.
    """

    id: str = ISSUE_DEFAULT_ID
    key: str = ISSUE_DEFAULT_KEY
    name: str = EMPTY_STRING
    description: str | None = None
    details: str | None = None
    type: IssueType = IssueType.TASK
    status: IssueStatus = IssueStatus.TODO
    board_position: float = UNPLACED_POSITION
    sprint_position: float = UNPLACED_POSITION
    assignee_id: str | None = None
    reporter_id: str | None = None
    creator_id: str | None = None
    parent_id: str | None = None
    sprint_id: str | None = None
    sprint_color: str | None = None
    is_deleted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any], **kwargs: Any) -> "Issue":
        """
        Create an Issue from a stored issue record.

        Args:
            data: The issue record (camelCase keys)

        Returns:
            An Issue instance
        """
        if not data:
            return cls()

        # Handle non-dictionary data by returning a default instance
        if not isinstance(data, dict):
            logger.debug("Received non-dictionary data, returning default instance")
            return cls()

        issue_type = IssueType.TASK
        if raw_type := data.get("type"):
            try:
                issue_type = IssueType(str(raw_type).upper())
            except ValueError:
                logger.debug(f"Unknown issue type '{raw_type}', defaulting to TASK")

        status = IssueStatus.TODO
        if raw_status := data.get("status"):
            try:
                status = IssueStatus(str(raw_status).upper())
            except ValueError:
                logger.debug(f"Unknown issue status '{raw_status}', defaulting to TODO")

        # Ensure ID is a string
        issue_id = data.get("id", ISSUE_DEFAULT_ID)
        if issue_id is not None:
            issue_id = str(issue_id)

        return cls(
            id=issue_id,
            key=str(data.get("key") or ISSUE_DEFAULT_KEY),
            name=str(data.get("name") or EMPTY_STRING),
            description=data.get("description"),
            details=data.get("details"),
            type=issue_type,
            status=status,
            board_position=_position(data.get("boardPosition", UNPLACED_POSITION)),
            sprint_position=_position(data.get("sprintPosition", UNPLACED_POSITION)),
            assignee_id=_optional_str(data.get("assigneeId")),
            reporter_id=_optional_str(data.get("reporterId")),
            creator_id=_optional_str(data.get("creatorId")),
            parent_id=_optional_str(data.get("parentId")),
            sprint_id=_optional_str(data.get("sprintId")),
            sprint_color=data.get("sprintColor"),
            is_deleted=bool(data.get("isDeleted", False)),
            created_at=cls.coerce_timestamp(data.get("createdAt")),
            updated_at=cls.coerce_timestamp(data.get("updatedAt")),
        )

    @property
    def key_number(self) -> int | None:
        """The sequence number of the issue key, if the key is well formed."""
        if not self.key.startswith(ISSUE_KEY_PREFIX):
            return None
        suffix = self.key[len(ISSUE_KEY_PREFIX) :]
        return int(suffix) if suffix.isdigit() else None

    @property
    def is_parked(self) -> bool:
        """Whether the issue carries the soft-delete sentinels."""
        return (
            self.sprint_id == DELETED_SPRINT_ID
            and self.board_position == UNPLACED_POSITION
            and self.sprint_position == UNPLACED_POSITION
        )

    def to_simplified_dict(self) -> dict[str, Any]:
        """Convert to simplified dictionary for API response."""
        return {
            "id": self.id,
            "key": self.key,
            "name": self.name,
            "description": self.description,
            "details": self.details,
            "type": self.type.value,
            "status": self.status.value,
            "boardPosition": self.board_position,
            "sprintPosition": self.sprint_position,
            "assigneeId": self.assignee_id,
            "reporterId": self.reporter_id,
            "creatorId": self.creator_id,
            "parentId": self.parent_id,
            "sprintId": self.sprint_id,
            "sprintColor": self.sprint_color,
            "isDeleted": self.is_deleted,
            "createdAt": self.format_timestamp(self.created_at),
            "updatedAt": self.format_timestamp(self.updated_at),
        }
