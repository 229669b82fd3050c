"""
Issue board agile models.

This module provides the Pydantic model for sprints.
"""

import logging
from datetime import datetime
from typing import Any

from ..base import ApiModel, TimestampMixin
from ..constants import EMPTY_STRING, SPRINT_DEFAULT_ID, UNKNOWN
from .common import LIVE_SPRINT_STATUSES, SprintStatus

logger = logging.getLogger(__name__)


class Sprint(ApiModel, TimestampMixin):
    """
    Model representing a sprint.
    """

    id: str = SPRINT_DEFAULT_ID
    name: str = UNKNOWN
    description: str = EMPTY_STRING
    duration: str | None = None
    status: SprintStatus = SprintStatus.PENDING
    creator_id: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any], **kwargs: Any) -> "Sprint":
        """
        Create a Sprint from a stored sprint record.

        Args:
            data: The sprint record (camelCase keys)

        Returns:
            A Sprint instance
        """
        if not data:
            return cls()

        # Handle non-dictionary data by returning a default instance
        if not isinstance(data, dict):
            logger.debug("Received non-dictionary data, returning default instance")
            return cls()

        status = SprintStatus.PENDING
        if raw_status := data.get("status"):
            try:
                status = SprintStatus(str(raw_status).upper())
            except ValueError:
                logger.debug(
                    f"Unknown sprint status '{raw_status}', defaulting to PENDING"
                )

        # Ensure ID is a string
        sprint_id = data.get("id", SPRINT_DEFAULT_ID)
        if sprint_id is not None:
            sprint_id = str(sprint_id)

        return cls(
            id=sprint_id,
            name=str(data.get("name") or UNKNOWN),
            description=str(data.get("description") or EMPTY_STRING),
            duration=data.get("duration"),
            status=status,
            creator_id=data.get("creatorId"),
            start_date=cls.coerce_timestamp(data.get("startDate")),
            end_date=cls.coerce_timestamp(data.get("endDate")),
            created_at=cls.coerce_timestamp(data.get("createdAt")),
        )

    @property
    def is_live(self) -> bool:
        """Whether the sprint counts towards active-sprint membership."""
        return self.status in LIVE_SPRINT_STATUSES

    def to_simplified_dict(self) -> dict[str, Any]:
        """Convert to simplified dictionary for API response."""
        result = {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "creatorId": self.creator_id,
            "createdAt": self.format_timestamp(self.created_at),
        }

        if self.description:
            result["description"] = self.description

        if self.duration:
            result["duration"] = self.duration

        # Only include dates if they're set
        if self.start_date:
            result["startDate"] = self.format_timestamp(self.start_date)

        if self.end_date:
            result["endDate"] = self.format_timestamp(self.end_date)

        return result
