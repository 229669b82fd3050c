"""
Common issue board models.

This module provides the enumerations shared by issues and sprints and the
Pydantic model for user identities coming from either identity source.
"""

import logging
from enum import Enum
from typing import Any

from ..base import ApiModel
from ..constants import EMPTY_STRING

logger = logging.getLogger(__name__)


class IssueType(str, Enum):
    """Issue type enumeration."""

    BUG = "BUG"
    TASK = "TASK"
    SUBTASK = "SUBTASK"
    STORY = "STORY"
    EPIC = "EPIC"


class IssueStatus(str, Enum):
    """Issue status enumeration; each status is one board column."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class SprintStatus(str, Enum):
    """Sprint status enumeration."""

    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    CLOSED = "CLOSED"


# Sprints in these states count as "active" for the sprintIsActive flag.
LIVE_SPRINT_STATUSES = frozenset({SprintStatus.ACTIVE, SprintStatus.PENDING})


class UserIdentity(ApiModel):
    """
    Model representing a user identity.

    All profile fields are optional so that a minimal local stub and a rich
    provider profile can be merged field by field.
    """

    id: str = EMPTY_STRING
    name: str | None = None
    email: str | None = None
    avatar: str | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any], **kwargs: Any) -> "UserIdentity":
        """
        Create a UserIdentity from a local user store record.

        Args:
            data: The user record ({id, name, email, avatar})

        Returns:
            A UserIdentity instance (with an empty id for unusable data)
        """
        if not data:
            return cls()

        # Handle non-dictionary data by returning a default instance
        if not isinstance(data, dict):
            logger.debug("Received non-dictionary data, returning default instance")
            return cls()

        user_id = data.get("id")
        return cls(
            id=str(user_id).strip() if user_id is not None else EMPTY_STRING,
            name=data.get("name") or None,
            email=data.get("email") or None,
            avatar=data.get("avatar") or data.get("avatarUrl") or None,
        )

    @property
    def is_valid(self) -> bool:
        """Whether the identity carries a usable id."""
        return bool(self.id)

    def merged_with(self, fallback: "UserIdentity") -> "UserIdentity":
        """
        Merge this identity with a fallback for the same user.

        Fields set on this identity win; fields it lacks are taken from the
        fallback.

        Args:
            fallback: The identity providing values for missing fields

        Returns:
            A new merged UserIdentity
        """
        return UserIdentity(
            id=self.id or fallback.id,
            name=self.name if self.name is not None else fallback.name,
            email=self.email if self.email is not None else fallback.email,
            avatar=self.avatar if self.avatar is not None else fallback.avatar,
        )

    def to_simplified_dict(self) -> dict[str, Any]:
        """Convert to simplified dictionary for API response."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "avatar": self.avatar,
        }
