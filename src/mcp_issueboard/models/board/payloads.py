"""
Issue board request payload models.

These models validate the bodies of create and update requests before they
reach the lifecycle coordinator. Keys may be given in snake_case or in the
camelCase used by the web client.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .common import IssueStatus, IssueType

# Fields that an update may explicitly clear by sending null.
NULLABLE_UPDATE_FIELDS = frozenset({"assignee_id", "parent_id", "sprint_id"})


class _Payload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class IssueCreate(_Payload):
    """Body of a create-issue request."""

    name: str = Field(min_length=1)
    type: IssueType
    status: IssueStatus | None = None
    assignee_id: str | None = None
    reporter_id: str | None = None
    sprint_id: str | None = None
    parent_id: str | None = None
    sprint_color: str | None = None
    user_id: str | None = None
    details: str | None = None


class IssueUpdate(_Payload):
    """Body of a partial issue update."""

    name: str | None = None
    description: str | None = None
    type: IssueType | None = None
    status: IssueStatus | None = None
    sprint_position: float | None = None
    board_position: float | None = None
    assignee_id: str | None = None
    reporter_id: str | None = None
    parent_id: str | None = None
    sprint_id: str | None = None
    is_deleted: bool | None = None
    sprint_color: str | None = None

    def changes(self) -> dict[str, Any]:
        """
        Return the fields this update actually changes.

        A field counts when it was sent with a value, or when it was sent as
        null and is one of the fields that may be cleared.

        Returns:
            Mapping of snake_case field name to new value
        """
        result: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None and name not in NULLABLE_UPDATE_FIELDS:
                continue
            result[name] = value
        return result


class IssueBulkUpdate(_Payload):
    """Body of a bulk update applying the same change to several issues."""

    ids: list[str] = Field(min_length=1)
    type: IssueType | None = None
    status: IssueStatus | None = None
    assignee_id: str | None = None
    reporter_id: str | None = None
    parent_id: str | None = None
    sprint_id: str | None = None
    is_deleted: bool | None = None

    def to_issue_update(self) -> IssueUpdate:
        """The per-issue update equivalent to this bulk request."""
        return IssueUpdate(
            **{
                name: getattr(self, name)
                for name in self.model_fields_set
                if name != "ids"
            }
        )
