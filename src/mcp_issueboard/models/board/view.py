"""
Issue board view models.

This module provides the output-only models returned to clients: the
decorated, nested issue view and the integrity warnings raised while
building it.
"""

from collections.abc import Iterator
from typing import Any, Literal

from pydantic import Field

from ..base import ApiModel
from .common import UserIdentity
from .issue import Issue


class IssueView(Issue):
    """
    An issue decorated for display.

    Top-level views nest their children recursively. A child view carries a
    shallow copy of its parent whose own parent is always None and whose
    children list is left empty.
    """

    assignee: UserIdentity | None = None
    reporter: UserIdentity | None = None
    children: list["IssueView"] = Field(default_factory=list)
    parent: "IssueView | None" = None
    sprint_is_active: bool = False

    @classmethod
    def from_issue(
        cls,
        issue: Issue,
        assignee: UserIdentity | None = None,
        reporter: UserIdentity | None = None,
        sprint_is_active: bool = False,
    ) -> "IssueView":
        """
        Decorate an issue without children or parent context.

        Args:
            issue: The issue to decorate
            assignee: The resolved assignee identity
            reporter: The resolved reporter identity
            sprint_is_active: Whether the issue's sprint is active

        Returns:
            A new IssueView
        """
        return cls(
            **issue.model_dump(),
            assignee=assignee,
            reporter=reporter,
            sprint_is_active=sprint_is_active,
        )

    def shallow_copy(self) -> "IssueView":
        """Return this view without parent context and without children."""
        return self.model_copy(update={"parent": None, "children": []})

    def iter_tree(self) -> Iterator["IssueView"]:
        """Yield this view and every descendant, depth first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def _node_dict(self) -> dict[str, Any]:
        result = super().to_simplified_dict()
        result["assignee"] = self.assignee.to_simplified_dict() if self.assignee else None
        result["reporter"] = self.reporter.to_simplified_dict() if self.reporter else None
        result["sprintIsActive"] = self.sprint_is_active
        result["parent"] = self.parent.to_simplified_dict() if self.parent else None
        result["children"] = []
        return result

    def to_simplified_dict(self) -> dict[str, Any]:
        """
        Convert to simplified dictionary for API response.

        The tree is walked with an explicit stack, so chains of any depth
        serialize without hitting the interpreter recursion limit.
        """
        root = self._node_dict()
        stack = [(self, root)]
        while stack:
            node, result = stack.pop()
            for child in node.children:
                child_result = child._node_dict()
                result["children"].append(child_result)
                stack.append((child, child_result))
        return root


class HierarchyIntegrityWarning(ApiModel):
    """
    Model describing ill-formed hierarchy input found while composing.
    """

    issue_id: str
    kind: Literal["cycle", "duplicate"]
    message: str

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], **kwargs: Any
    ) -> "HierarchyIntegrityWarning":
        """
        Create a warning from a dictionary.

        Args:
            data: The warning data ({issueId, kind, message})

        Returns:
            A HierarchyIntegrityWarning instance
        """
        return cls(
            issue_id=str(data.get("issueId", "")),
            kind=data.get("kind", "cycle"),
            message=str(data.get("message", "")),
        )

    def to_simplified_dict(self) -> dict[str, Any]:
        """Convert to simplified dictionary for API response."""
        return {
            "issueId": self.issue_id,
            "kind": self.kind,
            "message": self.message,
        }


IssueView.model_rebuild()
