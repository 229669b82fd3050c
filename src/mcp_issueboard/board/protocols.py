"""Module for issue board protocol definitions.

The engine never talks to a database or a remote service directly; it is
handed collaborators that satisfy these protocols.
"""

from abc import abstractmethod
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from ..models.board import Issue, Project, ProjectMember, Sprint, UserIdentity


class IssueStoreProto(Protocol):
    """Protocol defining the issue store interface."""

    @abstractmethod
    def find_many(self, **filters: Any) -> list[Issue]:
        """
        Return the issues whose fields equal every given filter.

        Args:
            **filters: Field values to match (e.g. sprint_id="s1", is_deleted=False)

        Returns:
            The matching issues
        """

    @abstractmethod
    def get(self, issue_id: str) -> Issue | None:
        """Return one issue by id, or None."""

    @abstractmethod
    def create(self, fields: dict[str, Any]) -> Issue:
        """
        Persist a new issue.

        Args:
            fields: Record fields in their stored (camelCase) form

        Returns:
            The stored issue
        """

    @abstractmethod
    def update(self, issue_id: str, fields: dict[str, Any]) -> Issue:
        """
        Apply a partial update to an issue.

        Args:
            issue_id: The issue to update
            fields: Stored (camelCase) fields to overwrite

        Returns:
            The updated issue

        Raises:
            IssueNotFoundError: If no issue has this id
        """

    @abstractmethod
    def delete_many(self, issue_ids: Iterable[str]) -> int:
        """Physically remove issues and return how many were removed."""


class SprintStoreProto(Protocol):
    """Protocol defining the sprint store interface."""

    @abstractmethod
    def find_many(self, **filters: Any) -> list[Sprint]:
        """Return the sprints whose fields equal every given filter."""

    @abstractmethod
    def get(self, sprint_id: str) -> Sprint | None:
        """Return one sprint by id, or None."""

    @abstractmethod
    def create(self, fields: dict[str, Any]) -> Sprint:
        """Persist a new sprint."""


class UserStoreProto(Protocol):
    """Protocol defining the local user store interface."""

    @abstractmethod
    def find_many(self, user_ids: Iterable[str]) -> list[UserIdentity]:
        """Return the stored users whose id is in ``user_ids``."""

    @abstractmethod
    def get(self, user_id: str) -> UserIdentity | None:
        """Return one user by id, or None."""

    @abstractmethod
    def find_by_email(self, email: str) -> UserIdentity | None:
        """Return the user registered with this email, or None."""

    @abstractmethod
    def create(self, fields: dict[str, Any]) -> UserIdentity:
        """Persist a new local user."""


class ProjectStoreProto(Protocol):
    """Protocol defining the project store interface."""

    @abstractmethod
    def get(self, project_id: str) -> Project | None:
        """Return one project by id, or None."""

    @abstractmethod
    def find_by_key(self, key: str) -> Project | None:
        """Return the project with this key, or None."""

    @abstractmethod
    def create(self, fields: dict[str, Any]) -> Project:
        """Persist a new project."""


class MemberStoreProto(Protocol):
    """Protocol defining the project membership store interface."""

    @abstractmethod
    def find_many(self, **filters: Any) -> list[ProjectMember]:
        """
        Return the memberships whose fields equal every given filter.

        Args:
            **filters: Field values to match (e.g. project_id="p1")

        Returns:
            The matching memberships, in insertion order
        """

    @abstractmethod
    def create(self, fields: dict[str, Any]) -> ProjectMember:
        """Persist a new membership."""


@runtime_checkable
class IdentitySource(Protocol):
    """Protocol defining a source of user identities."""

    @abstractmethod
    def fetch_many(self, user_ids: Iterable[str]) -> list[UserIdentity]:
        """
        Fetch the identities known to this source.

        Args:
            user_ids: Ids to look up; unknown ids are silently absent

        Returns:
            The identities found
        """
