"""Module for the issue lifecycle: create, update, reorder and delete issues."""

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ..exceptions import (
    HierarchyCycleError,
    IssueNotFoundError,
    PositionOrderError,
    ProjectNotFoundError,
    SprintNotFoundError,
)
from ..models.board import (
    LIVE_SPRINT_STATUSES,
    HierarchyIntegrityWarning,
    Issue,
    IssueStatus,
    IssueView,
    Project,
    ProjectMember,
    Sprint,
    SprintStatus,
    UserIdentity,
)
from ..models.board.payloads import IssueBulkUpdate, IssueCreate, IssueUpdate
from ..models.constants import (
    DELETED_SPRINT_ID,
    ISSUE_KEY_PREFIX,
    SPRINT_NAME_PREFIX,
    UNPLACED_POSITION,
)
from .config import BoardConfig
from .hierarchy import HierarchyComposer
from .identity import resolve_from_sources
from .positions import PositionField, compute_between_position, compute_insert_position
from .protocols import (
    IdentitySource,
    IssueStoreProto,
    MemberStoreProto,
    ProjectStoreProto,
    SprintStoreProto,
    UserStoreProto,
)
from .sources import ClerkIdentitySource, LocalIdentitySource
from .stores import MemoryMemberStore, MemoryProjectStore, MemoryStores

logger = logging.getLogger("mcp-issueboard.board.lifecycle")

# Stored record key for each updatable issue field.
RECORD_KEYS = {
    "name": "name",
    "description": "description",
    "type": "type",
    "status": "status",
    "sprint_position": "sprintPosition",
    "board_position": "boardPosition",
    "assignee_id": "assigneeId",
    "reporter_id": "reporterId",
    "parent_id": "parentId",
    "sprint_id": "sprintId",
    "is_deleted": "isDeleted",
    "sprint_color": "sprintColor",
}

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _to_record(changes: dict[str, Any]) -> dict[str, Any]:
    record: dict[str, Any] = {}
    for name, value in changes.items():
        if isinstance(value, Enum):
            value = value.value
        record[RECORD_KEYS[name]] = value
    return record


def _created_at(model: Issue | Sprint) -> datetime:
    created = model.created_at or _EPOCH
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created


@dataclass
class IssueListResult:
    """A page of composed issues."""

    issues: list[IssueView] = field(default_factory=list)
    total: int | None = None
    warnings: list[HierarchyIntegrityWarning] = field(default_factory=list)

    def to_simplified_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "issues": [issue.to_simplified_dict() for issue in self.issues]
        }
        if self.total is not None:
            result["total"] = self.total
        if self.warnings:
            result["warnings"] = [
                warning.to_simplified_dict() for warning in self.warnings
            ]
        return result


class _LockRegistry:
    """Hands out one lock per ordering destination."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[tuple[Any, ...], threading.Lock] = {}

    def get(self, key: tuple[Any, ...]) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, *keys: tuple[Any, ...]) -> Iterator[None]:
        # Always acquired in a fixed order.
        unique = sorted(set(keys), key=repr)
        with ExitStack() as stack:
            for key in unique:
                stack.enter_context(self.get(key))
            yield


def _backlog_key(sprint_id: str | None) -> tuple[Any, ...]:
    return ("sprint_position", sprint_id)


def _column_key(sprint_id: str | None, status: IssueStatus) -> tuple[Any, ...]:
    return ("board_position", sprint_id, status.value)


class IssueLifecycleCoordinator:
    """Runs issue, sprint and project operations against the injected stores.

    Every write that places an issue at the bottom of an ordering reads the
    ordering, computes the new position and persists it while holding the
    lock of that ordering.
    """

    def __init__(
        self,
        issues: IssueStoreProto,
        sprints: SprintStoreProto,
        users: UserStoreProto,
        config: BoardConfig | None = None,
        identity_provider: IdentitySource | None = None,
        composer: HierarchyComposer | None = None,
        projects: ProjectStoreProto | None = None,
        members: MemberStoreProto | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            issues: Issue store
            sprints: Sprint store
            users: Local user store
            config: Board configuration (defaults apply when omitted)
            identity_provider: Optional external identity source
            composer: Hierarchy composer to use
            projects: Project store (empty in-memory store when omitted)
            members: Project membership store (empty in-memory store when omitted)
        """
        self.issues = issues
        self.sprints = sprints
        self.users = users
        self.config = config or BoardConfig()
        self.local_identities = LocalIdentitySource(users)
        self.identity_provider = identity_provider
        self.composer = composer or HierarchyComposer()
        self.projects = projects if projects is not None else MemoryProjectStore()
        self.members = members if members is not None else MemoryMemberStore()
        self._locks = _LockRegistry()
        self._key_lock = threading.Lock()
        self._sprint_lock = threading.Lock()
        self._member_lock = threading.Lock()
        self._key_watermark = max(
            (issue.key_number or 0 for issue in self.issues.find_many()), default=0
        )

    @classmethod
    def from_config(cls, config: BoardConfig) -> "IssueLifecycleCoordinator":
        """Build a coordinator over in-memory stores from configuration.

        Args:
            config: Board configuration

        Returns:
            The coordinator, with stores seeded when a seed file is configured
        """
        stores = (
            MemoryStores.from_seed_file(config.seed_file)
            if config.seed_file
            else MemoryStores()
        )
        provider = None
        if config.is_identity_provider_configured:
            provider = ClerkIdentitySource(config)
        else:
            logger.info("Identity provider not configured, using local users only")
        return cls(
            stores.issues,
            stores.sprints,
            stores.users,
            config=config,
            identity_provider=provider,
            projects=stores.projects,
            members=stores.members,
        )

    # Lookups

    def active_sprint_ids(self) -> set[str]:
        return {
            sprint.id
            for sprint in self.sprints.find_many()
            if sprint.status in LIVE_SPRINT_STATUSES
        }

    def resolve_identities(self, issues: Iterable[Issue]) -> dict[str, UserIdentity]:
        user_ids: list[str | None] = []
        for issue in issues:
            user_ids.extend((issue.assignee_id, issue.reporter_id))
        return resolve_from_sources(
            user_ids, self.local_identities, self.identity_provider
        )

    def _live_issue(self, issue_id: str) -> Issue:
        issue = self.issues.get(issue_id)
        if issue is None or issue.is_deleted:
            raise IssueNotFoundError(f"Issue '{issue_id}' not found.")
        return issue

    def _sprint_accepts_board(self, sprint_id: str | None) -> bool:
        if sprint_id is None:
            return False
        sprint = self.sprints.get(sprint_id)
        return sprint is not None and sprint.status == SprintStatus.ACTIVE

    def _backlog(self, sprint_id: str | None, exclude: str | None = None) -> list[Issue]:
        return [
            issue
            for issue in self.issues.find_many(sprint_id=sprint_id, is_deleted=False)
            if issue.id != exclude
        ]

    def _column(
        self, sprint_id: str | None, status: IssueStatus, exclude: str | None = None
    ) -> list[Issue]:
        return [
            issue
            for issue in self.issues.find_many(
                sprint_id=sprint_id, status=status, is_deleted=False
            )
            if issue.id != exclude
        ]

    def _next_key(self) -> str:
        with self._key_lock:
            self._key_watermark += 1
            return f"{ISSUE_KEY_PREFIX}{self._key_watermark}"

    def _check_parent(self, issue_id: str | None, parent_id: str) -> None:
        """Reject a parent that is missing, deleted or would close a cycle."""
        if issue_id is not None and parent_id == issue_id:
            raise HierarchyCycleError(f"Issue '{issue_id}' cannot be its own parent.")
        ancestor = self._live_issue(parent_id)
        seen: set[str] = set()
        while ancestor.parent_id and ancestor.id not in seen:
            seen.add(ancestor.id)
            if ancestor.parent_id == issue_id:
                raise HierarchyCycleError(
                    f"Issue '{parent_id}' is a descendant of '{issue_id}'."
                )
            next_ancestor = self.issues.get(ancestor.parent_id)
            if next_ancestor is None:
                break
            ancestor = next_ancestor

    # Issues

    def list_issues(
        self,
        creator_id: str | None = None,
        limit: int | None = None,
        page: int | None = None,
    ) -> IssueListResult:
        """
        List live issues composed into parent/child trees.

        Args:
            creator_id: Only issues created by this user, newest first
            limit: Page size for the creator listing
            page: 1-based page number for the creator listing

        Returns:
            The composed issues, with a total when filtered by creator
        """
        live = self.issues.find_many(is_deleted=False)
        total = None
        if creator_id:
            live = sorted(
                (issue for issue in live if issue.creator_id == creator_id),
                key=_created_at,
                reverse=True,
            )
            total = len(live)
            if limit is not None:
                if limit < 1:
                    raise ValueError("limit must be at least 1")
                offset = (max(page, 1) - 1) * limit if page else 0
                live = live[offset : offset + limit]

        composition = self.composer.compose_report(
            live, self.resolve_identities(live), self.active_sprint_ids()
        )
        return IssueListResult(
            issues=composition.issues, total=total, warnings=composition.warnings
        )

    def get_issue(self, issue_id: str) -> IssueView | None:
        """
        Get one issue with its parent and direct children.

        Args:
            issue_id: The issue id

        Returns:
            The composed view, or None for an unknown or deleted issue
        """
        issue = self.issues.get(issue_id)
        if issue is None or issue.is_deleted:
            return None
        parent = self.issues.get(issue.parent_id) if issue.parent_id else None
        children = self.issues.find_many(parent_id=issue.id, is_deleted=False)
        related = [issue, *children] + ([parent] if parent else [])
        return self.composer.compose_with_parent(
            issue,
            parent,
            self.resolve_identities(related),
            self.active_sprint_ids(),
            children=children,
        )

    def create_issue(self, payload: IssueCreate) -> Issue:
        """
        Create an issue at the bottom of its sprint backlog.

        Args:
            payload: The validated create request

        Returns:
            The created issue

        Raises:
            SprintNotFoundError: If the named sprint does not exist
            IssueNotFoundError: If the named parent is missing or deleted
        """
        if payload.sprint_id and self.sprints.get(payload.sprint_id) is None:
            raise SprintNotFoundError(f"Sprint '{payload.sprint_id}' not found.")
        if payload.parent_id:
            self._check_parent(None, payload.parent_id)

        status = payload.status or IssueStatus.TODO
        sprint_id = payload.sprint_id
        on_board = self._sprint_accepts_board(sprint_id)
        keys = [_backlog_key(sprint_id)]
        if on_board:
            keys.append(_column_key(sprint_id, status))

        with self._locks.hold(*keys):
            sprint_position = compute_insert_position(
                self._backlog(sprint_id), "sprint_position"
            )
            board_position = (
                compute_insert_position(
                    self._column(sprint_id, status), "board_position"
                )
                if on_board
                else UNPLACED_POSITION
            )
            issue = self.issues.create(
                {
                    "key": self._next_key(),
                    "name": payload.name,
                    "details": payload.details,
                    "type": payload.type.value,
                    "status": status.value,
                    "sprintPosition": sprint_position,
                    "boardPosition": board_position,
                    "assigneeId": payload.assignee_id,
                    "reporterId": payload.reporter_id
                    or self.config.default_reporter_id,
                    "creatorId": payload.user_id or self.config.default_creator_id,
                    "parentId": payload.parent_id,
                    "sprintId": sprint_id,
                    "sprintColor": payload.sprint_color,
                    "isDeleted": False,
                }
            )
        logger.info(f"Created issue {issue.key} ({issue.id})")
        return issue

    def _apply_update(self, current: Issue, changes: dict[str, Any]) -> Issue:
        if changes.get("is_deleted") is True:
            changes.update(
                sprint_id=DELETED_SPRINT_ID,
                sprint_position=UNPLACED_POSITION,
                board_position=UNPLACED_POSITION,
            )
            return self.issues.update(current.id, _to_record(changes))

        if changes.get("parent_id"):
            self._check_parent(current.id, changes["parent_id"])
        if changes.get("sprint_id") and self.sprints.get(changes["sprint_id"]) is None:
            raise SprintNotFoundError(f"Sprint '{changes['sprint_id']}' not found.")

        restoring = current.is_deleted and changes.get("is_deleted") is False
        sprint_id = changes.get("sprint_id", current.sprint_id)
        if restoring and sprint_id == DELETED_SPRINT_ID:
            sprint_id = changes["sprint_id"] = None
        status = changes.get("status", current.status)
        sprint_moved = "sprint_id" in changes and sprint_id != current.sprint_id
        status_moved = "status" in changes and status != current.status

        keys = []
        place_backlog = (sprint_moved or restoring) and "sprint_position" not in changes
        place_column = (
            sprint_moved or status_moved or restoring
        ) and "board_position" not in changes
        on_board = self._sprint_accepts_board(sprint_id)
        if place_backlog:
            keys.append(_backlog_key(sprint_id))
        if place_column and on_board:
            keys.append(_column_key(sprint_id, status))

        with self._locks.hold(*keys):
            if place_backlog:
                changes["sprint_position"] = compute_insert_position(
                    self._backlog(sprint_id, exclude=current.id), "sprint_position"
                )
            if place_column:
                changes["board_position"] = (
                    compute_insert_position(
                        self._column(sprint_id, status, exclude=current.id),
                        "board_position",
                    )
                    if on_board
                    else UNPLACED_POSITION
                )
            return self.issues.update(current.id, _to_record(changes))

    def update_issue(self, issue_id: str, payload: IssueUpdate) -> IssueView:
        """
        Apply a partial update to one issue.

        Moving an issue to another sprint or status without explicit
        positions places it at the bottom of its new orderings.

        Args:
            issue_id: The issue id
            payload: The validated update request

        Returns:
            The updated issue decorated with its assignee and reporter

        Raises:
            IssueNotFoundError: If the issue or the new parent does not exist, or
                the issue is soft deleted and the update does not restore it
            SprintNotFoundError: If the new sprint does not exist
            HierarchyCycleError: If the new parent would create a cycle
        """
        current = self.issues.get(issue_id)
        changes = payload.changes()
        if current is None or (current.is_deleted and "is_deleted" not in changes):
            raise IssueNotFoundError(f"Issue '{issue_id}' not found.")
        updated = self._apply_update(current, changes)
        logger.debug(f"Updated issue {updated.key}")
        return self.composer.decorate(
            updated, self.resolve_identities([updated]), self.active_sprint_ids()
        )

    def update_issues(self, payload: IssueBulkUpdate) -> list[IssueView]:
        """
        Apply the same update to several issues.

        Unknown ids are skipped, and so are soft deleted issues unless the
        update sets isDeleted.

        Args:
            payload: The validated bulk update request

        Returns:
            The updated issues
        """
        update = payload.to_issue_update()
        touches_deletion = "is_deleted" in update.changes()
        updated: list[IssueView] = []
        for issue_id in dict.fromkeys(payload.ids):
            current = self.issues.get(issue_id)
            if current is None or (current.is_deleted and not touches_deletion):
                logger.debug(f"Skipping missing issue '{issue_id}' in bulk update")
                continue
            updated.append(self.update_issue(issue_id, update))
        logger.info(f"Bulk updated {len(updated)} of {len(payload.ids)} issues")
        return updated

    def reorder_issue(
        self,
        issue_id: str,
        before_id: str | None = None,
        after_id: str | None = None,
        field: PositionField = "sprint_position",
    ) -> Issue:
        """
        Move an issue between two neighbours of the same ordering.

        Args:
            issue_id: The issue to move
            before_id: The issue that should end up directly above it
            after_id: The issue that should end up directly below it
            field: Which ordering to change

        Returns:
            The moved issue

        Raises:
            IssueNotFoundError: If any of the issues is missing or deleted
            PositionOrderError: If a neighbour belongs to another ordering or
                the neighbours are out of order
        """
        issue = self._live_issue(issue_id)
        neighbours = [
            self._live_issue(other_id) for other_id in (before_id, after_id) if other_id
        ]
        for neighbour in neighbours:
            same_ordering = neighbour.sprint_id == issue.sprint_id and (
                field == "sprint_position" or neighbour.status == issue.status
            )
            if not same_ordering or neighbour.id == issue.id:
                raise PositionOrderError(
                    f"Issue '{neighbour.id}' is not a neighbour in this ordering."
                )

        if field == "sprint_position":
            key = _backlog_key(issue.sprint_id)
        else:
            key = _column_key(issue.sprint_id, issue.status)
        with self._locks.hold(key):
            before = self._live_issue(before_id) if before_id else None
            after = self._live_issue(after_id) if after_id else None
            ordering = (
                self._backlog(issue.sprint_id, exclude=issue.id)
                if field == "sprint_position"
                else self._column(issue.sprint_id, issue.status, issue.id)
            )
            if before is None and after is None:
                position = compute_insert_position(ordering, field)
            else:
                lower = getattr(before, field) if before else None
                upper = getattr(after, field) if after else None
                placed = [
                    getattr(other, field)
                    for other in ordering
                    if getattr(other, field) > UNPLACED_POSITION
                ]
                # A single neighbour pins one side; the other is its adjacent item.
                if upper is None:
                    upper = min((p for p in placed if p > lower), default=None)
                elif lower is None:
                    lower = max((p for p in placed if p < upper), default=None)
                position = compute_between_position(lower, upper)
            return self.issues.update(issue.id, _to_record({field: position}))

    def delete_issue(self, issue_id: str) -> Issue:
        """
        Soft delete an issue, parking it outside every ordering.

        Args:
            issue_id: The issue id

        Returns:
            The parked issue

        Raises:
            IssueNotFoundError: If the issue does not exist
        """
        current = self.issues.get(issue_id)
        if current is None:
            raise IssueNotFoundError(f"Issue '{issue_id}' not found.")
        deleted = self._apply_update(current, {"is_deleted": True})
        logger.info(f"Soft deleted issue {deleted.key}")
        return deleted

    def delete_issues(self, issue_ids: Iterable[str]) -> int:
        """
        Permanently remove issues.

        Args:
            issue_ids: Ids of the issues to remove

        Returns:
            Number of issues removed
        """
        removed = self.issues.delete_many(list(issue_ids))
        logger.info(f"Permanently deleted {removed} issues")
        return removed

    # Sprints

    def list_sprints(self, creator_id: str | None = None) -> list[Sprint]:
        """
        List ACTIVE and PENDING sprints, oldest first.

        Args:
            creator_id: Only sprints created by this user

        Returns:
            The sprints
        """
        sprints = [
            sprint
            for sprint in self.sprints.find_many()
            if sprint.is_live and (creator_id is None or sprint.creator_id == creator_id)
        ]
        return sorted(sprints, key=_created_at)

    def create_sprint(self, creator_id: str) -> Sprint:
        """
        Create the creator's next pending sprint.

        Args:
            creator_id: The user creating the sprint

        Returns:
            The new sprint, named SPRINT-<k>
        """
        if not creator_id:
            raise ValueError("creator_id is required to create a sprint")
        with self._sprint_lock:
            count = len(self.sprints.find_many(creator_id=creator_id))
            sprint = self.sprints.create(
                {
                    "name": f"{SPRINT_NAME_PREFIX}{count + 1}",
                    "description": "",
                    "status": SprintStatus.PENDING.value,
                    "creatorId": creator_id,
                }
            )
        logger.info(f"Created sprint {sprint.name} for {creator_id}")
        return sprint

    # Users

    def get_user(self, user_id: str) -> UserIdentity | None:
        """Resolve one user through the local store and the provider."""
        return resolve_from_sources(
            [user_id], self.local_identities, self.identity_provider
        ).get(user_id)

    def find_user_by_email(self, email: str) -> UserIdentity | None:
        """Find a local user by email and enrich it from the provider."""
        local = self.users.find_by_email(email)
        if local is None:
            return None
        return self.get_user(local.id) or local

    # Project

    def get_project(self, key: str | None = None) -> Project | None:
        """
        Look up a project by key.

        Args:
            key: Project key; the configured project key when omitted

        Returns:
            The project, or None when no project has this key
        """
        return self.projects.find_by_key(key or self.config.project_key)

    def _stored_project(self, project_id: str) -> Project:
        project = self.projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project '{project_id}' not found.")
        return project

    def list_project_members(self, project_id: str) -> list[UserIdentity]:
        """
        List the identities of a project's members, in the order they joined.

        Members that neither the local store nor the provider knows are left
        out.

        Args:
            project_id: The project id

        Returns:
            The member identities

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        self._stored_project(project_id)
        user_ids = list(
            dict.fromkeys(
                member.user_id
                for member in self.members.find_many(project_id=project_id)
            )
        )
        identities = resolve_from_sources(
            user_ids, self.local_identities, self.identity_provider
        )
        return [identities[user_id] for user_id in user_ids if user_id in identities]

    def add_project_member(self, project_id: str, user_id: str) -> ProjectMember:
        """
        Add a user to a project.

        Adding an existing member returns the existing membership.

        Args:
            project_id: The project id
            user_id: The user to add

        Returns:
            The membership

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        if not user_id:
            raise ValueError("user_id is required to add a project member")
        project = self._stored_project(project_id)
        with self._member_lock:
            existing = self.members.find_many(project_id=project.id, user_id=user_id)
            if existing:
                return existing[0]
            member = self.members.create({"userId": user_id, "projectId": project.id})
        logger.info(f"Added {user_id} to project {project.key}")
        return member
