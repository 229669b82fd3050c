"""Module composing flat issue records into nested, decorated issue views."""

import logging
from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass, field

from ..models.board import HierarchyIntegrityWarning, Issue, IssueView, UserIdentity

logger = logging.getLogger("mcp-issueboard.board.hierarchy")


@dataclass
class HierarchyComposition:
    """Top-level issue views plus any integrity problems found on the way."""

    issues: list[IssueView] = field(default_factory=list)
    warnings: list[HierarchyIntegrityWarning] = field(default_factory=list)


def _find_cycle_members(by_id: Mapping[str, Issue]) -> list[list[str]]:
    """Return each parent-pointer cycle as the list of its member ids."""
    cycles: list[list[str]] = []
    settled: set[str] = set()
    for start in by_id:
        if start in settled:
            continue
        path: list[str] = []
        on_path: dict[str, int] = {}
        current: str | None = start
        while current is not None and current in by_id and current not in settled:
            if current in on_path:
                cycles.append(path[on_path[current] :])
                break
            on_path[current] = len(path)
            path.append(current)
            current = by_id[current].parent_id
        settled.update(path)
    return cycles


class HierarchyComposer:
    """Builds the nested issue view model from a flat set of issues.

    The composer is stateless: each call rebuilds the tree from the records
    it is given, so it can be shared between concurrent requests.
    """

    def decorate(
        self,
        issue: Issue,
        identities: Mapping[str, UserIdentity],
        active_sprint_ids: Collection[str],
    ) -> IssueView:
        """
        Decorate one issue with identities and its sprint flag.

        Args:
            issue: The issue to decorate
            identities: Resolved identities keyed by user id
            active_sprint_ids: Ids of sprints that are ACTIVE or PENDING

        Returns:
            An IssueView with no children and no parent
        """
        assignee = identities.get(issue.assignee_id) if issue.assignee_id else None
        reporter = identities.get(issue.reporter_id) if issue.reporter_id else None
        return IssueView.from_issue(
            issue,
            assignee=assignee,
            reporter=reporter,
            sprint_is_active=(
                issue.sprint_id is not None and issue.sprint_id in active_sprint_ids
            ),
        )

    def compose_report(
        self,
        issues: Iterable[Issue],
        identities: Mapping[str, UserIdentity],
        active_sprint_ids: Collection[str],
    ) -> HierarchyComposition:
        """
        Compose issues into trees and report integrity problems.

        Deleted issues are dropped first. An issue whose parent is absent
        (unknown or deleted) becomes top level, and so does every member of
        a parent cycle.

        Args:
            issues: The flat issue records of one scope
            identities: Resolved identities keyed by user id
            active_sprint_ids: Ids of sprints that are ACTIVE or PENDING

        Returns:
            The top-level views and the warnings collected
        """
        composition = HierarchyComposition()

        by_id: dict[str, Issue] = {}
        for issue in issues:
            if issue.is_deleted:
                continue
            if issue.id in by_id:
                composition.warnings.append(
                    HierarchyIntegrityWarning(
                        issue_id=issue.id,
                        kind="duplicate",
                        message=(
                            f"Issue {issue.key} appears more than once; "
                            "keeping the first record"
                        ),
                    )
                )
                continue
            by_id[issue.id] = issue

        detached: set[str] = set()
        for cycle in _find_cycle_members(by_id):
            detached.update(cycle)
            keys = " -> ".join(by_id[issue_id].key for issue_id in cycle)
            for issue_id in cycle:
                composition.warnings.append(
                    HierarchyIntegrityWarning(
                        issue_id=issue_id,
                        kind="cycle",
                        message=(
                            f"Parent cycle {keys}; issue "
                            f"{by_id[issue_id].key} shown as top level"
                        ),
                    )
                )

        views = {
            issue_id: self.decorate(issue, identities, active_sprint_ids)
            for issue_id, issue in by_id.items()
        }

        # Single pass: every issue either hangs off its parent or is a root.
        for issue_id, issue in by_id.items():
            view = views[issue_id]
            parent_id = issue.parent_id
            if parent_id is None or parent_id not in by_id or issue_id in detached:
                composition.issues.append(view)
                continue
            parent_view = views[parent_id]
            parent_view.children.append(view)
            view.parent = parent_view.shallow_copy()

        # Every live issue must be reachable exactly once from a root.
        visited: set[str] = set()
        for root in composition.issues:
            for node in root.iter_tree():
                if node.id in visited:
                    logger.warning(f"Issue {node.key} reached twice while composing")
                    continue
                visited.add(node.id)
        unreachable = set(by_id) - visited
        if unreachable:
            logger.error(f"{len(unreachable)} issues unreachable after composition")

        for warning in composition.warnings:
            logger.warning(f"Hierarchy integrity: {warning.message}")
        return composition

    def compose(
        self,
        issues: Iterable[Issue],
        identities: Mapping[str, UserIdentity],
        active_sprint_ids: Collection[str],
    ) -> list[IssueView]:
        """
        Compose issues into trees, returning only the top-level views.

        Args:
            issues: The flat issue records of one scope
            identities: Resolved identities keyed by user id
            active_sprint_ids: Ids of sprints that are ACTIVE or PENDING

        Returns:
            Top-level issue views with children nested recursively
        """
        return self.compose_report(issues, identities, active_sprint_ids).issues

    def compose_with_parent(
        self,
        issue: Issue,
        parent: Issue | None,
        identities: Mapping[str, UserIdentity],
        active_sprint_ids: Collection[str],
        children: Iterable[Issue] = (),
    ) -> IssueView | None:
        """
        Compose a single issue with exactly one level of ancestor context.

        Args:
            issue: The issue to show
            parent: Its parent record, if any
            identities: Resolved identities keyed by user id
            active_sprint_ids: Ids of sprints that are ACTIVE or PENDING
            children: Direct child records to list under the issue

        Returns:
            The decorated view, or None when the issue is deleted
        """
        if issue.is_deleted:
            return None

        view = self.decorate(issue, identities, active_sprint_ids)
        if (
            parent is not None
            and not parent.is_deleted
            and parent.id == issue.parent_id
            and parent.id != issue.id
        ):
            view.parent = self.decorate(parent, identities, active_sprint_ids)

        for child in children:
            if child.is_deleted or child.parent_id != issue.id or child.id == issue.id:
                continue
            child_view = self.decorate(child, identities, active_sprint_ids)
            child_view.parent = view.shallow_copy()
            view.children.append(child_view)
        return view
