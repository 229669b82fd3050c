"""In-memory stores implementing the issue board store protocols.

Records are kept in their stored (camelCase) form and converted to models
on the way out, the same way a database-backed store would hand rows to
the engine.
"""

import json
import logging
import threading
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Generic, TypeVar

from ..exceptions import IssueNotFoundError
from ..models.base import ApiModel
from ..models.board import Issue, Project, ProjectMember, Sprint, UserIdentity
from ..utils.date import utc_now

logger = logging.getLogger("mcp-issueboard.board.stores")

ModelType = TypeVar("ModelType", bound=ApiModel)


def _matches(model: ApiModel, filters: dict[str, Any]) -> bool:
    for name, expected in filters.items():
        actual = getattr(model, name)
        if isinstance(expected, (set, frozenset, list, tuple)):
            if actual not in expected:
                return False
        elif actual != expected:
            return False
    return True


class _MemoryTable(Generic[ModelType]):
    """A thread-safe table of camelCase records keyed by id."""

    model: type[ModelType]

    def __init__(self, records: Iterable[dict[str, Any]] = ()) -> None:
        self._lock = threading.RLock()
        self._records: dict[str, dict[str, Any]] = {}
        for record in records:
            self._insert(dict(record))

    def _insert(self, record: dict[str, Any]) -> ModelType:
        now = utc_now().isoformat()
        record.setdefault("id", str(uuid.uuid4()))
        record["id"] = str(record["id"])
        record.setdefault("createdAt", now)
        record.setdefault("updatedAt", record["createdAt"])
        with self._lock:
            self._records[record["id"]] = record
        return self.model.from_api_response(record)

    def find_many(self, **filters: Any) -> list[ModelType]:
        with self._lock:
            records = list(self._records.values())
        models = [self.model.from_api_response(record) for record in records]
        return [model for model in models if _matches(model, filters)]

    def get(self, record_id: str) -> ModelType | None:
        with self._lock:
            record = self._records.get(record_id)
        return self.model.from_api_response(record) if record else None

    def create(self, fields: dict[str, Any]) -> ModelType:
        return self._insert(dict(fields))

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class MemoryIssueStore(_MemoryTable[Issue]):
    """Issue store keeping records in memory."""

    model = Issue

    def update(self, issue_id: str, fields: dict[str, Any]) -> Issue:
        with self._lock:
            record = self._records.get(issue_id)
            if record is None:
                raise IssueNotFoundError(f"Issue '{issue_id}' not found.")
            record.update(fields)
            record["updatedAt"] = utc_now().isoformat()
            return Issue.from_api_response(record)

    def delete_many(self, issue_ids: Iterable[str]) -> int:
        removed = 0
        with self._lock:
            for issue_id in set(issue_ids):
                if self._records.pop(issue_id, None) is not None:
                    removed += 1
        logger.debug(f"Deleted {removed} issues")
        return removed


class MemorySprintStore(_MemoryTable[Sprint]):
    """Sprint store keeping records in memory."""

    model = Sprint


class MemoryUserStore(_MemoryTable[UserIdentity]):
    """Local user store keeping records in memory."""

    model = UserIdentity

    def find_many(self, user_ids: Iterable[str]) -> list[UserIdentity]:  # type: ignore[override]
        wanted = set(user_ids)
        with self._lock:
            records = [
                self._records[user_id] for user_id in wanted if user_id in self._records
            ]
        return [UserIdentity.from_api_response(record) for record in records]

    def find_by_email(self, email: str) -> UserIdentity | None:
        wanted = email.strip().lower()
        with self._lock:
            for record in self._records.values():
                if str(record.get("email") or "").lower() == wanted:
                    return UserIdentity.from_api_response(record)
        return None


class MemoryProjectStore(_MemoryTable[Project]):
    """Project store keeping records in memory."""

    model = Project

    def find_by_key(self, key: str) -> Project | None:
        with self._lock:
            for record in self._records.values():
                if record.get("key") == key:
                    return Project.from_api_response(record)
        return None


class MemoryMemberStore(_MemoryTable[ProjectMember]):
    """Project membership store keeping records in memory."""

    model = ProjectMember


@dataclass
class MemoryStores:
    """The in-memory stores backing one coordinator."""

    issues: MemoryIssueStore = field(default_factory=MemoryIssueStore)
    sprints: MemorySprintStore = field(default_factory=MemorySprintStore)
    users: MemoryUserStore = field(default_factory=MemoryUserStore)
    projects: MemoryProjectStore = field(default_factory=MemoryProjectStore)
    members: MemoryMemberStore = field(default_factory=MemoryMemberStore)

    @classmethod
    def from_seed_file(cls, path: str | Path) -> "MemoryStores":
        """
        Build stores preloaded from a JSON seed file.

        The file holds ``{"issues": [...], "sprints": [...], "users": [...],
        "projects": [...], "members": [...]}`` with camelCase records; missing
        sections are treated as empty.

        Args:
            path: Path to the JSON seed file

        Returns:
            The populated stores

        Raises:
            ValueError: If the file is not a JSON object
            OSError: If the file cannot be read
        """
        seed_path = Path(path)
        with seed_path.open(encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            error_msg = f"Seed file {seed_path} must contain a JSON object"
            raise ValueError(error_msg)

        stores = cls(
            issues=MemoryIssueStore(data.get("issues", [])),
            sprints=MemorySprintStore(data.get("sprints", [])),
            users=MemoryUserStore(data.get("users", [])),
            projects=MemoryProjectStore(data.get("projects", [])),
            members=MemoryMemberStore(data.get("members", [])),
        )
        logger.info(
            f"Loaded seed file {seed_path}: {len(stores.issues)} issues, "
            f"{len(stores.sprints)} sprints, {len(stores.users)} users, "
            f"{len(stores.projects)} projects, {len(stores.members)} members"
        )
        return stores
