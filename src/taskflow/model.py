"""Board data model: users, tasks, activities and conflicts.

All records are plain dataclasses that serialize to dicts with enum values
flattened to strings, so any transport can hand them to a client unchanged.
Timestamps are ISO-8601 UTC strings.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from .utils import _generate_id, _now_iso


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class TaskStatus(str, Enum):
    """Board column a task sits in."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActivityAction(str, Enum):
    """Kinds of entries recorded in the activity log."""

    CREATED = "created"
    UPDATED = "updated"
    MOVED = "moved"
    ASSIGNED = "assigned"
    COMPLETED = "completed"
    DELETED = "deleted"
    LOGIN = "login"
    LOGOUT = "logout"


class ResolutionStrategy(str, Enum):
    OVERWRITE = "overwrite"
    MERGE = "merge"


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------

@dataclass
class User:
    """A registered board member."""

    id: str = field(default_factory=lambda: _generate_id("user"))
    display_name: str = ""
    contact_address: str = ""  # email
    avatar_ref: str = ""
    created_at: str = field(default_factory=_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        return cls(
            id=str(data.get("id") or _generate_id("user")),
            display_name=str(data.get("display_name") or ""),
            contact_address=str(data.get("contact_address") or ""),
            avatar_ref=str(data.get("avatar_ref") or ""),
            created_at=str(data.get("created_at") or _now_iso()),
        )


# ---------------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------------

# Fields a caller may change on an existing task.
EDITABLE_TASK_FIELDS = ("title", "description", "status", "priority", "assigned_to")


@dataclass
class Task:
    """A card on the board.

    ``updated_at`` doubles as the task's version: an edit submitted against an
    older ``updated_at`` than the stored one is a concurrent edit.
    """

    # Identity
    id: str = field(default_factory=lambda: _generate_id("task"))
    title: str = ""
    description: str = ""

    # Classification
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM

    # Ownership
    assigned_to: str = ""
    created_by: str = ""

    # Versioning
    created_at: str = field(default_factory=_now_iso)
    updated_at: str = field(default_factory=_now_iso)
    updated_by: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict."""
        return {k: _enum_value(v) for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Deserialize from a plain dict.  Unknown enum values raise ``ValueError``."""
        d = dict(data)
        created_at = str(d.get("created_at") or _now_iso())
        return cls(
            id=str(d.get("id") or _generate_id("task")),
            title=str(d.get("title") or ""),
            description=str(d.get("description") or ""),
            status=TaskStatus(d.get("status") or TaskStatus.TODO),
            priority=TaskPriority(d.get("priority") or TaskPriority.MEDIUM),
            assigned_to=str(d.get("assigned_to") or ""),
            created_by=str(d.get("created_by") or ""),
            created_at=created_at,
            updated_at=str(d.get("updated_at") or created_at),
            updated_by=d.get("updated_by"),
        )

    def copy(self, **changes: Any) -> "Task":
        return replace(self, **changes)

    def with_patch(self, patch: dict[str, Any], *, updated_at: str, updated_by: Optional[str] = None) -> "Task":
        """Return a new version with *patch* applied and the version bumped."""
        changes = {k: v for k, v in patch.items() if k in EDITABLE_TASK_FIELDS}
        return replace(self, **changes, updated_at=updated_at, updated_by=updated_by)

    @property
    def is_active(self) -> bool:
        """True while the task still counts toward its assignee's load."""
        return self.status != TaskStatus.DONE


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Activity:
    """One entry of the activity log.  Entries are never mutated."""

    action: ActivityAction
    actor_name: str
    task_title: str = ""
    details: str = ""
    id: str = field(default_factory=lambda: _generate_id("act"))
    timestamp: str = field(default_factory=_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "action": self.action.value,
            "task_title": self.task_title,
            "actor_name": self.actor_name,
            "timestamp": self.timestamp,
            "details": self.details,
        }


# ---------------------------------------------------------------------------
# Conflict
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Conflict:
    """Two competing versions of one task awaiting an explicit resolution.

    ``version_a`` is what the submitting editor intended; ``version_b`` is
    what the store held when the edit arrived.
    """

    task_id: str
    version_a: Task
    version_b: Task
    user_a: str
    user_b: str
    id: str = field(default_factory=lambda: _generate_id("conflict"))
    created_at: str = field(default_factory=_now_iso)

    def version(self, label: str) -> Task:
        """Look up a version by label (``"a"``/``"b"`` or ``"version_a"``/``"version_b"``)."""
        key = label.lower().removeprefix("version_")
        if key == "a":
            return self.version_a
        if key == "b":
            return self.version_b
        raise KeyError(label)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "version_a": self.version_a.to_dict(),
            "version_b": self.version_b.to_dict(),
            "user_a": self.user_a,
            "user_b": self.user_b,
            "created_at": self.created_at,
        }
