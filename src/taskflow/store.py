"""In-memory entity store for users and tasks.

The store is the single owner of the user and task collections.  Every read
hands out a copy, so the only way to change stored state is through the
methods below.  Validation always runs before mutation: a raised error leaves
the collections exactly as they were.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Iterable, Optional

from loguru import logger

from .constants import RESERVED_TITLES
from .errors import NotFoundError, ValidationError
from .model import EDITABLE_TASK_FIELDS, Task, TaskPriority, TaskStatus, User
from .schemas import TaskCreate
from .utils import BoardClock


class EntityStore:
    """Canonical users and tasks of one board.

    Parameters
    ----------
    clock:
        Timestamp source; defaults to a fresh :class:`BoardClock`.
    reserved_titles:
        Titles no task may take (compared case-insensitively).
    """

    def __init__(
        self,
        clock: Optional[Callable[[], str]] = None,
        reserved_titles: Iterable[str] = RESERVED_TITLES,
    ) -> None:
        self._clock = clock or BoardClock()
        self._reserved = {t.strip().casefold() for t in reserved_titles}
        self._tasks: list[Task] = []
        self._index: dict[str, int] = {}
        self._users: dict[str, User] = {}

    # -- users --------------------------------------------------------------

    def add_user(self, user: User) -> User:
        if user.id in self._users:
            raise ValidationError(f"User {user.id} already exists")
        self._users[user.id] = replace(user)
        return replace(user)

    def get_user(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return replace(user) if user else None

    def require_user(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return replace(user)

    def find_user_by_address(self, address: str) -> Optional[User]:
        folded = address.strip().casefold()
        for user in self._users.values():
            if user.contact_address.casefold() == folded:
                return replace(user)
        return None

    def list_users(self) -> list[User]:
        """Users in registration order."""
        return [replace(u) for u in self._users.values()]

    def update_user_profile(
        self,
        user_id: str,
        *,
        display_name: Optional[str] = None,
        avatar_ref: Optional[str] = None,
    ) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        if display_name is not None and not display_name.strip():
            raise ValidationError("Display name must be non-empty")
        if display_name is not None:
            user.display_name = display_name.strip()
        if avatar_ref is not None:
            user.avatar_ref = avatar_ref
        return replace(user)

    # -- task lookups ---------------------------------------------------------

    def get_task(self, task_id: str) -> Optional[Task]:
        idx = self._index.get(task_id)
        return replace(self._tasks[idx]) if idx is not None else None

    def require_task(self, task_id: str) -> Task:
        task = self.get_task(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    def list_tasks(self) -> list[Task]:
        return [replace(t) for t in self._tasks]

    def list_by_status(self, status: TaskStatus | str) -> list[Task]:
        """Tasks in column *status*, insertion order preserved."""
        target = TaskStatus(status)
        return [replace(t) for t in self._tasks if t.status == target]

    def title_errors(self, title: str) -> list[str]:
        errors: list[str] = []
        folded = title.strip().casefold()
        if not folded:
            errors.append("Task title is required")
            return errors
        if folded in self._reserved:
            errors.append(f"Task title {title!r} cannot match a column name")
        if any(t.title.casefold() == folded for t in self._tasks):
            errors.append(f"Task title {title!r} must be unique")
        return errors

    # -- task mutations -------------------------------------------------------

    def create_task(self, data: TaskCreate) -> Task:
        """Validate and insert a new task, returning a copy of it."""
        errors = self.title_errors(data.title)
        for field_name in ("assigned_to", "created_by"):
            user_id = getattr(data, field_name)
            if user_id not in self._users:
                errors.append(f"'{field_name}' references unknown user {user_id}")
        if errors:
            logger.warning("Rejected task {!r}: {}", data.title, "; ".join(errors))
            raise ValidationError("; ".join(errors), errors)

        now = self._clock()
        task = Task(
            title=data.title,
            description=data.description,
            status=data.status,
            priority=data.priority,
            assigned_to=data.assigned_to,
            created_by=data.created_by,
            created_at=now,
            updated_at=now,
            updated_by=data.created_by,
        )
        while task.id in self._index:
            task = replace(task, id=Task().id)
        self._index[task.id] = len(self._tasks)
        self._tasks.append(task)
        return replace(task)

    def update_task(self, task_id: str, patch: dict[str, Any], updated_by: Optional[str] = None) -> Task:
        """Apply *patch* over the stored task and bump ``updated_at``.

        Title uniqueness is not re-checked here.
        """
        idx = self._index.get(task_id)
        if idx is None:
            raise NotFoundError("Task", task_id)
        unknown = sorted(set(patch) - set(EDITABLE_TASK_FIELDS))
        if unknown:
            raise ValidationError(f"Fields not editable: {unknown}")
        if "assigned_to" in patch and patch["assigned_to"] not in self._users:
            raise ValidationError(f"'assigned_to' references unknown user {patch['assigned_to']}")
        changes = dict(patch)
        for key, enum_cls in (("status", TaskStatus), ("priority", TaskPriority)):
            if key in changes:
                try:
                    changes[key] = enum_cls(changes[key])
                except ValueError:
                    raise ValidationError(f"Invalid {key} {changes[key]!r}") from None
        if "title" in changes and not str(changes["title"]).strip():
            raise ValidationError("Task title is required")
        updated = self._tasks[idx].with_patch(changes, updated_at=self._clock(), updated_by=updated_by)
        self._tasks[idx] = updated
        return replace(updated)

    def replace_task(self, task: Task) -> Task:
        """Swap in a complete version of an existing task."""
        idx = self._index.get(task.id)
        if idx is None:
            raise NotFoundError("Task", task.id)
        self._tasks[idx] = replace(task)
        return replace(task)

    def delete_task(self, task_id: str) -> Task:
        """Physically remove a task, returning the removed version."""
        idx = self._index.pop(task_id, None)
        if idx is None:
            raise NotFoundError("Task", task_id)
        removed = self._tasks.pop(idx)
        self._index = {t.id: i for i, t in enumerate(self._tasks)}
        return removed
