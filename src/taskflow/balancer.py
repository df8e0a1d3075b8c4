"""Smart assignment: hand a task to the least-loaded user."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Sequence

from .errors import ValidationError
from .model import Task, User


def load_by_user(users: Sequence[User], tasks: Iterable[Task]) -> dict[str, int]:
    """Count active (not done) tasks per user, in user enumeration order."""
    counts = {u.id: 0 for u in users}
    for t in tasks:
        if t.is_active and t.assigned_to in counts:
            counts[t.assigned_to] += 1
    return counts


def pick_least_loaded(users: Sequence[User], tasks: Iterable[Task]) -> User:
    """Return the user with the fewest active tasks.

    Ties go to whoever comes first in *users*.
    """
    if not users:
        raise ValidationError("Cannot assign a task: no users registered")
    counts = load_by_user(users, tasks)
    best = users[0]
    for user in users[1:]:
        if counts[user.id] < counts[best.id]:
            best = user
    return best


def smart_assign(task: Task, users: Sequence[User], tasks: Iterable[Task], now: str) -> Task:
    """Return a copy of *task* assigned to the least-loaded user.

    Pure: the inputs are not modified and equal inputs give equal output.
    """
    winner = pick_least_loaded(users, tasks)
    return replace(task, assigned_to=winner.id, updated_at=now)
