"""Tests for smart assignment (taskflow/balancer.py)."""

from __future__ import annotations

import pytest

from taskflow.balancer import load_by_user, pick_least_loaded, smart_assign
from taskflow.errors import ValidationError
from taskflow.model import Task, TaskStatus, User

NOW = "2025-06-01T00:00:00+00:00"


def _users(*ids: str) -> list[User]:
    return [User(id=i, display_name=i.upper()) for i in ids]


def _tasks(assignments: dict[str, int], status: TaskStatus = TaskStatus.TODO) -> list[Task]:
    out: list[Task] = []
    for user_id, count in assignments.items():
        for n in range(count):
            out.append(Task(id=f"{user_id}-{status.value}-{n}", title=f"{user_id} {n}", assigned_to=user_id, status=status))
    return out


class TestLoad:
    def test_done_tasks_do_not_count(self) -> None:
        users = _users("u1", "u2")
        tasks = _tasks({"u1": 2}) + _tasks({"u2": 5}, TaskStatus.DONE)
        assert load_by_user(users, tasks) == {"u1": 2, "u2": 0}

    def test_tasks_of_unknown_users_ignored(self) -> None:
        assert load_by_user(_users("u1"), _tasks({"ghost": 3})) == {"u1": 0}


class TestSmartAssign:
    def test_counts_3_1_1_picks_first_tied(self) -> None:
        users = _users("u1", "u2", "u3")
        tasks = _tasks({"u1": 3, "u2": 1, "u3": 1})
        task = Task(id="new", title="New", assigned_to="u1", status=TaskStatus.DONE)
        result = smart_assign(task, users, tasks, NOW)
        assert result.assigned_to == "u2"
        assert result.updated_at == NOW

    def test_enumeration_order_breaks_ties(self) -> None:
        tasks = _tasks({"u1": 3, "u2": 1, "u3": 1})
        assert pick_least_loaded(_users("u1", "u3", "u2"), tasks).id == "u3"

    def test_always_minimum(self) -> None:
        users = _users("a", "b", "c", "d")
        tasks = _tasks({"a": 4, "b": 2, "c": 0, "d": 1})
        assert pick_least_loaded(users, tasks).id == "c"

    def test_pure(self) -> None:
        users = _users("u1", "u2")
        tasks = _tasks({"u1": 1})
        task = Task(id="t", title="T", assigned_to="u1", updated_at="2025-01-01T00:00:00+00:00")
        first = smart_assign(task, users, tasks, NOW)
        second = smart_assign(task, users, tasks, NOW)
        assert first == second
        assert task.assigned_to == "u1"
        assert task.updated_at == "2025-01-01T00:00:00+00:00"

    def test_no_users(self) -> None:
        with pytest.raises(ValidationError):
            smart_assign(Task(title="T"), [], [], NOW)
