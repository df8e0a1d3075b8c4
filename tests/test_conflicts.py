"""Tests for conflict detection and resolution (taskflow/conflicts.py)."""

from __future__ import annotations

import pytest

from taskflow.conflicts import detect_conflict, is_stale, resolve_conflict
from taskflow.errors import InvalidStrategyError, MissingSelectionError, ValidationError
from taskflow.model import Conflict, ResolutionStrategy, Task, TaskPriority, TaskStatus

T0 = "2025-01-01T00:00:00+00:00"
T1 = "2025-01-01T00:00:05+00:00"
T2 = "2025-01-01T00:00:09+00:00"
NOW = "2025-01-01T00:01:00+00:00"


@pytest.fixture
def stored() -> Task:
    return Task(
        id="task-1",
        title="Design Homepage",
        description="A",
        priority=TaskPriority.LOW,
        assigned_to="u2",
        created_by="u1",
        created_at=T0,
        updated_at=T1,
        updated_by="u2",
    )


def _detect(stored: Task, patch: dict, observed: str | None, task_id: str = "task-1") -> Conflict | None:
    return detect_conflict(
        stored,
        task_id,
        patch,
        observed,
        editor_id="u1",
        editor_name="Alice",
        stored_editor_name="Bob",
        now=T2,
    )


class TestDetect:
    def test_current_version_no_conflict(self, stored: Task) -> None:
        assert _detect(stored, {"description": "B"}, T1) is None

    def test_no_observed_version_is_blind_write(self, stored: Task) -> None:
        assert _detect(stored, {"description": "B"}, None) is None

    def test_stale_version_conflicts(self, stored: Task) -> None:
        conflict = _detect(stored, {"description": "B"}, T0)
        assert conflict is not None
        assert conflict.task_id == "task-1"
        assert conflict.version_b == stored
        assert conflict.version_a.description == "B"
        assert conflict.version_a.updated_by == "u1"
        assert (conflict.user_a, conflict.user_b) == ("Alice", "Bob")

    def test_other_task_id_never_conflicts(self, stored: Task) -> None:
        assert _detect(stored, {"description": "B"}, T0, task_id="task-2") is None

    def test_is_stale(self, stored: Task) -> None:
        assert is_stale(stored, T0)
        assert not is_stale(stored, T1)
        assert not is_stale(stored, T2)


class TestResolve:
    def _conflict(self, stored: Task) -> Conflict:
        conflict = _detect(stored, {"description": "B", "status": TaskStatus.DONE, "priority": TaskPriority.HIGH}, T0)
        assert conflict is not None
        return conflict

    def test_merge_concatenates_descriptions(self, stored: Task) -> None:
        conflict = self._conflict(stored)
        chosen = conflict.version_b.copy(description="B")
        result = resolve_conflict(conflict, "merge", chosen, stored, NOW)
        assert result.description == "A\n\nB"
        assert result.updated_at == NOW

    def test_merge_takes_other_fields_from_chosen(self, stored: Task) -> None:
        conflict = self._conflict(stored)
        result = resolve_conflict(conflict, ResolutionStrategy.MERGE, conflict.version_a, stored, NOW)
        assert result.description == "A\n\nB"
        assert result.status == TaskStatus.DONE
        assert result.priority == TaskPriority.HIGH
        assert result.assigned_to == "u2"

    def test_overwrite_is_version_a_with_fresh_timestamp(self, stored: Task) -> None:
        conflict = self._conflict(stored)
        result = resolve_conflict(conflict, "overwrite", conflict.version_a, stored, NOW)
        expected = conflict.version_a.to_dict()
        got = result.to_dict()
        assert got.pop("updated_at") == NOW
        expected.pop("updated_at")
        assert got == expected

    def test_overwrite_with_stored_version(self, stored: Task) -> None:
        conflict = self._conflict(stored)
        result = resolve_conflict(conflict, "overwrite", conflict.version_b, stored, NOW)
        assert result.description == "A"
        assert result.status == TaskStatus.TODO

    def test_identity_comes_from_stored(self, stored: Task) -> None:
        conflict = self._conflict(stored)
        forged = conflict.version_a.copy(created_by="intruder", created_at=T2)
        result = resolve_conflict(conflict, "overwrite", forged, stored, NOW)
        assert result.created_by == "u1"
        assert result.created_at == T0

    def test_overwrite_by_third_user_keeps_chosen_editor(self, stored: Task) -> None:
        conflict = self._conflict(stored)
        result = resolve_conflict(conflict, "overwrite", conflict.version_a, stored, NOW, resolved_by="u3")
        assert result.updated_by == "u1"
        assert result == conflict.version_a.copy(updated_at=NOW)

    def test_merge_credits_resolver(self, stored: Task) -> None:
        conflict = self._conflict(stored)
        result = resolve_conflict(conflict, "merge", conflict.version_b, stored, NOW, resolved_by="u3")
        assert result.updated_by == "u3"

    def test_invalid_strategy(self, stored: Task) -> None:
        conflict = self._conflict(stored)
        with pytest.raises(InvalidStrategyError):
            resolve_conflict(conflict, "rebase", conflict.version_a, stored, NOW)

    def test_missing_selection(self, stored: Task) -> None:
        conflict = self._conflict(stored)
        with pytest.raises(MissingSelectionError):
            resolve_conflict(conflict, "merge", None, stored, NOW)

    def test_version_of_other_task_rejected(self, stored: Task) -> None:
        conflict = self._conflict(stored)
        with pytest.raises(ValidationError):
            resolve_conflict(conflict, "overwrite", Task(id="task-9", title="X"), stored, NOW)
