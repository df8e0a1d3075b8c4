"""Optimistic-concurrency conflict detection and resolution.

Readers observe a task version (its ``updated_at``); editors submit against
that version.  If the stored task moved on in the meantime the edit is not
applied.  The caller instead gets a :class:`Conflict` and must resolve it
explicitly, either by overwriting with one version or by merging
descriptions.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional

from .constants import MERGE_SEPARATOR
from .errors import InvalidStrategyError, MissingSelectionError, ValidationError
from .model import Conflict, ResolutionStrategy, Task
from .utils import is_later


def is_stale(stored: Task, observed_updated_at: Optional[str]) -> bool:
    """True if *stored* was written after the caller's observed version."""
    if observed_updated_at is None:
        return False
    return is_later(stored.updated_at, observed_updated_at)


def detect_conflict(
    stored: Task,
    task_id: str,
    patch: dict[str, Any],
    observed_updated_at: Optional[str],
    *,
    editor_id: Optional[str],
    editor_name: str,
    stored_editor_name: str,
    now: str,
) -> Optional[Conflict]:
    """Return a conflict if the edit targets *stored* and is based on a stale read.

    ``version_a`` is the stored task with the caller's patch applied (what the
    caller meant to save); ``version_b`` is the stored task untouched.
    """
    if stored.id != task_id or not is_stale(stored, observed_updated_at):
        return None
    intended = stored.with_patch(patch, updated_at=now, updated_by=editor_id)
    return Conflict(
        task_id=task_id,
        version_a=intended,
        version_b=replace(stored),
        user_a=editor_name,
        user_b=stored_editor_name,
        created_at=now,
    )


def parse_strategy(strategy: Any) -> ResolutionStrategy:
    if isinstance(strategy, ResolutionStrategy):
        return strategy
    try:
        return ResolutionStrategy(str(strategy).lower())
    except ValueError:
        raise InvalidStrategyError(strategy) from None


def resolve_conflict(
    conflict: Conflict,
    strategy: ResolutionStrategy | str,
    chosen: Optional[Task],
    stored: Task,
    now: str,
    resolved_by: Optional[str] = None,
) -> Task:
    """Produce the final task for *conflict*.

    * ``overwrite``: *chosen* replaces the stored task, ``updated_by``
      included.
    * ``merge``: *chosen* wins every field except ``description``, which
      becomes the stored description followed by the chosen one, separated by
      a blank line.  The merged version is credited to *resolved_by*.

    *stored* is the version in the store at resolution time.  Identity fields
    always come from *stored*; ``updated_at`` is set to *now*.
    """
    kind = parse_strategy(strategy)
    if chosen is None:
        raise MissingSelectionError(conflict.id)
    if chosen.id != conflict.task_id or stored.id != conflict.task_id:
        raise ValidationError(f"Selected version does not belong to task {conflict.task_id}")

    final = replace(
        chosen,
        id=stored.id,
        created_by=stored.created_by,
        created_at=stored.created_at,
        updated_at=now,
    )
    if kind == ResolutionStrategy.MERGE:
        final = replace(
            final,
            description=f"{stored.description}{MERGE_SEPARATOR}{chosen.description}",
            updated_by=resolved_by or chosen.updated_by,
        )
    return final
