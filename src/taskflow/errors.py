"""Error taxonomy for the board engine.

Every failure is returned to the immediate caller as one of these
exceptions.  A raised error always leaves the entity store and the activity
log untouched.  A :class:`~taskflow.model.Conflict` is *not* an error: it is
a regular return value of ``update_task``.
"""

from __future__ import annotations

from typing import Iterable, Optional


class BoardError(Exception):
    """Base class for recoverable board errors."""


class ValidationError(BoardError):
    """Bad caller input: empty or duplicate title, reserved name, bad enum value."""

    def __init__(self, message: str, errors: Optional[Iterable[str]] = None) -> None:
        super().__init__(message)
        self.errors: list[str] = list(errors) if errors else [message]


class NotFoundError(BoardError):
    """Unknown task or user id (usually a stale reference)."""

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"{kind} {entity_id} not found")
        self.kind = kind
        self.entity_id = entity_id


class ResolutionError(BoardError):
    """Malformed conflict-resolution request."""


class InvalidStrategyError(ResolutionError):
    def __init__(self, strategy: object) -> None:
        super().__init__(f"Unknown resolution strategy {strategy!r}; expected 'overwrite' or 'merge'")
        self.strategy = strategy


class MissingSelectionError(ResolutionError):
    def __init__(self, conflict_id: str) -> None:
        super().__init__(f"No version selected for conflict {conflict_id}")
        self.conflict_id = conflict_id


class ConflictClosedError(ResolutionError):
    """The conflict was already resolved or cancelled."""

    def __init__(self, conflict_id: str) -> None:
        super().__init__(f"Conflict {conflict_id} is no longer pending")
        self.conflict_id = conflict_id
