"""Provide the public `taskflow` package exports."""

from __future__ import annotations

from .activity_log import ActivityLog
from .config import BoardConfig, load_board_config
from .controller import BoardController
from .errors import (
    BoardError,
    ConflictClosedError,
    InvalidStrategyError,
    MissingSelectionError,
    NotFoundError,
    ValidationError,
)
from .model import Activity, ActivityAction, Conflict, ResolutionStrategy, Task, TaskPriority, TaskStatus, User
from .store import EntityStore

__all__ = [
    "Activity",
    "ActivityAction",
    "ActivityLog",
    "BoardConfig",
    "BoardController",
    "BoardError",
    "Conflict",
    "ConflictClosedError",
    "EntityStore",
    "InvalidStrategyError",
    "MissingSelectionError",
    "NotFoundError",
    "ResolutionStrategy",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "User",
    "ValidationError",
    "load_board_config",
]
