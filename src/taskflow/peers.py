"""Injectable sources of peer activity.

A peer source stands in for other clients editing the same board.  The
controller drains a source with :meth:`BoardController.pump` and applies each
event through its regular entry points, so peers obey exactly the same
uniqueness and conflict rules as any local caller.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Optional, Protocol

from loguru import logger

from .model import TaskPriority

if TYPE_CHECKING:
    from .controller import BoardController


class PeerEventKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    MOVE = "move"
    ASSIGN = "assign"
    DELETE = "delete"
    LOGIN = "login"
    LOGOUT = "logout"


@dataclass(frozen=True)
class PeerEvent:
    """One action performed by a peer.

    ``payload`` holds the create fields, the edit patch or ``{"status": ...}``
    for a move, depending on ``kind``.
    """

    kind: PeerEventKind
    actor_id: str
    task_id: Optional[str] = None
    payload: dict[str, Any] = field(default_factory=dict)
    observed_updated_at: Optional[str] = None
    details: str = ""


@dataclass
class PeerOutcome:
    event: PeerEvent
    result: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PeerEventSource(Protocol):
    def poll(self) -> list[PeerEvent]:
        """Return the events produced since the last poll (possibly none)."""
        ...


class ScriptedEventSource:
    """Replay a fixed sequence of events, *batch_size* per poll."""

    def __init__(self, events: Iterable[PeerEvent], batch_size: int = 1) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self._events = list(events)
        self._cursor = 0
        self._batch_size = batch_size

    @property
    def exhausted(self) -> bool:
        return self._cursor >= len(self._events)

    def poll(self) -> list[PeerEvent]:
        batch = self._events[self._cursor:self._cursor + self._batch_size]
        self._cursor += len(batch)
        return batch


class SimulatedPeerSource:
    """Occasionally propose a priority change made by another user.

    Each poll fires with probability *probability*.  When it fires, a random
    task is picked and the first registered user other than *local_user_id*
    changes its priority, editing against the version currently stored.
    Pass a seeded ``random.Random`` for reproducible runs.
    """

    def __init__(
        self,
        board: "BoardController",
        local_user_id: Optional[str] = None,
        *,
        probability: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._board = board
        self._local_user_id = local_user_id
        self._probability = board.config.peer_activity_probability if probability is None else probability
        self._rng = rng or random.Random()

    def poll(self) -> list[PeerEvent]:
        if self._rng.random() >= self._probability:
            return []
        tasks = self._board.list_tasks()
        peer = next((u for u in self._board.list_users() if u.id != self._local_user_id), None)
        if not tasks or peer is None:
            return []
        task = self._rng.choice(tasks)
        choices = [p for p in TaskPriority if p != task.priority]
        priority = self._rng.choice(choices)
        logger.debug("Simulated peer {} changes priority of {} to {}", peer.id, task.id, priority.value)
        return [
            PeerEvent(
                kind=PeerEventKind.UPDATE,
                actor_id=peer.id,
                task_id=task.id,
                payload={"priority": priority.value},
                observed_updated_at=task.updated_at,
                details="Changed task priority",
            )
        ]
