"""Bounded, newest-first record of board mutations."""

from __future__ import annotations

from collections import deque
from dataclasses import replace
from typing import Callable, Optional

from loguru import logger

from .constants import DEFAULT_ACTIVITY_CAPACITY
from .model import Activity, ActivityAction
from .utils import BoardClock, _generate_id

ActivityObserver = Callable[[Activity], None]


class ActivityLog:
    """Fixed-capacity activity sequence.

    New entries go to the front; once the log is full the oldest entry is
    dropped.  Entries are frozen, so a snapshot can never be used to rewrite
    history.
    """

    def __init__(self, capacity: int = DEFAULT_ACTIVITY_CAPACITY, clock: Optional[Callable[[], str]] = None) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._clock = clock or BoardClock()
        self._entries: deque[Activity] = deque(maxlen=capacity)
        self._observers: list[ActivityObserver] = []

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def __len__(self) -> int:
        return len(self._entries)

    def subscribe(self, observer: ActivityObserver) -> None:
        """Call *observer* with every entry appended from now on."""
        self._observers.append(observer)

    def append(self, entry: Activity) -> Activity:
        """Stamp *entry* with a fresh id and the current time, then prepend it."""
        stamped = replace(entry, id=_generate_id("act"), timestamp=self._clock())
        self._entries.appendleft(stamped)
        logger.debug("Activity {} {} by {}", stamped.action.value, stamped.task_title or "-", stamped.actor_name)
        for observer in list(self._observers):
            try:
                observer(stamped)
            except Exception:
                logger.exception("Activity observer failed for {}", stamped.id)
        return stamped

    def record(
        self,
        action: ActivityAction | str,
        actor_name: str,
        task_title: str = "",
        details: str = "",
    ) -> Activity:
        return self.append(
            Activity(
                action=ActivityAction(action),
                actor_name=actor_name,
                task_title=task_title,
                details=details,
            )
        )

    def snapshot(self) -> list[Activity]:
        """Current entries, newest first."""
        return list(self._entries)
