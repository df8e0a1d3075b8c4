"""Provide timestamp and id helpers for the board."""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        if not isinstance(value, str):
            value = str(value)
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        dt = datetime.fromisoformat(value)
        # Naive timestamps are treated as UTC.
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    except ValueError:
        return None


def _generate_id(prefix: str) -> str:
    """Short human-friendly id: ``<prefix>-<8hex>``."""
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def is_later(candidate: Optional[str], reference: Optional[str]) -> bool:
    """Return True if ISO timestamp *candidate* is strictly after *reference*."""
    cand = _parse_iso(candidate)
    ref = _parse_iso(reference)
    if cand is None or ref is None:
        return False
    return cand > ref


class BoardClock:
    """Strictly increasing UTC clock.

    Two calls never return the same instant: when the wall clock has not
    advanced (or went backwards) the previous value is bumped by one
    microsecond.  Every mutation therefore moves ``updated_at`` forward and a
    stale observed version stays detectable.

    Parameters
    ----------
    source:
        Callable returning an aware ``datetime``.  Defaults to the wall clock;
        tests pass a stepping fake.
    """

    _TICK = timedelta(microseconds=1)

    def __init__(self, source: Optional[Callable[[], datetime]] = None) -> None:
        self._source = source or (lambda: datetime.now(timezone.utc))
        self._last: Optional[datetime] = None
        self._lock = threading.Lock()

    def now(self) -> str:
        with self._lock:
            current = self._source()
            if current.tzinfo is None:
                current = current.replace(tzinfo=timezone.utc)
            if self._last is not None and current <= self._last:
                current = self._last + self._TICK
            self._last = current
            return current.isoformat()

    def __call__(self) -> str:
        return self.now()
