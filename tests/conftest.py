from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from taskflow.controller import BoardController
from taskflow.utils import BoardClock


class SteppingSource:
    """Fake wall clock that advances one second per reading."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start or datetime(2025, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        self.current += self.step
        return self.current


@pytest.fixture
def clock() -> BoardClock:
    return BoardClock(SteppingSource())


@pytest.fixture
def board(clock: BoardClock) -> BoardController:
    return BoardController(clock=clock)


@pytest.fixture
def team(board: BoardController) -> dict[str, str]:
    """Register three users; returns short name -> user id."""
    alice = board.register_user("Alice Johnson", "alice@example.com")
    bob = board.register_user("Bob Smith", "bob@example.com")
    carol = board.register_user("Carol Williams", "carol@example.com")
    return {"alice": alice.id, "bob": bob.id, "carol": carol.id}
