"""Tests for the strictly increasing board clock and timestamp helpers."""

from __future__ import annotations

from datetime import datetime, timezone

from taskflow.utils import BoardClock, _parse_iso, is_later


class TestBoardClock:
    def test_frozen_source_still_advances(self) -> None:
        frozen = datetime(2025, 1, 1, tzinfo=timezone.utc)
        clock = BoardClock(lambda: frozen)
        first, second, third = clock(), clock(), clock()
        assert is_later(second, first)
        assert is_later(third, second)

    def test_backwards_source_never_goes_back(self) -> None:
        readings = iter([
            datetime(2025, 1, 2, tzinfo=timezone.utc),
            datetime(2025, 1, 1, tzinfo=timezone.utc),
        ])
        clock = BoardClock(lambda: next(readings))
        first = clock.now()
        second = clock.now()
        assert is_later(second, first)

    def test_naive_source_is_treated_as_utc(self) -> None:
        clock = BoardClock(lambda: datetime(2025, 1, 1, 12, 0))
        parsed = _parse_iso(clock.now())
        assert parsed is not None
        assert parsed.tzinfo is not None


class TestIsLater:
    def test_strictly_later(self) -> None:
        assert is_later("2025-01-01T00:00:01+00:00", "2025-01-01T00:00:00+00:00")
        assert not is_later("2025-01-01T00:00:00+00:00", "2025-01-01T00:00:00+00:00")

    def test_zulu_suffix(self) -> None:
        assert is_later("2025-01-01T00:00:01Z", "2025-01-01T00:00:00+00:00")

    def test_unparseable_is_never_later(self) -> None:
        assert not is_later("garbage", "2025-01-01T00:00:00+00:00")
        assert not is_later(None, "2025-01-01T00:00:00+00:00")
