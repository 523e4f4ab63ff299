from __future__ import annotations

from datetime import date
from pathlib import Path

from config import JsonFileStore
from streak import StreakTracker


def _tracker(tmp_path: Path) -> StreakTracker:
    return StreakTracker(JsonFileStore(tmp_path / "state.json"))


def test_first_check_in_starts_at_one(tmp_path: Path) -> None:
    tracker = _tracker(tmp_path)
    assert tracker.check_in(date(2026, 3, 1)) == 1
    assert tracker.streak == 1


def test_same_day_keeps_streak(tmp_path: Path) -> None:
    tracker = _tracker(tmp_path)
    tracker.check_in(date(2026, 3, 1))
    tracker.mark_full_day_complete()

    assert tracker.check_in(date(2026, 3, 1)) == 1


def test_completed_day_extends_streak(tmp_path: Path) -> None:
    tracker = _tracker(tmp_path)
    tracker.check_in(date(2026, 3, 1))
    tracker.mark_full_day_complete()
    assert tracker.check_in(date(2026, 3, 2)) == 2

    tracker.mark_full_day_complete()
    assert tracker.check_in(date(2026, 3, 3)) == 3


def test_incomplete_day_resets_streak(tmp_path: Path) -> None:
    tracker = _tracker(tmp_path)
    tracker.check_in(date(2026, 3, 1))
    tracker.mark_full_day_complete()
    tracker.check_in(date(2026, 3, 2))

    assert tracker.check_in(date(2026, 3, 3)) == 1


def test_streak_survives_restart(tmp_path: Path) -> None:
    tracker = _tracker(tmp_path)
    tracker.check_in(date(2026, 3, 1))
    tracker.mark_full_day_complete()
    tracker.check_in(date(2026, 3, 2))

    assert _tracker(tmp_path).streak == 2


def test_corrupt_streak_value_reads_as_one(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "state.json")
    store.set("streak", "lots")
    assert StreakTracker(store).streak == 1
