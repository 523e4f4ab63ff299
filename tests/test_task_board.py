from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import List

from config import JsonFileStore
from models import Goal, Task
from streak import StreakTracker
from task_board import TaskBoard


def _task(task_id: str, completed: bool = False) -> Task:
    return Task(id=task_id, title=f"task {task_id}", duration=15, completed=completed)


def test_progress_of_empty_board_is_zero() -> None:
    assert TaskBoard().progress == 0.0


def test_toggle_updates_progress_and_notifies() -> None:
    board = TaskBoard()
    snapshots: List[List[Task]] = []
    board.subscribe(snapshots.append)
    board.add_many([_task("a"), _task("b")])

    toggled = board.toggle("a")

    assert toggled is not None and toggled.completed is True
    assert board.progress == 50.0
    assert [t.id for t in board.pending] == ["b"]
    assert len(snapshots) == 2


def test_toggle_unknown_task_is_ignored() -> None:
    board = TaskBoard()
    board.add(_task("a"))
    assert board.toggle("missing") is None
    assert board.progress == 0.0


def test_add_goal_adds_its_tasks() -> None:
    board = TaskBoard()
    goal = Goal(id="g", title="Run a 5k", tasks=[_task("a"), _task("b")])

    board.add_goal(goal)

    assert board.goals == [goal]
    assert [t.id for t in board.tasks] == ["a", "b"]


def test_replace_pending_keeps_completed_tasks() -> None:
    board = TaskBoard()
    board.add_many([_task("done", completed=True), _task("missed")])

    board.replace_pending([_task("new1"), _task("new2")])

    assert [t.id for t in board.tasks] == ["done", "new1", "new2"]


def test_finishing_every_task_marks_the_day_complete(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "state.json")
    streak = StreakTracker(store)
    streak.check_in(date(2026, 3, 1))
    board = TaskBoard(streak=streak)
    board.add_many([_task("a"), _task("b")])

    board.toggle("a")
    assert store.get("full_day_complete") is False

    board.toggle("b")
    assert store.get("full_day_complete") is True
    assert streak.check_in(date(2026, 3, 2)) == 2
