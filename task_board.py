"""The host application's task list."""

from __future__ import annotations

import threading
from typing import Callable, Iterable, List, Optional

from models import Goal, Task
from streak import StreakTracker

BoardListener = Callable[[List[Task]], None]


class TaskBoard:
    def __init__(self, streak: Optional[StreakTracker] = None) -> None:
        self._streak = streak
        self._lock = threading.RLock()
        self._tasks: List[Task] = []
        self._goals: List[Goal] = []
        self._listeners: List[BoardListener] = []

    def subscribe(self, listener: BoardListener) -> None:
        self._listeners.append(listener)

    @property
    def tasks(self) -> List[Task]:
        with self._lock:
            return list(self._tasks)

    @property
    def goals(self) -> List[Goal]:
        with self._lock:
            return list(self._goals)

    @property
    def pending(self) -> List[Task]:
        with self._lock:
            return [t for t in self._tasks if not t.completed]

    @property
    def progress(self) -> float:
        """Percent of tasks completed, 0 when the board is empty."""
        with self._lock:
            if not self._tasks:
                return 0.0
            done = sum(1 for t in self._tasks if t.completed)
            return done / len(self._tasks) * 100.0

    def add(self, task: Task) -> None:
        self.add_many([task])

    def add_many(self, tasks: Iterable[Task]) -> None:
        with self._lock:
            self._tasks.extend(tasks)
        self._changed()

    def add_goal(self, goal: Goal) -> None:
        with self._lock:
            self._goals.append(goal)
            self._tasks.extend(goal.tasks)
        self._changed()

    def toggle(self, task_id: str) -> Optional[Task]:
        with self._lock:
            task = next((t for t in self._tasks if t.id == task_id), None)
            if task is None:
                return None
            task.completed = not task.completed
        self._changed()
        return task

    def replace_pending(self, new_tasks: Iterable[Task]) -> None:
        """Keep completed tasks and swap the rest for a rescheduled list."""
        with self._lock:
            self._tasks = [t for t in self._tasks if t.completed] + list(new_tasks)
        self._changed()

    def _changed(self) -> None:
        snapshot = self.tasks
        if self._streak is not None and snapshot and self.progress == 100.0:
            self._streak.mark_full_day_complete()
        for listener in self._listeners:
            listener(snapshot)
