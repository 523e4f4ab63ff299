"""Daily completion streak kept in local persistent storage."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from interfaces import KeyValueStore

logger = logging.getLogger(__name__)

LAST_DATE_KEY = "last_date"
STREAK_KEY = "streak"
FULL_DAY_KEY = "full_day_complete"


class StreakTracker:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @property
    def streak(self) -> int:
        try:
            return max(1, int(self._store.get(STREAK_KEY, 1)))
        except (TypeError, ValueError):
            return 1

    def check_in(self, today: Optional[date] = None) -> int:
        """Roll the streak forward on the first check of a new day."""
        today = today or date.today()
        last = self._store.get(LAST_DATE_KEY)
        if not last:
            self._reset_day(today, 1)
            return 1
        if last == today.isoformat():
            return self.streak

        if self._store.get(FULL_DAY_KEY, False) is True:
            streak = self.streak + 1
        else:
            streak = 1
        logger.info("New day %s, streak is now %d", today.isoformat(), streak)
        self._reset_day(today, streak)
        return streak

    def mark_full_day_complete(self) -> None:
        self._store.set(FULL_DAY_KEY, True)

    def _reset_day(self, today: date, streak: int) -> None:
        self._store.set(LAST_DATE_KEY, today.isoformat())
        self._store.set(STREAK_KEY, streak)
        self._store.set(FULL_DAY_KEY, False)
