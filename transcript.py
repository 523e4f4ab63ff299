"""Bounded log of recent agent utterances."""

from __future__ import annotations

import threading
from collections import deque
from typing import List


class TranscriptLog:
    def __init__(self, max_lines: int = 5, prefix: str = "Agent: ") -> None:
        self._lines: deque = deque(maxlen=max_lines)
        self._prefix = prefix
        self._lock = threading.Lock()

    def append(self, text: str) -> List[str]:
        with self._lock:
            self._lines.append(f"{self._prefix}{text}")
            return list(self._lines)

    def lines(self) -> List[str]:
        with self._lock:
            return list(self._lines)

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)
