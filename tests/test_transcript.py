from __future__ import annotations

from transcript import TranscriptLog


def test_keeps_most_recent_lines() -> None:
    log = TranscriptLog(max_lines=3)
    for i in range(5):
        lines = log.append(f"line {i}")

    assert lines == ["Agent: line 2", "Agent: line 3", "Agent: line 4"]
    assert log.lines() == lines
    assert len(log) == 3


def test_clear() -> None:
    log = TranscriptLog()
    log.append("hello")
    log.clear()
    assert log.lines() == []
