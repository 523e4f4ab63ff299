"""Tests for ToolCallBridge."""

from __future__ import annotations

from typing import List

import pytest

from errors import InvalidToolArguments
from live_protocol import tool_response_message
from models import Category, Priority, Task, ToolCall, ToolResponse
from tool_bridge import TASK_CREATED_ACK, ToolCallBridge, task_from_args


class Host:
    def __init__(self) -> None:
        self.tasks: List[Task] = []
        self.responses: List[ToolResponse] = []

    def bridge(self) -> ToolCallBridge:
        return ToolCallBridge(on_task_created=self.tasks.append, send_response=self.responses.append)


def test_create_life_task_builds_task_and_acknowledges() -> None:
    host = Host()
    call = ToolCall(
        "create_life_task",
        {"title": "Call Mom", "duration": 15, "priority": "high", "category": "personal"},
        "call-1",
    )

    response = host.bridge().handle(call)

    assert len(host.tasks) == 1
    task = host.tasks[0]
    assert task.title == "Call Mom"
    assert task.duration == 15
    assert task.priority is Priority.HIGH
    assert task.category is Category.PERSONAL
    assert task.completed is False
    assert response == ToolResponse("call-1", "create_life_task", TASK_CREATED_ACK, ok=True)
    assert host.responses == [response]
    assert tool_response_message(response) == {
        "toolResponse": {
            "functionResponses": [
                {"id": "call-1", "name": "create_life_task", "response": {"result": TASK_CREATED_ACK}}
            ]
        }
    }


def test_task_ids_are_unique() -> None:
    host = Host()
    bridge = host.bridge()
    for i in range(50):
        bridge.handle(ToolCall("create_life_task", {"title": f"t{i}", "duration": 5}, str(i)))
    assert len({t.id for t in host.tasks}) == 50


def test_missing_priority_and_category_use_defaults() -> None:
    host = Host()
    host.bridge().handle(ToolCall("create_life_task", {"title": "Stretch", "duration": 10}, "c"))
    assert host.tasks[0].priority is Priority.MEDIUM
    assert host.tasks[0].category is Category.PERSONAL


@pytest.mark.parametrize(
    "args",
    [
        {"duration": 10},
        {"title": "  ", "duration": 10},
        {"title": "Run"},
        {"title": "Run", "duration": "ten"},
        {"title": "Run", "duration": 0},
        {"title": "Run", "duration": True},
        {"title": "Run", "duration": float("nan")},
        {"title": "Run", "duration": float("inf")},
        {"title": "Run", "duration": 10, "priority": "urgent"},
        {"title": "Run", "duration": 10, "category": "chores"},
    ],
)
def test_invalid_arguments_return_failed_response_without_task(args: dict) -> None:
    host = Host()
    response = host.bridge().handle(ToolCall("create_life_task", args, "bad"))

    assert host.tasks == []
    assert response.ok is False
    assert response.call_id == "bad"
    assert "error" in tool_response_message(response)["toolResponse"]["functionResponses"][0]["response"]


def test_task_from_args_raises_on_missing_title() -> None:
    with pytest.raises(InvalidToolArguments):
        task_from_args({"duration": 5}, "id")


def test_unknown_tool_is_refused() -> None:
    host = Host()
    response = host.bridge().handle(ToolCall("delete_everything", {}, "x"))
    assert response.ok is False
    assert host.tasks == []
    assert host.responses == [response]


def test_host_callback_failure_still_acknowledges() -> None:
    responses: List[ToolResponse] = []

    def broken_host(task: Task) -> None:
        raise RuntimeError("board locked")

    bridge = ToolCallBridge(on_task_created=broken_host, send_response=responses.append)
    response = bridge.handle(ToolCall("create_life_task", {"title": "Nap", "duration": 20}, "n"))

    assert response.ok is True
    assert responses == [response]
