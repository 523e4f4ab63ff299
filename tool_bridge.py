"""Turns remote tool invocations into local tasks and acknowledgements."""

from __future__ import annotations

import logging
import math
import uuid
from numbers import Real
from typing import Any, Callable, Dict, Optional

from errors import InvalidToolArguments
from live_protocol import CREATE_TASK_TOOL_NAME
from models import Category, Priority, Task, ToolCall, ToolResponse

logger = logging.getLogger(__name__)

TASK_CREATED_ACK = "Task successfully created and added to dashboard."

TaskCallback = Callable[[Task], None]
ResponseSender = Callable[[ToolResponse], None]


def new_task_id() -> str:
    return uuid.uuid4().hex[:9]


def task_from_args(args: Dict[str, Any], task_id: str) -> Task:
    """Build a Task from ``create_life_task`` arguments or raise InvalidToolArguments."""
    title = args.get("title")
    if not isinstance(title, str) or not title.strip():
        raise InvalidToolArguments("'title' must be a non-empty string")

    duration = args.get("duration")
    if (
        isinstance(duration, bool)
        or not isinstance(duration, Real)
        or not math.isfinite(duration)
        or duration <= 0
    ):
        raise InvalidToolArguments("'duration' must be a positive number of minutes")

    try:
        priority = Priority(args.get("priority") or Priority.MEDIUM.value)
    except ValueError as exc:
        raise InvalidToolArguments(f"unknown priority {args.get('priority')!r}") from exc
    try:
        category = Category(args.get("category") or Category.PERSONAL.value)
    except ValueError as exc:
        raise InvalidToolArguments(f"unknown category {args.get('category')!r}") from exc

    return Task(
        id=task_id,
        title=title.strip(),
        duration=duration,
        priority=priority,
        category=category,
        completed=False,
    )


class ToolCallBridge:
    def __init__(
        self,
        on_task_created: TaskCallback,
        send_response: ResponseSender,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self._on_task_created = on_task_created
        self._send_response = send_response
        self._id_factory = id_factory or new_task_id

    def handle(self, call: ToolCall) -> ToolResponse:
        if call.name != CREATE_TASK_TOOL_NAME:
            logger.warning("Unknown tool %r requested", call.name)
            response = ToolResponse(call.call_id, call.name, f"unknown tool {call.name!r}", ok=False)
        else:
            response = self._create_task(call)
        self._send_response(response)
        return response

    def _create_task(self, call: ToolCall) -> ToolResponse:
        try:
            task = task_from_args(call.args, self._id_factory())
        except InvalidToolArguments as exc:
            logger.warning("Rejected %s(%s): %s", call.name, call.args, exc)
            return ToolResponse(call.call_id, call.name, str(exc), ok=False)
        logger.info("Creating task %r (%s min)", task.title, task.duration)
        try:
            self._on_task_created(task)
        except Exception:
            logger.exception("Host rejected task %r", task.title)
        return ToolResponse(call.call_id, call.name, TASK_CREATED_ACK)
