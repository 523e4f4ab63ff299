"""Request/response model endpoints: goal breakdown, rescheduling and study material."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from errors import AUTH_FAILED, AssistantError
from models import Category, DocumentAnalysis, Priority, QuizQuestion, Task
from tool_bridge import new_task_id

try:
    from google import genai
    from google.genai import types
except Exception:  # pragma: no cover
    genai = None  # type: ignore
    types = None  # type: ignore

logger = logging.getLogger(__name__)

PLANNING_MODEL = "gemini-3-pro-preview"
ANALYSIS_MODEL = "gemini-3-flash-preview"

TASK_DRAFT_SCHEMA: Dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "title": {"type": "STRING"},
            "duration": {"type": "NUMBER"},
            "startTime": {"type": "STRING"},
            "priority": {"type": "STRING", "enum": ["low", "medium", "high"]},
            "category": {"type": "STRING", "enum": ["work", "study", "fitness", "personal"]},
        },
        "required": ["title", "duration", "priority", "category"],
    },
}

ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "summary": {"type": "STRING"},
        "quiz": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "question": {"type": "STRING"},
                    "options": {"type": "ARRAY", "items": {"type": "STRING"}},
                    "answer": {"type": "NUMBER"},
                },
                "required": ["question", "options", "answer"],
            },
        },
    },
    "required": ["summary", "quiz"],
}

ANALYSIS_PROMPT = "Analyze the attached material. Provide a summary and 3 multiple-choice questions."


def _is_supported_modality(mime_type: str) -> bool:
    return mime_type.startswith("image/") or mime_type == "application/pdf"


def _task_from_draft(draft: Dict[str, Any], synced: bool) -> Task:
    return Task(
        id=new_task_id(),
        title=str(draft.get("title", "")),
        duration=draft.get("duration", 0),
        priority=Priority(draft.get("priority") or Priority.MEDIUM.value),
        category=Category(draft.get("category") or Category.PERSONAL.value),
        completed=False,
        start_time=draft.get("startTime"),
        synced_to_calendar=synced,
    )


class GeminiAssistant:
    def __init__(self, api_key: str, client: Optional[Any] = None) -> None:
        self._api_key = api_key
        self._client = client

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client
        if genai is None:
            raise AssistantError("google-genai is not installed")
        if not self._api_key:
            err = AssistantError("No API key configured")
            err.code = AUTH_FAILED
            raise err
        self._client = genai.Client(api_key=self._api_key)
        return self._client

    def _generate(self, model: str, contents: Any, schema: Dict[str, Any]) -> str:
        client = self._get_client()
        try:
            response = client.models.generate_content(
                model=model,
                contents=contents,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=schema,
                ),
            )
        except Exception as exc:
            raise AssistantError(f"{model} request failed: {exc}") from exc
        return response.text or ""

    def break_down_goal(
        self, goal_title: str, constraints: str, has_integrations: bool
    ) -> List[Task]:
        prompt = (
            f'Break down the goal "{goal_title}" into actionable tasks.\n'
            f"Constraints: {constraints}.\n"
            f"Calendar Integration: {'Active' if has_integrations else 'Inactive'}.\n"
            "Always suggest specific start times for these tasks."
        )
        text = self._generate(PLANNING_MODEL, prompt, TASK_DRAFT_SCHEMA)
        if not text:
            return []
        try:
            return [_task_from_draft(d, has_integrations) for d in json.loads(text)]
        except (TypeError, ValueError, AttributeError):
            logger.error("Failed to parse breakdown JSON: %s", text[:200])
            return []

    def reoptimize_schedule(
        self, missed_tasks: Sequence[Task], tomorrow_tasks: Sequence[Task]
    ) -> List[Task]:
        prompt = (
            f"Reschedule these missed tasks: {json.dumps([t.to_dict() for t in missed_tasks])} "
            f"and merge with tomorrow: {json.dumps([t.to_dict() for t in tomorrow_tasks])}. "
            "Optimize for morning high-focus."
        )
        text = self._generate(PLANNING_MODEL, prompt, TASK_DRAFT_SCHEMA)
        if not text:
            return []
        try:
            return [_task_from_draft(d, True) for d in json.loads(text)]
        except (TypeError, ValueError, AttributeError) as exc:
            raise AssistantError(f"invalid schedule JSON: {exc}") from exc

    def analyze_content(self, data: bytes, mime_type: str) -> DocumentAnalysis:
        if not _is_supported_modality(mime_type):
            mime_type = "image/jpeg"
        if types is None:
            raise AssistantError("google-genai is not installed")
        contents = [
            types.Part.from_bytes(data=data, mime_type=mime_type),
            ANALYSIS_PROMPT,
        ]
        text = self._generate(ANALYSIS_MODEL, contents, ANALYSIS_SCHEMA)
        try:
            payload = json.loads(text or "{}")
            quiz = [
                QuizQuestion(
                    question=str(q["question"]),
                    options=[str(o) for o in q["options"]],
                    answer=int(q["answer"]),
                )
                for q in payload.get("quiz", [])
            ]
            return DocumentAnalysis(summary=str(payload.get("summary", "")), quiz=quiz)
        except (TypeError, ValueError, KeyError, AttributeError) as exc:
            raise AssistantError(f"invalid analysis JSON: {exc}") from exc
