"""Core data models for the app."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class SessionState(str, Enum):
    IDLE = "IDLE"
    CONNECTING = "CONNECTING"
    ACTIVE = "ACTIVE"
    ERROR = "ERROR"
    CLOSED = "CLOSED"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Category(str, Enum):
    WORK = "work"
    STUDY = "study"
    FITNESS = "fitness"
    PERSONAL = "personal"


class GoalStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


@dataclass
class Task:
    id: str
    title: str
    duration: float  # minutes
    priority: Priority = Priority.MEDIUM
    category: Category = Category.PERSONAL
    completed: bool = False
    start_time: Optional[str] = None
    synced_to_calendar: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialise in the shape the model endpoints expect."""
        data: Dict[str, Any] = {
            "title": self.title,
            "duration": self.duration,
            "priority": self.priority.value,
            "category": self.category.value,
        }
        if self.start_time:
            data["startTime"] = self.start_time
        return data


@dataclass
class Goal:
    id: str
    title: str
    description: str = ""
    deadline: str = ""
    tasks: List[Task] = field(default_factory=list)
    status: GoalStatus = GoalStatus.ACTIVE


@dataclass(frozen=True)
class AudioChunk:
    """One encoded microphone block, ready for the wire."""

    data: str
    mime_type: str = "audio/pcm;rate=16000"


@dataclass(frozen=True)
class AudioData:
    data: str  # base64 PCM16LE


@dataclass(frozen=True)
class TranscriptText:
    text: str


@dataclass(frozen=True)
class ToolCall:
    name: str
    args: Dict[str, Any]
    call_id: str


InboundEvent = Union[AudioData, TranscriptText, ToolCall]


@dataclass(frozen=True)
class ToolResponse:
    call_id: str
    name: str
    result: str
    ok: bool = True


@dataclass
class QuizQuestion:
    question: str
    options: List[str]
    answer: int


@dataclass
class DocumentAnalysis:
    summary: str
    quiz: List[QuizQuestion] = field(default_factory=list)
