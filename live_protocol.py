"""Gemini Live wire messages: setup, realtime audio and tool responses."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from models import AudioChunk, ToolResponse

LIVE_WS_URL = (
    "wss://generativelanguage.googleapis.com/ws/"
    "google.ai.generativelanguage.v1beta.GenerativeService.BidiGenerateContent"
)

LIFELOOP_SYSTEM_INSTRUCTION = (
    "You are LifeLoop, a supportive and proactive life coach. You have the tool "
    "'create_life_task' to add tasks to the user's dashboard. When they ask to do "
    "something later or schedule something, use the tool. Otherwise, provide "
    "encouraging advice."
)

CREATE_TASK_TOOL_NAME = "create_life_task"

CREATE_TASK_TOOL: Dict[str, Any] = {
    "name": CREATE_TASK_TOOL_NAME,
    "description": "Create a new task in the LifeLoop dashboard.",
    "parameters": {
        "type": "object",
        "properties": {
            "title": {"type": "string"},
            "duration": {"type": "number", "description": "Minutes"},
            "priority": {"type": "string", "enum": ["low", "medium", "high"]},
            "category": {
                "type": "string",
                "enum": ["work", "study", "fitness", "personal"],
            },
        },
        "required": ["title", "duration", "priority", "category"],
    },
}


def build_setup_message(
    model: str,
    system_instruction: str = LIFELOOP_SYSTEM_INSTRUCTION,
    voice: Optional[str] = None,
    tools: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    generation_config: Dict[str, Any] = {"responseModalities": ["AUDIO"]}
    if voice:
        generation_config["speechConfig"] = {
            "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice}}
        }
    return {
        "setup": {
            "model": model if model.startswith("models/") else f"models/{model}",
            "generationConfig": generation_config,
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "tools": [{"functionDeclarations": tools or [CREATE_TASK_TOOL]}],
            "outputAudioTranscription": {},
        }
    }


def realtime_input_message(chunk: AudioChunk) -> Dict[str, Any]:
    return {
        "realtimeInput": {
            "mediaChunks": [{"data": chunk.data, "mimeType": chunk.mime_type}]
        }
    }


def tool_response_message(response: ToolResponse) -> Dict[str, Any]:
    payload = {"result": response.result} if response.ok else {"error": response.result}
    return {
        "toolResponse": {
            "functionResponses": [
                {"id": response.call_id, "name": response.name, "response": payload}
            ]
        }
    }
