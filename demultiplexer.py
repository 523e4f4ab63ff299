"""Split inbound live-session messages into audio, transcript and tool-call events.

A single server message may carry any mix of the three kinds. Parsing yields
them as separate ``InboundEvent`` values in a fixed order: tool calls first
(in array order), then audio parts, then the transcription fragment. Messages
that carry none of them are treated as malformed and ignored by the
demultiplexer, since the remote protocol adds new message kinds over time.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from errors import MalformedEvent
from models import AudioData, InboundEvent, ToolCall, TranscriptText

logger = logging.getLogger(__name__)

AudioCallback = Callable[[AudioData], None]
TranscriptCallback = Callable[[TranscriptText], None]
ToolCallCallback = Callable[[ToolCall], None]


def parse_server_message(raw: Union[str, bytes, Dict[str, Any]]) -> List[InboundEvent]:
    if isinstance(raw, dict):
        msg = raw
    else:
        try:
            msg = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise MalformedEvent(f"not JSON: {exc}") from exc
    if not isinstance(msg, dict):
        raise MalformedEvent(f"expected an object, got {type(msg).__name__}")

    events: List[InboundEvent] = []
    events.extend(_tool_calls(msg.get("toolCall")))

    server_content = msg.get("serverContent")
    if isinstance(server_content, dict):
        events.extend(_audio_parts(server_content.get("modelTurn")))
        transcription = server_content.get("outputTranscription")
        if isinstance(transcription, dict):
            text = transcription.get("text")
            if isinstance(text, str) and text:
                events.append(TranscriptText(text))

    if not events and not _is_known_control(msg):
        raise MalformedEvent(f"unrecognised message keys: {sorted(msg)}")
    return events


def _tool_calls(tool_call: Any) -> List[ToolCall]:
    if not isinstance(tool_call, dict):
        return []
    calls = tool_call.get("functionCalls")
    if not isinstance(calls, list):
        return []
    out = []
    for fc in calls:
        if not isinstance(fc, dict) or not isinstance(fc.get("name"), str):
            continue
        args = fc.get("args")
        out.append(
            ToolCall(
                name=fc["name"],
                args=args if isinstance(args, dict) else {},
                call_id=str(fc.get("id", "")),
            )
        )
    return out


def _audio_parts(model_turn: Any) -> List[AudioData]:
    if not isinstance(model_turn, dict):
        return []
    parts = model_turn.get("parts")
    if not isinstance(parts, list):
        return []
    out = []
    for part in parts:
        inline = part.get("inlineData") if isinstance(part, dict) else None
        if not isinstance(inline, dict):
            continue
        mime = inline.get("mimeType", "audio/")
        data = inline.get("data")
        if isinstance(mime, str) and mime.startswith("audio/") and isinstance(data, str):
            out.append(AudioData(data))
    return out


def _is_known_control(msg: Dict[str, Any]) -> bool:
    # Messages the session legitimately receives that carry nothing to dispatch.
    return any(
        key in msg
        for key in ("setupComplete", "serverContent", "toolCallCancellation", "usageMetadata", "goAway")
    )


class EventDemultiplexer:
    def __init__(
        self,
        on_audio: Optional[AudioCallback] = None,
        on_transcript: Optional[TranscriptCallback] = None,
        on_tool_call: Optional[ToolCallCallback] = None,
    ) -> None:
        self._on_audio = on_audio
        self._on_transcript = on_transcript
        self._on_tool_call = on_tool_call
        self.ignored_messages = 0

    def handle_message(self, raw: Union[str, bytes, Dict[str, Any]]) -> int:
        """Dispatch every event in ``raw``; returns how many were dispatched."""
        try:
            events = parse_server_message(raw)
        except MalformedEvent as exc:
            self.ignored_messages += 1
            logger.debug("Ignoring inbound message: %s", exc)
            return 0
        for event in events:
            self.dispatch(event)
        return len(events)

    def dispatch(self, event: InboundEvent) -> None:
        if isinstance(event, ToolCall):
            if self._on_tool_call:
                self._on_tool_call(event)
        elif isinstance(event, AudioData):
            if self._on_audio:
                self._on_audio(event)
        elif isinstance(event, TranscriptText):
            if self._on_transcript:
                self._on_transcript(event)
