"""Tests for inbound message parsing and dispatch."""

from __future__ import annotations

import json
from typing import Any, List

import pytest

from demultiplexer import EventDemultiplexer, parse_server_message
from errors import MalformedEvent
from models import AudioData, ToolCall, TranscriptText


def _tool_call_msg(*calls: dict) -> dict:
    return {"toolCall": {"functionCalls": list(calls)}}


def _audio_msg(*chunks: str) -> dict:
    return {
        "serverContent": {
            "modelTurn": {
                "parts": [
                    {"inlineData": {"mimeType": "audio/pcm;rate=24000", "data": c}}
                    for c in chunks
                ]
            }
        }
    }


class Recorder:
    def __init__(self) -> None:
        self.events: List[Any] = []

    def demux(self) -> EventDemultiplexer:
        return EventDemultiplexer(
            on_audio=self.events.append,
            on_transcript=self.events.append,
            on_tool_call=self.events.append,
        )


# ---------------------------------------------------------------
# parse_server_message
# ---------------------------------------------------------------

def test_parse_tool_calls_in_array_order() -> None:
    msg = _tool_call_msg(
        {"id": "a", "name": "create_life_task", "args": {"title": "one"}},
        {"id": "b", "name": "create_life_task", "args": {"title": "two"}},
    )
    events = parse_server_message(json.dumps(msg))
    assert events == [
        ToolCall("create_life_task", {"title": "one"}, "a"),
        ToolCall("create_life_task", {"title": "two"}, "b"),
    ]


def test_parse_audio_and_transcript_from_bytes() -> None:
    msg = _audio_msg("AAAA", "BBBB")
    msg["serverContent"]["outputTranscription"] = {"text": "Sure, added."}
    events = parse_server_message(json.dumps(msg).encode())
    assert events == [AudioData("AAAA"), AudioData("BBBB"), TranscriptText("Sure, added.")]


def test_parse_skips_non_audio_parts() -> None:
    msg = {
        "serverContent": {
            "modelTurn": {
                "parts": [
                    {"text": "thinking", "thought": True},
                    {"inlineData": {"mimeType": "image/png", "data": "xxx"}},
                    "garbage",
                    {"inlineData": {"mimeType": "audio/pcm", "data": "AAAA"}},
                ]
            }
        }
    }
    assert parse_server_message(msg) == [AudioData("AAAA")]


def test_parse_turn_complete_has_no_events() -> None:
    assert parse_server_message({"serverContent": {"turnComplete": True}}) == []
    assert parse_server_message({"setupComplete": {}}) == []


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", json.dumps({"mystery": 1}), b"\xff\xfe"])
def test_parse_rejects_unknown_shapes(raw: Any) -> None:
    with pytest.raises(MalformedEvent):
        parse_server_message(raw)


# ---------------------------------------------------------------
# EventDemultiplexer
# ---------------------------------------------------------------

def test_message_with_tool_call_and_audio_dispatches_each_once() -> None:
    rec = Recorder()
    msg = _audio_msg("AAAA")
    msg.update(_tool_call_msg({"id": "c1", "name": "create_life_task", "args": {}}))

    count = rec.demux().handle_message(json.dumps(msg))

    assert count == 2
    assert rec.events == [ToolCall("create_life_task", {}, "c1"), AudioData("AAAA")]


def test_malformed_message_is_ignored() -> None:
    rec = Recorder()
    demux = rec.demux()

    assert demux.handle_message("{broken") == 0
    assert demux.handle_message(json.dumps({"unknownKind": {}})) == 0
    assert rec.events == []
    assert demux.ignored_messages == 2


def test_missing_handlers_are_tolerated() -> None:
    demux = EventDemultiplexer()
    assert demux.handle_message(_audio_msg("AAAA")) == 1


def test_tool_call_without_args_gets_empty_dict() -> None:
    events = parse_server_message(_tool_call_msg({"id": 7, "name": "create_life_task"}))
    assert events == [ToolCall("create_life_task", {}, "7")]
