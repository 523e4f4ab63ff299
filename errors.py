"""Shared error codes, user-facing messages and exception types."""

from __future__ import annotations

DEVICE_UNAVAILABLE = "DEVICE_UNAVAILABLE"
CONNECTION_ERROR = "CONNECTION_ERROR"
DECODE_ERROR = "DECODE_ERROR"
MALFORMED_EVENT = "MALFORMED_EVENT"
INVALID_TOOL_ARGUMENTS = "INVALID_TOOL_ARGUMENTS"
AUTH_FAILED = "AUTH_FAILED"
ASSISTANT_ERROR = "ASSISTANT_ERROR"

ERROR_MESSAGES = {
    DEVICE_UNAVAILABLE: "Microphone is unavailable or permission was denied.",
    CONNECTION_ERROR: "Voice session lost, press start to reconnect.",
    DECODE_ERROR: "Received audio could not be decoded.",
    MALFORMED_EVENT: "Received an unrecognised message.",
    INVALID_TOOL_ARGUMENTS: "The assistant asked for a task without a title or duration.",
    AUTH_FAILED: "API key is missing or invalid.",
    ASSISTANT_ERROR: "The assistant could not complete the request.",
}


class LifeLoopError(Exception):
    code = ASSISTANT_ERROR

    def __init__(self, message: str = "") -> None:
        super().__init__(message or ERROR_MESSAGES.get(self.code, self.code))


class DeviceUnavailable(LifeLoopError):
    code = DEVICE_UNAVAILABLE


class LiveConnectionError(LifeLoopError, ConnectionError):
    code = CONNECTION_ERROR


class DecodeError(LifeLoopError):
    code = DECODE_ERROR


class MalformedEvent(LifeLoopError):
    code = MALFORMED_EVENT


class InvalidToolArguments(LifeLoopError):
    code = INVALID_TOOL_ARGUMENTS


class AssistantError(LifeLoopError):
    code = ASSISTANT_ERROR
