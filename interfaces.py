"""Protocol interfaces used by VoiceSessionController."""

from __future__ import annotations

from queue import Queue
from typing import Any, Dict, Iterator, Optional, Protocol, Union

import numpy as np

from models import AudioChunk

RawMessage = Union[str, bytes]


class Recorder(Protocol):
    def start(self, chunk_queue: Queue[AudioChunk | None]) -> None: ...

    def stop(self) -> None: ...


class LiveTransport(Protocol):
    def connect(self, setup: Dict[str, Any]) -> None: ...

    def send(self, message: Dict[str, Any]) -> None: ...

    def receive(self) -> Iterator[RawMessage]: ...

    def close(self) -> None: ...


class PlaybackHandle(Protocol):
    @property
    def done(self) -> bool: ...


class AudioOutput(Protocol):
    def start(self) -> None: ...

    def now(self) -> float: ...

    def schedule(self, samples: np.ndarray, start_at: float) -> PlaybackHandle: ...

    def cancel(self, handle: PlaybackHandle) -> None: ...

    def close(self) -> None: ...


class KeyValueStore(Protocol):
    def get(self, key: str, default: Optional[Any] = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...
