"""Microphone recorder adapter."""

from __future__ import annotations

import logging
import threading
from queue import Empty, Full, Queue
from typing import Any, Optional

import numpy as np

from errors import DeviceUnavailable
from models import AudioChunk
from pcm import INPUT_SAMPLE_RATE, encode_chunk

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)


class SoundDeviceRecorder:
    def __init__(
        self,
        sample_rate: int = INPUT_SAMPLE_RATE,
        channels: int = 1,
        block_frames: int = 4096,
        device: Optional[str] = None,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.block_frames = block_frames
        self.device = device
        self._stream: Any = None
        self._running = False
        self._lock = threading.Lock()
        self.dropped_chunks = 0
        self._chunk_queue: Queue[AudioChunk | None] | None = None

    def start(self, chunk_queue: Queue[AudioChunk | None]) -> None:
        with self._lock:
            if self._running:
                return
            if sd is None:
                raise DeviceUnavailable("sounddevice is not installed")
            self._chunk_queue = chunk_queue
            self.dropped_chunks = 0
            try:
                self._stream = sd.InputStream(
                    samplerate=self.sample_rate,
                    channels=self.channels,
                    dtype="float32",
                    blocksize=self.block_frames,
                    device=self.device,
                    callback=self._on_audio,
                )
                self._stream.start()
            except Exception as exc:
                self._stream = None
                raise DeviceUnavailable(f"cannot open microphone: {exc}") from exc
            self._running = True
            logger.info("Microphone open (%d Hz, %d ch)", self.sample_rate, self.channels)

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                self._emit_sentinel_if_needed()
                return
            self._running = False
            stream, self._stream = self._stream, None
            try:
                if stream is not None:
                    stream.stop()
                    stream.close()
            finally:
                self._emit_sentinel_if_needed()
            if self.dropped_chunks:
                logger.info("Microphone closed, %d chunks dropped", self.dropped_chunks)

    def _on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        if not self._running or self._chunk_queue is None:
            return
        chunk = encode_chunk(np.asarray(indata, dtype=np.float32))
        try:
            self._chunk_queue.put_nowait(chunk)
        except Full:
            self.dropped_chunks += 1

    def _emit_sentinel_if_needed(self) -> None:
        if self._chunk_queue is None:
            return
        try:
            self._chunk_queue.put_nowait(None)
        except Full:
            # Sender is behind; make room so it still sees the sentinel.
            try:
                self._chunk_queue.get_nowait()
                self._chunk_queue.put_nowait(None)
            except (Empty, Full):
                logger.debug("Could not enqueue recorder sentinel", exc_info=True)
