"""Gap-free scheduling of inbound PCM audio against a device clock."""

from __future__ import annotations

import logging
import threading
from typing import Any, List, Optional, Set

import numpy as np

from errors import DecodeError
from interfaces import AudioOutput, PlaybackHandle
from pcm import OUTPUT_SAMPLE_RATE, decode_pcm16

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)


class ScheduledBuffer:
    """A decoded buffer placed at a fixed frame on the output timeline."""

    def __init__(self, samples: np.ndarray, start_frame: int) -> None:
        self.samples = samples
        self.start_frame = start_frame
        self.cancelled = False
        self.finished = False

    @property
    def end_frame(self) -> int:
        return self.start_frame + len(self.samples)

    @property
    def done(self) -> bool:
        return self.cancelled or self.finished


class PlaybackScheduler:
    def __init__(
        self,
        output: AudioOutput,
        sample_rate: int = OUTPUT_SAMPLE_RATE,
        channels: int = 1,
    ) -> None:
        self._output = output
        self.sample_rate = sample_rate
        self.channels = channels
        self._lock = threading.Lock()
        self._clock = 0.0
        self._sources: Set[PlaybackHandle] = set()
        self.dropped_chunks = 0
        self._stopped = False

    @property
    def clock(self) -> float:
        """Scheduled end time of the most recently queued buffer."""
        return self._clock

    @property
    def pending(self) -> List[PlaybackHandle]:
        with self._lock:
            self._prune()
            return list(self._sources)

    def start(self) -> None:
        with self._lock:
            self._stopped = False
        self._output.start()

    def enqueue(self, data: str) -> Optional[float]:
        """Schedule one base64 chunk; returns its start time, or None if dropped."""
        try:
            samples = decode_pcm16(data, self.channels)
        except DecodeError as exc:
            self.dropped_chunks += 1
            logger.debug("Dropping inbound audio chunk: %s", exc)
            return None
        duration = len(samples) / float(self.sample_rate)
        with self._lock:
            if self._stopped:
                return None
            start_at = max(self._output.now(), self._clock)
            handle = self._output.schedule(samples, start_at)
            self._clock = start_at + duration
            self._prune()
            self._sources.add(handle)
        return start_at

    def stop(self) -> None:
        """Cancel everything still queued and release the output device."""
        with self._lock:
            self._stopped = True
            sources, self._sources = self._sources, set()
            self._clock = 0.0
        try:
            for handle in sources:
                if not handle.done:
                    self._output.cancel(handle)
        finally:
            self._output.close()

    def _prune(self) -> None:
        self._sources = {h for h in self._sources if not h.done}


class SoundDeviceOutput:
    """Callback-driven speaker stream whose clock is frames rendered."""

    def __init__(
        self,
        sample_rate: int = OUTPUT_SAMPLE_RATE,
        channels: int = 1,
        device: Optional[str] = None,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device
        self._stream: Any = None
        self._lock = threading.Lock()
        self._buffers: List[ScheduledBuffer] = []
        self._frames_rendered = 0

    def start(self) -> None:
        with self._lock:
            if self._stream is not None:
                return
            if sd is None:
                raise RuntimeError("sounddevice is not installed")
            self._frames_rendered = 0
            self._buffers = []
            stream = None
            try:
                stream = sd.OutputStream(
                    samplerate=self.sample_rate,
                    channels=self.channels,
                    dtype="float32",
                    device=self.device,
                    callback=self._on_output,
                )
                stream.start()
            except Exception:
                if stream is not None:
                    try:
                        stream.close()
                    except Exception:
                        logger.debug("Error closing half-open output stream", exc_info=True)
                raise
            self._stream = stream

    def now(self) -> float:
        with self._lock:
            return self._frames_rendered / float(self.sample_rate)

    def schedule(self, samples: np.ndarray, start_at: float) -> ScheduledBuffer:
        buffer = ScheduledBuffer(samples, int(round(start_at * self.sample_rate)))
        with self._lock:
            self._buffers.append(buffer)
        return buffer

    def cancel(self, handle: PlaybackHandle) -> None:
        with self._lock:
            if isinstance(handle, ScheduledBuffer):
                handle.cancelled = True
            self._buffers = [b for b in self._buffers if not b.done]

    def close(self) -> None:
        with self._lock:
            stream, self._stream = self._stream, None
            for buffer in self._buffers:
                buffer.cancelled = True
            self._buffers = []
        if stream is not None:
            stream.stop()
            stream.close()

    def _on_output(self, outdata: Any, frames: int, time_info: Any, status: Any) -> None:
        if status:
            logger.debug("Output stream status: %s", status)
        outdata[:] = self.render(frames)

    def render(self, frames: int) -> np.ndarray:
        """Mix every buffer overlapping the next ``frames`` frames and advance the clock."""
        out = np.zeros((frames, self.channels), dtype=np.float32)
        with self._lock:
            t0 = self._frames_rendered
            t1 = t0 + frames
            for buffer in self._buffers:
                if buffer.end_frame <= t0:
                    buffer.finished = True
                if buffer.done or buffer.start_frame >= t1:
                    continue
                lo = max(t0, buffer.start_frame)
                hi = min(t1, buffer.end_frame)
                out[lo - t0:hi - t0] += buffer.samples[lo - buffer.start_frame:hi - buffer.start_frame]
                if buffer.end_frame <= t1:
                    buffer.finished = True
            self._buffers = [b for b in self._buffers if not b.done]
            self._frames_rendered = t1
        return out
