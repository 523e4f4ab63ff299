"""State-machine based voice session orchestration."""

from __future__ import annotations

import logging
import threading
from queue import Empty, Full, Queue
from typing import Callable, List, Optional

from config import DEFAULT_LIVE_MODEL
from demultiplexer import EventDemultiplexer
from errors import CONNECTION_ERROR, DeviceUnavailable, LiveConnectionError
from interfaces import AudioOutput, LiveTransport, Recorder
from live_protocol import (
    LIFELOOP_SYSTEM_INSTRUCTION,
    build_setup_message,
    realtime_input_message,
    tool_response_message,
)
from models import AudioChunk, AudioData, SessionState, Task, ToolResponse, TranscriptText
from playback import PlaybackScheduler
from tool_bridge import ToolCallBridge
from transcript import TranscriptLog

logger = logging.getLogger(__name__)

StateCallback = Callable[[SessionState, SessionState], None]
TranscriptCallback = Callable[[List[str]], None]
ErrorCallback = Callable[[str, str], None]
TaskCallback = Callable[[Task], None]
TransportFactory = Callable[[], LiveTransport]


class VoiceSession:
    """Everything owned by one live conversation, discarded on teardown."""

    def __init__(
        self,
        session_id: int,
        transport: LiveTransport,
        playback: PlaybackScheduler,
        transcript: TranscriptLog,
        chunk_queue: Queue[AudioChunk | None],
    ) -> None:
        self.session_id = session_id
        self.transport = transport
        self.playback = playback
        self.transcript = transcript
        self.chunk_queue = chunk_queue
        self.closing = threading.Event()
        self.threads: List[threading.Thread] = []


class VoiceSessionController:
    def __init__(
        self,
        recorder: Recorder,
        transport_factory: TransportFactory,
        output: AudioOutput,
        on_task_created: TaskCallback,
        model: str = DEFAULT_LIVE_MODEL,
        voice: Optional[str] = None,
        system_instruction: str = LIFELOOP_SYSTEM_INSTRUCTION,
        transcript_size: int = 5,
        queue_maxsize: int = 8,
        join_timeout_s: float = 1.0,
        on_state_change: Optional[StateCallback] = None,
        on_transcript: Optional[TranscriptCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._recorder = recorder
        self._transport_factory = transport_factory
        self._output = output
        self._on_task_created = on_task_created
        self._model = model
        self._voice = voice
        self._system_instruction = system_instruction
        self._transcript_size = transcript_size
        self._queue_maxsize = queue_maxsize
        self._join_timeout_s = join_timeout_s
        self._on_state_change = on_state_change
        self._on_transcript = on_transcript
        self._on_error = on_error

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._session: Optional[VoiceSession] = None
        self._session_id = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state in (SessionState.CONNECTING, SessionState.ACTIVE)

    @property
    def transcript(self) -> List[str]:
        session = self._session
        return session.transcript.lines() if session else []

    def start(self) -> None:
        """Open the microphone and the live session.

        Raises DeviceUnavailable (state unchanged) or LiveConnectionError
        (state becomes ERROR). A no-op while a session is running.
        """
        with self._lock:
            if self.is_active:
                return
            chunk_queue: Queue[AudioChunk | None] = Queue(maxsize=self._queue_maxsize)
            playback = PlaybackScheduler(self._output)
            self._recorder.start(chunk_queue)
            try:
                playback.start()
            except Exception as exc:
                self._safe_release("microphone", self._recorder.stop)
                self._safe_release("playback", playback.stop)
                raise DeviceUnavailable(f"cannot open speaker: {exc}") from exc

            self._transition(SessionState.CONNECTING)
            transport: Optional[LiveTransport] = None
            try:
                transport = self._transport_factory()
                transport.connect(
                    build_setup_message(self._model, self._system_instruction, self._voice)
                )
            except Exception as exc:
                self._safe_release("microphone", self._recorder.stop)
                self._safe_release("playback", playback.stop)
                if transport is not None:
                    self._safe_release("connection", transport.close)
                self._transition(SessionState.ERROR)
                if isinstance(exc, LiveConnectionError):
                    raise
                raise LiveConnectionError(str(exc)) from exc

            self._session_id += 1
            session = VoiceSession(
                session_id=self._session_id,
                transport=transport,
                playback=playback,
                transcript=TranscriptLog(self._transcript_size),
                chunk_queue=chunk_queue,
            )
            bridge = ToolCallBridge(
                on_task_created=self._on_task_created,
                send_response=lambda response: self._send_tool_response(session, response),
            )
            demux = EventDemultiplexer(
                on_audio=lambda event: self._play(session, event),
                on_transcript=lambda event: self._append_transcript(session, event),
                on_tool_call=bridge.handle,
            )
            self._session = session
            self._transition(SessionState.ACTIVE)
            session.threads = [
                threading.Thread(
                    target=self._send_loop, args=(session,), daemon=True,
                    name=f"live-send-{session.session_id}",
                ),
                threading.Thread(
                    target=self._receive_loop, args=(session, demux), daemon=True,
                    name=f"live-recv-{session.session_id}",
                ),
            ]
            for thread in session.threads:
                thread.start()
            logger.info("Voice session %d active", session.session_id)

    def stop(self) -> None:
        with self._lock:
            session = self._session
            if session is None:
                return
            self._teardown(session)
            self._transition(SessionState.CLOSED)
        self._join(session)

    # ------------------------------------------------------------------
    # Worker loops
    # ------------------------------------------------------------------

    def _send_loop(self, session: VoiceSession) -> None:
        while not session.closing.is_set():
            chunk = session.chunk_queue.get()
            if chunk is None or session.closing.is_set():
                return
            try:
                session.transport.send(realtime_input_message(chunk))
            except Exception as exc:
                self._fail(session, f"send failed: {exc}")
                return

    def _receive_loop(self, session: VoiceSession, demux: EventDemultiplexer) -> None:
        try:
            for raw in session.transport.receive():
                if session.closing.is_set():
                    return
                demux.handle_message(raw)
        except Exception as exc:
            if not session.closing.is_set():
                self._fail(session, str(exc))
            return
        if not session.closing.is_set():
            logger.info("Voice session %d ended by remote", session.session_id)
            self._finish(session, SessionState.CLOSED)

    def _play(self, session: VoiceSession, event: AudioData) -> None:
        if not session.closing.is_set():
            session.playback.enqueue(event.data)

    def _append_transcript(self, session: VoiceSession, event: TranscriptText) -> None:
        if session.closing.is_set():
            return
        lines = session.transcript.append(event.text)
        if self._on_transcript:
            self._on_transcript(lines)

    def _send_tool_response(self, session: VoiceSession, response: ToolResponse) -> None:
        session.transport.send(tool_response_message(response))

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def _fail(self, session: VoiceSession, message: str) -> None:
        logger.error("Voice session %d failed: %s", session.session_id, message)
        if self._finish(session, SessionState.ERROR):
            self._emit_error(CONNECTION_ERROR, message)

    def _finish(self, session: VoiceSession, to_state: SessionState) -> bool:
        with self._lock:
            if self._session is not session:
                return False
            self._teardown(session)
            self._transition(to_state)
        self._join(session)
        return True

    def _teardown(self, session: VoiceSession) -> None:
        session.closing.set()
        self._session = None
        self._safe_release("microphone", self._recorder.stop)
        self._safe_release("connection", session.transport.close)
        self._safe_release("playback", session.playback.stop)
        self._wake_sender(session)
        session.transcript.clear()
        if self._on_transcript:
            self._on_transcript([])

    def _wake_sender(self, session: VoiceSession) -> None:
        try:
            session.chunk_queue.put_nowait(None)
        except Full:
            try:
                session.chunk_queue.get_nowait()
                session.chunk_queue.put_nowait(None)
            except (Empty, Full):
                pass

    def _join(self, session: VoiceSession) -> None:
        current = threading.current_thread()
        for thread in session.threads:
            if thread is not current and thread.is_alive():
                thread.join(timeout=self._join_timeout_s)

    def _safe_release(self, what: str, release: Callable[[], None]) -> None:
        try:
            release()
        except Exception:
            logger.warning("Releasing %s failed", what, exc_info=True)

    def _emit_error(self, code: str, message: str) -> None:
        if self._on_error:
            self._on_error(code, message)

    def _transition(self, to_state: SessionState) -> None:
        from_state = self._state
        if from_state == to_state:
            return
        self._state = to_state
        if self._on_state_change:
            self._on_state_change(from_state, to_state)
