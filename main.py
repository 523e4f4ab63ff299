"""Application entrypoint."""

from __future__ import annotations

import logging
import mimetypes
import os
import sys
import threading
from pathlib import Path
from typing import Any, Callable, List

from assistant import GeminiAssistant
from config import JsonConfigStore, state_store
from errors import ERROR_MESSAGES, LifeLoopError
from hotkey import GlobalHotkeyAdapter
from live_client import GeminiLiveTransport
from models import DocumentAnalysis, Goal, SessionState, Task
from overlay import OverlayWindow
from playback import SoundDeviceOutput
from recorder import SoundDeviceRecorder
from session_controller import VoiceSessionController
from streak import StreakTracker
from task_board import TaskBoard
from tool_bridge import new_task_id

try:
    from PySide6.QtCore import QObject, QSize, Signal
    from PySide6.QtGui import QAction, QBrush, QColor, QIcon, QPainter, QPixmap
    from PySide6.QtWidgets import (
        QApplication,
        QFileDialog,
        QInputDialog,
        QMenu,
        QMessageBox,
        QSystemTrayIcon,
    )
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

logger = logging.getLogger("lifeloop")


def _create_icon(color: str = "#888888", size: int = 22) -> QIcon:
    """Generate a simple circular tray icon with the given color."""
    pixmap = QPixmap(QSize(size, size))
    pixmap.fill(QColor(0, 0, 0, 0))
    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.Antialiasing, True)
    painter.setBrush(QBrush(QColor(color)))
    painter.setPen(QColor(color))
    painter.drawEllipse(2, 2, size - 4, size - 4)
    painter.end()
    return QIcon(pixmap)


ICON_IDLE = "#888888"    # grey
ICON_ACTIVE = "#6366f1"  # indigo
ICON_ERROR = "#FF8800"   # orange


class UIBridge(QObject):
    state_signal = Signal(str, str)  # from_state, to_state
    transcript_signal = Signal(list)
    error_signal = Signal(str)
    board_signal = Signal()
    result_signal = Signal(object, object)  # handler, result


class App:
    def __init__(self) -> None:
        self.app = QApplication(sys.argv)
        self.app.setQuitOnLastWindowClosed(False)
        self.config_store = JsonConfigStore()
        self.streak = StreakTracker(state_store())
        self.streak.check_in()
        self.board = TaskBoard(streak=self.streak)
        self.assistant = GeminiAssistant(api_key=self.config_store.get_api_key())
        self.overlay = OverlayWindow()

        self.ui = UIBridge()
        self.ui.state_signal.connect(self._on_state_change_ui)
        self.ui.transcript_signal.connect(self.overlay.set_transcript)
        self.ui.error_signal.connect(self.overlay.show_error)
        self.ui.board_signal.connect(self._refresh_board_ui)
        self.ui.result_signal.connect(lambda handler, result: handler(result))
        self.board.subscribe(lambda _tasks: self.ui.board_signal.emit())

        self.controller = self._build_controller()
        self.hotkey = GlobalHotkeyAdapter(hotkey_name=self.config_store.get_hotkey())

        self.tray = QSystemTrayIcon()
        self.tray.setIcon(_create_icon(ICON_IDLE))
        self._setup_menu()
        self._refresh_board_ui()
        self.tray.show()

    def _build_controller(self) -> VoiceSessionController:
        api_key = self.config_store.get_api_key()
        return VoiceSessionController(
            recorder=SoundDeviceRecorder(device=self.config_store.get_input_device()),
            transport_factory=lambda: GeminiLiveTransport(api_key=api_key),
            output=SoundDeviceOutput(device=self.config_store.get_output_device()),
            on_task_created=self.board.add,
            model=self.config_store.get_live_model(),
            voice=self.config_store.get_voice() or None,
            on_state_change=self._on_state_change,
            on_transcript=self._on_transcript,
            on_error=self._on_error,
        )

    def _setup_menu(self) -> None:
        menu = QMenu()

        self.voice_action = QAction("Start Coaching", menu)
        self.voice_action.triggered.connect(self.toggle_voice)
        menu.addAction(self.voice_action)
        menu.addSeparator()

        plan_action = QAction("Plan Goal...", menu)
        plan_action.triggered.connect(self._plan_goal)
        menu.addAction(plan_action)

        self.reschedule_action = QAction("Reschedule Remaining", menu)
        self.reschedule_action.triggered.connect(self._reschedule_remaining)
        menu.addAction(self.reschedule_action)

        analyze_action = QAction("Analyze Document...", menu)
        analyze_action.triggered.connect(self._analyze_document)
        menu.addAction(analyze_action)

        self.tasks_menu = menu.addMenu("Today's Tasks")
        menu.addSeparator()

        calendar_action = QAction("Google Calendar Sync", menu)
        calendar_action.setCheckable(True)
        calendar_action.setChecked(self.config_store.get_calendar_sync())
        calendar_action.toggled.connect(self.config_store.set_calendar_sync)
        menu.addAction(calendar_action)

        api_action = QAction("Set API Key", menu)
        api_action.triggered.connect(self._set_api_key)
        menu.addAction(api_action)

        hotkey_action = QAction("Set Hotkey", menu)
        hotkey_action.triggered.connect(self._set_hotkey)
        menu.addAction(hotkey_action)

        menu.addSeparator()
        quit_action = QAction("Quit", menu)
        quit_action.triggered.connect(self.quit)
        menu.addAction(quit_action)

        self.tray.setContextMenu(menu)

    # ------------------------------------------------------------------
    # Voice session
    # ------------------------------------------------------------------

    def toggle_voice(self) -> None:
        if self.controller.is_active:
            threading.Thread(target=self.controller.stop, daemon=True).start()
            return
        threading.Thread(target=self._start_voice, daemon=True).start()

    def _start_voice(self) -> None:
        try:
            self.controller.start()
        except LifeLoopError as exc:
            self._on_error(exc.code, str(exc))

    # ------------------------------------------------------------------
    # Assistant actions
    # ------------------------------------------------------------------

    def _run_background(self, work: Callable[[], Any], on_done: Callable[[Any], None]) -> None:
        """Run a model request off the Qt thread and hand the result back to it."""

        def _worker() -> None:
            try:
                result = work()
            except LifeLoopError as exc:
                self.ui.error_signal.emit(str(exc))
                return
            self.ui.result_signal.emit(on_done, result)

        threading.Thread(target=_worker, daemon=True).start()

    def _plan_goal(self) -> None:
        title, ok = QInputDialog.getText(None, "Plan Goal", "What do you want to achieve?")
        if not ok or not title.strip():
            return
        constraints, ok = QInputDialog.getText(
            None, "Plan Goal", "Constraints (time available, deadline, ...)"
        )
        if not ok:
            return
        synced = self.config_store.get_calendar_sync()

        def _done(tasks: List[Task]) -> None:
            self.board.add_goal(Goal(id=new_task_id(), title=title.strip(), description=constraints, tasks=tasks))
            self.overlay.show_message(f"Added {len(tasks)} tasks for \"{title.strip()}\".")

        self.overlay.show_message("LifeLoop Agent is planning your goal...")
        self._run_background(
            lambda: self.assistant.break_down_goal(title.strip(), constraints, synced), _done
        )

    def _reschedule_remaining(self) -> None:
        pending = self.board.pending
        if not pending:
            self.overlay.show_message("No tasks to reschedule! You're a hero.")
            return

        def _done(tasks: List[Task]) -> None:
            self.board.replace_pending(tasks)
            self.overlay.show_message(
                f"Re-optimized {len(pending)} tasks and pushed them to tomorrow."
            )

        self.overlay.show_message("Rescheduling...")
        self._run_background(lambda: self.assistant.reoptimize_schedule(pending, []), _done)

    def _analyze_document(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            None, "Analyze Document", str(Path.home()), "Documents (*.pdf *.png *.jpg *.jpeg *.webp)"
        )
        if not path:
            return
        mime_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            self.overlay.show_error(f"Cannot read {path}: {exc}")
            return

        def _done(analysis: DocumentAnalysis) -> None:
            lines = [analysis.summary, ""]
            for n, q in enumerate(analysis.quiz, start=1):
                lines.append(f"{n}. {q.question}")
                for i, option in enumerate(q.options):
                    marker = "*" if i == q.answer else "-"
                    lines.append(f"   {marker} {option}")
            QMessageBox.information(None, "Study Material", "\n".join(lines))

        self.overlay.show_message("LifeLoop Agent is analyzing your material...")
        self._run_background(lambda: self.assistant.analyze_content(data, mime_type), _done)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def _set_api_key(self) -> None:
        value, ok = QInputDialog.getText(None, "API Key", "Gemini API Key")
        if not ok:
            return
        self.config_store.set_api_key(value)
        self.controller.stop()
        self.controller = self._build_controller()
        self.assistant = GeminiAssistant(api_key=value)
        QMessageBox.information(None, "Saved", "API Key saved and applied.")

    def _set_hotkey(self) -> None:
        value, ok = QInputDialog.getText(
            None, "Hotkey", "Use pynput key format, e.g. Key.f9"
        )
        if not ok or not value:
            return
        self.config_store.set_hotkey(value)
        QMessageBox.information(None, "Saved", "Hotkey saved. Restart app to apply.")

    # ------------------------------------------------------------------
    # Callbacks (called from worker threads → emit signals for UI thread)
    # ------------------------------------------------------------------

    def _on_state_change(self, from_state: SessionState, to_state: SessionState) -> None:
        self.ui.state_signal.emit(from_state.value, to_state.value)

    def _on_transcript(self, lines: List[str]) -> None:
        self.ui.transcript_signal.emit(lines)

    def _on_error(self, code: str, message: str) -> None:
        logger.warning("%s: %s", code, message)
        self.ui.error_signal.emit(ERROR_MESSAGES.get(code, message))

    # ------------------------------------------------------------------
    # UI thread handlers (safe for Qt)
    # ------------------------------------------------------------------

    def _on_state_change_ui(self, from_state: str, to_state: str) -> None:
        if to_state in (SessionState.CONNECTING.value, SessionState.ACTIVE.value):
            self.tray.setIcon(_create_icon(ICON_ACTIVE))
            self.voice_action.setText("Stop Session")
            self.overlay.set_listening(to_state == SessionState.ACTIVE.value)
        elif to_state == SessionState.ERROR.value:
            self.tray.setIcon(_create_icon(ICON_ERROR))
            self.voice_action.setText("Start Coaching")
            self.overlay.set_listening(False)
        else:
            self.tray.setIcon(_create_icon(ICON_IDLE))
            self.voice_action.setText("Start Coaching")
            self.overlay.set_listening(False)

    def _refresh_board_ui(self) -> None:
        self.tasks_menu.clear()
        tasks = self.board.tasks
        if not tasks:
            empty = self.tasks_menu.addAction("Your loop is empty. Ask the voice coach.")
            empty.setEnabled(False)
        for task in tasks:
            label = f"{task.title} ({task.duration:g} min, {task.priority.value})"
            if task.start_time:
                label = f"{task.start_time}  {label}"
            action = self.tasks_menu.addAction(label)
            action.setCheckable(True)
            action.setChecked(task.completed)
            action.triggered.connect(lambda _checked=False, tid=task.id: self.board.toggle(tid))
        self.reschedule_action.setEnabled(bool(self.board.pending))
        self.tray.setToolTip(
            f"LifeLoop: {self.streak.streak} day streak, {self.board.progress:.0f}% done today"
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        try:
            self.hotkey.start(on_toggle=lambda: self.ui.result_signal.emit(lambda _r: self.toggle_voice(), None))
        except Exception as exc:
            self.overlay.show_error(f"Hotkey disabled: {exc}")
        return self.app.exec()

    def quit(self) -> None:
        self.hotkey.stop()
        self.controller.stop()
        self.app.quit()


def main() -> int:
    logging.basicConfig(
        level=os.getenv("LIFELOOP_LOG_LEVEL", "INFO").upper(),
        format="[%(name)s] %(levelname)s %(message)s",
    )
    app = App()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
