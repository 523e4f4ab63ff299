"""Overlay window for the listening indicator and agent transcript."""

from __future__ import annotations

from typing import List

try:
    from PySide6.QtCore import Qt, QTimer
    from PySide6.QtWidgets import QApplication, QLabel, QWidget, QVBoxLayout
except Exception:  # pragma: no cover
    Qt = None  # type: ignore
    QTimer = None  # type: ignore
    QApplication = None  # type: ignore
    QLabel = object  # type: ignore
    QWidget = object  # type: ignore
    QVBoxLayout = object  # type: ignore

_BASE_STYLE = "font-size: 16px; padding: 14px; border-radius: 12px;"
_STATUS_STYLE = "color: #a5b4fc; background: rgba(15,23,42,220);" + _BASE_STYLE
_TEXT_STYLE = "color: white; background: rgba(15,23,42,200);" + _BASE_STYLE
_ERROR_STYLE = "color: #FF6B6B; background: rgba(0,0,0,210);" + _BASE_STYLE


class OverlayWindow(QWidget):
    def __init__(self) -> None:
        if Qt is None:
            raise RuntimeError("PySide6 is not installed")
        super().__init__()
        self.setWindowFlags(
            Qt.WindowStaysOnTopHint | Qt.FramelessWindowHint | Qt.Tool
        )
        self.setAttribute(Qt.WA_TranslucentBackground, True)
        self.setFixedWidth(560)

        self._status = QLabel("")
        self._status.setStyleSheet(_STATUS_STYLE)
        self._label = QLabel("")
        self._label.setWordWrap(True)
        self._label.setStyleSheet(_TEXT_STYLE)

        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)
        layout.addWidget(self._status)
        layout.addWidget(self._label)
        self.setLayout(layout)

        self._hide_timer: QTimer | None = None

    def _anchor_top_right(self) -> None:
        if QApplication is None:
            return
        screen = QApplication.primaryScreen()
        if screen is None:
            return
        geom = screen.availableGeometry()
        self.adjustSize()
        self.move(geom.x() + geom.width() - self.width() - 24, geom.y() + 40)

    def set_listening(self, listening: bool) -> None:
        """Show or clear the listening indicator."""
        self._cancel_hide_timer()
        if listening:
            self._status.setText("● Listening. Try: \"Remind me to call Mom at 5pm\"")
            self._label.setStyleSheet(_TEXT_STYLE)
            self._label.setText("Ready for instructions...")
            self._anchor_top_right()
            self.show()
        else:
            self._status.setText("")
            self.hide_with_delay(400)

    def set_transcript(self, lines: List[str]) -> None:
        if not lines:
            return
        self._label.setStyleSheet(_TEXT_STYLE)
        self._label.setText("\n".join(lines))
        self._anchor_top_right()

    def show_message(self, text: str, hide_after_ms: int = 3000) -> None:
        self._cancel_hide_timer()
        self._label.setStyleSheet(_TEXT_STYLE)
        self._label.setText(text)
        self._anchor_top_right()
        self.show()
        self.hide_with_delay(hide_after_ms)

    def show_error(self, text: str, hide_after_ms: int = 3000) -> None:
        self._cancel_hide_timer()
        self._label.setStyleSheet(_ERROR_STYLE)
        self._label.setText(f"⚠️ {text}")
        self._anchor_top_right()
        self.show()
        self.hide_with_delay(hide_after_ms)

    def hide_with_delay(self, delay_ms: int = 400) -> None:
        self._cancel_hide_timer()
        if QTimer is not None:
            self._hide_timer = QTimer()
            self._hide_timer.setSingleShot(True)
            self._hide_timer.timeout.connect(self.hide)
            self._hide_timer.start(delay_ms)

    def _cancel_hide_timer(self) -> None:
        if self._hide_timer is not None:
            self._hide_timer.stop()
            self._hide_timer = None
