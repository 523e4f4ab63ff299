"""Gemini Live transport over a synchronous WebSocket."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, Optional

from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK, WebSocketException
from websockets.sync.client import connect

from errors import AUTH_FAILED, LiveConnectionError
from interfaces import RawMessage
from live_protocol import LIVE_WS_URL

logger = logging.getLogger(__name__)


class GeminiLiveTransport:
    def __init__(
        self,
        api_key: str,
        url: str = LIVE_WS_URL,
        open_timeout_s: float = 10.0,
        setup_timeout_s: float = 15.0,
        max_size: int = 10 * 1024 * 1024,
    ) -> None:
        self._api_key = api_key
        self._url = url
        self._open_timeout_s = open_timeout_s
        self._setup_timeout_s = setup_timeout_s
        self._max_size = max_size
        self._ws: Any = None
        self.messages_sent = 0
        self.messages_received = 0

    def connect(self, setup: Dict[str, Any]) -> None:
        if not self._api_key:
            err = LiveConnectionError("No API key configured")
            err.code = AUTH_FAILED
            raise err
        try:
            self._ws = connect(
                f"{self._url}?key={self._api_key}",
                open_timeout=self._open_timeout_s,
                max_size=self._max_size,
            )
            self._ws.send(json.dumps(setup))
            logger.info("Setup sent, waiting for setupComplete...")
            raw = self._ws.recv(timeout=self._setup_timeout_s)
        except (OSError, TimeoutError, WebSocketException) as exc:
            self._abort()
            raise LiveConnectionError(f"cannot open live session: {exc}") from exc

        try:
            reply = json.loads(raw)
        except ValueError:
            reply = None
        if not isinstance(reply, dict) or "setupComplete" not in reply:
            self._abort()
            raise LiveConnectionError(f"expected setupComplete, got {str(raw)[:120]}")
        logger.info("Session established (setupComplete)")

    def send(self, message: Dict[str, Any]) -> None:
        ws = self._ws
        if ws is None:
            raise LiveConnectionError("live session is not connected")
        try:
            ws.send(json.dumps(message))
        except (OSError, WebSocketException) as exc:
            raise LiveConnectionError(f"send failed: {exc}") from exc
        self.messages_sent += 1

    def receive(self) -> Iterator[RawMessage]:
        ws = self._ws
        if ws is None:
            return
        while True:
            try:
                raw = ws.recv()
            except ConnectionClosedOK:
                logger.info("Live session closed by server")
                return
            except (ConnectionClosedError, OSError, WebSocketException) as exc:
                raise LiveConnectionError(f"receive failed: {exc}") from exc
            self.messages_received += 1
            yield raw

    def close(self) -> None:
        ws, self._ws = self._ws, None
        if ws is not None:
            ws.close()

    def _abort(self) -> None:
        ws: Optional[Any]
        ws, self._ws = self._ws, None
        if ws is not None:
            try:
                ws.close()
            except Exception:
                logger.debug("Error closing half-open socket", exc_info=True)
