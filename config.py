"""Simple JSON-based config and state stores."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

CONFIG_DIR = Path.home() / ".config" / "lifeloop"
DEFAULT_LIVE_MODEL = "gemini-2.5-flash-native-audio-preview-12-2025"
DEFAULT_HOTKEY = "Key.f9"


class JsonFileStore:
    """Key/value pairs persisted as one JSON object."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._read_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


class JsonConfigStore(JsonFileStore):
    def __init__(self, path: Path | None = None) -> None:
        super().__init__(path or CONFIG_DIR / "config.json")

    def get_api_key(self) -> str:
        key = str(self.get("api_key", ""))
        return key or os.getenv("GEMINI_API_KEY", "") or os.getenv("API_KEY", "")

    def set_api_key(self, key: str) -> None:
        self.set("api_key", key)

    def get_hotkey(self) -> str:
        return str(self.get("hotkey", DEFAULT_HOTKEY))

    def set_hotkey(self, hotkey: str) -> None:
        self.set("hotkey", hotkey)

    def get_live_model(self) -> str:
        return str(self.get("live_model", DEFAULT_LIVE_MODEL))

    def get_voice(self) -> str:
        return str(self.get("voice", ""))

    def get_calendar_sync(self) -> bool:
        return bool(self.get("calendar_sync", True))

    def set_calendar_sync(self, enabled: bool) -> None:
        self.set("calendar_sync", bool(enabled))

    def get_input_device(self) -> Optional[str]:
        return self.get("input_device") or None

    def get_output_device(self) -> Optional[str]:
        return self.get("output_device") or None


def state_store(path: Path | None = None) -> JsonFileStore:
    return JsonFileStore(path or CONFIG_DIR / "state.json")
