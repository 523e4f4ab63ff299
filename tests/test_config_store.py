from __future__ import annotations

from pathlib import Path

import pytest

from config import DEFAULT_HOTKEY, DEFAULT_LIVE_MODEL, JsonConfigStore, JsonFileStore, state_store


@pytest.fixture(autouse=True)
def _no_env_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)


def test_config_read_write(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    store = JsonConfigStore(path=path)

    assert store.get_api_key() == ""
    assert store.get_hotkey() == DEFAULT_HOTKEY
    assert store.get_live_model() == DEFAULT_LIVE_MODEL
    assert store.get_calendar_sync() is True

    store.set_api_key("abc")
    store.set_hotkey("Key.f8")
    store.set_calendar_sync(False)

    reloaded = JsonConfigStore(path=path)
    assert reloaded.get_api_key() == "abc"
    assert reloaded.get_hotkey() == "Key.f8"
    assert reloaded.get_calendar_sync() is False


def test_config_invalid_json_fallback(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{invalid", encoding="utf-8")

    store = JsonConfigStore(path=path)
    assert store.get_api_key() == ""
    assert store.get_hotkey() == DEFAULT_HOTKEY


def test_api_key_falls_back_to_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    store = JsonConfigStore(path=tmp_path / "config.json")

    monkeypatch.setenv("API_KEY", "from-api-key")
    assert store.get_api_key() == "from-api-key"

    monkeypatch.setenv("GEMINI_API_KEY", "from-gemini")
    assert store.get_api_key() == "from-gemini"

    store.set_api_key("stored")
    assert store.get_api_key() == "stored"


def test_file_store_ignores_non_object_json(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    store = JsonFileStore(path)
    assert store.get("streak", 1) == 1

    store.set("streak", 4)
    assert state_store(path).get("streak") == 4
