"""Tests for the JSON preference store."""

import json

from engine_bootstrap.preferences import JsonPreferenceStore


class TestJsonPreferenceStore:
    def test_missing_file_is_empty(self, tmp_path):
        store = JsonPreferenceStore(tmp_path / "settings.json")

        assert store.get("setting.useNative") is None
        assert store.get("setting.useNative", True) is True

    def test_set_persists(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        store = JsonPreferenceStore(path)

        store.set("setting.useNative", False)

        assert json.loads(path.read_text()) == {"setting.useNative": False}
        assert JsonPreferenceStore(path).get("setting.useNative") is False
        assert [p.name for p in path.parent.iterdir()] == ["settings.json"]

    def test_unreadable_file_is_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{broken")

        store = JsonPreferenceStore(path)
        assert store.get("setting.useNative") is None

        store.set("setting.useNative", True)
        assert json.loads(path.read_text()) == {"setting.useNative": True}
