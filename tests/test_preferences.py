"""Tests for the preference store."""

import json

import pytest
from pydantic import ValidationError


class TestReaderPreferences:
    def test_defaults(self):
        from config.preferences import ReaderPreferences
        prefs = ReaderPreferences()
        assert prefs.font_size == 17
        assert prefs.library_sort == "recent"

    def test_font_size_out_of_range(self):
        from config.preferences import ReaderPreferences
        with pytest.raises(ValidationError, match="font_size"):
            ReaderPreferences(font_size=200)


class TestPreferenceStore:
    def test_missing_file_loads_defaults(self, tmp_path):
        from config.preferences import PreferenceStore, ReaderPreferences
        store = PreferenceStore(tmp_path / "none.json")
        assert store.load() == ReaderPreferences()

    def test_save_then_load(self, tmp_path):
        from config.preferences import PreferenceStore, ReaderPreferences
        store = PreferenceStore(tmp_path / "prefs.json")
        path = store.save(ReaderPreferences(theme="light", font_size=20))
        assert json.loads(path.read_text(encoding="utf-8"))["font_size"] == 20
        loaded = store.load()
        assert loaded.theme == "light"
        assert loaded.font_size == 20

    def test_corrupt_file_loads_defaults(self, tmp_path, caplog):
        from config.preferences import PreferenceStore, ReaderPreferences
        path = tmp_path / "prefs.json"
        path.write_text("{not json", encoding="utf-8")
        with caplog.at_level("WARNING"):
            assert PreferenceStore(path).load() == ReaderPreferences()
        assert "unreadable preferences" in caplog.text

    def test_update_merges_changes(self, tmp_path):
        from config.preferences import PreferenceStore
        store = PreferenceStore(tmp_path / "prefs.json")
        store.update(font_size=22)
        updated = store.update(reading_theme="sepia")
        assert updated.font_size == 22
        assert updated.reading_theme == "sepia"

    def test_update_rejects_invalid_value(self, tmp_path):
        from config.preferences import PreferenceStore
        store = PreferenceStore(tmp_path / "prefs.json")
        with pytest.raises(ValidationError):
            store.update(library_sort="random")
