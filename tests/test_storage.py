"""Tests for the key/value store and preferences."""

import json

import pytest

from bible_mirror.data.types import Bookmark
from bible_mirror.storage import (
    BOOKMARKS_KEY,
    FONT_SIZE_KEY,
    HISTORY_KEY,
    LANGUAGES_KEY,
    MAX_HISTORY,
    VERSION_KEY,
    KeyValueStore,
    Preferences,
)


@pytest.fixture
def prefs():
    return Preferences(KeyValueStore.memory())


class TestKeyValueStore:
    """Test the raw store."""

    def test_set_and_get(self):
        store = KeyValueStore.memory()
        store.set("a", "1")
        assert store.get("a") == "1"
        assert store.get("missing") is None

    def test_listener_receives_changed_keys(self):
        store = KeyValueStore.memory()
        seen = []
        store.add_listener(seen.append)
        store.update({"a": "1", "b": "2"})
        store.update({"a": "1", "b": "3"})
        assert seen == [{"a", "b"}, {"b"}]

    def test_unchanged_write_does_not_notify(self):
        store = KeyValueStore.memory()
        store.set("a", "1")
        seen = []
        store.add_listener(seen.append)
        store.set("a", "1")
        assert seen == []

    def test_remove_listener(self):
        store = KeyValueStore.memory()
        seen = []
        remove = store.add_listener(seen.append)
        remove()
        store.set("a", "1")
        assert seen == []

    def test_get_json_tolerates_corrupt_value(self):
        store = KeyValueStore.memory()
        store.set("k", "{not json")
        assert store.get_json("k", []) == []

    def test_persists_to_file(self, tmp_path):
        path = tmp_path / "storage.json"
        KeyValueStore(path).set("a", "1")
        assert KeyValueStore(path).get("a") == "1"
        assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1"}

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("[broken", encoding="utf-8")
        assert KeyValueStore(path).keys() == []

    def test_refresh_picks_up_other_writer(self, tmp_path):
        path = tmp_path / "storage.json"
        reader = KeyValueStore(path)
        seen = []
        reader.add_listener(seen.append)

        KeyValueStore(path).set("a", "1")

        assert reader.refresh() is True
        assert reader.get("a") == "1"
        assert seen == [{"a"}]
        assert reader.refresh() is False


class TestLanguages:
    """Test language selection."""

    def test_default(self, prefs):
        assert prefs.get_languages() == ["en"]

    def test_toggle_adds_sorted(self, prefs):
        prefs.set_languages(["zh"])
        assert prefs.toggle_language("en") == ["en", "zh"]

    def test_toggle_removes(self, prefs):
        prefs.set_languages(["en", "zh"])
        assert prefs.toggle_language("en") == ["zh"]

    def test_toggle_only_language_is_noop(self, prefs):
        assert prefs.toggle_language("en") == ["en"]
        assert prefs.get_languages() == ["en"]

    def test_unknown_language_ignored(self, prefs):
        assert prefs.toggle_language("fr") == ["en"]

    def test_corrupt_value_resets(self, prefs):
        prefs.store.set(LANGUAGES_KEY, "not json")
        assert prefs.get_languages() == ["en"]
        prefs.store.set(LANGUAGES_KEY, "[]")
        assert prefs.get_languages() == ["en"]

    def test_duplicates_removed(self, prefs):
        prefs.store.set(LANGUAGES_KEY, '["zh", "zh", "en"]')
        assert prefs.get_languages() == ["zh", "en"]


class TestVersionAndFontSize:
    """Test enumerated preferences."""

    def test_defaults(self, prefs):
        assert prefs.get_version() == "kjv"
        assert prefs.get_font_size() == "medium"

    def test_set_version(self, prefs):
        prefs.set_version("cus")
        assert prefs.get_version() == "cus"

    def test_invalid_stored_values_reset(self, prefs):
        prefs.store.set(VERSION_KEY, "nope")
        prefs.store.set(FONT_SIZE_KEY, "huge")
        assert prefs.get_version() == "kjv"
        assert prefs.get_font_size() == "medium"

    def test_set_invalid_raises(self, prefs):
        with pytest.raises(ValueError):
            prefs.set_version("nope")
        with pytest.raises(ValueError):
            prefs.set_font_size("huge")


class TestBookmarks:
    """Test bookmarks."""

    def test_add_and_remove(self, prefs):
        assert prefs.add_bookmark(Bookmark("JHN", 3, 16, "For God so loved"))
        assert prefs.is_bookmarked("JHN", 3, 16)
        assert prefs.remove_bookmark("JHN", 3, 16)
        assert not prefs.is_bookmarked("JHN", 3, 16)

    def test_duplicate_is_noop(self, prefs):
        prefs.add_bookmark(Bookmark("JHN", 3, 16))
        assert not prefs.add_bookmark(Bookmark("JHN", 3, 16, "again"))
        assert len(prefs.get_bookmarks()) == 1

    def test_remove_missing(self, prefs):
        assert not prefs.remove_bookmark("GEN", 1, 1)

    def test_toggle(self, prefs):
        assert prefs.toggle_bookmark(Bookmark("GEN", 1, 1)) is True
        assert prefs.toggle_bookmark(Bookmark("GEN", 1, 1)) is False
        assert prefs.get_bookmarks() == []

    def test_stored_format(self, prefs):
        prefs.add_bookmark(Bookmark("GEN", 1, 1, "In the beginning", timestamp=5))
        raw = json.loads(prefs.store.get(BOOKMARKS_KEY))
        assert raw == [
            {"bookId": "GEN", "chapter": 1, "verse": 1, "text": "In the beginning", "timestamp": 5}
        ]

    def test_malformed_entries_skipped(self, prefs):
        prefs.store.set(BOOKMARKS_KEY, '[{"bookId": "GEN"}, {"bookId": "EXO", "chapter": 2, "verse": 3}]')
        assert [bm.key for bm in prefs.get_bookmarks()] == [("EXO", 2, 3)]


class TestReadingHistory:
    """Test reading history."""

    def test_repeat_moves_to_front(self, prefs):
        prefs.add_to_reading_history("GEN", 1, 5)
        prefs.add_to_reading_history("EXO", 2)
        prefs.add_to_reading_history("GEN", 1, 5)
        history = prefs.get_reading_history()
        assert [h.key for h in history] == [("GEN", 1, 5), ("EXO", 2, 1)]

    def test_same_entry_twice(self, prefs):
        prefs.add_to_reading_history("GEN", 1, 5)
        prefs.add_to_reading_history("GEN", 1, 5)
        assert len(prefs.get_reading_history()) == 1

    def test_capped_most_recent_first(self, prefs):
        for chapter in range(1, 41):
            prefs.add_to_reading_history("PSA", chapter)
        history = prefs.get_reading_history()
        assert len(history) == MAX_HISTORY == 30
        assert history[0].chapter == 40
        assert history[-1].chapter == 11

    def test_last_read(self, prefs):
        assert prefs.get_last_read() is None
        prefs.add_to_reading_history("ROM", 8, 28)
        assert prefs.get_last_read().key == ("ROM", 8, 28)

    def test_missing_verse_defaults_to_one(self, prefs):
        prefs.store.set(HISTORY_KEY, '[{"bookId": "GEN", "chapter": 2, "timestamp": 1}]')
        assert prefs.get_reading_history()[0].verse == 1

    def test_clear_all_data(self, prefs):
        prefs.add_bookmark(Bookmark("GEN", 1, 1))
        prefs.add_to_reading_history("GEN", 1)
        prefs.set_version("web")
        prefs.clear_all_data()
        assert prefs.get_bookmarks() == []
        assert prefs.get_reading_history() == []
        assert prefs.get_version() == "web"
