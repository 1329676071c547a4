"""Local key/value storage for preferences, bookmarks and reading history."""

import json
import logging
import os
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from bible_mirror.data.types import (
    DEFAULT_FONT_SIZE,
    DEFAULT_VERSION,
    FONT_SIZES,
    LANGUAGES,
    VERSION_IDS,
    Bookmark,
    ReadingHistoryEntry,
    normalize_languages,
)

logger = logging.getLogger(__name__)

BOOKMARKS_KEY = "bible_bookmarks"
HISTORY_KEY = "bible_reading_history"
LANGUAGES_KEY = "bible_languages"
VERSION_KEY = "bible_version"
FONT_SIZE_KEY = "bible_font_size"

MAX_HISTORY = 30

StoreListener = Callable[[Set[str]], None]


class KeyValueStore:
    """Flat string key/value store, optionally persisted as one JSON file.

    Every key is independently readable and writable and values are plain
    strings. Listeners receive the set of keys that changed, both for writes
    made through this object and for writes by another process that
    refresh() picks up from the file.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path
        self._listeners: List[StoreListener] = []
        self._stamp: Optional[Tuple[int, int]] = None
        self._data = self._read_file()
        self._stamp = self._file_stamp()

    @classmethod
    def memory(cls) -> "KeyValueStore":
        """Create a store that lives only as long as this process."""
        return cls(None)

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def keys(self) -> List[str]:
        return list(self._data)

    def set(self, key: str, value: str) -> None:
        self.update({key: value})

    def update(self, values: Mapping[str, str]) -> None:
        """Write several keys at once with a single change notification."""
        self.refresh()
        changed = {k for k, v in values.items() if self._data.get(k) != v}
        if not changed:
            return
        self._data.update(values)
        self._save()
        self._notify(changed)

    def remove(self, *keys: str) -> None:
        self.refresh()
        changed = {k for k in keys if k in self._data}
        if not changed:
            return
        for key in changed:
            del self._data[key]
        self._save()
        self._notify(changed)

    def get_json(self, key: str, default=None):
        """Decode a JSON value, returning default when missing or corrupt."""
        raw = self._data.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding corrupt value for %s", key)
            return default

    def set_json(self, key: str, value) -> None:
        self.set(key, json.dumps(value, ensure_ascii=False))

    def add_listener(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def refresh(self) -> bool:
        """Reload the file if another process changed it.

        Returns:
            True if any key changed
        """
        if self._path is None:
            return False
        stamp = self._file_stamp()
        if stamp == self._stamp:
            return False
        fresh = self._read_file()
        self._stamp = stamp
        changed = {
            k for k in set(fresh) | set(self._data) if fresh.get(k) != self._data.get(k)
        }
        self._data = fresh
        if changed:
            self._notify(changed)
        return bool(changed)

    def _notify(self, keys: Set[str]) -> None:
        for listener in list(self._listeners):
            listener(set(keys))

    def _file_stamp(self) -> Optional[Tuple[int, int]]:
        if self._path is None:
            return None
        try:
            st = self._path.stat()
        except OSError:
            return None
        return (st.st_mtime_ns, st.st_size)

    def _read_file(self) -> Dict[str, str]:
        """Load the backing file; a corrupt file reads as empty."""
        if self._path is None or not self._path.exists():
            return {}
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable store %s: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed store %s", self._path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, ensure_ascii=False)
        os.replace(tmp, self._path)
        self._stamp = self._file_stamp()


class Preferences:
    """Reader preferences, bookmarks and history on top of a KeyValueStore.

    Stored values are validated on read: anything corrupt or outside the
    known enumerations reads back as the default.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    # Languages

    def get_languages(self) -> List[str]:
        """Get selected languages (never empty)."""
        return list(normalize_languages(self.store.get_json(LANGUAGES_KEY)))

    def set_languages(self, languages: Iterable[str]) -> List[str]:
        """Set selected languages; unknown tags are dropped."""
        normalized = list(normalize_languages(list(languages)))
        self.store.set_json(LANGUAGES_KEY, normalized)
        return normalized

    def toggle_language(self, language: str) -> List[str]:
        """Toggle a language on/off, always keeping at least one."""
        current = self.get_languages()
        if language not in LANGUAGES:
            return current

        if language not in current:
            return self.set_languages(sorted(current + [language]))

        if len(current) == 1:
            return current
        return self.set_languages([lang for lang in current if lang != language])

    # Version and font size

    def get_version(self) -> str:
        version = self.store.get(VERSION_KEY)
        return version if version in VERSION_IDS else DEFAULT_VERSION

    def set_version(self, version: str) -> None:
        if version not in VERSION_IDS:
            raise ValueError(f"Unknown version: {version}")
        self.store.set(VERSION_KEY, version)

    def get_font_size(self) -> str:
        size = self.store.get(FONT_SIZE_KEY)
        return size if size in FONT_SIZES else DEFAULT_FONT_SIZE

    def set_font_size(self, size: str) -> None:
        if size not in FONT_SIZES:
            raise ValueError(f"Unknown font size: {size}")
        self.store.set(FONT_SIZE_KEY, size)

    # Bookmarks

    def get_bookmarks(self) -> List[Bookmark]:
        """Get all bookmarks, skipping malformed records."""
        raw = self.store.get_json(BOOKMARKS_KEY, [])
        if not isinstance(raw, list):
            return []
        bookmarks = []
        for item in raw:
            try:
                bookmarks.append(Bookmark.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed bookmark: %r", item)
        return bookmarks

    def _save_bookmarks(self, bookmarks: List[Bookmark]) -> None:
        self.store.set_json(BOOKMARKS_KEY, [bm.to_dict() for bm in bookmarks])

    def add_bookmark(self, bookmark: Bookmark) -> bool:
        """Add a bookmark. Returns False if one already exists at that verse."""
        bookmarks = self.get_bookmarks()
        if any(bm.key == bookmark.key for bm in bookmarks):
            return False
        bookmarks.append(bookmark)
        self._save_bookmarks(bookmarks)
        return True

    def remove_bookmark(self, book_id: str, chapter: int, verse: int) -> bool:
        """Remove a bookmark. Returns True if one was removed."""
        bookmarks = self.get_bookmarks()
        kept = [bm for bm in bookmarks if bm.key != (book_id, chapter, verse)]
        if len(kept) == len(bookmarks):
            return False
        self._save_bookmarks(kept)
        return True

    def is_bookmarked(self, book_id: str, chapter: int, verse: int) -> bool:
        return any(bm.key == (book_id, chapter, verse) for bm in self.get_bookmarks())

    def toggle_bookmark(self, bookmark: Bookmark) -> bool:
        """Add or remove a bookmark. Returns True if the verse is now bookmarked."""
        if self.remove_bookmark(*bookmark.key):
            return False
        return self.add_bookmark(bookmark)

    # Reading history

    def get_reading_history(self) -> List[ReadingHistoryEntry]:
        """Get reading history, most recent first."""
        raw = self.store.get_json(HISTORY_KEY, [])
        if not isinstance(raw, list):
            return []
        history = []
        for item in raw:
            try:
                history.append(ReadingHistoryEntry.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed history entry: %r", item)
        return history

    def add_to_reading_history(self, book_id: str, chapter: int, verse: int = 1) -> None:
        """Record a visit; a repeated location moves to the front."""
        entry = ReadingHistoryEntry(book_id=book_id, chapter=chapter, verse=verse)
        history = [h for h in self.get_reading_history() if h.key != entry.key]
        history.insert(0, entry)
        self.store.set_json(HISTORY_KEY, [h.to_dict() for h in history[:MAX_HISTORY]])

    def get_last_read(self) -> Optional[ReadingHistoryEntry]:
        history = self.get_reading_history()
        return history[0] if history else None

    def clear_all_data(self) -> None:
        """Clear bookmarks and history (preferences are kept)."""
        self.store.remove(BOOKMARKS_KEY, HISTORY_KEY)
