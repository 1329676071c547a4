"""Controller session: owns the current selection and publishes it."""

import logging
from typing import List, Optional, Sequence

from bible_mirror.data.canon import get_book, next_book, prev_book
from bible_mirror.data.types import FONT_SIZES, BibleBook, VerseRef
from bible_mirror.resolver import resolve
from bible_mirror.storage import Preferences
from bible_mirror.sync.controller import SyncController
from bible_mirror.sync.scroll import ScrollTarget, ScrollTargetSlot
from bible_mirror.sync.snapshot import SelectionSnapshot

logger = logging.getLogger(__name__)

START_BOOK = "GEN"


class ReaderSession:
    """The controller of the reader.

    Every selection change is recorded in the reading history and published
    as a SelectionSnapshot, so all attached surfaces follow along.
    """

    def __init__(
        self,
        prefs: Preferences,
        sync: SyncController,
        scroll_slot: ScrollTargetSlot,
        books: Sequence[BibleBook],
    ) -> None:
        self.prefs = prefs
        self.sync = sync
        self.scroll_slot = scroll_slot
        self.books: List[BibleBook] = list(books)
        self.book_id = START_BOOK
        self.chapter = 1
        self.verse = 1
        self.version = prefs.get_version()
        self.languages = tuple(prefs.get_languages())
        self.font_size = prefs.get_font_size()

    def start(self) -> SelectionSnapshot:
        """Restore the last read chapter and publish the first snapshot."""
        last = self.prefs.get_last_read()
        if last and get_book(last.book_id):
            self.book_id = get_book(last.book_id).id
            self.chapter = self._clamp(self.book_id, last.chapter)
            self.verse = max(1, last.verse)
        return self.publish()

    def close(self) -> None:
        self.sync.close()

    # Selection

    @property
    def book(self) -> BibleBook:
        return get_book(self.book_id)

    def snapshot(self) -> SelectionSnapshot:
        return SelectionSnapshot(
            book_id=self.book_id,
            chapter=self.chapter,
            book_name=self.book.name,
            version=self.version,
            languages=self.languages,
            font_size=self.font_size,
        )

    def publish(self) -> SelectionSnapshot:
        snapshot = self.snapshot()
        self.sync.publish(snapshot)
        return snapshot

    def _clamp(self, book_id: str, chapter: int) -> int:
        book = get_book(book_id)
        return max(1, min(chapter, book.chapters))

    def select(self, book_id: str, chapter: int = 1, verse: int = 1) -> bool:
        """Select a chapter. Returns False for an unknown book."""
        book = get_book(book_id)
        if book is None:
            logger.warning("Ignoring selection of unknown book %r", book_id)
            return False
        self.book_id = book.id
        self.chapter = self._clamp(book.id, chapter)
        self.verse = max(1, verse)
        self.prefs.add_to_reading_history(self.book_id, self.chapter, self.verse)
        self.publish()
        return True

    def select_book(self, book_id: str) -> bool:
        return self.select(book_id, 1)

    def select_chapter(self, chapter: int) -> bool:
        return self.select(self.book_id, chapter)

    def next_chapter(self) -> bool:
        """Go to the next chapter, crossing into the next book. False at the end."""
        if self.chapter < self.book.chapters:
            return self.select(self.book_id, self.chapter + 1)
        following = next_book(self.book_id)
        if following is None:
            return False
        return self.select(following, 1)

    def prev_chapter(self) -> bool:
        """Go to the previous chapter, crossing into the last chapter of the previous book."""
        if self.chapter > 1:
            return self.select(self.book_id, self.chapter - 1)
        previous = prev_book(self.book_id)
        if previous is None:
            return False
        return self.select(previous, get_book(previous).chapters)

    # Jumps

    def goto(self, ref: VerseRef) -> bool:
        """Navigate to a verse, arming a scroll target when it is past verse 1."""
        if get_book(ref.book_id) is None:
            return False
        if ref.verse > 1:
            self.scroll_slot.set(ScrollTarget(ref.book_id, ref.chapter, ref.verse))
        return self.select(ref.book_id, ref.chapter, ref.verse)

    def jump(self, text: str) -> Optional[VerseRef]:
        """Resolve typed text like "mat 1:12" and navigate to it.

        Returns:
            The resolved reference, or None (selection unchanged) if the text
            does not name a valid chapter
        """
        ref = resolve(text, self.books)
        if ref is None:
            return None
        self.goto(ref)
        return ref

    # Display preferences

    def set_version(self, version: str) -> None:
        self.prefs.set_version(version)
        self.version = version
        self.publish()

    def toggle_language(self, language: str) -> bool:
        """Toggle a language. Returns False if nothing changed."""
        languages = tuple(self.prefs.toggle_language(language))
        if languages == self.languages:
            return False
        self.languages = languages
        self.publish()
        return True

    def set_font_size(self, size: str) -> None:
        self.prefs.set_font_size(size)
        self.font_size = size
        self.publish()

    def cycle_font_size(self) -> str:
        index = FONT_SIZES.index(self.font_size)
        self.set_font_size(FONT_SIZES[(index + 1) % len(FONT_SIZES)])
        return self.font_size
