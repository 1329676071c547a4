"""Data types and Bible metadata."""

from bible_mirror.data.types import (
    BIBLE_VERSIONS,
    FONT_SIZES,
    LANGUAGES,
    BibleBook,
    BibleVerse,
    BibleVersion,
    Bookmark,
    ReadingHistoryEntry,
    SearchHit,
    VerseRef,
    get_version_name,
    normalize_languages,
    version_language,
)
from bible_mirror.data.canon import (
    BOOK_ORDER,
    all_books,
    book_chapters,
    book_index,
    filter_books,
    get_book,
    next_book,
    prev_book,
)

__all__ = [
    "BIBLE_VERSIONS",
    "FONT_SIZES",
    "LANGUAGES",
    "BibleBook",
    "BibleVerse",
    "BibleVersion",
    "Bookmark",
    "ReadingHistoryEntry",
    "SearchHit",
    "VerseRef",
    "get_version_name",
    "normalize_languages",
    "version_language",
    "BOOK_ORDER",
    "all_books",
    "book_chapters",
    "book_index",
    "filter_books",
    "get_book",
    "next_book",
    "prev_book",
]
