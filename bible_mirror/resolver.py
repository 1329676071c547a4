"""Resolve typed references like "mat 1:12" to a book, chapter and verse."""

import re
from typing import Iterable, Optional, Sequence

from bible_mirror.data.types import BibleBook, VerseRef

# Pattern: "<book token> <chapter>[:<verse>]"
_REFERENCE = re.compile(r"^(?P<token>.+?)\s+(?P<chapter>\d+)(?::(?P<verse>\d+))?$")


def _candidates(book: BibleBook) -> Iterable[str]:
    yield book.abbreviation.lower()
    yield book.name.lower()
    yield book.id.lower()
    if book.name_chinese:
        yield book.name_chinese


def find_book(token: str, books: Sequence[BibleBook]) -> Optional[BibleBook]:
    """Return the first book (in list order) whose abbreviation, name or id starts with token."""
    needle = token.strip().lower()
    if not needle:
        return None
    for book in books:
        if any(candidate.startswith(needle) for candidate in _candidates(book)):
            return book
    return None


def resolve(text: str, books: Sequence[BibleBook]) -> Optional[VerseRef]:
    """Parse a free-text reference.

    Supports:
    - "gen 1" -> GEN 1:1
    - "mat 1:12" -> MAT 1:12
    - "创世记 3:15" -> GEN 3:15

    Args:
        text: Text typed by the user
        books: Books in canonical order

    Returns:
        VerseRef, or None if the text is not a valid reference
    """
    match = _REFERENCE.match(text.strip())
    if not match:
        return None

    book = find_book(match.group("token"), books)
    if book is None:
        return None

    chapter = int(match.group("chapter"))
    if chapter < 1 or chapter > book.chapters:
        return None

    verse = int(match.group("verse")) if match.group("verse") else 1
    if verse < 1:
        return None

    return VerseRef(book_id=book.id, chapter=chapter, verse=verse)
