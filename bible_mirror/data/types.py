"""Data types for bible-mirror."""

import time
from dataclasses import dataclass, field
from typing import Optional, Tuple

LANGUAGES: Tuple[str, ...] = ("en", "zh")
FONT_SIZES: Tuple[str, ...] = ("small", "medium", "large")

DEFAULT_LANGUAGES: Tuple[str, ...] = ("en",)
DEFAULT_VERSION = "kjv"
DEFAULT_FONT_SIZE = "medium"

# Prefix used to detect a chapter that could not be loaded
UNAVAILABLE_MARKER = "[Unable to load chapter"


def _now_ms() -> int:
    return int(time.time() * 1000)


def verse_id(book_id: str, chapter: int, verse: int) -> str:
    """Return the stable id of a verse, e.g. ``GEN-1-1``."""
    return f"{book_id}-{chapter}-{verse}"


@dataclass(frozen=True)
class BibleVersion:
    """A translation the scripture APIs can serve."""

    id: str
    name: str
    language: str


# Display names are the familiar ones; ids are what the APIs accept
BIBLE_VERSIONS: Tuple[BibleVersion, ...] = (
    BibleVersion("kjv", "KJV", "en"),
    BibleVersion("web", "NIV", "en"),
    BibleVersion("basicenglish", "ESV", "en"),
    BibleVersion("cus", "CUNPSS (和合本简体)", "zh"),
    BibleVersion("cns", "CCB (当代圣经)", "zh"),
)

VERSION_IDS: Tuple[str, ...] = tuple(v.id for v in BIBLE_VERSIONS)


def version_language(version: str) -> str:
    """Return the language tag of a version id (English if unknown)."""
    for v in BIBLE_VERSIONS:
        if v.id == version:
            return v.language
    return "en"


def get_version_name(version: str) -> str:
    """Return the display name of a version id (the id itself if unknown)."""
    for v in BIBLE_VERSIONS:
        if v.id == version:
            return v.name
    return version


@dataclass(frozen=True)
class BibleBook:
    """Metadata for a Bible book."""

    id: str
    abbreviation: str
    name: str
    name_long: str
    chapters: int
    name_chinese: str = ""
    pinyin: str = ""
    pinyin_abbr: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "abbreviation": self.abbreviation,
            "name": self.name,
            "nameLong": self.name_long,
            "chapters": self.chapters,
            "nameChinese": self.name_chinese,
        }


@dataclass(frozen=True)
class BibleVerse:
    """A single verse of chapter text."""

    book_id: str
    chapter: int
    verse: int
    text: str

    @property
    def id(self) -> str:
        return verse_id(self.book_id, self.chapter, self.verse)

    @property
    def reference(self) -> str:
        """Return formatted reference string."""
        return f"{self.book_id} {self.chapter}:{self.verse}"

    @property
    def unavailable(self) -> bool:
        """True for the placeholder returned when a chapter failed to load."""
        return self.text.startswith(UNAVAILABLE_MARKER)


@dataclass(frozen=True)
class VerseRef:
    """A resolved (book, chapter, verse) location."""

    book_id: str
    chapter: int
    verse: int = 1


@dataclass
class Bookmark:
    """A saved verse."""

    book_id: str
    chapter: int
    verse: int
    text: str = ""
    timestamp: int = field(default_factory=_now_ms)

    @property
    def key(self) -> Tuple[str, int, int]:
        return (self.book_id, self.chapter, self.verse)

    @property
    def reference(self) -> str:
        """Return formatted reference string."""
        return f"{self.book_id} {self.chapter}:{self.verse}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "bookId": self.book_id,
            "chapter": self.chapter,
            "verse": self.verse,
            "text": self.text,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Bookmark":
        """Create from dictionary."""
        return cls(
            book_id=data["bookId"],
            chapter=int(data["chapter"]),
            verse=int(data["verse"]),
            text=data.get("text", ""),
            timestamp=int(data.get("timestamp", 0)),
        )


@dataclass
class ReadingHistoryEntry:
    """A chapter (and verse) the reader visited."""

    book_id: str
    chapter: int
    verse: int = 1
    timestamp: int = field(default_factory=_now_ms)

    @property
    def key(self) -> Tuple[str, int, int]:
        return (self.book_id, self.chapter, self.verse)

    @property
    def reference(self) -> str:
        if self.verse > 1:
            return f"{self.book_id} {self.chapter}:{self.verse}"
        return f"{self.book_id} {self.chapter}"

    def to_dict(self) -> dict:
        return {
            "bookId": self.book_id,
            "chapter": self.chapter,
            "verse": self.verse,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ReadingHistoryEntry":
        # Entries written before verses were tracked have no "verse"
        return cls(
            book_id=data["bookId"],
            chapter=int(data["chapter"]),
            verse=int(data.get("verse") or 1),
            timestamp=int(data.get("timestamp", 0)),
        )


@dataclass(frozen=True)
class SearchHit:
    """A text search result."""

    verse: BibleVerse
    book_name: str = ""

    @property
    def reference(self) -> str:
        name = self.book_name or self.verse.book_id
        return f"{name} {self.verse.chapter}:{self.verse.verse}"


def optional_int(value: object) -> Optional[int]:
    """Parse an int from stored/wire data, None when not a number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def normalize_languages(values: object) -> Tuple[str, ...]:
    """Keep known language tags once each, in order; never return an empty set."""
    if not isinstance(values, (list, tuple)):
        return DEFAULT_LANGUAGES
    result: list = []
    for value in values:
        if value in LANGUAGES and value not in result:
            result.append(value)
    return tuple(result) or DEFAULT_LANGUAGES
