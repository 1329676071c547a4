"""Selection snapshots and the messages that carry them between views."""

from dataclasses import dataclass, replace
from typing import Mapping, Tuple

from bible_mirror.data.types import (
    DEFAULT_FONT_SIZE,
    DEFAULT_LANGUAGES,
    DEFAULT_VERSION,
    FONT_SIZES,
    VERSION_IDS,
    normalize_languages,
    optional_int,
)

READY_TYPE = "ready"


def ready_message() -> dict:
    """Message a newly attached surface sends to ask for the current state."""
    return {"type": READY_TYPE}


def is_ready_request(message: object) -> bool:
    return isinstance(message, Mapping) and message.get("type") == READY_TYPE


@dataclass(frozen=True)
class SelectionSnapshot:
    """Everything a display surface needs to show what the controller shows."""

    book_id: str = ""
    chapter: int = 0
    book_name: str = ""
    version: str = DEFAULT_VERSION
    languages: Tuple[str, ...] = DEFAULT_LANGUAGES
    font_size: str = DEFAULT_FONT_SIZE

    @property
    def is_complete(self) -> bool:
        """True once a book and chapter are known."""
        return bool(self.book_id) and self.chapter > 0

    @property
    def reference(self) -> str:
        return f"{self.book_name or self.book_id} {self.chapter}"

    def to_message(self) -> dict:
        """Serialize to the wire format."""
        return {
            "bookId": self.book_id,
            "chapter": self.chapter,
            "bookName": self.book_name,
            "version": self.version,
            "languages": list(self.languages),
            "fontSize": self.font_size,
        }

    def merge(self, message: Mapping) -> "SelectionSnapshot":
        """Apply a received message field by field.

        Missing or invalid fields keep their current value, so receiving the
        same message twice, or a partial one, never corrupts the snapshot.
        """
        changes: dict = {}

        book_id = message.get("bookId")
        if isinstance(book_id, str) and book_id:
            changes["book_id"] = book_id

        chapter = optional_int(message.get("chapter"))
        if chapter is not None and chapter > 0:
            changes["chapter"] = chapter

        book_name = message.get("bookName")
        if isinstance(book_name, str) and book_name:
            changes["book_name"] = book_name

        version = message.get("version")
        if version in VERSION_IDS:
            changes["version"] = version

        languages = message.get("languages")
        if isinstance(languages, (list, tuple)):
            changes["languages"] = normalize_languages(languages)

        font_size = message.get("fontSize")
        if font_size in FONT_SIZES:
            changes["font_size"] = font_size

        return replace(self, **changes) if changes else self

    @classmethod
    def from_message(cls, message: Mapping) -> "SelectionSnapshot":
        return cls().merge(message)
