"""One-shot scroll targets for verse jumps."""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from bible_mirror.storage import KeyValueStore

logger = logging.getLogger(__name__)

SCROLL_TARGET_KEY = "scrollToVerse"


@dataclass(frozen=True)
class ScrollTarget:
    """A verse to bring into view once its chapter is rendered."""

    book_id: str
    chapter: int
    verse: int

    def matches(self, book_id: str, chapter: int) -> bool:
        return self.book_id == book_id and self.chapter == chapter

    def to_dict(self) -> dict:
        return {"bookId": self.book_id, "chapter": self.chapter, "verse": self.verse}

    @classmethod
    def from_dict(cls, data: dict) -> "ScrollTarget":
        return cls(
            book_id=str(data["bookId"]),
            chapter=int(data["chapter"]),
            verse=int(data["verse"]),
        )


class ScrollTargetSlot:
    """The single slot holding the pending target; a new target replaces the old."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def set(self, target: ScrollTarget) -> None:
        self.store.set_json(SCROLL_TARGET_KEY, target.to_dict())

    def peek(self) -> Optional[ScrollTarget]:
        raw = self.store.get_json(SCROLL_TARGET_KEY)
        if raw is None:
            return None
        try:
            return ScrollTarget.from_dict(raw)
        except (KeyError, TypeError, ValueError):
            logger.error("Failed to parse scroll target: %r", raw)
            self.clear()
            return None

    def clear(self) -> None:
        self.store.remove(SCROLL_TARGET_KEY)


class ScrollState(enum.Enum):
    IDLE = "idle"
    ARMED = "armed"
    CONSUMED = "consumed"


class ScrollCoordinator:
    """Per-surface state machine matching the pending target with rendered chapters.

    Events:
        target_set: a new target was written to the slot
        chapter_rendered: the surface finished rendering a chapter

    A target is consumed (removed from the slot) by the first render of its
    chapter, so it fires at most once. Renders of other chapters leave it
    armed.
    """

    def __init__(self, slot: ScrollTargetSlot) -> None:
        self.slot = slot
        self.state = ScrollState.ARMED if slot.peek() else ScrollState.IDLE

    def target_set(self) -> None:
        if self.slot.peek() is not None:
            self.state = ScrollState.ARMED

    def chapter_rendered(self, book_id: str, chapter: int) -> Optional[ScrollTarget]:
        """Return the target to scroll to if it belongs to this chapter."""
        target = self.slot.peek()
        if target is None:
            self.state = ScrollState.IDLE
            return None

        if not target.matches(book_id, chapter):
            self.state = ScrollState.ARMED
            return None

        self.slot.clear()
        self.state = ScrollState.CONSUMED
        logger.debug("Consumed scroll target %s %s:%s", book_id, chapter, target.verse)
        return target
