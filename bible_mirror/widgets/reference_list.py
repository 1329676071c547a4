"""Picker listing verse references: bookmarks, reading history, search results."""

from dataclasses import dataclass
from typing import List, Sequence

from rich.text import Text
from textual.app import ComposeResult
from textual.message import Message
from textual.widget import Widget
from textual.widgets import ListItem, ListView, Static

from bible_mirror.data.canon import get_book
from bible_mirror.data.types import Bookmark, ReadingHistoryEntry, SearchHit, VerseRef


@dataclass
class ReferenceEntry:
    """One line of the picker."""

    ref: VerseRef
    label: str
    detail: str = ""


def _label(book_id: str, chapter: int, verse: int) -> str:
    book = get_book(book_id)
    name = book.name if book else book_id
    return f"{name} {chapter}:{verse}"


def bookmark_entries(bookmarks: Sequence[Bookmark]) -> List[ReferenceEntry]:
    return [
        ReferenceEntry(
            VerseRef(bm.book_id, bm.chapter, bm.verse),
            _label(bm.book_id, bm.chapter, bm.verse),
            bm.text,
        )
        for bm in bookmarks
    ]


def history_entries(history: Sequence[ReadingHistoryEntry]) -> List[ReferenceEntry]:
    return [
        ReferenceEntry(
            VerseRef(h.book_id, h.chapter, h.verse),
            _label(h.book_id, h.chapter, h.verse),
        )
        for h in history
    ]


def search_entries(hits: Sequence[SearchHit]) -> List[ReferenceEntry]:
    return [
        ReferenceEntry(
            VerseRef(hit.verse.book_id, hit.verse.chapter, hit.verse.verse),
            hit.reference,
            hit.verse.text,
        )
        for hit in hits
    ]


class ReferenceList(Widget):
    """Floating list of references; Enter navigates, Esc closes."""

    DEFAULT_CSS = """
    ReferenceList {
        layer: overlay;
        width: 70;
        height: 20;
        offset: 10 3;
        background: $surface;
        border: solid $primary;
        padding: 1;
    }

    ReferenceList > .picker-title {
        height: 1;
        text-style: bold;
        color: $primary;
    }

    ReferenceList > .picker-list {
        height: 1fr;
    }

    ReferenceList > .picker-hint {
        height: 1;
        color: $text-muted;
    }
    """

    class ReferenceChosen(Message):
        """Message sent when an entry is selected."""

        def __init__(self, ref: VerseRef) -> None:
            self.ref = ref
            super().__init__()

    class Cancelled(Message):
        """Message sent when the list is closed without a choice."""

        pass

    def __init__(self, title: str, entries: Sequence[ReferenceEntry], empty: str = "Nothing here", **kwargs) -> None:
        super().__init__(**kwargs)
        self._title = title
        self._entries: List[ReferenceEntry] = list(entries)
        self._empty = empty

    def compose(self) -> ComposeResult:
        yield Static(self._title, classes="picker-title")
        yield ListView(classes="picker-list", id="reference-list")
        yield Static("Enter=open, Esc=close", classes="picker-hint")

    def on_mount(self) -> None:
        lst = self.query_one("#reference-list", ListView)
        if not self._entries:
            lst.append(ListItem(Static(Text(self._empty, style="italic dim"))))
        for entry in self._entries:
            text = Text()
            text.append(entry.label, style="bold cyan")
            if entry.detail:
                detail = entry.detail if len(entry.detail) <= 80 else entry.detail[:77] + "..."
                text.append(f"  {detail}", style="dim")
            lst.append(ListItem(Static(text)))
        if self._entries:
            lst.index = 0
        lst.focus()

    def on_key(self, event) -> None:
        if event.key == "escape":
            event.stop()
            self.post_message(self.Cancelled())

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        event.stop()
        lst = self.query_one("#reference-list", ListView)
        if lst.index is not None and lst.index < len(self._entries):
            self.post_message(self.ReferenceChosen(self._entries[lst.index].ref))
