"""Sidebar with the reader's controls."""

from typing import List, Sequence

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Checkbox, Input, ListItem, ListView, Select, Static

from bible_mirror.data.canon import filter_books
from bible_mirror.data.types import BIBLE_VERSIONS, FONT_SIZES, BibleBook
from bible_mirror.sync.snapshot import SelectionSnapshot


class ControlPanel(Widget):
    """Language toggles, version and font size, book filter and reference jump."""

    DEFAULT_CSS = """
    ControlPanel {
        width: 36;
        height: 100%;
        background: $surface;
        border-right: solid $primary;
        padding: 0 1;
    }

    ControlPanel > .panel-title {
        height: 1;
        text-style: bold;
        color: $primary;
        margin-top: 1;
    }

    ControlPanel > .panel-row {
        height: auto;
    }

    ControlPanel > #book-list {
        height: 1fr;
    }
    """

    class LanguageToggled(Message):
        """Message sent when a language checkbox is clicked."""

        def __init__(self, language: str) -> None:
            self.language = language
            super().__init__()

    class VersionChanged(Message):
        def __init__(self, version: str) -> None:
            self.version = version
            super().__init__()

    class FontSizeChanged(Message):
        def __init__(self, size: str) -> None:
            self.size = size
            super().__init__()

    class BookChosen(Message):
        """Message sent when a book is picked from the list."""

        def __init__(self, book: BibleBook) -> None:
            self.book = book
            super().__init__()

    class JumpRequested(Message):
        """Message sent when a reference is typed in the jump input."""

        def __init__(self, text: str) -> None:
            self.text = text
            super().__init__()

    def __init__(self, books: Sequence[BibleBook], **kwargs) -> None:
        super().__init__(**kwargs)
        self._books: List[BibleBook] = list(books)
        self._filtered: List[BibleBook] = self._books
        self._current_book = ""

    def compose(self) -> ComposeResult:
        yield Static("Languages", classes="panel-title")
        with Horizontal(classes="panel-row"):
            yield Checkbox("EN", id="lang-en")
            yield Checkbox("中文", id="lang-zh")
        yield Static("Version", classes="panel-title")
        yield Select(
            [(v.name, v.id) for v in BIBLE_VERSIONS],
            allow_blank=False,
            id="version-select",
        )
        yield Static("Font size", classes="panel-title")
        yield Select(
            [(size.capitalize(), size) for size in FONT_SIZES],
            allow_blank=False,
            id="font-select",
        )
        yield Static("Go to", classes="panel-title")
        yield Input(placeholder="mat 1:12", id="jump-input")
        yield Static("Books", classes="panel-title")
        yield Input(placeholder="Filter books...", id="book-filter")
        yield ListView(id="book-list")

    def on_mount(self) -> None:
        self._update_list()

    def sync(self, snapshot: SelectionSnapshot) -> None:
        """Reflect the session state without emitting change messages."""
        with self.prevent(Checkbox.Changed, Select.Changed):
            self.query_one("#lang-en", Checkbox).value = "en" in snapshot.languages
            self.query_one("#lang-zh", Checkbox).value = "zh" in snapshot.languages
            self.query_one("#version-select", Select).value = snapshot.version
            self.query_one("#font-select", Select).value = snapshot.font_size
        if snapshot.book_id != self._current_book:
            self._current_book = snapshot.book_id
            self._update_list()

    def clear_jump(self) -> None:
        self.query_one("#jump-input", Input).value = ""

    def focus_jump(self) -> None:
        self.query_one("#jump-input", Input).focus()

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        event.stop()
        language = (event.checkbox.id or "")[len("lang-"):]
        self.post_message(self.LanguageToggled(language))

    def on_select_changed(self, event: Select.Changed) -> None:
        event.stop()
        if event.select.id == "version-select":
            self.post_message(self.VersionChanged(str(event.value)))
        elif event.select.id == "font-select":
            self.post_message(self.FontSizeChanged(str(event.value)))

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "book-filter":
            return
        event.stop()
        self._filtered = filter_books(self._books, event.value)
        self._update_list()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        if event.input.id == "jump-input":
            if event.value.strip():
                self.post_message(self.JumpRequested(event.value))
        elif event.input.id == "book-filter" and self._filtered:
            self.post_message(self.BookChosen(self._filtered[0]))

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        event.stop()
        lst = self.query_one("#book-list", ListView)
        if lst.index is not None and lst.index < len(self._filtered):
            self.post_message(self.BookChosen(self._filtered[lst.index]))

    def _update_list(self) -> None:
        """Update the book list display."""
        lst = self.query_one("#book-list", ListView)
        lst.clear()

        for book in self._filtered:
            text = Text()
            if book.id == self._current_book:
                text.append("* ", style="bold green")
                name_style = "bold green"
            else:
                text.append("  ")
                name_style = "bold cyan"
            text.append(book.name, style=name_style)
            if book.name_chinese:
                text.append(f" {book.name_chinese}", style="dim")
            lst.append(ListItem(Static(text)))

        if self._filtered:
            lst.index = 0
