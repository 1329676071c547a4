"""Chapter text view in single or dual-language layout."""

from typing import Dict, List, Optional

from rich.text import Text
from textual.containers import Vertical
from textual.widgets import Static

from bible_mirror.backend.pages import ChapterPage
from bible_mirror.data.types import FONT_SIZES, BibleVerse


class VerseRow(Static):
    """Single verse display widget."""

    DEFAULT_CSS = """
    VerseRow {
        width: 100%;
        padding: 0 2;
        background: $surface;
    }
    VerseRow.current {
        background: $surface-lighten-1;
    }
    VerseRow.highlight {
        background: #333300;
    }
    """

    def __init__(self, verse: BibleVerse, chinese: str, english: str, layout: str, **kwargs):
        super().__init__("", **kwargs)
        self.verse = verse
        self._chinese = chinese
        self._english = english
        self._layout = layout
        self._is_current = False

    def on_mount(self) -> None:
        self._render_verse()

    @property
    def display_text(self) -> str:
        """Text shown for this verse (both languages joined in dual layout)."""
        if self._layout == "dual":
            return f"{self._chinese}\n{self._english}"
        return self._chinese if self._layout == "zh" else self._english

    def set_current(self, is_current: bool) -> None:
        self._is_current = is_current
        self.set_class(is_current, "current")
        self._render_verse()

    def _render_verse(self) -> None:
        text = Text()
        text.append("▶ " if self._is_current else "  ", style="bold cyan")

        if self.verse.unavailable:
            text.append(self.verse.text, style="italic red")
            self.update(text)
            return

        text.append(f"{self.verse.verse}", style="bold yellow")
        text.append(". ", style="dim")

        if self._layout == "dual":
            text.append(self._chinese)
            text.append("\n     ")
            text.append(self._english, style="italic")
        else:
            text.append(self.display_text)
        self.update(text)


def page_layout(page: ChapterPage) -> str:
    """Return "dual", "zh" or "en" for a page."""
    if page.dual:
        return "dual"
    if "zh" in page.languages and "en" not in page.languages:
        return "zh"
    return "en"


class VerseView(Vertical):
    """Widget that displays one chapter page with a verse cursor."""

    DEFAULT_CSS = """
    VerseView {
        width: 100%;
        height: auto;
        background: $surface;
    }
    VerseView.font-small VerseRow {
        padding: 0 1;
        color: $text-muted;
    }
    VerseView.font-large VerseRow {
        margin-bottom: 1;
        text-style: bold;
    }
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._page: Optional[ChapterPage] = None
        self._rows: Dict[int, VerseRow] = {}
        self._current_verse = 1
        self.add_class("font-medium")

    @property
    def page(self) -> Optional[ChapterPage]:
        return self._page

    @property
    def current_verse(self) -> int:
        return self._current_verse

    @property
    def verse_numbers(self) -> List[int]:
        return sorted(self._rows)

    def update_page(self, page: ChapterPage) -> None:
        """Replace the displayed chapter."""
        self._page = page
        self._current_verse = 1
        self._rows.clear()
        self.remove_children()

        layout = page_layout(page)
        rows = []
        for verse, chinese, english in page.rows():
            row = VerseRow(verse, chinese, english, layout)
            self._rows[verse.verse] = row
            rows.append(row)
        self.mount_all(rows)

    def set_font_size(self, size: str) -> None:
        """Apply a font size tag (small, medium, large) as a CSS class."""
        if size not in FONT_SIZES:
            return
        self.remove_class(*(f"font-{s}" for s in FONT_SIZES))
        self.add_class(f"font-{size}")

    def row(self, verse: int) -> Optional[VerseRow]:
        return self._rows.get(verse)

    def set_highlight(self, verse: int, on: bool = True) -> bool:
        """Toggle the highlight of one verse. Returns False if it is not shown."""
        row = self._rows.get(verse)
        if row is None:
            return False
        row.set_class(on, "highlight")
        return True

    def set_current_verse(self, verse: int) -> None:
        """Move the cursor, clamped to the verses shown."""
        if not self._rows:
            return
        numbers = self.verse_numbers
        verse = max(numbers[0], min(verse, numbers[-1]))
        previous = self._rows.get(self._current_verse)
        if previous is not None:
            previous.set_current(False)
        self._current_verse = verse
        current = self._rows.get(verse)
        if current is not None:
            current.set_current(True)
            current.scroll_visible()

    def next_verse(self) -> bool:
        """Move to next verse. Returns True if moved, False if at end."""
        numbers = self.verse_numbers
        if self._current_verse in numbers:
            idx = numbers.index(self._current_verse)
            if idx < len(numbers) - 1:
                self.set_current_verse(numbers[idx + 1])
                return True
        return False

    def prev_verse(self) -> bool:
        """Move to previous verse. Returns True if moved, False if at start."""
        numbers = self.verse_numbers
        if self._current_verse in numbers:
            idx = numbers.index(self._current_verse)
            if idx > 0:
                self.set_current_verse(numbers[idx - 1])
                return True
        return False

    def get_verse_text(self, verse: int) -> str:
        row = self._rows.get(verse)
        return row.display_text if row is not None else ""
