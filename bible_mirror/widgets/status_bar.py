"""Status bar widget."""

from typing import Optional, Sequence

from rich.text import Text
from textual.widgets import Static

from bible_mirror.data.types import get_version_name


class StatusBar(Static):
    """Status bar showing the current location, sync backend and key hints."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        background: $primary-darken-2;
        color: $text-muted;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__("", **kwargs)
        self._mode = "normal"
        self._book = ""
        self._chapter = 1
        self._verse = 1
        self._version = ""
        self._languages: Sequence[str] = ()
        self._backend = ""
        self._bookmarked = False
        self._message: Optional[str] = None

    def set_mode(self, mode: str) -> None:
        """Set the current mode: normal, picker, projection."""
        self._mode = mode
        self._message = None
        self._update()

    def set_position(self, book: str, chapter: int, verse: int, bookmarked: bool = False) -> None:
        """Set the current Bible position."""
        self._book = book
        self._chapter = chapter
        self._verse = verse
        self._bookmarked = bookmarked
        self._update()

    def set_version(self, version: str, languages: Sequence[str]) -> None:
        self._version = version
        self._languages = tuple(languages)
        self._update()

    def set_backend(self, backend: str) -> None:
        """Set the name of the sync channel backend in use."""
        self._backend = backend
        self._update()

    def show_message(self, message: str) -> None:
        """Show a temporary message."""
        self._message = message
        self._update()

    def clear_message(self) -> None:
        self._message = None
        self._update()

    def _update(self) -> None:
        """Update the status bar display."""
        text = Text()

        if self._book:
            text.append(f"{self._book} {self._chapter}:{self._verse}", style="bold")
            if self._bookmarked:
                text.append(" *", style="bold yellow")

        if self._version:
            text.append(" | ")
            text.append(f"[{get_version_name(self._version)}]", style="cyan")
            text.append(f" {'+'.join(self._languages).upper()}", style="dim")

        if self._backend:
            text.append(" | ")
            text.append(f"sync:{self._backend}", style="green")

        if self._mode == "projection":
            text.append(" | ")
            text.append("PROJECTION", style="bold black on cyan")

        if self._message:
            text.append("  ")
            text.append(self._message, style="yellow")
        else:
            hints = self._get_hints()
            if hints:
                text.append("  ")
                for i, (key, desc) in enumerate(hints):
                    if i > 0:
                        text.append(" ", style="dim")
                    text.append(key, style="bold yellow")
                    text.append(f" {desc}", style="dim")

        self.update(text)

    def _get_hints(self) -> list[tuple[str, str]]:
        """Get keybinding hints for the current mode."""
        if self._mode == "normal":
            return [
                ("j/k", "verse"),
                ("]/[", "chapter"),
                ("g", "go to"),
                ("/", "search"),
                ("b", "mark"),
                ("p", "project"),
            ]
        elif self._mode == "picker":
            return [
                ("Enter", "open"),
                ("Esc", "close"),
            ]
        elif self._mode == "projection":
            return [
                ("]/[", "chapter"),
                ("Esc", "close"),
            ]
        else:
            return []
