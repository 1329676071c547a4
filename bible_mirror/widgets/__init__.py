"""Textual widgets for bible-mirror."""

from bible_mirror.widgets.verse_view import VerseRow, VerseView
from bible_mirror.widgets.display import DisplaySurface
from bible_mirror.widgets.control_panel import ControlPanel
from bible_mirror.widgets.status_bar import StatusBar
from bible_mirror.widgets.reference_list import (
    ReferenceEntry,
    ReferenceList,
    bookmark_entries,
    history_entries,
    search_entries,
)

__all__ = [
    "VerseRow",
    "VerseView",
    "DisplaySurface",
    "ControlPanel",
    "StatusBar",
    "ReferenceEntry",
    "ReferenceList",
    "bookmark_entries",
    "history_entries",
    "search_entries",
]
