"""Main Textual applications for bible-mirror."""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Header

from bible_mirror.backend import ScriptureClient, create_client
from bible_mirror.backend.sources import GetBibleSource
from bible_mirror.config import Config, get_config
from bible_mirror.data import Bookmark, SearchHit, get_book
from bible_mirror.errors import ConfigurationError
from bible_mirror.session import ReaderSession
from bible_mirror.storage import KeyValueStore, Preferences
from bible_mirror.sync import (
    BroadcastHub,
    ScrollTargetSlot,
    SurfaceModel,
    SyncController,
    open_channel,
)
from bible_mirror.widgets import (
    ControlPanel,
    DisplaySurface,
    ReferenceEntry,
    ReferenceList,
    StatusBar,
    bookmark_entries,
    history_entries,
    search_entries,
)

logger = logging.getLogger(__name__)

CSS_FILE = Path(__file__).parent / "styles" / "app.tcss"


def build_client(config: Config) -> Tuple[ScriptureClient, Optional[str]]:
    """Create the scripture client, falling back to GetBible if misconfigured.

    Returns:
        Tuple of (client, configuration error message or None)
    """
    try:
        return create_client(config), None
    except ConfigurationError as exc:
        logger.error("%s", exc)
        source = GetBibleSource(config.getbible_url)
        return ScriptureClient(source, timeout=config.request_timeout), str(exc)


class ProjectionScreen(ModalScreen):
    """Full-screen display surface for projection."""

    DEFAULT_CSS = """
    ProjectionScreen {
        align: center middle;
    }

    ProjectionScreen > DisplaySurface {
        width: 100%;
        height: 100%;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close", show=False),
        Binding("p", "close", "Close", show=False),
    ]

    def __init__(self, model: SurfaceModel, settle_delay: float, highlight_duration: float) -> None:
        super().__init__()
        self._model = model
        self._settle_delay = settle_delay
        self._highlight_duration = highlight_duration

    def compose(self) -> ComposeResult:
        yield DisplaySurface(
            self._model,
            settle_delay=self._settle_delay,
            highlight_duration=self._highlight_duration,
            id="projection-surface",
        )

    def action_close(self) -> None:
        self.dismiss()


class ReaderApp(App):
    """Bilingual Bible reader; the controller all display surfaces follow."""

    TITLE = "Bible Mirror"
    CSS_PATH = CSS_FILE

    BINDINGS = [
        Binding("q", "quit", "Quit", show=False),
        Binding("j", "next_verse", "Next verse", show=False),
        Binding("k", "prev_verse", "Prev verse", show=False),
        Binding("right_square_bracket", "next_chapter", "Next chapter", show=False),
        Binding("left_square_bracket", "prev_chapter", "Prev chapter", show=False),
        Binding("g", "goto", "Go to", show=False),
        Binding("slash", "goto", "Search", show=False),
        Binding("b", "bookmark", "Bookmark", show=False),
        Binding("'", "show_bookmarks", "Bookmarks", show=False),
        Binding("H", "show_history", "History", show=False),
        Binding("p", "projection", "Projection", show=False),
        Binding("f", "cycle_font_size", "Font size", show=False),
        Binding("e", "toggle_language('en')", "English", show=False),
        Binding("z", "toggle_language('zh')", "Chinese", show=False),
    ]

    def __init__(self, config: Optional[Config] = None) -> None:
        super().__init__()
        self._config = config or get_config()

        # Persistent preferences; scroll targets live only for this session
        self._store = KeyValueStore(self._config.store_file)
        self._scroll_slot = ScrollTargetSlot(KeyValueStore.memory())
        self._prefs = Preferences(self._store)

        self._client, self._startup_error = build_client(self._config)
        self._books = self._client.get_books()

        self._hub = BroadcastHub()
        channel = self._open_channel()
        mirror = self._store if self._config.mirror_snapshot else None
        self._session = ReaderSession(
            self._prefs,
            SyncController(channel, mirror),
            self._scroll_slot,
            self._books,
        )

        self._status: Optional[StatusBar] = None
        self._panel: Optional[ControlPanel] = None
        self._surface: Optional[DisplaySurface] = None

    def _open_channel(self):
        return open_channel(
            self._config.channel_name,
            self._store,
            self._hub,
            self._config.sync_backend,
        )

    def new_surface_model(self) -> SurfaceModel:
        """Create the model of an additional in-process display surface."""
        return SurfaceModel(self._open_channel(), self._client, self._scroll_slot)

    @property
    def session(self) -> ReaderSession:
        return self._session

    def compose(self) -> ComposeResult:
        """Create the UI layout."""
        yield Header()
        with Horizontal(id="main"):
            yield ControlPanel(self._books, id="control-panel")
            yield DisplaySurface(
                self.new_surface_model(),
                settle_delay=self._config.scroll_settle_delay,
                highlight_duration=self._config.highlight_duration,
                id="reader-surface",
            )
        yield StatusBar(id="status-bar")

    def on_mount(self) -> None:
        """Restore the last position and publish the first snapshot."""
        if self._startup_error:
            self.notify(self._startup_error, title="Configuration", severity="error", timeout=10)

        # Widgets of the main screen stay reachable while a modal screen is on top
        self._status = self.query_one("#status-bar", StatusBar)
        self._panel = self.query_one("#control-panel", ControlPanel)
        self._surface = self.query_one("#reader-surface", DisplaySurface)

        self._status.set_backend(self._session.sync.channel.backend)
        self._session.start()
        self._refresh_controls()
        self.query_one("#reader-surface #surface-scroll", VerticalScroll).focus()

    async def on_unmount(self) -> None:
        self._session.close()
        await self._client.aclose()

    # Helpers

    def _refresh_controls(self) -> None:
        """Bring the control panel and status bar in line with the session."""
        snapshot = self._session.snapshot()
        self._panel.sync(snapshot)
        status = self._status
        status.set_version(snapshot.version, snapshot.languages)
        self._update_position()

    def _update_position(self) -> None:
        session = self._session
        verse = self._surface.view.current_verse
        bookmarked = self._prefs.is_bookmarked(session.book_id, session.chapter, verse)
        self._status.set_position(session.book.name, session.chapter, verse, bookmarked)

    def _open_list(self, title: str, entries: List[ReferenceEntry], empty: str) -> None:
        self._close_pickers()
        self._status.set_mode("picker")
        picker = ReferenceList(title, entries, empty=empty)
        self.mount(picker)

    def _close_pickers(self) -> None:
        for picker in self.query(ReferenceList):
            picker.remove()

    # Control panel events

    def on_control_panel_language_toggled(self, event: ControlPanel.LanguageToggled) -> None:
        if not self._session.toggle_language(event.language):
            self._status.show_message("At least one language stays selected")
        self._refresh_controls()

    def on_control_panel_version_changed(self, event: ControlPanel.VersionChanged) -> None:
        if event.version != self._session.version:
            self._session.set_version(event.version)
        self._refresh_controls()

    def on_control_panel_font_size_changed(self, event: ControlPanel.FontSizeChanged) -> None:
        if event.size != self._session.font_size:
            self._session.set_font_size(event.size)
        self._refresh_controls()

    def on_control_panel_book_chosen(self, event: ControlPanel.BookChosen) -> None:
        self._session.select_book(event.book.id)
        self._refresh_controls()

    def on_control_panel_jump_requested(self, event: ControlPanel.JumpRequested) -> None:
        """Go to a typed reference, or search the text when it is not one."""
        ref = self._session.jump(event.text)
        if ref is not None:
            self._panel.clear_jump()
            self._refresh_controls()
            return

        self._status.show_message(f"Searching for '{event.text.strip()}'...")
        self.run_worker(self._search(event.text), group="search", exclusive=True)

    async def _search(self, query: str) -> None:
        verses = await self._client.search_verses(query, self._session.version)
        hits = []
        for verse in verses:
            book = get_book(verse.book_id)
            hits.append(SearchHit(verse, book.name if book else verse.book_id))
        self._status.clear_message()
        self._open_list(f"Search: {query.strip()}", search_entries(hits), "No matches")

    # Surface events

    def on_display_surface_page_shown(self, event: DisplaySurface.PageShown) -> None:
        if self._status is None:
            return
        if event.page.unavailable:
            self._status.show_message("Chapter unavailable")
        self._update_position()

    # Picker events

    def on_reference_list_reference_chosen(self, event: ReferenceList.ReferenceChosen) -> None:
        self._close_pickers()
        self._status.set_mode("normal")
        self._session.goto(event.ref)
        self._refresh_controls()

    def on_reference_list_cancelled(self, event: ReferenceList.Cancelled) -> None:
        self._close_pickers()
        self._status.set_mode("normal")

    # Actions

    def action_next_chapter(self) -> None:
        if not self._session.next_chapter():
            self._status.show_message("End of the Bible")
        self._refresh_controls()

    def action_prev_chapter(self) -> None:
        if not self._session.prev_chapter():
            self._status.show_message("Start of the Bible")
        self._refresh_controls()

    def action_next_verse(self) -> None:
        self._surface.view.next_verse()
        self._update_position()

    def action_prev_verse(self) -> None:
        self._surface.view.prev_verse()
        self._update_position()

    def action_goto(self) -> None:
        self._panel.focus_jump()

    def action_bookmark(self) -> None:
        """Toggle a bookmark on the verse under the cursor."""
        session = self._session
        view = self._surface.view
        verse = view.current_verse
        bookmark = Bookmark(
            book_id=session.book_id,
            chapter=session.chapter,
            verse=verse,
            text=view.get_verse_text(verse),
        )
        ref = f"{session.book.name} {session.chapter}:{verse}"
        if self._prefs.toggle_bookmark(bookmark):
            self._status.show_message(f"Bookmark: {ref}")
        else:
            self._status.show_message(f"Bookmark removed: {ref}")
        self._update_position()

    def action_show_bookmarks(self) -> None:
        self._open_list("Bookmarks", bookmark_entries(self._prefs.get_bookmarks()), "No bookmarks")

    def action_show_history(self) -> None:
        self._open_list(
            "Reading history",
            history_entries(self._prefs.get_reading_history()),
            "No reading history",
        )

    def action_cycle_font_size(self) -> None:
        size = self._session.cycle_font_size()
        self._status.show_message(f"Font size: {size}")
        self._refresh_controls()

    def action_toggle_language(self, language: str) -> None:
        if not self._session.toggle_language(language):
            self._status.show_message("At least one language stays selected")
        self._refresh_controls()

    def action_projection(self) -> None:
        """Open a full-screen display surface following this reader.

        While it is open the projection screen takes over scroll targets from
        the embedded pane.
        """
        status = self._status
        embedded = self._surface.model
        status.set_mode("projection")
        embedded.consumes_scroll = False
        screen = ProjectionScreen(
            self.new_surface_model(),
            self._config.scroll_settle_delay,
            self._config.highlight_duration,
        )

        def closed(_) -> None:
            embedded.consumes_scroll = True
            status.set_mode("normal")

        self.push_screen(screen, closed)


class DisplayApp(App):
    """Standalone display surface following a reader in another process."""

    TITLE = "Bible Mirror Display"
    CSS_PATH = CSS_FILE

    BINDINGS = [
        Binding("q", "quit", "Quit", show=False),
    ]

    def __init__(self, config: Optional[Config] = None) -> None:
        super().__init__()
        self._config = config or get_config()
        self._store = KeyValueStore(self._config.store_file)
        self._client, self._startup_error = build_client(self._config)
        # No hub across processes: always the storage channel
        channel = open_channel(self._config.channel_name, self._store, backend="storage")
        self._model = SurfaceModel(
            channel,
            self._client,
            ScrollTargetSlot(KeyValueStore.memory()),
        )

    def compose(self) -> ComposeResult:
        yield Header()
        yield DisplaySurface(
            self._model,
            settle_delay=self._config.scroll_settle_delay,
            highlight_duration=self._config.highlight_duration,
            id="display-surface",
        )

    def on_mount(self) -> None:
        if self._startup_error:
            self.notify(self._startup_error, title="Configuration", severity="error", timeout=10)
        self.set_interval(self._config.poll_interval, self._poll)

    def _poll(self) -> None:
        self.query_one("#display-surface", DisplaySurface).poll()

    async def on_unmount(self) -> None:
        await self._client.aclose()
