"""Display surface widget: renders whatever the controller publishes."""

from typing import Optional

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Static

from bible_mirror.backend.pages import ChapterPage
from bible_mirror.data.types import get_version_name
from bible_mirror.sync.scroll import ScrollTarget
from bible_mirror.sync.snapshot import SelectionSnapshot
from bible_mirror.sync.surface import SurfaceModel
from bible_mirror.widgets.verse_view import VerseView


class DisplaySurface(Widget):
    """Passive view that mirrors the controller's selection."""

    DEFAULT_CSS = """
    DisplaySurface {
        width: 1fr;
        height: 100%;
        background: $surface;
    }

    DisplaySurface > #surface-header {
        height: 1;
        background: $primary-darken-1;
        color: $text;
        padding: 0 1;
        text-style: bold;
    }

    DisplaySurface > #surface-scroll {
        height: 1fr;
    }
    """

    class PageShown(Message):
        """Message sent after a chapter page is rendered."""

        def __init__(self, page: ChapterPage) -> None:
            self.page = page
            super().__init__()

    def __init__(
        self,
        model: SurfaceModel,
        settle_delay: float = 0.3,
        highlight_duration: float = 2.0,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.model = model
        self.settle_delay = settle_delay
        self.highlight_duration = highlight_duration

    def compose(self) -> ComposeResult:
        yield Static("Waiting for the reader...", id="surface-header")
        with VerticalScroll(id="surface-scroll"):
            yield VerseView(id="surface-view")

    def on_mount(self) -> None:
        self.model.attach(self._on_snapshot, self._on_scroll_target)

    def on_unmount(self) -> None:
        self.model.detach()

    @property
    def view(self) -> VerseView:
        return self.query_one("#surface-view", VerseView)

    def poll(self) -> None:
        """Pick up snapshots written by another process."""
        self.model.channel.poll()

    def _on_snapshot(self, snapshot: SelectionSnapshot) -> None:
        self.view.set_font_size(snapshot.font_size)
        self._update_header(snapshot)
        if self.model.needs_reload():
            self.run_worker(self._load(), group="surface-load", exclusive=True)

    def _update_header(self, snapshot: SelectionSnapshot) -> None:
        header = self.query_one("#surface-header", Static)
        if not snapshot.is_complete:
            header.update("Waiting for the reader...")
            return
        version = get_version_name(snapshot.version)
        header.update(f"{snapshot.reference} | {version}")

    async def _load(self) -> None:
        page = await self.model.load()
        if page is None:
            return
        self._show(page)

    def _show(self, page: ChapterPage) -> None:
        self.view.update_page(page)
        self.query_one("#surface-scroll", VerticalScroll).scroll_home(animate=False)
        self.post_message(self.PageShown(page))

        target = self.model.rendered()
        if target is not None:
            self._on_scroll_target(target)

    def _on_scroll_target(self, target: ScrollTarget) -> None:
        # Rows mount asynchronously; give the layout time to settle first
        self.set_timer(self.settle_delay, lambda: self.scroll_to_verse(target.verse))

    def scroll_to_verse(self, verse: int) -> Optional[int]:
        """Scroll a verse into view and highlight it briefly."""
        row = self.view.row(verse)
        if row is None:
            return None
        scroll = self.query_one("#surface-scroll", VerticalScroll)
        scroll.scroll_to_widget(row, animate=False, top=True)
        self.view.set_current_verse(verse)
        self.view.set_highlight(verse)
        # Clear this row only; the page may have changed by then
        self.set_timer(self.highlight_duration, lambda: row.remove_class("highlight"))
        return verse
