"""Display surface state, independent of the widget that draws it."""

import logging
from typing import Callable, Optional, Tuple

from bible_mirror.backend.client import ScriptureClient
from bible_mirror.backend.pages import ChapterPage, load_page
from bible_mirror.sync.channel import Channel
from bible_mirror.sync.scroll import (
    SCROLL_TARGET_KEY,
    ScrollCoordinator,
    ScrollTarget,
    ScrollTargetSlot,
)
from bible_mirror.sync.snapshot import SelectionSnapshot, is_ready_request

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[SelectionSnapshot], None]
ScrollCallback = Callable[[ScrollTarget], None]

LoadKey = Tuple[str, int, str, Tuple[str, ...]]


class SurfaceModel:
    """A passive surface mirroring the controller's selection.

    The surface owns its channel port. It applies every received snapshot,
    loads the matching chapter page and reports scroll targets meant for the
    chapter it shows. Page loads carry a generation number; a load that
    finishes after the selection moved elsewhere is discarded.

    With `consumes_scroll` off the surface still renders the selection but
    leaves scroll targets for another surface.
    """

    def __init__(
        self,
        channel: Channel,
        client: ScriptureClient,
        scroll_slot: ScrollTargetSlot,
    ) -> None:
        self.channel = channel
        self.client = client
        self.scroll_slot = scroll_slot
        self.scroll = ScrollCoordinator(scroll_slot)
        self.snapshot = SelectionSnapshot()
        self.page: Optional[ChapterPage] = None
        self.consumes_scroll = True
        self._loaded_key: Optional[LoadKey] = None
        self._pending_key: Optional[LoadKey] = None
        self._generation = 0
        self._on_change: Optional[SnapshotCallback] = None
        self._on_scroll: Optional[ScrollCallback] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._unwatch: Optional[Callable[[], None]] = None

    @property
    def attached(self) -> bool:
        return self._unsubscribe is not None

    def attach(
        self,
        on_change: SnapshotCallback,
        on_scroll: Optional[ScrollCallback] = None,
    ) -> None:
        """Start listening and ask the controller for its current state."""
        if self.attached:
            return
        self._on_change = on_change
        self._on_scroll = on_scroll
        self._unsubscribe = self.channel.subscribe(self.handle_message)
        self._unwatch = self.scroll_slot.store.add_listener(self._on_slot_change)
        self.channel.request_ready()

    def detach(self) -> None:
        """Stop listening and close the channel port."""
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
        if self._unwatch:
            self._unwatch()
            self._unwatch = None
        self.channel.close()

    def handle_message(self, message: dict) -> bool:
        """Apply a snapshot message. Returns True if the snapshot changed."""
        if is_ready_request(message):
            return False
        updated = self.snapshot.merge(message)
        if updated == self.snapshot:
            return False
        if self._load_key(updated) != self._load_key(self.snapshot):
            # Any load in flight is for a selection that is no longer current
            self._generation += 1
            self._pending_key = None
        self.snapshot = updated
        if self._on_change:
            self._on_change(updated)
        return True

    def _load_key(self, snapshot: SelectionSnapshot) -> LoadKey:
        return (snapshot.book_id, snapshot.chapter, snapshot.version, snapshot.languages)

    def needs_reload(self) -> bool:
        """True if neither the page shown nor the load in flight matches the snapshot."""
        if not self.snapshot.is_complete:
            return False
        key = self._load_key(self.snapshot)
        return key != self._loaded_key and key != self._pending_key

    async def load(self) -> Optional[ChapterPage]:
        """Load the page for the current snapshot.

        Returns:
            The page, or None if the snapshot is incomplete or the selection
            changed while this load was in flight
        """
        snapshot = self.snapshot
        if not snapshot.is_complete:
            return None

        self._generation += 1
        generation = self._generation
        key = self._load_key(snapshot)
        self._pending_key = key
        page = await load_page(
            self.client,
            snapshot.book_id,
            snapshot.chapter,
            snapshot.version,
            snapshot.languages,
        )
        if generation != self._generation:
            logger.debug("Discarding stale load of %s", snapshot.reference)
            return None

        self._pending_key = None
        self.page = page
        self._loaded_key = key
        return page

    def rendered(self) -> Optional[ScrollTarget]:
        """Report that the current page is on screen; returns a target to scroll to."""
        if self.page is None or not self.consumes_scroll:
            return None
        return self.scroll.chapter_rendered(self.page.book_id, self.page.chapter)

    def _on_slot_change(self, keys: set) -> None:
        if SCROLL_TARGET_KEY not in keys or not self.consumes_scroll:
            return
        if self.scroll_slot.peek() is None:
            return
        self.scroll.target_set()
        # A target inside the chapter already on screen needs no new render
        if self.page is not None and self._loaded_key == self._load_key(self.snapshot):
            target = self.rendered()
            if target is not None and self._on_scroll:
                self._on_scroll(target)
