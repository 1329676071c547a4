"""Controller side of the synchronization channel."""

import logging
from typing import Optional

from bible_mirror.storage import KeyValueStore
from bible_mirror.sync.channel import Channel, write_snapshot_slots
from bible_mirror.sync.snapshot import SelectionSnapshot, is_ready_request

logger = logging.getLogger(__name__)


class SyncController:
    """Publishes snapshots and answers ready requests from new surfaces.

    The last published snapshot is kept so a surface that attaches after a
    publish can still catch up.
    """

    def __init__(self, channel: Channel, mirror: Optional[KeyValueStore] = None) -> None:
        """Initialize the controller.

        Args:
            channel: Channel port owned by this controller
            mirror: Store that also receives every snapshot in the storage
                slot format, for display processes on the storage backend
        """
        self.channel = channel
        self._mirror = mirror
        self._last: Optional[SelectionSnapshot] = None
        self._unsubscribe = channel.subscribe(self._on_message)

    @property
    def last_published(self) -> Optional[SelectionSnapshot]:
        return self._last

    def publish(self, snapshot: SelectionSnapshot) -> None:
        self._last = snapshot
        message = snapshot.to_message()
        self.channel.publish(message)
        if self._mirror is not None and self.channel.backend != "storage":
            write_snapshot_slots(self._mirror, message)

    def close(self) -> None:
        self._unsubscribe()
        self.channel.close()

    def _on_message(self, message: dict) -> None:
        if not is_ready_request(message):
            return
        if self._last is None:
            logger.debug("Ready request before first publish; nothing to send")
            return
        logger.debug("Surface attached; republishing %s", self._last.reference)
        self.channel.publish(self._last.to_message())
