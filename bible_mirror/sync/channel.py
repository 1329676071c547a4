"""Named channel connecting the controller with its display surfaces.

Two interchangeable backends implement the same Channel interface:

- BroadcastChannel delivers messages to every other port opened on the same
  BroadcastHub under the same name. Surfaces in the controller's process
  use it.
- StorageChannel writes each snapshot field into its own key of a
  KeyValueStore and rebuilds the snapshot on the receiving side whenever
  those keys change. It is the fallback when no hub is available, such as
  in a separate display process sharing only the storage file.
"""

import copy
import json
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from bible_mirror.data.types import optional_int
from bible_mirror.errors import ChannelUnavailable
from bible_mirror.storage import KeyValueStore
from bible_mirror.sync.snapshot import is_ready_request, ready_message

logger = logging.getLogger(__name__)

MessageHandler = Callable[[dict], None]

# Wire field -> storage key used by the storage backend
SNAPSHOT_SLOTS: Dict[str, str] = {
    "bookId": "bible_popup_bookId",
    "chapter": "bible_popup_chapter",
    "bookName": "bible_popup_bookName",
    "version": "bible_popup_version",
    "languages": "bible_popup_languages",
    "fontSize": "bible_popup_fontSize",
}


def write_snapshot_slots(store: KeyValueStore, message: dict) -> None:
    """Store each snapshot field under its own key, in one store update."""
    values = {}
    for field, key in SNAPSHOT_SLOTS.items():
        if field not in message or message[field] is None:
            continue
        value = message[field]
        if field == "languages":
            values[key] = json.dumps(list(value))
        else:
            values[key] = str(value)
    store.update(values)


def read_snapshot_slots(store: KeyValueStore) -> Optional[dict]:
    """Rebuild a snapshot message from the stored slots (None if there are none)."""
    message: dict = {}
    for field, key in SNAPSHOT_SLOTS.items():
        raw = store.get(key)
        if raw is None:
            continue
        if field == "chapter":
            chapter = optional_int(raw)
            if chapter is not None:
                message[field] = chapter
        elif field == "languages":
            try:
                message[field] = json.loads(raw)
            except ValueError:
                logger.error("Failed to parse stored languages: %r", raw)
                message[field] = ["en"]
        else:
            message[field] = raw
    return message or None


class Channel(ABC):
    """A named message bus shared by a controller and its display surfaces."""

    backend = ""

    def __init__(self, name: str) -> None:
        self.name = name
        self._handlers: List[MessageHandler] = []
        self._closed = False

    def __enter__(self) -> "Channel":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @abstractmethod
    def publish(self, message: dict) -> None:
        """Send a message to every other listener on the channel."""

    def subscribe(self, handler: MessageHandler) -> Callable[[], None]:
        """Register a handler for all messages. Returns an unsubscribe function."""
        if self._closed:
            raise ChannelUnavailable(f"Channel {self.name!r} is closed")
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def request_ready(self) -> None:
        """Ask the controller to republish its current snapshot."""
        self.publish(ready_message())

    def poll(self) -> bool:
        """Pick up changes made outside this process. Returns True if any."""
        return False

    def close(self) -> None:
        self._handlers.clear()
        self._closed = True

    def _deliver(self, message: dict) -> None:
        for handler in list(self._handlers):
            handler(copy.deepcopy(message))


class BroadcastHub:
    """In-process registry of broadcast ports, grouped by channel name."""

    def __init__(self) -> None:
        self._ports: Dict[str, List["BroadcastChannel"]] = {}

    def attach(self, port: "BroadcastChannel") -> None:
        self._ports.setdefault(port.name, []).append(port)

    def detach(self, port: "BroadcastChannel") -> None:
        ports = self._ports.get(port.name, [])
        if port in ports:
            ports.remove(port)
        if not ports:
            self._ports.pop(port.name, None)

    def peers(self, port: "BroadcastChannel") -> List["BroadcastChannel"]:
        """All other ports open on the same name."""
        return [p for p in self._ports.get(port.name, []) if p is not port]

    def port_count(self, name: str) -> int:
        return len(self._ports.get(name, []))


class BroadcastChannel(Channel):
    """Channel port on a BroadcastHub. Messages never echo back to the sender."""

    backend = "broadcast"

    def __init__(self, name: str, hub: BroadcastHub) -> None:
        super().__init__(name)
        self._hub = hub
        hub.attach(self)

    def publish(self, message: dict) -> None:
        if self._closed:
            raise ChannelUnavailable(f"Channel {self.name!r} is closed")
        for peer in self._hub.peers(self):
            peer._deliver(message)

    def close(self) -> None:
        if not self._closed:
            self._hub.detach(self)
        super().close()


class StorageChannel(Channel):
    """Channel emulated with per-field storage slots and change notifications.

    There is no ready handshake: request_ready() reads the slots once
    instead. Notifications can coalesce, and a receiver that is not running
    when a snapshot is written only sees it through request_ready().
    """

    backend = "storage"

    def __init__(self, name: str, store: KeyValueStore) -> None:
        super().__init__(name)
        self._store = store
        self._remove_listener = store.add_listener(self._on_store_change)

    def publish(self, message: dict) -> None:
        if self._closed:
            raise ChannelUnavailable(f"Channel {self.name!r} is closed")
        if is_ready_request(message):
            logger.debug("Storage channel %r has no ready handshake", self.name)
            return
        write_snapshot_slots(self._store, message)

    def request_ready(self) -> None:
        message = read_snapshot_slots(self._store)
        if message:
            self._deliver(message)

    def poll(self) -> bool:
        return self._store.refresh()

    def close(self) -> None:
        self._remove_listener()
        super().close()

    def _on_store_change(self, keys: set) -> None:
        if not keys & set(SNAPSHOT_SLOTS.values()):
            return
        message = read_snapshot_slots(self._store)
        if message:
            self._deliver(message)


def open_channel(
    name: str,
    store: KeyValueStore,
    hub: Optional[BroadcastHub] = None,
    backend: str = "auto",
) -> Channel:
    """Open a channel port, preferring broadcast when a hub is available.

    Args:
        name: Channel name shared by all participants
        store: Store used by the storage fallback
        hub: Broadcast hub of this process, if any
        backend: "auto", "broadcast" or "storage"
    """
    if backend != "storage":
        try:
            if hub is None:
                raise ChannelUnavailable("no broadcast hub in this process")
            return BroadcastChannel(name, hub)
        except ChannelUnavailable as exc:
            logger.debug("Broadcast unavailable (%s); using storage channel", exc)
    return StorageChannel(name, store)
