"""Cross-view synchronization: channel, snapshots and scroll targets."""

from bible_mirror.sync.channel import (
    SNAPSHOT_SLOTS,
    BroadcastChannel,
    BroadcastHub,
    Channel,
    StorageChannel,
    open_channel,
)
from bible_mirror.sync.controller import SyncController
from bible_mirror.sync.scroll import (
    SCROLL_TARGET_KEY,
    ScrollCoordinator,
    ScrollState,
    ScrollTarget,
    ScrollTargetSlot,
)
from bible_mirror.sync.snapshot import SelectionSnapshot, is_ready_request, ready_message
from bible_mirror.sync.surface import SurfaceModel

__all__ = [
    "SNAPSHOT_SLOTS",
    "BroadcastChannel",
    "BroadcastHub",
    "Channel",
    "StorageChannel",
    "open_channel",
    "SyncController",
    "SCROLL_TARGET_KEY",
    "ScrollCoordinator",
    "ScrollState",
    "ScrollTarget",
    "ScrollTargetSlot",
    "SelectionSnapshot",
    "is_ready_request",
    "ready_message",
    "SurfaceModel",
]
