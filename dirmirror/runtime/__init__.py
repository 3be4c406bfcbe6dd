"""Runtime pieces that keep a mirror in sync with disk.

Holds the notification sources, the refresh loop, and persisted settings.
"""

from __future__ import annotations

from .notify import (
    DEFAULT_COALESCE_SECONDS,
    ChangeEvent,
    ChannelClosed,
    NotificationSource,
    PollingNotificationSource,
    WatchError,
)
from .watcher import FsWatcher, WatcherState

__all__ = [
    "DEFAULT_COALESCE_SECONDS",
    "ChangeEvent",
    "ChannelClosed",
    "NotificationSource",
    "PollingNotificationSource",
    "WatchError",
    "FsWatcher",
    "WatcherState",
]
