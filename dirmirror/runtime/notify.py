"""Change-notification sources feeding the watcher's event channel.

A source delivers ``ChangeEvent`` and ``WatchError`` items through a queue.
``PollingNotificationSource`` produces them by re-scanning the watched
subtree once per coalescing window on a background thread.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue
from typing import Protocol

from ..errors import SetupError
from ..watch import ChangeSet, diff_stat_states, scan_stat_states

logger = logging.getLogger(__name__)

DEFAULT_COALESCE_SECONDS = 2.0


@dataclass(frozen=True)
class ChangeEvent:
    """All changes observed under ``root`` during one coalescing window."""

    root: Path
    changes: ChangeSet
    detected_at: float


@dataclass(frozen=True)
class WatchError:
    """A failure reported by the notification source for ``path``."""

    path: Path
    error: Exception


class ChannelClosed(Exception):
    """Raised by ``receive`` once the source has been closed and drained."""


class NotificationSource(Protocol):
    def subscribe(self, path: Path, recursive: bool = True) -> None: ...

    def receive(self, timeout: float | None = None) -> ChangeEvent | WatchError | None: ...

    def close(self) -> None: ...


_CLOSED = object()


class PollingNotificationSource:
    """Stat-polling source that batches changes per coalescing window."""

    def __init__(
        self,
        coalesce_seconds: float = DEFAULT_COALESCE_SECONDS,
        *,
        follow_symlinks: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if coalesce_seconds <= 0:
            raise ValueError("coalesce_seconds must be > 0")
        self.coalesce_seconds = float(coalesce_seconds)
        self.follow_symlinks = follow_symlinks
        self._clock = clock
        self._queue: Queue[object] = Queue()
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._closed = False

    def subscribe(self, path: Path, recursive: bool = True) -> None:
        """Start polling ``path``; only one subscription per source."""
        root = Path(path)
        with self._lock:
            if self._closed:
                raise SetupError("notification source is closed")
            if self._thread is not None:
                raise SetupError("notification source is already subscribed")
            if not root.is_dir():
                raise SetupError(f"cannot watch {root}: not a directory")

            baseline = scan_stat_states(root, recursive=recursive, follow_symlinks=self.follow_symlinks)
            self._thread = threading.Thread(
                target=self._poll_loop,
                args=(root, recursive, baseline.states),
                name="dirmirror-change-poller",
                daemon=True,
            )
            self._thread.start()
        logger.debug("Polling %s every %.2fs", root, self.coalesce_seconds)

    def _poll_loop(self, root: Path, recursive: bool, previous: dict) -> None:
        while not self._stop.wait(self.coalesce_seconds):
            scan = scan_stat_states(root, recursive=recursive, follow_symlinks=self.follow_symlinks)
            for failed_path, exc in scan.errors:
                self._queue.put(WatchError(path=failed_path, error=exc))
            if root not in scan.states:
                continue

            changes = diff_stat_states(previous, scan.states)
            previous = scan.states
            if changes.is_empty():
                continue
            self._queue.put(ChangeEvent(root=root, changes=changes, detected_at=self._clock()))

    def receive(self, timeout: float | None = None) -> ChangeEvent | WatchError | None:
        """Return the next item, or ``None`` when ``timeout`` elapses first.

        Items queued before ``close`` are still delivered; after them every
        call raises ``ChannelClosed``.
        """
        try:
            item = self._queue.get(timeout=timeout)
        except Empty:
            return None
        if item is _CLOSED:
            self._queue.put(_CLOSED)
            raise ChannelClosed()
        return item

    def close(self) -> None:
        """Stop polling and close the channel. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            thread = self._thread
        self._stop.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._queue.put(_CLOSED)


__all__ = [
    "DEFAULT_COALESCE_SECONDS",
    "ChangeEvent",
    "WatchError",
    "ChannelClosed",
    "NotificationSource",
    "PollingNotificationSource",
]
