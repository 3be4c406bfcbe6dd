"""Event loop that refreshes a tree whenever its subtree changes on disk.

Refreshes run strictly one after another on the watching thread. The tree has
no locking of its own; pass the same ``lock`` used by other threads touching
the tree so refreshes never overlap with their queries.
"""

from __future__ import annotations

import contextlib
import enum
import logging
import threading
from collections.abc import Callable
from pathlib import Path

from ..errors import MirrorError, SetupError
from ..mirror_model import Tree
from .notify import (
    DEFAULT_COALESCE_SECONDS,
    ChangeEvent,
    ChannelClosed,
    NotificationSource,
    PollingNotificationSource,
    WatchError,
)

logger = logging.getLogger(__name__)

DEFAULT_POLL_TIMEOUT_SECONDS = 0.25


class WatcherState(enum.Enum):
    IDLE = "idle"
    WATCHING = "watching"
    STOPPED = "stopped"


class FsWatcher:
    """Turns change notifications for one path into full tree refreshes."""

    def __init__(
        self,
        source: NotificationSource | None = None,
        *,
        coalesce_seconds: float = DEFAULT_COALESCE_SECONDS,
        follow_symlinks: bool = False,
        poll_timeout: float = DEFAULT_POLL_TIMEOUT_SECONDS,
        on_refresh: Callable[[Tree], None] | None = None,
    ) -> None:
        if source is None:
            try:
                source = PollingNotificationSource(coalesce_seconds, follow_symlinks=follow_symlinks)
            except ValueError as exc:
                raise SetupError(f"cannot create notification source: {exc}") from exc
        self._source = source
        self._stop_requested = threading.Event()
        self.poll_timeout = poll_timeout
        self.on_refresh = on_refresh
        self.state = WatcherState.IDLE
        self.refresh_count = 0
        self.error: MirrorError | None = None

    def _should_stop(self, stop_event: threading.Event | None) -> bool:
        if self._stop_requested.is_set():
            return True
        return stop_event is not None and stop_event.is_set()

    def _refresh(self, tree: Tree, lock: threading.Lock | None) -> None:
        guard = lock if lock is not None else contextlib.nullcontext()
        with guard:
            tree.refresh()
            self.refresh_count += 1
            if self.on_refresh is not None:
                self.on_refresh(tree)

    def _stop_before_watching(self, watch_path: Path) -> int:
        self._source.close()
        self.state = WatcherState.STOPPED
        logger.info("Stop requested before watching %s", watch_path)
        return 0

    def watch(
        self,
        path: Path | str,
        tree: Tree,
        *,
        lock: threading.Lock | None = None,
        stop_event: threading.Event | None = None,
    ) -> int:
        """Watch ``path`` recursively and refresh ``tree`` on every change event.

        Blocks until ``stop()`` is called, ``stop_event`` is set, or the
        notification channel closes. Notification errors are logged and
        skipped. A failed refresh closes the subscription and propagates.
        Returns the number of refreshes performed by this call.
        """
        watch_path = Path(path)
        if self.state is not WatcherState.IDLE:
            raise SetupError(f"watcher is {self.state.value}; create a new one to watch again")
        if self._should_stop(stop_event):
            return self._stop_before_watching(watch_path)
        try:
            self._source.subscribe(watch_path, recursive=True)
        except SetupError:
            # stop() may have closed the source between the check above and subscribe.
            if self._should_stop(stop_event):
                return self._stop_before_watching(watch_path)
            raise
        except OSError as exc:
            raise SetupError(f"cannot watch {watch_path}: {exc}") from exc

        self.state = WatcherState.WATCHING
        logger.info("Started watching %s", watch_path)
        refreshes = 0
        try:
            while not self._should_stop(stop_event):
                try:
                    item = self._source.receive(timeout=self.poll_timeout)
                except ChannelClosed:
                    logger.debug("Watch channel closed for %s", watch_path)
                    break
                if item is None:
                    continue
                if isinstance(item, WatchError):
                    logger.warning("Watch error for %s: %s", item.path, item.error)
                    continue
                if isinstance(item, ChangeEvent):
                    logger.debug(
                        "Filesystem event under %s: %d created, %d modified, %d deleted",
                        item.root,
                        len(item.changes.created),
                        len(item.changes.modified),
                        len(item.changes.deleted),
                    )
                self._refresh(tree, lock)
                refreshes += 1
        except MirrorError as exc:
            logger.error("Refresh of %s failed, stopping watcher: %s", tree.root_path, exc)
            raise
        finally:
            self._source.close()
            self.state = WatcherState.STOPPED
            logger.info("Stopped watching %s", watch_path)
        return refreshes

    def stop(self) -> None:
        """Ask the loop to exit; it notices within one poll timeout."""
        self._stop_requested.set()
        self._source.close()

    def start(self, path: Path | str, tree: Tree, *, lock: threading.Lock | None = None) -> threading.Thread:
        """Run ``watch`` on a dedicated daemon thread and return it.

        A refresh failure ends the thread and is kept in ``error``.
        """

        def run() -> None:
            try:
                self.watch(path, tree, lock=lock)
            except MirrorError as exc:
                self.error = exc

        thread = threading.Thread(target=run, name="dirmirror-watcher", daemon=True)
        thread.start()
        return thread


__all__ = [
    "DEFAULT_POLL_TIMEOUT_SECONDS",
    "WatcherState",
    "FsWatcher",
]
