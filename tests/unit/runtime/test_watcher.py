"""Tests for the event-driven refresh loop."""

from __future__ import annotations

import tempfile
import threading
import time
import unittest
from pathlib import Path
from queue import Empty, Queue

from dirmirror.errors import FilesystemError, SetupError
from dirmirror.mirror_model import Tree
from dirmirror.runtime import ChangeEvent, ChannelClosed, FsWatcher, WatchError, WatcherState
from dirmirror.watch import ChangeSet

_CLOSE = object()


class FakeSource:
    """In-memory notification source fed directly by tests."""

    def __init__(self) -> None:
        self._items: Queue[object] = Queue()
        self.subscriptions: list[tuple[Path, bool]] = []
        self.closed = False

    def push(self, item: object) -> None:
        self._items.put(item)

    def subscribe(self, path: Path, recursive: bool = True) -> None:
        self.subscriptions.append((path, recursive))

    def receive(self, timeout: float | None = None):
        try:
            item = self._items.get(timeout=timeout)
        except Empty:
            return None
        if item is _CLOSE:
            self._items.put(_CLOSE)
            raise ChannelClosed()
        return item

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._items.put(_CLOSE)


class RecordingLock:
    def __init__(self) -> None:
        self.entered = 0

    def __enter__(self) -> RecordingLock:
        self.entered += 1
        return self

    def __exit__(self, *exc_info) -> None:
        return None


def _event(root: Path) -> ChangeEvent:
    return ChangeEvent(root=root, changes=ChangeSet(modified=(root,)), detected_at=0.0)


class FsWatcherLoopTests(unittest.TestCase):
    def test_each_change_event_refreshes_tree_until_channel_closes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a.txt").write_bytes(b"a" * 10)
            tree = Tree(root)
            source = FakeSource()
            watcher = FsWatcher(source, poll_timeout=0.05)

            (root / "b.txt").write_bytes(b"b" * 5)
            source.push(_event(root))
            source.push(WatchError(path=root, error=OSError("transient")))
            source.push(_event(root))
            source.close()

            with self.assertLogs("dirmirror.runtime.watcher", level="WARNING") as logs:
                refreshes = watcher.watch(root, tree)

            self.assertEqual(refreshes, 2)
            self.assertEqual(watcher.refresh_count, 2)
            self.assertEqual(tree.total_size, 15)
            self.assertEqual(source.subscriptions, [(root, True)])
            self.assertIs(watcher.state, WatcherState.STOPPED)
            self.assertTrue(any("transient" in line for line in logs.output))

    def test_refresh_runs_under_supplied_lock_and_calls_hook(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            tree = Tree(root)
            source = FakeSource()
            seen: list[int] = []
            watcher = FsWatcher(source, poll_timeout=0.05, on_refresh=lambda t: seen.append(t.total_size))
            lock = RecordingLock()

            (root / "c.txt").write_bytes(b"c" * 3)
            source.push(_event(root))
            source.close()
            watcher.watch(root, tree, lock=lock)  # type: ignore[arg-type]

            self.assertEqual(lock.entered, 1)
            self.assertEqual(seen, [3])

    def test_preset_stop_event_exits_without_refreshing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            tree = Tree(root)
            source = FakeSource()
            source.push(_event(root))
            stop_event = threading.Event()
            stop_event.set()

            refreshes = FsWatcher(source, poll_timeout=0.05).watch(root, tree, stop_event=stop_event)

            self.assertEqual(refreshes, 0)
            self.assertTrue(source.closed)

    def test_refresh_failure_closes_source_and_propagates(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp) / "root"
            root.mkdir()
            tree = Tree(root)
            source = FakeSource()
            watcher = FsWatcher(source, poll_timeout=0.05)
            root.rmdir()
            source.push(_event(root))

            with self.assertRaises(FilesystemError):
                watcher.watch(root, tree)

            self.assertTrue(source.closed)
            self.assertIs(watcher.state, WatcherState.STOPPED)

    def test_watcher_cannot_be_reused_after_stopping(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            tree = Tree(root)
            source = FakeSource()
            watcher = FsWatcher(source, poll_timeout=0.05)
            source.close()
            watcher.watch(root, tree)

            with self.assertRaises(SetupError):
                watcher.watch(root, tree)

    def test_invalid_coalesce_window_is_a_setup_error(self) -> None:
        with self.assertRaises(SetupError):
            FsWatcher(coalesce_seconds=0)

    def test_stop_ends_background_watch_thread(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            tree = Tree(root)
            source = FakeSource()
            watcher = FsWatcher(source, poll_timeout=0.05)

            thread = watcher.start(root, tree)
            deadline = time.monotonic() + 1.0
            while watcher.state is not WatcherState.WATCHING and time.monotonic() < deadline:
                time.sleep(0.01)
            watcher.stop()
            thread.join(timeout=1.0)

            self.assertFalse(thread.is_alive())
            self.assertIs(watcher.state, WatcherState.STOPPED)
            self.assertIsNone(watcher.error)


class FsWatcherPollingIntegrationTests(unittest.TestCase):
    def test_stop_before_start_ends_thread_without_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            tree = Tree(root)
            watcher = FsWatcher(coalesce_seconds=0.05, poll_timeout=0.05)

            watcher.stop()
            thread = watcher.start(root, tree)
            thread.join(timeout=2.0)

            self.assertFalse(thread.is_alive())
            self.assertIs(watcher.state, WatcherState.STOPPED)
            self.assertIsNone(watcher.error)
            self.assertEqual(watcher.refresh_count, 0)

    def test_disk_change_reaches_tree_through_polling_source(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "sub").mkdir()
            tree = Tree(root)
            lock = threading.Lock()
            watcher = FsWatcher(coalesce_seconds=0.05, poll_timeout=0.05)

            thread = watcher.start(root, tree, lock=lock)
            try:
                deadline = time.monotonic() + 1.0
                while watcher.state is not WatcherState.WATCHING and time.monotonic() < deadline:
                    time.sleep(0.01)
                (root / "sub" / "new.bin").write_bytes(b"n" * 64)

                deadline = time.monotonic() + 3.0
                size = 0
                while time.monotonic() < deadline:
                    with lock:
                        size = tree.total_size
                    if size == 64:
                        break
                    time.sleep(0.02)
            finally:
                watcher.stop()
                thread.join(timeout=2.0)

            self.assertEqual(size, 64)
            self.assertGreaterEqual(watcher.refresh_count, 1)
            self.assertFalse(thread.is_alive())


if __name__ == "__main__":
    unittest.main()
