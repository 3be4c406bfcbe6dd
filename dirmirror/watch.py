"""Stat-state scans and diffs used to detect filesystem changes by polling.

A scan maps every path under a root to a small stat tuple. Comparing two scans
yields the created, modified, and deleted paths between them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

StatState = tuple[int, int, int]


@dataclass(frozen=True)
class ChangeSet:
    """Paths that differ between two scans, each tuple sorted."""

    created: tuple[Path, ...] = ()
    modified: tuple[Path, ...] = ()
    deleted: tuple[Path, ...] = ()

    def is_empty(self) -> bool:
        return not (self.created or self.modified or self.deleted)

    def total_count(self) -> int:
        return len(self.created) + len(self.modified) + len(self.deleted)


@dataclass
class ScanResult:
    """Stat states for every reachable path plus directories that failed to list."""

    states: dict[Path, StatState] = field(default_factory=dict)
    errors: list[tuple[Path, OSError]] = field(default_factory=list)


def _stat_state(st: os.stat_result) -> StatState:
    return (st.st_mtime_ns, st.st_size, st.st_mode)


def scan_stat_states(root: Path, *, recursive: bool = True, follow_symlinks: bool = False) -> ScanResult:
    """Collect stat state for ``root`` and the entries below it.

    Directory symlinks are only descended when ``follow_symlinks`` is set, and
    then each physical directory is visited once. Unreadable directories are
    recorded in ``errors`` and skipped.
    """
    result = ScanResult()
    try:
        root_stat = root.stat()
    except OSError as exc:
        result.errors.append((root, exc))
        return result
    result.states[root] = _stat_state(root_stat)

    visited: set[tuple[int, int]] = {(root_stat.st_dev, root_stat.st_ino)}
    pending = [root]
    while pending:
        directory = pending.pop()
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    path = directory / entry.name
                    try:
                        st = entry.stat(follow_symlinks=follow_symlinks)
                        is_dir = entry.is_dir(follow_symlinks=follow_symlinks)
                    except OSError:
                        # Entry vanished mid-scan; the next scan reports it as deleted.
                        continue
                    result.states[path] = _stat_state(st)
                    if not recursive or not is_dir:
                        continue
                    file_id = (st.st_dev, st.st_ino)
                    if file_id in visited:
                        continue
                    visited.add(file_id)
                    pending.append(path)
        except OSError as exc:
            result.errors.append((directory, exc))
    return result


def diff_stat_states(previous: dict[Path, StatState], current: dict[Path, StatState]) -> ChangeSet:
    """Return paths added, changed, or removed between two scans."""
    created = sorted(path for path in current if path not in previous)
    deleted = sorted(path for path in previous if path not in current)
    modified = sorted(path for path, state in current.items() if path in previous and previous[path] != state)
    return ChangeSet(created=tuple(created), modified=tuple(modified), deleted=tuple(deleted))


__all__ = [
    "StatState",
    "ChangeSet",
    "ScanResult",
    "scan_stat_states",
    "diff_stat_states",
]
