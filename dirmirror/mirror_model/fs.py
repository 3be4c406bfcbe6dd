"""Filesystem reads and writes backing the mirror model.

Every helper converts ``OSError`` into ``FilesystemError`` so callers deal
with a single failure type. Unlike a best-effort listing, nothing here
swallows errors: a scan that cannot see an entry must fail loudly.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path

from ..errors import FilesystemError
from .types import ExtendedMetadata, NodeType


@dataclass(frozen=True)
class EntryStat:
    """Type and metadata observed for one path."""

    path: Path
    node_type: NodeType
    metadata: ExtendedMetadata
    file_id: tuple[int, int]


def _stat(path: Path, *, follow_symlinks: bool) -> os.stat_result:
    try:
        return os.stat(path, follow_symlinks=follow_symlinks)
    except OSError as exc:
        raise FilesystemError.from_os_error(path, exc) from exc


def stat_entry(path: Path, *, follow_symlinks: bool) -> EntryStat:
    """Read type and metadata for ``path``.

    When ``follow_symlinks`` is false a symlink is reported as a file carrying
    its own ``lstat`` metadata, so links are never descended into.
    """
    st = _stat(path, follow_symlinks=False)
    is_symlink = stat.S_ISLNK(st.st_mode)
    if is_symlink and follow_symlinks:
        st = _stat(path, follow_symlinks=True)

    node_type = NodeType.DIRECTORY if stat.S_ISDIR(st.st_mode) else NodeType.FILE
    return EntryStat(
        path=path,
        node_type=node_type,
        metadata=ExtendedMetadata.from_stat(st, is_symlink=is_symlink),
        file_id=(int(st.st_dev), int(st.st_ino)),
    )


def read_file_size(path: Path, *, follow_symlinks: bool) -> int:
    """Return the current on-disk byte length of ``path``."""
    return int(_stat(path, follow_symlinks=follow_symlinks).st_size)


def list_directory_entries(directory: Path) -> list[Path]:
    """List direct entries of ``directory`` in filesystem enumeration order."""
    try:
        with os.scandir(directory) as entries:
            return [directory / entry.name for entry in entries]
    except OSError as exc:
        raise FilesystemError.from_os_error(directory, exc) from exc


def make_directories(path: Path) -> None:
    """Create ``path`` and any missing parents; existing directories are fine."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FilesystemError.from_os_error(path, exc) from exc


__all__ = [
    "EntryStat",
    "stat_entry",
    "read_file_size",
    "list_directory_entries",
    "make_directories",
]
