"""Domain datatypes describing one mirrored filesystem entry."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass


class NodeType(enum.Enum):
    """Whether a node mirrors a file or a directory."""

    FILE = "file"
    DIRECTORY = "directory"


def _created_ns(st: os.stat_result) -> int | None:
    """Return birth time in nanoseconds when the platform records it."""
    birthtime = getattr(st, "st_birthtime", None)
    if birthtime is not None:
        return int(birthtime * 1_000_000_000)
    if os.name == "nt":
        # Windows reports creation time in st_ctime.
        return int(st.st_ctime_ns)
    return None


@dataclass
class ExtendedMetadata:
    """Timestamps and size observed for one entry.

    Every timestamp is optional because not every platform supplies all of
    them. ``size`` is the raw byte length for files; directories store their
    aggregate here once children are populated.
    """

    modified_ns: int | None = None
    accessed_ns: int | None = None
    created_ns: int | None = None
    size: int = 0
    is_symlink: bool = False

    @classmethod
    def from_stat(cls, st: os.stat_result, *, is_symlink: bool = False) -> ExtendedMetadata:
        return cls(
            modified_ns=int(st.st_mtime_ns),
            accessed_ns=int(st.st_atime_ns),
            created_ns=_created_ns(st),
            size=int(st.st_size),
            is_symlink=is_symlink,
        )


__all__ = [
    "NodeType",
    "ExtendedMetadata",
]
