"""Typed errors raised by the mirror model and watcher runtime."""

from __future__ import annotations

from pathlib import Path


class MirrorError(Exception):
    """Base class for all dirmirror failures."""


class FilesystemError(MirrorError):
    """A filesystem read or write failed while scanning or mutating the mirror.

    ``path`` names the entry that failed. The originating ``OSError`` is
    chained as ``__cause__`` and its ``errno`` is copied for convenience.
    """

    def __init__(self, path: Path, message: str, errno: int | None = None) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path
        self.errno = errno

    @classmethod
    def from_os_error(cls, path: Path, exc: OSError) -> FilesystemError:
        reason = exc.strerror or exc.__class__.__name__
        return cls(path, reason, exc.errno)


class SetupError(MirrorError):
    """The change-notification subscription could not be established."""


class ConsistencyError(MirrorError, LookupError):
    """The mirror disagrees with what a just-completed mutation should have produced."""


__all__ = [
    "MirrorError",
    "FilesystemError",
    "SetupError",
    "ConsistencyError",
]
