"""Public package surface for dirmirror.

Exports the mirror model, the watcher, the error types, and ``main`` for
programmatic CLI invocation.
"""

from __future__ import annotations

from .errors import ConsistencyError, FilesystemError, MirrorError, SetupError
from .mirror_model import ExtendedMetadata, Node, NodeType, Tree, render_node
from .runtime import FsWatcher


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "Node",
    "NodeType",
    "ExtendedMetadata",
    "Tree",
    "render_node",
    "FsWatcher",
    "MirrorError",
    "FilesystemError",
    "SetupError",
    "ConsistencyError",
    "main",
]
