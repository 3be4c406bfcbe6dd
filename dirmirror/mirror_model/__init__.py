"""Domain model for the in-memory directory mirror.

This package contains non-runtime primitives:
- node types and per-entry metadata
- filesystem scanning helpers that fail loudly
- the recursive node and the tree that owns it
- plain-text display of a node
"""

from __future__ import annotations

from .types import ExtendedMetadata, NodeType
from .fs import EntryStat, list_directory_entries, make_directories, read_file_size, stat_entry
from .display import format_size, render_node
from .node import Node
from .tree import Tree

__all__ = [
    "NodeType",
    "ExtendedMetadata",
    "EntryStat",
    "stat_entry",
    "read_file_size",
    "list_directory_entries",
    "make_directories",
    "render_node",
    "format_size",
    "Node",
    "Tree",
]
