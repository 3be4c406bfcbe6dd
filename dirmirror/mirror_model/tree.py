"""Tree owning the mirrored root node plus traversal, search, and refresh.

``Tree`` does no locking of its own. Code that shares one tree between a
watcher thread and other threads must guard every call with one lock.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path

from ..errors import ConsistencyError
from .fs import make_directories
from .node import Node

logger = logging.getLogger(__name__)


class Tree:
    """In-memory mirror of the directory subtree at ``root_path``."""

    def __init__(self, root_path: Path | str, *, follow_symlinks: bool = False) -> None:
        self.follow_symlinks = follow_symlinks
        root = Path(os.path.abspath(root_path))
        self._root = Node.from_path(root, follow_symlinks=follow_symlinks)
        logger.debug("Built mirror of %s (%d bytes)", root, self._root.size)

    @property
    def root(self) -> Node:
        return self._root

    @property
    def root_path(self) -> Path:
        return self._root.path

    @property
    def total_size(self) -> int:
        return self._root.size

    def iter(self) -> Iterator[Node]:
        """Yield every node in pre-order, depth first.

        Each call starts a fresh traversal of the current state. Siblings are
        visited in the order the last scan produced them.
        """
        stack = [self._root]
        while stack:
            current = stack.pop()
            yield current
            if current.children:
                stack.extend(reversed(current.children))

    def __iter__(self) -> Iterator[Node]:
        return self.iter()

    def __len__(self) -> int:
        return sum(1 for _node in self.iter())

    def search(self, predicate: Callable[[Node], bool]) -> list[Node]:
        """Return nodes matching ``predicate`` in traversal order."""
        return [node for node in self.iter() if predicate(node)]

    def get_node(self, path: Path | str) -> Node | None:
        """Return the node whose path equals ``path``, or ``None``.

        Relative paths are taken relative to the root. This walks the tree, so
        callers doing repeated lookups should cache results until the next
        refresh.
        """
        target = Path(path)
        if not target.is_absolute():
            target = self.root_path / target
        target = Path(os.path.normpath(target))
        for node in self.iter():
            if node.path == target:
                return node
        return None

    def refresh(self) -> None:
        """Re-scan the whole subtree from disk and recompute sizes.

        The replacement subtree is built completely before the root takes it
        over, so a failed refresh leaves the previous mirror in place.
        """
        fresh = Node.from_path(self.root_path, follow_symlinks=self.follow_symlinks)
        if fresh.node_type is not self._root.node_type:
            raise ConsistencyError(
                f"{self.root_path} changed from {self._root.node_type.value} to {fresh.node_type.value}"
            )
        self._root.adopt_contents(fresh)
        logger.debug("Refreshed mirror of %s (%d bytes)", self.root_path, self._root.size)

    def _stays_inside_root(self, target: Path) -> bool:
        """Check the deepest existing ancestor of ``target`` resolves below the root."""
        anchor = target
        while anchor != self.root_path and not anchor.exists():
            anchor = anchor.parent
        try:
            return anchor.resolve().is_relative_to(self.root_path.resolve())
        except OSError:
            return False

    def create_dir(self, relative_path: Path | str) -> Node:
        """Create a directory (with missing parents) under the root and return its node.

        Raises ``ConsistencyError`` if the directory is not in the mirror
        after the refresh that follows creation.
        """
        relative = Path(relative_path)
        if relative.is_absolute():
            raise ValueError(f"expected a path relative to the tree root, got {relative}")
        target = Path(os.path.normpath(self.root_path / relative))
        if target == self.root_path or not target.is_relative_to(self.root_path):
            raise ValueError(f"{relative} does not name a directory below {self.root_path}")
        if not self._stays_inside_root(target):
            raise ValueError(f"{relative} leaves {self.root_path} through a symlink")

        make_directories(target)
        self.refresh()

        node = self.get_node(target)
        if node is None or not node.is_dir():
            raise ConsistencyError(f"Node not found after refresh: {target}")
        logger.info("Created directory %s", target)
        return node


__all__ = ["Tree"]
