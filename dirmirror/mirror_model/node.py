"""Recursive node model mirroring one filesystem entry and its subtree."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .display import render_node
from .fs import EntryStat, list_directory_entries, read_file_size, stat_entry
from .types import ExtendedMetadata, NodeType

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Node:
    """One mirrored file or directory.

    ``children`` is ``None`` for files and for directories that have not been
    scanned yet; a scanned empty directory has ``[]``. Each child list is
    owned by exactly one parent and children never point back up.

    ``size`` is the byte length for files. For directories it is the sum of
    all descendant file sizes and is only meaningful once ``children`` is
    populated.
    """

    path: Path
    node_type: NodeType
    metadata: ExtendedMetadata = field(default_factory=ExtendedMetadata)
    children: list[Node] | None = None
    size: int = 0
    follow_symlinks: bool = field(default=False, repr=False)
    file_id: tuple[int, int] | None = field(default=None, repr=False)
    link_cycle: bool = field(default=False, repr=False)

    @classmethod
    def from_path(cls, path: Path | str, *, follow_symlinks: bool = False) -> Node:
        """Build a fully populated node for ``path``.

        Directories are scanned recursively and their sizes aggregated before
        this returns. The entry point itself is always resolved through a
        symlink so a linked root mirrors its target. Raises
        ``FilesystemError`` on the first failure at any depth.
        """
        entry = stat_entry(Path(path), follow_symlinks=True)
        return cls._build(entry, follow_symlinks=follow_symlinks, ancestors=frozenset())

    @classmethod
    def _build(
        cls,
        entry: EntryStat,
        *,
        follow_symlinks: bool,
        ancestors: frozenset[tuple[int, int]],
    ) -> Node:
        node = cls(
            path=entry.path,
            node_type=entry.node_type,
            metadata=entry.metadata,
            size=entry.metadata.size if entry.node_type is NodeType.FILE else 0,
            follow_symlinks=follow_symlinks,
            file_id=entry.file_id,
        )
        if node.is_dir():
            node._populate(ancestors)
        return node

    @classmethod
    def _cycle_placeholder(cls, entry: EntryStat) -> Node:
        """Leaf standing in for a directory link that points at its own ancestor."""
        metadata = ExtendedMetadata(
            modified_ns=entry.metadata.modified_ns,
            accessed_ns=entry.metadata.accessed_ns,
            created_ns=entry.metadata.created_ns,
            size=0,
            is_symlink=True,
        )
        return cls(
            path=entry.path,
            node_type=NodeType.FILE,
            metadata=metadata,
            size=0,
            follow_symlinks=True,
            file_id=entry.file_id,
            link_cycle=True,
        )

    @property
    def name(self) -> str:
        return self.path.name

    def is_file(self) -> bool:
        return self.node_type is NodeType.FILE

    def is_dir(self) -> bool:
        return self.node_type is NodeType.DIRECTORY

    def is_populated(self) -> bool:
        """Return whether this directory's children have been scanned."""
        return self.children is not None

    def iter_children(self) -> Iterator[Node]:
        """Iterate direct children; nothing when unpopulated."""
        if self.children is None:
            return iter(())
        return iter(self.children)

    def populate_children(self) -> None:
        """Re-scan direct entries and rebuild every child subtree.

        No-op for files. The new child list replaces ``children`` only after
        it has been built completely, so a failure leaves the previous list
        untouched. Child order is filesystem enumeration order.
        """
        if not self.is_dir():
            return
        self._populate(frozenset())

    def _populate(self, ancestors: frozenset[tuple[int, int]]) -> None:
        if self.follow_symlinks and self.file_id is not None:
            ancestors = ancestors | {self.file_id}

        built: list[Node] = []
        for child_path in list_directory_entries(self.path):
            entry = stat_entry(child_path, follow_symlinks=self.follow_symlinks)
            if entry.node_type is NodeType.DIRECTORY and entry.file_id in ancestors:
                logger.warning("Not following %s: link points back to an ancestor directory", child_path)
                built.append(self._cycle_placeholder(entry))
                continue
            built.append(self._build(entry, follow_symlinks=self.follow_symlinks, ancestors=ancestors))

        self.children = built
        self.size = sum(child.size for child in built)
        self.metadata.size = self.size

    def update_size(self) -> int:
        """Recompute and store this node's size, returning it.

        Files re-read their on-disk length. Directories scan children first
        when unpopulated, then update every child recursively and sum.
        """
        if self.link_cycle:
            return 0
        if self.is_file():
            self.size = read_file_size(self.path, follow_symlinks=self.follow_symlinks)
            self.metadata.size = self.size
            return self.size

        if self.children is None:
            self.populate_children()
        total = 0
        for child in self.iter_children():
            total += child.update_size()
        self.size = total
        self.metadata.size = total
        return total

    calc_size = update_size

    def adopt_contents(self, other: Node) -> None:
        """Take over the scanned state of ``other`` while keeping this object's identity."""
        self.metadata = other.metadata
        self.children = other.children
        self.size = other.size
        self.file_id = other.file_id
        other.children = None

    def __str__(self) -> str:
        return render_node(self)


__all__ = ["Node"]
