"""Plain-text rendering of a mirrored node for human display."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .types import NodeType

if TYPE_CHECKING:
    from .node import Node

UNPOPULATED_PLACEHOLDER = "  [Children not populated]"


def render_node(node: Node) -> str:
    """Render ``node`` and, for directories, a listing of its direct children.

    File children are listed with their sizes and directory children by path
    only. Unscanned directories show a placeholder instead of descending.
    """
    if node.node_type is NodeType.FILE:
        return f"File: {node.path} (size: {node.size})"

    lines = [f"Directory: {node.path} (size: {node.size})"]
    if node.children is None:
        lines.append(UNPOPULATED_PLACEHOLDER)
        return "\n".join(lines)

    file_children = [child for child in node.children if child.node_type is NodeType.FILE]
    dir_children = [child for child in node.children if child.node_type is NodeType.DIRECTORY]

    if file_children:
        lines.append("  File Children:")
        for child in file_children:
            lines.append(f"    {child.path} (size: {child.size} bytes)")
    if dir_children:
        lines.append("  Directory Children:")
        for child in dir_children:
            lines.append(f"    {child.path}")
    return "\n".join(lines)


def format_size(size_bytes: int) -> str:
    """Return a compact human-readable size label such as ``12.5 KB``."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    value = float(size_bytes)
    for unit in ("KB", "MB", "GB"):
        value /= 1024
        if value < 1024:
            return f"{value:.1f} {unit}"
    return f"{value / 1024:.1f} TB"


__all__ = [
    "UNPOPULATED_PLACEHOLDER",
    "render_node",
    "format_size",
]
