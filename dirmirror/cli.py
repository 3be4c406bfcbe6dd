"""Command-line front door for dirmirror.

Builds a mirror of the target directory, prints it (or the entries matching
``--find``), and with ``--watch`` keeps it refreshed until interrupted.
"""

from __future__ import annotations

import argparse
import fnmatch
import sys
import threading
from pathlib import Path

from .errors import MirrorError
from .log import configure_logging
from .mirror_model import Tree, format_size
from .runtime import FsWatcher
from .runtime.config import LOG_LEVELS, load_settings, save_coalesce_seconds, save_follow_symlinks


def _positive_float(value: str) -> float:
    """argparse type for positive float values."""
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dirmirror",
        description="Mirror a directory tree in memory with aggregated sizes.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to mirror. Defaults to current directory.")
    parser.add_argument("--watch", action="store_true", help="Keep the mirror refreshed until interrupted.")
    parser.add_argument(
        "--coalesce",
        type=_positive_float,
        default=None,
        metavar="SECONDS",
        help="Window over which changes are batched into one refresh (default: from config, else 2).",
    )
    parser.add_argument("--follow-symlinks", action="store_true", help="Descend into symlinked directories.")
    parser.add_argument("--find", metavar="GLOB", default=None, help="List entries whose name matches GLOB.")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=None, help="Logging verbosity.")
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Persist the effective --coalesce and --follow-symlinks values as defaults.",
    )
    return parser


def _print_matches(tree: Tree, pattern: str) -> None:
    for node in tree.search(lambda node: fnmatch.fnmatch(node.name, pattern)):
        kind = "dir " if node.is_dir() else "file"
        print(f"{kind}  {format_size(node.size):>10}  {node.path}")


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, build the mirror, and optionally watch it.

    Returns the process exit status: ``0`` on success and ``2`` when the
    mirror could not be built or kept in sync.
    """
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(args.log_level or settings.log_level)

    follow_symlinks = args.follow_symlinks or settings.follow_symlinks
    coalesce_seconds = args.coalesce if args.coalesce is not None else settings.coalesce_seconds
    if args.save_settings:
        save_coalesce_seconds(coalesce_seconds)
        save_follow_symlinks(follow_symlinks)
    path = Path(args.path) if args.path is not None else Path.cwd()
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")

    try:
        tree = Tree(path, follow_symlinks=follow_symlinks)
    except MirrorError as exc:
        print(f"dirmirror: {exc}", file=sys.stderr)
        return 2

    if args.find is not None:
        _print_matches(tree, args.find)
    else:
        print(tree.root)
    if not args.watch:
        return 0

    def report(refreshed: Tree) -> None:
        print(f"{refreshed.root_path}: {format_size(refreshed.total_size)}", flush=True)

    lock = threading.Lock()
    try:
        watcher = FsWatcher(
            coalesce_seconds=coalesce_seconds,
            follow_symlinks=follow_symlinks,
            on_refresh=report,
        )
    except MirrorError as exc:
        print(f"dirmirror: {exc}", file=sys.stderr)
        return 2

    try:
        watcher.watch(tree.root_path, tree, lock=lock)
    except KeyboardInterrupt:
        watcher.stop()
    except MirrorError as exc:
        print(f"dirmirror: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
