"""Tests for the filesystem helpers behind the mirror model."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from dirmirror.errors import FilesystemError
from dirmirror.mirror_model import NodeType, list_directory_entries, make_directories, read_file_size, stat_entry


class MirrorFsTests(unittest.TestCase):
    def test_stat_entry_reports_type_and_size(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            target = root / "f.bin"
            target.write_bytes(b"12345")

            file_entry = stat_entry(target, follow_symlinks=False)
            dir_entry = stat_entry(root, follow_symlinks=False)

            self.assertIs(file_entry.node_type, NodeType.FILE)
            self.assertEqual(file_entry.metadata.size, 5)
            self.assertFalse(file_entry.metadata.is_symlink)
            self.assertIs(dir_entry.node_type, NodeType.DIRECTORY)
            self.assertEqual(read_file_size(target, follow_symlinks=False), 5)

    def test_list_directory_entries_returns_joined_paths(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a").write_bytes(b"")
            (root / "b").mkdir()

            entries = list_directory_entries(root)

            self.assertEqual(sorted(entries), [root / "a", root / "b"])

    def test_list_directory_entries_on_missing_directory_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "missing"

            with self.assertRaises(FilesystemError) as ctx:
                list_directory_entries(missing)

            self.assertEqual(ctx.exception.path, missing)
            self.assertIsNotNone(ctx.exception.errno)

    def test_make_directories_is_recursive_and_idempotent(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "x" / "y" / "z"

            make_directories(target)
            make_directories(target)

            self.assertTrue(target.is_dir())


if __name__ == "__main__":
    unittest.main()
