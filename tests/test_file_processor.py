"""Tests for tar packing utilities."""

from __future__ import annotations

import io
import os
import tarfile
import tempfile
import unittest
from pathlib import Path

from fmarchive.file_processor import is_hidden, pack_entries, scan_paths, unpack_archive
from fmarchive.utils import ArchiveError


class TestFileProcessing(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.base = Path(self.temp_dir.name)
        self.tree = self.base / "tree"
        (self.tree / "nested").mkdir(parents=True)
        (self.tree / "a.txt").write_text("hello", encoding="utf-8")
        (self.tree / "nested" / "b.txt").write_text("world", encoding="utf-8")
        (self.tree / ".hidden").write_text("secret", encoding="utf-8")
        (self.tree / ".git").mkdir()
        (self.tree / ".git" / "config").write_text("x", encoding="utf-8")
        self.loose = self.base / "loose.bin"
        self.loose.write_bytes(b"\x00\x01\x02")

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_is_hidden(self) -> None:
        self.assertTrue(is_hidden(self.tree / ".hidden"))
        self.assertFalse(is_hidden(self.tree / "a.txt"))

    def test_scan_order_and_hidden_entries(self) -> None:
        entries = scan_paths([str(self.tree), str(self.loose), str(self.tree) + "/"])
        self.assertEqual(
            [entry.arcname for entry in entries],
            ["loose.bin", "tree/", "tree/a.txt", "tree/nested/", "tree/nested/b.txt"],
        )
        self.assertEqual([entry.is_directory for entry in entries], [False, True, False, True, False])

    def test_scan_missing_path(self) -> None:
        with self.assertRaises(ArchiveError):
            scan_paths([str(self.base / "missing")])

    def test_pack_and_unpack(self) -> None:
        tar_path = self.base / "packed.tar"
        added = []
        pack_entries(scan_paths([str(self.tree), str(self.loose)]), tar_path, added.append)
        self.assertIn("tree/nested/b.txt", added)

        extract_dir = self.base / "extract"
        created = unpack_archive(tar_path, extract_dir)
        self.assertEqual((extract_dir / "tree" / "a.txt").read_text(encoding="utf-8"), "hello")
        self.assertEqual((extract_dir / "tree" / "nested" / "b.txt").read_text(encoding="utf-8"), "world")
        self.assertEqual((extract_dir / "loose.bin").read_bytes(), b"\x00\x01\x02")
        self.assertFalse((extract_dir / "tree" / ".hidden").exists())
        self.assertEqual(len(created), 5)

    def test_hard_links_unpack_as_files(self) -> None:
        os.link(self.tree / "a.txt", self.tree / "c.txt")
        tar_path = self.base / "packed.tar"
        pack_entries(scan_paths([str(self.tree)]), tar_path)
        with tarfile.open(tar_path) as tar:
            self.assertTrue(all(not member.islnk() for member in tar.getmembers()))

        extract_dir = self.base / "extract"
        unpack_archive(tar_path, extract_dir)
        self.assertEqual((extract_dir / "tree" / "a.txt").read_text(encoding="utf-8"), "hello")
        self.assertEqual((extract_dir / "tree" / "c.txt").read_text(encoding="utf-8"), "hello")

    def test_directory_mtime_is_kept(self) -> None:
        tar_path = self.base / "packed.tar"
        entries = scan_paths([str(self.tree)])
        pack_entries(entries, tar_path)
        with tarfile.open(tar_path) as tar:
            member = tar.getmember("tree")
        self.assertTrue(member.isdir())
        self.assertEqual(member.mtime, int(entries[0].modified_time))

    def _tar_with(self, info: tarfile.TarInfo, data: bytes = b"") -> Path:
        tar_path = self.base / "evil.tar"
        with tarfile.open(tar_path, "w") as tar:
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
        return tar_path

    def test_blocks_path_traversal(self) -> None:
        tar_path = self._tar_with(tarfile.TarInfo("../escape.txt"), b"boom")
        with self.assertRaises(ArchiveError):
            unpack_archive(tar_path, self.base / "out")
        self.assertFalse((self.base / "escape.txt").exists())

    def test_blocks_links(self) -> None:
        info = tarfile.TarInfo("link")
        info.type = tarfile.SYMTYPE
        info.linkname = "/etc/passwd"
        tar_path = self._tar_with(info)
        with self.assertRaises(ArchiveError):
            unpack_archive(tar_path, self.base / "out")

    def test_corrupt_tar(self) -> None:
        tar_path = self.base / "corrupt.tar"
        tar_path.write_bytes(b"\x01" * 1024)
        with self.assertRaises(ArchiveError):
            unpack_archive(tar_path, self.base / "out")


if __name__ == "__main__":
    unittest.main()
