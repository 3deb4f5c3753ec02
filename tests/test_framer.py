"""Tests for chunk framing."""

from __future__ import annotations

import asyncio
import io
import random
import tempfile
import unittest
import zipfile
from pathlib import Path
from unittest import mock

from fmarchive.common.constants import CHUNK_SIZE
from fmarchive.core import framer
from fmarchive.core.codecs import CODECS, get_codec
from fmarchive.core.compression import CompressionLevel
from fmarchive.core.crypto import derive_cryptography_key
from fmarchive.utils import AuthenticationError, FormatError


class TestFramingHelpers(unittest.TestCase):
    def test_entry_name(self) -> None:
        self.assertEqual(framer.entry_name(0), "00000000.txt")
        self.assertEqual(framer.entry_name(1234), "00001234.txt")

    def test_count_chunks(self) -> None:
        self.assertEqual(framer.count_chunks(0), 0)
        self.assertEqual(framer.count_chunks(1), 1)
        self.assertEqual(framer.count_chunks(CHUNK_SIZE), 1)
        self.assertEqual(framer.count_chunks(CHUNK_SIZE + 1), 2)

    def test_iter_chunks(self) -> None:
        data = b"x" * (CHUNK_SIZE + 5)
        chunks = list(framer.iter_chunks(io.BytesIO(data)))
        self.assertEqual([len(chunk) for chunk in chunks], [CHUNK_SIZE, 5])
        self.assertEqual(list(framer.iter_chunks(io.BytesIO(b""))), [])

    def test_select_entry_names(self) -> None:
        names = [
            "00000001.txt",
            "notes.md",
            "00000000.txt",
            "0000000.txt",
            "00000002.TXT",
            "dir/00000003.txt",
            "00000004.txt.bak",
        ]
        self.assertEqual(framer.select_entry_names(names), ["00000000.txt", "00000001.txt"])

    def test_check_entry_name(self) -> None:
        framer.check_entry_name("00000003.txt", 3)
        with self.assertRaisesRegex(FormatError, "not compatible"):
            framer.check_entry_name("00000004.txt", 3)

    def test_chunk_text_round_trip(self) -> None:
        key = derive_cryptography_key("chunk")
        data = random.Random(7).randbytes(3000)
        for name, codec in CODECS.items():
            with self.subTest(codec=name):
                text = framer.seal_chunk_text(data, codec, key, CompressionLevel.FASTEST)
                self.assertEqual(framer.open_chunk_text(text, codec, key), data)


class TestFramingArchive(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.base = Path(self.temp_dir.name)
        self.key = derive_cryptography_key("john doe")
        self.codec = get_codec("base64")

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _write(self, data: bytes, codec=None, concurrency: int = 1) -> io.BytesIO:
        source = self.base / "source.bin"
        source.write_bytes(data)
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            count = asyncio.run(
                framer.write_entries(
                    source,
                    archive,
                    codec or self.codec,
                    self.key,
                    level=CompressionLevel.FASTEST,
                    max_concurrency=concurrency,
                )
            )
        self.assertEqual(count, framer.count_chunks(len(data)))
        buffer.seek(0)
        return buffer

    def _read(self, buffer: io.BytesIO, codec=None, key=None, concurrency: int = 1) -> bytes:
        output = self.base / "output.bin"
        with zipfile.ZipFile(buffer, "r") as archive:
            asyncio.run(
                framer.read_entries(
                    archive,
                    output,
                    codec or self.codec,
                    key or self.key,
                    max_concurrency=concurrency,
                )
            )
        return output.read_bytes()

    def test_round_trip_full_size_chunks(self) -> None:
        data = random.Random(1).randbytes(2 * CHUNK_SIZE + 10)
        buffer = self._write(data, concurrency=2)
        with zipfile.ZipFile(buffer) as archive:
            self.assertEqual(
                sorted(archive.namelist()),
                ["00000000.txt", "00000001.txt", "00000002.txt"],
            )
        buffer.seek(0)
        self.assertEqual(self._read(buffer, concurrency=3), data)

    def test_round_trip_every_codec_and_window(self) -> None:
        data = random.Random(2).randbytes(1000)
        with mock.patch.object(framer, "CHUNK_SIZE", 96):
            for name, codec in CODECS.items():
                for concurrency in (1, 4):
                    with self.subTest(codec=name, concurrency=concurrency):
                        buffer = self._write(data, codec, concurrency)
                        with zipfile.ZipFile(buffer) as archive:
                            self.assertEqual(len(archive.namelist()), 11)
                        buffer.seek(0)
                        self.assertEqual(self._read(buffer, codec, concurrency=concurrency), data)

    def test_empty_stream_has_no_entries(self) -> None:
        buffer = self._write(b"")
        with zipfile.ZipFile(buffer) as archive:
            self.assertEqual(archive.namelist(), [])
        buffer.seek(0)
        self.assertEqual(self._read(buffer), b"")

    def test_entries_read_in_index_order(self) -> None:
        first = framer.seal_chunk_text(b"first-", self.codec, self.key)
        second = framer.seal_chunk_text(b"second", self.codec, self.key)
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("00000001.txt", second)
            archive.writestr("readme.txt", "ignored")
            archive.writestr("00000000.txt", first)
        buffer.seek(0)
        self.assertEqual(self._read(buffer), b"first-second")

    def test_gap_in_indices(self) -> None:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("00000000.txt", framer.seal_chunk_text(b"a", self.codec, self.key))
            archive.writestr("00000002.txt", framer.seal_chunk_text(b"b", self.codec, self.key))
        buffer.seek(0)
        with self.assertRaisesRegex(FormatError, "not compatible"):
            self._read(buffer)

    def test_missing_first_index(self) -> None:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("00000001.txt", framer.seal_chunk_text(b"a", self.codec, self.key))
        buffer.seek(0)
        with self.assertRaises(FormatError):
            self._read(buffer)

    def test_wrong_key(self) -> None:
        buffer = self._write(b"payload" * 100)
        with self.assertRaises(AuthenticationError):
            self._read(buffer, key=derive_cryptography_key("jane doe"))

    def test_codec_mismatch(self) -> None:
        buffer = self._write(b"payload" * 100, get_codec("base122"))
        with self.assertRaises((FormatError, AuthenticationError)):
            self._read(buffer, get_codec("z85"))

    def test_invalid_concurrency(self) -> None:
        with self.assertRaises(ValueError):
            self._write(b"data", concurrency=0)


if __name__ == "__main__":
    unittest.main()
