"""Chunked, encrypted framing of a byte stream into numbered text entries.

Every chunk of the stream becomes one container entry::

    chunk -> encode -> gzip -> AES-GCM seal -> encode -> NNNNNNNN.txt

and expansion runs the same steps backwards in ascending index order.
"""

from __future__ import annotations

import asyncio
import logging
import zipfile
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, Iterator, List, Optional

import aiofiles

from ..common.constants import CHUNK_SIZE, ENTRY_NAME_FORMAT, ENTRY_NAME_PATTERN
from ..utils import FormatError
from .codecs import TextCodec
from .compression import CompressionLevel, compress_text, decompress_text
from .crypto import open_chunk, seal_chunk

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def entry_name(index: int) -> str:
    """Return the container entry name for a chunk index."""
    return ENTRY_NAME_FORMAT.format(index=index)


def count_chunks(length: int) -> int:
    """Number of entries a stream of ``length`` bytes produces."""
    return -(-length // CHUNK_SIZE)


def iter_chunks(stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """
    Yield consecutive chunks from a binary stream.

    Args:
        stream: Readable binary stream.
        chunk_size: Maximum bytes per chunk.

    Yields:
        Chunks of ``chunk_size`` bytes; the last may be shorter.
    """
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        yield chunk


def seal_chunk_text(
    chunk: bytes,
    codec: TextCodec,
    key: bytes,
    level: CompressionLevel = CompressionLevel.OPTIMAL,
) -> str:
    """
    Turn one plaintext chunk into entry text.

    Args:
        chunk: Plaintext chunk.
        codec: Text codec for both encoding passes.
        key: Archive key.
        level: Compression level.

    Returns:
        Encoded sealed chunk.
    """
    compressed = compress_text(codec.encode(chunk), level)
    return codec.encode(seal_chunk(compressed, key))


def open_chunk_text(text: str, codec: TextCodec, key: bytes) -> bytes:
    """
    Recover the plaintext chunk from entry text.

    Args:
        text: Entry text.
        codec: Text codec used on create.
        key: Archive key.

    Returns:
        Plaintext chunk.

    Raises:
        FormatError: If the text or the decompressed payload is malformed.
        AuthenticationError: If the chunk fails verification.
    """
    compressed = open_chunk(codec.decode(text), key)
    return codec.decode(decompress_text(compressed))


def select_entry_names(names: Iterable[str]) -> List[str]:
    """
    Pick chunk entries out of a container listing, sorted by index.

    Args:
        names: All entry names in the container.

    Returns:
        Matching names in ascending order. Contiguity is checked while reading.
    """
    return sorted(name for name in names if ENTRY_NAME_PATTERN.match(name))


def check_entry_name(name: str, index: int) -> None:
    """
    Ensure the entry at sorted position ``index`` carries that index.

    Raises:
        FormatError: On a gap or duplicate in the numbering.
    """
    if name != entry_name(index):
        raise FormatError("Format is not compatible.")


def write_entry(
    archive: zipfile.ZipFile,
    index: int,
    text: str,
    level: CompressionLevel = CompressionLevel.OPTIMAL,
) -> None:
    """Write one entry text into the container."""
    archive.writestr(
        entry_name(index),
        text.encode("utf-8"),
        compress_type=level.zip_compression,
        compresslevel=level.compresslevel,
    )


def read_entry(archive: zipfile.ZipFile, name: str) -> str:
    """Read one entry text from the container."""
    try:
        return archive.read(name).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError(f"Entry {name} is not valid text.") from exc


async def write_entries(
    source_path: Path,
    archive: zipfile.ZipFile,
    codec: TextCodec,
    key: bytes,
    level: CompressionLevel = CompressionLevel.OPTIMAL,
    max_concurrency: int = 1,
    progress_callback: Optional[ProgressCallback] = None,
) -> int:
    """
    Frame a file into numbered, sealed text entries.

    Up to ``max_concurrency`` chunks are sealed at once in worker threads;
    entries are always written in stream order.

    Args:
        source_path: File holding the plaintext stream.
        archive: Container open for writing.
        codec: Text codec.
        key: Archive key.
        level: Compression level for chunk text and container entries.
        max_concurrency: Chunks processed per window.
        progress_callback: Optional ``(done, total)`` callback.

    Returns:
        Number of entries written.
    """
    if max_concurrency <= 0:
        raise ValueError("max_concurrency must be greater than 0.")

    total = count_chunks(source_path.stat().st_size)
    index = 0
    async with aiofiles.open(source_path, "rb") as infile:
        while True:
            window = []
            for _ in range(max_concurrency):
                chunk = await infile.read(CHUNK_SIZE)
                if not chunk:
                    break
                window.append(chunk)
            if not window:
                break

            texts = await asyncio.gather(
                *(
                    asyncio.to_thread(seal_chunk_text, chunk, codec, key, level)
                    for chunk in window
                )
            )
            for text in texts:
                write_entry(archive, index, text, level)
                logger.debug("Wrote %s (%d chars)", entry_name(index), len(text))
                index += 1
                if progress_callback:
                    progress_callback(index, total)

    return index


async def read_entries(
    archive: zipfile.ZipFile,
    output_path: Path,
    codec: TextCodec,
    key: bytes,
    max_concurrency: int = 1,
    progress_callback: Optional[ProgressCallback] = None,
) -> int:
    """
    Rebuild the plaintext stream from numbered entries.

    Args:
        archive: Container open for reading.
        output_path: File receiving the reconstructed stream.
        codec: Text codec used on create.
        key: Archive key.
        max_concurrency: Entries processed per window.
        progress_callback: Optional ``(done, total)`` callback.

    Returns:
        Number of entries read.

    Raises:
        FormatError: On an index gap/duplicate or malformed entry.
        AuthenticationError: If any entry fails verification.
    """
    if max_concurrency <= 0:
        raise ValueError("max_concurrency must be greater than 0.")

    names = select_entry_names(archive.namelist())
    total = len(names)
    done = 0
    async with aiofiles.open(output_path, "wb") as outfile:
        for start in range(0, total, max_concurrency):
            texts = []
            for offset, name in enumerate(names[start:start + max_concurrency]):
                check_entry_name(name, start + offset)
                texts.append(read_entry(archive, name))

            chunks = await asyncio.gather(
                *(asyncio.to_thread(open_chunk_text, text, codec, key) for text in texts)
            )
            for chunk in chunks:
                await outfile.write(chunk)
                done += 1
                if progress_callback:
                    progress_callback(done, total)

    return done
