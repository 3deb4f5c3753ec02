"""Gzip compression of encoded chunk text."""

import enum
import gzip
import zipfile
import zlib

from ..utils import ConfigError, FormatError


class CompressionLevel(enum.IntEnum):
    """Configured compression levels, in configuration file order."""

    OPTIMAL = 0
    FASTEST = 1
    NONE = 2
    SMALLEST = 3

    @property
    def compresslevel(self) -> int:
        """Equivalent zlib level."""
        return _ZLIB_LEVELS[self]

    @property
    def zip_compression(self) -> int:
        """Compression method for container entries."""
        if self is CompressionLevel.NONE:
            return zipfile.ZIP_STORED
        return zipfile.ZIP_DEFLATED

    @classmethod
    def parse(cls, value: object) -> "CompressionLevel":
        """Parse a level from an integer or name."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        try:
            if text.isdigit():
                return cls(int(text))
            return cls[text.upper()]
        except (KeyError, ValueError) as exc:
            raise ConfigError("Unknown compression level.") from exc


_ZLIB_LEVELS = {
    CompressionLevel.OPTIMAL: 6,
    CompressionLevel.FASTEST: 1,
    CompressionLevel.NONE: 0,
    CompressionLevel.SMALLEST: 9,
}


def compress_text(text: str, level: CompressionLevel = CompressionLevel.OPTIMAL) -> bytes:
    """
    Compress text using gzip.

    Args:
        text: Text to compress
        level: Compression level

    Returns:
        Compressed UTF-8 bytes
    """
    return gzip.compress(text.encode("utf-8"), compresslevel=level.compresslevel, mtime=0)


def decompress_text(data: bytes) -> str:
    """
    Decompress gzip data back to text.

    Args:
        data: Compressed data

    Returns:
        Decompressed text

    Raises:
        FormatError: If decompression fails
    """
    try:
        return gzip.decompress(data).decode("utf-8")
    except (OSError, EOFError, zlib.error, UnicodeDecodeError) as exc:
        raise FormatError(
            "Decompression failed. Data may be corrupted."
        ) from exc
