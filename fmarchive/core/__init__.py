"""Core archive logic: codecs, chunk sealing, compression and framing."""

from .codecs import CODECS, TextCodec, get_codec
from .compression import CompressionLevel, compress_text, decompress_text
from .crypto import derive_cryptography_key, open_chunk, seal_chunk
from .framer import (
    count_chunks,
    entry_name,
    open_chunk_text,
    read_entries,
    seal_chunk_text,
    write_entries,
)

__all__ = [
    "CODECS",
    "TextCodec",
    "get_codec",
    "CompressionLevel",
    "compress_text",
    "decompress_text",
    "derive_cryptography_key",
    "open_chunk",
    "seal_chunk",
    "count_chunks",
    "entry_name",
    "open_chunk_text",
    "read_entries",
    "seal_chunk_text",
    "write_entries",
]
