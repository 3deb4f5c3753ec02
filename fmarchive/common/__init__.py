"""Common utilities and shared functionality."""

from .constants import CHUNK_SIZE, ENTRY_NAME_PATTERN, NONCE_SIZE, TAG_SIZE
from .utils import clean_path, dedupe_paths, format_bytes

__all__ = [
    "CHUNK_SIZE",
    "ENTRY_NAME_PATTERN",
    "NONCE_SIZE",
    "TAG_SIZE",
    "clean_path",
    "dedupe_paths",
    "format_bytes",
]
