"""Shared utilities for fmarchive."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


class FMArchiveError(Exception):
    """Base exception for fmarchive errors."""


class ConfigError(FMArchiveError):
    """Raised when configuration is invalid or missing."""


class FormatError(FMArchiveError):
    """Raised when encoded text or archive layout is malformed."""


class AuthenticationError(FMArchiveError):
    """Raised when a sealed chunk fails tag verification."""


class ArchiveError(FMArchiveError):
    """Raised when packing or unpacking an archive fails."""


def create_temp_file(prefix: str = "fmarchive_", suffix: str = ".tar") -> Path:
    """
    Create an empty temporary file.

    Args:
        prefix: File name prefix.
        suffix: File name suffix.

    Returns:
        Path to the created file.
    """
    handle, name = tempfile.mkstemp(prefix=prefix, suffix=suffix)
    os.close(handle)
    return Path(name)


def remove_file(path: Path) -> None:
    """
    Delete a file if it exists.

    Args:
        path: File to delete.
    """
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def atomic_write(path: Path, data: str, mode: str = "w") -> None:
    """
    Write data atomically to a file.

    Args:
        path: Destination path.
        data: Data to write.
        mode: File mode.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(path.suffix + ".tmp")
    with open(temp_path, mode, encoding="utf-8") as file_handle:
        file_handle.write(data)
        file_handle.flush()
        os.fsync(file_handle.fileno())
    temp_path.replace(path)
