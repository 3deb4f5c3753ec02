"""Service layer for archive operations."""

from .archive_manager import create_archive, expand_archive, expand_archives

__all__ = ["create_archive", "expand_archive", "expand_archives"]
