"""File processing utilities: scanning, packing and unpacking tar streams."""

from __future__ import annotations

import logging
import stat
import tarfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .common.utils import dedupe_paths
from .utils import ArchiveError

logger = logging.getLogger(__name__)

ReportCallback = Callable[[str], None]

_HIDDEN_ATTRIBUTES = stat.FILE_ATTRIBUTE_HIDDEN | stat.FILE_ATTRIBUTE_SYSTEM


@dataclass(frozen=True)
class PackEntry:
    """One record of the packed stream."""

    path: Path
    arcname: str
    is_directory: bool
    modified_time: float


def is_hidden(path: Path) -> bool:
    """
    Check whether a path is hidden or a system entry.

    Args:
        path: Path to check.

    Returns:
        True for dot-names and, on Windows, hidden/system attributes.
    """
    if path.name.startswith("."):
        return True
    attributes = getattr(path.stat(), "st_file_attributes", 0)
    return bool(attributes & _HIDDEN_ATTRIBUTES)


def _visible_children(directory: Path) -> List[Path]:
    return [
        child
        for child in sorted(directory.iterdir(), key=lambda item: item.name)
        if not child.is_symlink() and not is_hidden(child)
    ]


def _scan_directory(directory: Path, prefix: str, entries: List[PackEntry]) -> None:
    name = f"{prefix}{directory.name}/"
    entries.append(PackEntry(directory, name, True, directory.stat().st_mtime))

    children = _visible_children(directory)
    for child in children:
        if child.is_file():
            entries.append(PackEntry(child, name + child.name, False, child.stat().st_mtime))
    for child in children:
        if child.is_dir():
            _scan_directory(child, name, entries)


def scan_paths(paths: Iterable[str]) -> List[PackEntry]:
    """
    Collect pack records for files and directories.

    Top-level files come first under their base name, then every directory
    followed by its files and, recursively, its sub-directories.

    Args:
        paths: Files and directories to pack.

    Returns:
        Ordered pack records.
    """
    files: List[Path] = []
    directories: List[Path] = []
    for raw in dedupe_paths([str(path).rstrip("/\\") or str(path) for path in paths]):
        path = Path(raw).resolve()
        if not path.exists():
            raise ArchiveError(f"Path not found: {raw}")
        if is_hidden(path):
            logger.info("Skipping hidden path %s", path)
            continue
        if path.is_dir():
            directories.append(path)
        elif path.is_file():
            files.append(path)

    entries = [PackEntry(path, path.name, False, path.stat().st_mtime) for path in files]
    for directory in directories:
        _scan_directory(directory, "", entries)
    return entries


def pack_entries(
    entries: Iterable[PackEntry],
    output_path: Path,
    report: Optional[ReportCallback] = None,
) -> None:
    """
    Write pack records into an uncompressed tar stream.

    Args:
        entries: Records from ``scan_paths``.
        output_path: Destination tar file.
        report: Optional callback receiving each added name.
    """
    # Hard links are stored as regular files so every record unpacks on its own.
    with tarfile.open(output_path, "w", format=tarfile.PAX_FORMAT, dereference=True) as tar:
        for entry in entries:
            if report:
                report(entry.arcname)
            if entry.is_directory:
                info = tarfile.TarInfo(entry.arcname)
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                info.mtime = int(entry.modified_time)
                tar.addfile(info)
            else:
                tar.add(entry.path, arcname=entry.arcname, recursive=False)


def _is_within_directory(base: Path, target: Path) -> bool:
    try:
        target.relative_to(base)
        return True
    except ValueError:
        return False


def _check_member(member: tarfile.TarInfo, base: Path) -> None:
    if member.islnk() or member.issym():
        raise ArchiveError(f"Blocked unsafe link in archive: {member.name}")
    target_path = (base / member.name).resolve()
    if not _is_within_directory(base, target_path):
        raise ArchiveError(f"Blocked path traversal in archive: {member.name}")


def unpack_archive(
    archive_path: Path,
    output_path: Path,
    report: Optional[ReportCallback] = None,
) -> List[Path]:
    """
    Extract directories and regular files from a tar stream.

    Args:
        archive_path: Tar file to read.
        output_path: Destination directory.
        report: Optional callback receiving each created path.

    Returns:
        Created paths, in archive order.
    """
    output_path.mkdir(parents=True, exist_ok=True)
    base = output_path.resolve()
    created: List[Path] = []
    try:
        with tarfile.open(archive_path, "r:") as tar:
            for member in tar:
                _check_member(member, base)
                if not (member.isdir() or member.isfile()):
                    continue
                target = base / member.name.rstrip("/")
                if member.isdir():
                    target.mkdir(parents=True, exist_ok=True)
                else:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    source = tar.extractfile(member)
                    with source, open(target, "wb") as outfile:
                        while True:
                            block = source.read(1024 * 1024)
                            if not block:
                                break
                            outfile.write(block)
                created.append(target)
                if report:
                    report(str(target))
    except tarfile.TarError as exc:
        raise ArchiveError(f"Failed to unpack archive: {exc}") from exc
    return created
