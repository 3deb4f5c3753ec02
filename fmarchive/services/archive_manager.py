"""High-level logic coordinating archive creation and expansion."""

from __future__ import annotations

import asyncio
import logging
import shutil
import zipfile
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from colorama import Fore, Style
from tqdm import tqdm

from ..common.constants import ARCHIVE_EXTENSION
from ..common.utils import clean_path, format_bytes
from ..config import Config
from ..core.codecs import TextCodec
from ..core.compression import CompressionLevel
from ..core.framer import count_chunks, read_entries, write_entries
from ..file_processor import pack_entries, scan_paths, unpack_archive
from ..utils import ArchiveError, create_temp_file, remove_file

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def _say(label: str, text: str, color: str = Fore.WHITE) -> None:
    print(f"{color}{label}:{Style.RESET_ALL} {text}")


def _progress_bar(total: int, desc: str) -> tqdm:
    return tqdm(total=total, desc=desc, unit="chunk", disable=None, leave=False)


def _bar_callback(progress: tqdm) -> ProgressCallback:
    def _progress(done: int, total: int) -> None:
        progress.n = done
        progress.total = total
        progress.refresh()

    return _progress


def validate_paths(paths: Iterable[str]) -> List[str]:
    """
    Clean and check user-supplied paths.

    Args:
        paths: Raw paths.

    Returns:
        Cleaned paths.

    Raises:
        ArchiveError: If no path is given or any path does not exist.
    """
    cleaned = [clean_path(path) for path in paths]
    if not cleaned or not all(Path(path).exists() for path in cleaned):
        raise ArchiveError("Arguments contains no pathname or invalid pathname.")
    return cleaned


def default_archive_path(config: Config, directory: Optional[Path] = None) -> Path:
    """Archive path built from the configured default name."""
    base = directory or Path.cwd()
    return base / f"{config.default_name}{ARCHIVE_EXTENSION}"


async def create_archive(
    paths: Iterable[str],
    archive_path: Path,
    config: Config,
    codec: Optional[TextCodec] = None,
    level: Optional[CompressionLevel] = None,
) -> int:
    """
    Pack files and directories into an encrypted, text-encoded zip.

    Args:
        paths: Files and directories to include.
        archive_path: Destination zip file.
        config: Active configuration.
        codec: Codec override, defaults to the configured one.
        level: Compression level override.

    Returns:
        Number of chunk entries written.
    """
    sources = validate_paths(paths)
    codec = codec or config.codec
    level = config.compression_level if level is None else level
    key = config.key

    archive_path = Path(archive_path).expanduser().resolve()
    temp_tar = create_temp_file()
    successful = False
    try:
        entries = await asyncio.to_thread(scan_paths, sources)
        await asyncio.to_thread(
            pack_entries, entries, temp_tar, lambda name: _say("ADDING", name, Fore.CYAN)
        )
        full_length = temp_tar.stat().st_size
        _say("FULL LENGTH", f"{full_length} ({format_bytes(full_length)})")

        archive_path.parent.mkdir(parents=True, exist_ok=True)
        progress = _progress_bar(count_chunks(full_length), "Sealing")
        try:
            with zipfile.ZipFile(archive_path, "w") as archive:
                count = await write_entries(
                    temp_tar,
                    archive,
                    codec,
                    key,
                    level=level,
                    max_concurrency=config.concurrency,
                    progress_callback=_bar_callback(progress),
                )
        finally:
            progress.close()

        logger.info("Created %s with %d chunks (%s)", archive_path, count, codec.name)
        _say("CHUNKS", str(count))
        _say("ARCHIVE", f"{archive_path} ({format_bytes(archive_path.stat().st_size)})")
        successful = True
        print(f"{Fore.GREEN}SUCCESSFUL.{Style.RESET_ALL}")
        return count
    finally:
        remove_file(temp_tar)
        if not successful:
            remove_file(archive_path)


async def expand_archive(
    archive_path: Path,
    config: Config,
    codec: Optional[TextCodec] = None,
) -> Optional[Path]:
    """
    Expand one archive into a directory next to it.

    The output directory is the archive path without its extension.

    Args:
        archive_path: Zip file to expand.
        config: Active configuration.
        codec: Codec override, defaults to the configured one.

    Returns:
        The output directory, or None when the archive was skipped.
    """
    fullpath = Path(archive_path).expanduser().resolve()
    if fullpath.suffix.lower() != ARCHIVE_EXTENSION:
        _say("SKIP (NOT ARCHIVE)", str(fullpath), Fore.YELLOW)
        return None
    if not fullpath.stem:
        _say("SKIP (NO FILENAME)", str(fullpath), Fore.YELLOW)
        return None
    directory = fullpath.with_suffix("")
    if directory.exists():
        _say("SKIP (DIRECTORY EXISTS)", str(fullpath), Fore.YELLOW)
        return None

    codec = codec or config.codec
    key = config.key

    directory.mkdir(parents=True)
    temp_tar = create_temp_file()
    successful = False
    try:
        with zipfile.ZipFile(fullpath, "r") as archive:
            progress = _progress_bar(0, "Opening")
            try:
                count = await read_entries(
                    archive,
                    temp_tar,
                    codec,
                    key,
                    max_concurrency=config.concurrency,
                    progress_callback=_bar_callback(progress),
                )
            finally:
                progress.close()
        logger.info("Read %d chunks from %s", count, fullpath)

        if temp_tar.stat().st_size == 0:
            logger.warning("Archive %s holds no data", fullpath)
        else:
            await asyncio.to_thread(
                unpack_archive,
                temp_tar,
                directory,
                lambda name: _say("CREATE", name, Fore.CYAN),
            )
        successful = True
        print(f"{Fore.GREEN}SUCCESSFUL.{Style.RESET_ALL}")
        return directory
    except zipfile.BadZipFile as exc:
        raise ArchiveError(f"Not a valid archive: {fullpath}") from exc
    finally:
        remove_file(temp_tar)
        if not successful:
            shutil.rmtree(directory, ignore_errors=True)


async def expand_archives(
    paths: Iterable[str],
    config: Config,
    codec: Optional[TextCodec] = None,
) -> List[Path]:
    """
    Expand several archives in turn.

    Args:
        paths: Archive paths.
        config: Active configuration.
        codec: Codec override.

    Returns:
        Output directories of the archives that were expanded.
    """
    expanded = []
    for path in validate_paths(paths):
        directory = await expand_archive(Path(path), config, codec)
        if directory is not None:
            expanded.append(directory)
    return expanded
