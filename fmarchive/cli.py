"""Command-line interface for fmarchive."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from colorama import Fore, Style, init as colorama_init

from . import __version__
from .common.logging import setup_logging
from .config import Config, generate_cryptography_key, save_config
from .core.codecs import CODECS, get_codec
from .core.compression import CompressionLevel
from .services.archive_manager import (
    create_archive,
    default_archive_path,
    expand_archives,
)
from .utils import ConfigError, FMArchiveError

COMMANDS = {"create", "c", "expand", "x", "init", "help"}
GLOBAL_FLAGS = {"-v", "--verbose"}


def _cli_header() -> str:
    return (
        f"{Fore.CYAN}[FM Archive]{Style.RESET_ALL}\n"
        f"VERSION: {__version__}\n"
    )


def _command_showcase() -> List[Tuple[str, str]]:
    return [
        ("-i | --info", "Show version information"),
        ("-h | --help | help", "Show this help"),
        ("create | c PATHNAME [...]", "Create an archive from files/directories"),
        ("expand | x PATHNAME.ZIP [...]", "Expand one or more archives"),
        ("init", "Write a .env with a new secret"),
        ("PATHNAME [...]", "Expand if the first path is a .zip, else create"),
    ]


def _print_command_help(title: str) -> None:
    print(_cli_header())
    print(title)
    print("Usage: fmarchive <command> [options]")
    print("\nAvailable commands:\n")
    for command, label in _command_showcase():
        print(f"  {command:<32} - {label}")
    print("")


class _FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        _print_command_help(f"{Fore.RED}Error:{Style.RESET_ALL} {message}")
        raise SystemExit(2)


def _implicit_command(argv: List[str]) -> List[str]:
    split = 0
    while split < len(argv) and argv[split] in GLOBAL_FLAGS:
        split += 1
    flags, rest = argv[:split], argv[split:]
    if not rest or rest[0] in COMMANDS or rest[0].startswith("-"):
        return argv
    if rest[0].lower().endswith(".zip"):
        return [*flags, "expand", *rest]
    return [*flags, "create", *rest]


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Arguments without the program name, defaults to ``sys.argv``.

    Returns:
        Parsed arguments namespace.
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = _FriendlyArgumentParser(prog="fmarchive", description="FM Archive CLI")
    parser.add_argument("-i", "--info", action="store_true", help="Show version information")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    create_parser = subparsers.add_parser("create", aliases=["c"], help="Create archive")
    create_parser.add_argument("paths", nargs="*", help="Files or directories")
    create_parser.add_argument("-o", "--output", type=str, help="Archive path (default: <default_name>.zip)")
    create_parser.add_argument("--encoder", choices=sorted(CODECS), help="Text encoder override")
    create_parser.add_argument(
        "--level",
        choices=[level.name.lower() for level in CompressionLevel],
        help="Compression level override",
    )

    expand_parser = subparsers.add_parser("expand", aliases=["x"], help="Expand archives")
    expand_parser.add_argument("paths", nargs="*", help="Archive files")
    expand_parser.add_argument("--encoder", choices=sorted(CODECS), help="Text encoder override")

    init_parser = subparsers.add_parser("init", help="Write a .env configuration")
    init_parser.add_argument("--name", default="archive", help="Default archive name")
    init_parser.add_argument("--encoder", choices=sorted(CODECS), default="base64")
    init_parser.add_argument(
        "--level",
        choices=[level.name.lower() for level in CompressionLevel],
        default="optimal",
    )
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing .env")

    subparsers.add_parser("help", help="Show help and usage examples")

    args = parser.parse_args(_implicit_command(argv))
    if args.command == "c":
        args.command = "create"
    elif args.command == "x":
        args.command = "expand"
    return args


def command_create(args: argparse.Namespace) -> None:
    """
    Handle create command.
    """
    config = Config.get_instance()
    archive_path = Path(args.output) if args.output else default_archive_path(config)
    codec = get_codec(args.encoder) if args.encoder else None
    level = CompressionLevel.parse(args.level) if args.level else None
    asyncio.run(create_archive(args.paths, archive_path, config, codec=codec, level=level))


def command_expand(args: argparse.Namespace) -> None:
    """
    Handle expand command.
    """
    config = Config.get_instance()
    codec = get_codec(args.encoder) if args.encoder else None
    asyncio.run(expand_archives(args.paths, config, codec=codec))


def command_init(args: argparse.Namespace) -> None:
    """
    Handle init command.
    """
    env_file = Path.cwd() / ".env"
    if env_file.exists() and not args.force:
        raise ConfigError(f"{env_file} already exists. Use --force to overwrite.")
    config = Config(
        cryptography_key=generate_cryptography_key(),
        default_name=args.name,
        compression_level=CompressionLevel.parse(args.level),
        text_encoder=args.encoder,
    )
    path = save_config(config, env_file)
    print(f"{Fore.GREEN}Configuration saved to {path}.{Style.RESET_ALL}")
    print("Keep the secret safe: archives cannot be expanded without it.")


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    CLI entry point.
    """
    colorama_init()
    args = parse_arguments(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        if args.info or not args.command:
            print(_cli_header())
            return
        if args.command == "help":
            _print_command_help("FM Archive CLI Help")
            return
        if args.command == "create":
            command_create(args)
        elif args.command == "expand":
            command_expand(args)
        elif args.command == "init":
            command_init(args)
    except FMArchiveError as exc:
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL}", file=sys.stderr)
        print(str(exc), file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
