"""Registry of the binary-to-text transforms an archive can use."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Callable, Dict

from ..utils import ConfigError, FormatError
from . import base32, base122, z85


@dataclass(frozen=True)
class TextCodec:
    """A named pair of pure encode/decode functions."""

    name: str
    encode: Callable[[bytes], str]
    decode: Callable[[str], bytes]


def _b64_encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64_decode(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise FormatError("Invalid Base64 text.") from exc


CODECS: Dict[str, TextCodec] = {
    "base32": TextCodec("base32", base32.encode, base32.decode),
    "base64": TextCodec("base64", _b64_encode, _b64_decode),
    "base122": TextCodec("base122", base122.encode, base122.decode),
    "z85": TextCodec("z85", z85.encode, z85.decode),
}


def get_codec(name: str) -> TextCodec:
    """
    Look up a codec by its configuration name.

    Args:
        name: One of ``base32``, ``base64``, ``base122``, ``z85``.

    Returns:
        The matching codec.

    Raises:
        ConfigError: If the name is unknown.
    """
    try:
        return CODECS[name.strip().lower()]
    except KeyError as exc:
        raise ConfigError(f"Unknown text encoder: {name}") from exc
