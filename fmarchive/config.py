"""Configuration management for fmarchive."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Optional

from dotenv import load_dotenv

from .common.constants import (
    DEFAULT_ARCHIVE_NAME,
    DEFAULT_CONCURRENCY,
    DEFAULT_TEXT_ENCODER,
)
from .core.codecs import TextCodec, get_codec
from .core.compression import CompressionLevel
from .core.crypto import derive_cryptography_key
from .utils import ConfigError, atomic_write

ENV_DEFAULT_NAME = "FMARCHIVE_DEFAULT_NAME"
ENV_KEY = "FMARCHIVE_CRYPTOGRAPHY_KEY"
ENV_COMPRESSION_LEVEL = "FMARCHIVE_COMPRESSION_LEVEL"
ENV_TEXT_ENCODER = "FMARCHIVE_TEXT_ENCODER"
ENV_CONCURRENCY = "FMARCHIVE_CONCURRENCY"


def _env_path() -> Path:
    return Path.cwd() / ".env"


def generate_cryptography_key() -> str:
    """
    Generate a new random secret.

    Returns:
        Base64-encoded Fernet key, used as the archive secret.
    """
    try:
        from cryptography.fernet import Fernet
    except ImportError as exc:
        raise ConfigError(
            "cryptography is required to generate a secret.") from exc
    return Fernet.generate_key().decode("utf-8")


def save_config(config: "Config", env_file: Optional[Path] = None) -> Path:
    """
    Persist configuration to a .env file.

    Args:
        config: Config instance to save.
        env_file: Destination, defaults to ``.env`` in the working directory.

    Returns:
        Path of the written file.
    """
    lines = [
        f"{ENV_DEFAULT_NAME}={config.default_name}",
        f"{ENV_KEY}={config.cryptography_key}",
        f"{ENV_COMPRESSION_LEVEL}={int(config.compression_level)}",
        f"{ENV_TEXT_ENCODER}={config.text_encoder}",
        f"{ENV_CONCURRENCY}={config.concurrency}",
    ]
    data = "\n".join(lines) + "\n"
    env_file = env_file or _env_path()
    atomic_write(env_file, data)
    os.chmod(env_file, 0o600)
    return env_file


@dataclass(frozen=True)
class Config:
    """Singleton configuration object."""

    cryptography_key: str
    default_name: str = DEFAULT_ARCHIVE_NAME
    compression_level: CompressionLevel = CompressionLevel.OPTIMAL
    text_encoder: str = DEFAULT_TEXT_ENCODER
    concurrency: int = DEFAULT_CONCURRENCY

    _instance: ClassVar[Optional["Config"]] = None

    @classmethod
    def get_instance(cls) -> "Config":
        """
        Retrieve a singleton instance of Config.

        Returns:
            Config singleton instance.
        """
        if cls._instance is None:
            cls._instance = load_config()
        return cls._instance

    @property
    def key(self) -> bytes:
        """AES key derived from the configured secret."""
        return derive_cryptography_key(self.cryptography_key)

    @property
    def codec(self) -> TextCodec:
        """Text codec selected for archives."""
        return get_codec(self.text_encoder)


def _parse_int(value: str, name: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ConfigError(f"Invalid integer for {name}.") from exc
    if parsed <= 0:
        raise ConfigError(f"{name} must be greater than 0.")
    return parsed


def load_config(env_file: Optional[Path] = None) -> Config:
    """
    Load and validate configuration from the environment and .env file.

    Args:
        env_file: Optional .env path, defaults to the working directory.

    Returns:
        Config instance.
    """
    env_file = env_file or _env_path()
    if env_file.exists():
        load_dotenv(env_file)

    cryptography_key = os.getenv(ENV_KEY, "")
    default_name = os.getenv(ENV_DEFAULT_NAME, DEFAULT_ARCHIVE_NAME).strip()
    compression_level = os.getenv(ENV_COMPRESSION_LEVEL, "0").strip()
    text_encoder = os.getenv(ENV_TEXT_ENCODER, DEFAULT_TEXT_ENCODER).strip().lower()
    concurrency = os.getenv(ENV_CONCURRENCY, str(DEFAULT_CONCURRENCY)).strip()

    if not cryptography_key:
        raise ConfigError(
            f"{ENV_KEY} is required. Run `fmarchive init` to configure.")
    if not default_name:
        raise ConfigError(f"{ENV_DEFAULT_NAME} must not be empty.")
    get_codec(text_encoder)

    return Config(
        cryptography_key=cryptography_key,
        default_name=default_name,
        compression_level=CompressionLevel.parse(compression_level),
        text_encoder=text_encoder,
        concurrency=_parse_int(concurrency, ENV_CONCURRENCY),
    )
