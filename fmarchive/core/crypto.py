"""AES-GCM chunk sealing and key derivation logic."""

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..common.constants import HEADER_SIZE, KEY_SIZE, NONCE_SIZE, TAG_SIZE
from ..utils import AuthenticationError, FormatError


def derive_cryptography_key(secret: str) -> bytes:
    """
    Derive the archive key from a user secret.

    Args:
        secret: User secret string

    Returns:
        32-byte SHA-256 digest of the UTF-8 secret
    """
    digest = hashes.Hash(hashes.SHA256())
    digest.update(secret.encode("utf-8"))
    return digest.finalize()


def seal_chunk(data: bytes, key: bytes) -> bytes:
    """
    Encrypt one chunk using AES-256-GCM under a fresh nonce.

    Args:
        data: Plaintext bytes
        key: 32-byte key

    Returns:
        Sealed chunk: nonce (12 bytes) + tag (16 bytes) + ciphertext
    """
    if len(key) != KEY_SIZE:
        raise ValueError(f"Key must be {KEY_SIZE} bytes.")
    nonce = os.urandom(NONCE_SIZE)
    # AESGCM appends the tag to the ciphertext
    sealed = AESGCM(key).encrypt(nonce, data, None)
    ciphertext, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
    return nonce + tag + ciphertext


def open_chunk(data: bytes, key: bytes) -> bytes:
    """
    Decrypt and verify a sealed chunk.

    Args:
        data: Sealed chunk (nonce + tag + ciphertext)
        key: 32-byte key

    Returns:
        Plaintext bytes

    Raises:
        FormatError: If the envelope is too short
        AuthenticationError: If the key is wrong or the data was tampered with
    """
    if len(data) < HEADER_SIZE:
        raise FormatError("Sealed chunk too short.")

    nonce = data[:NONCE_SIZE]
    tag = data[NONCE_SIZE:HEADER_SIZE]
    ciphertext = data[HEADER_SIZE:]

    try:
        return AESGCM(key).decrypt(nonce, ciphertext + tag, None)
    except InvalidTag as exc:
        raise AuthenticationError(
            "Decryption failed. Wrong key or corrupted data."
        ) from exc
