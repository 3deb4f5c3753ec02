"""Constants used throughout the application."""

import re

# Plaintext bytes per archive entry
CHUNK_SIZE = 262144

# AES-GCM envelope layout: nonce || tag || ciphertext
NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32
HEADER_SIZE = NONCE_SIZE + TAG_SIZE

# Container entry names
ENTRY_NAME_FORMAT = "{index:08d}.txt"
ENTRY_NAME_PATTERN = re.compile(r"^[0-9]{8}\.txt$")

ARCHIVE_EXTENSION = ".zip"

DEFAULT_ARCHIVE_NAME = "archive"
DEFAULT_TEXT_ENCODER = "base64"
DEFAULT_CONCURRENCY = 4
