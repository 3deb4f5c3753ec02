"""RFC 4648 Base32 encoding and decoding."""

from ..utils import FormatError

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"

# Case-insensitive symbol lookup
DECODE_TABLE = {
    **{symbol: value for value, symbol in enumerate(ALPHABET)},
    **{symbol.lower(): value for value, symbol in enumerate(ALPHABET) if symbol.isalpha()},
}

PAD = "="

# Bytes in a partial group -> symbols emitted before padding
SYMBOLS_PER_PARTIAL = {1: 2, 2: 4, 3: 5, 4: 7, 5: 8}

# Symbols left after stripping padding -> bytes they carry
BYTES_PER_SYMBOLS = {0: 0, 2: 1, 4: 2, 5: 3, 7: 4, 8: 5}


def encode(data: bytes) -> str:
    """
    Encode bytes to padded Base32 text.

    Args:
        data: Bytes to encode.

    Returns:
        Base32 text whose length is a multiple of 8.
    """
    symbols = []
    for offset in range(0, len(data), 5):
        block = data[offset:offset + 5]
        value = int.from_bytes(block.ljust(5, b"\x00"), "big")
        count = SYMBOLS_PER_PARTIAL[len(block)]
        for position in range(count):
            symbols.append(ALPHABET[(value >> (35 - 5 * position)) & 0x1F])
        symbols.append(PAD * (8 - count))
    return "".join(symbols)


def decode(text: str) -> bytes:
    """
    Decode Base32 text, ignoring trailing padding.

    Args:
        text: Base32 text; lower-case letters are accepted.

    Returns:
        Decoded bytes.

    Raises:
        FormatError: If the length is non-canonical or a symbol is invalid.
    """
    trimmed = text.rstrip(PAD)
    if len(trimmed) % 8 in (1, 3, 6):
        raise FormatError("Invalid text.")

    decoded = bytearray()
    for offset in range(0, len(trimmed), 8):
        group = trimmed[offset:offset + 8]
        value = 0
        for symbol in group:
            digit = DECODE_TABLE.get(symbol)
            if digit is None:
                raise FormatError("Invalid text.")
            value = (value << 5) | digit
        value <<= 5 * (8 - len(group))
        decoded += value.to_bytes(5, "big")[:BYTES_PER_SYMBOLS[len(group)]]
    return bytes(decoded)
