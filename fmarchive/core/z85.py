"""Z85 (ZeroMQ Base85) encoding and decoding.

Unlike the ZeroMQ reference, input lengths need not be multiples of four:
a trailing group of ``n`` bytes is written as ``n + 1`` digits and read back
by padding with the highest digit.
"""

from ..utils import FormatError

ALPHABET = (
    "0123456789"
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    ".-:+=^!/*?&<>()[]{}@%$#"
)

DECODE_TABLE = {symbol: value for value, symbol in enumerate(ALPHABET)}

POWERS = (85 ** 4, 85 ** 3, 85 ** 2, 85, 1)

MAX_DIGIT = 84


def encode(data: bytes) -> str:
    """
    Encode bytes to Z85 text.

    Args:
        data: Bytes to encode.

    Returns:
        Z85 text.
    """
    symbols = []
    for offset in range(0, len(data), 4):
        block = data[offset:offset + 4]
        value = int.from_bytes(block.ljust(4, b"\x00"), "big")
        count = 5 if len(block) == 4 else len(block) + 1
        for power in POWERS[:count]:
            symbols.append(ALPHABET[(value // power) % 85])
    return "".join(symbols)


def _digit(symbol: str) -> int:
    digit = DECODE_TABLE.get(symbol)
    if digit is None:
        raise FormatError(f"Contains invalid character (U+{ord(symbol):04X}).")
    return digit


def decode(text: str) -> bytes:
    """
    Decode Z85 text.

    Args:
        text: Z85 text.

    Returns:
        Decoded bytes.

    Raises:
        FormatError: If the text contains a character outside the alphabet.
    """
    decoded = bytearray()
    for offset in range(0, len(text), 5):
        group = text[offset:offset + 5]
        value = 0
        for symbol in group:
            value = value * 85 + _digit(symbol)
        for _ in range(5 - len(group)):
            value = value * 85 + MAX_DIGIT
        value &= 0xFFFFFFFF
        count = 4 if len(group) == 5 else len(group) - 1
        decoded += value.to_bytes(4, "big")[:count]
    return bytes(decoded)
