"""Base122 encoding and decoding.

Data is consumed as a stream of 7-bit values. Values that are unsafe in
quoted text (NUL, LF, CR, double quote, ampersand, backslash) are folded
together with the following 7-bit value into one two-byte UTF-8 sequence::

    110sss1b 10bbbbbb

where ``sss`` is the index of the illegal value (``111`` when the stream
ended and there is no following value) and ``bbbbbbb`` is the next value.

Decoding performs no validation; malformed text yields wrong bytes rather
than an error.
"""

from typing import Iterator, Optional, Tuple

ILLEGALS = (0x00, 0x0A, 0x0D, 0x22, 0x26, 0x5C)

SHORTENED = 0b111

# (byte index, bit offset) into the input while encoding
FetchState = Tuple[int, int]

# (bits filled in current byte, current byte) while decoding
PushState = Tuple[int, int]


def fetch_7_bits(data: bytes, state: FetchState) -> Tuple[Optional[int], FetchState]:
    """
    Read the next 7 bits from ``data``.

    Args:
        data: Input bytes.
        state: Cursor returned by the previous call, ``(0, 0)`` to start.

    Returns:
        Tuple of (7-bit value or None when exhausted, advanced cursor).
    """
    index, current_bit = state
    if index == len(data):
        return None, state

    first_byte = data[index]
    first_part = (((0b11111110 >> current_bit) & first_byte) << current_bit) >> 1
    current_bit += 7
    if current_bit < 8:
        return first_part, (index, current_bit)

    current_bit -= 8
    index += 1
    if index == len(data):
        return first_part, (index, current_bit)

    second_byte = data[index]
    second_part = ((0xFF00 >> current_bit) & second_byte & 0xFF) >> (8 - current_bit)
    return first_part | second_part, (index, current_bit)


def push_7_bits(decoded: bytearray, value: int, state: PushState) -> PushState:
    """
    Append 7 bits to ``decoded``, flushing whole bytes as they fill.

    Args:
        decoded: Output buffer.
        value: 7-bit value.
        state: State returned by the previous call, ``(0, 0)`` to start.

    Returns:
        Updated state.
    """
    bit_of_byte, current_byte = state
    value = (value << 1) & 0xFF
    current_byte |= value >> bit_of_byte
    bit_of_byte += 7
    if bit_of_byte >= 8:
        decoded.append(current_byte)
        bit_of_byte -= 8
        current_byte = (value << (7 - bit_of_byte)) & 0xFF
    return bit_of_byte, current_byte


def encode(data: bytes) -> str:
    """
    Encode bytes to Base122 text.

    Args:
        data: Bytes to encode.

    Returns:
        Text made of safe ASCII and two-byte UTF-8 escapes.
    """
    encoded = bytearray()
    state: FetchState = (0, 0)
    while True:
        bits, state = fetch_7_bits(data, state)
        if bits is None:
            break
        if bits not in ILLEGALS:
            encoded.append(bits)
            continue

        first, second = 0b11000010, 0b10000000
        next_bits, state = fetch_7_bits(data, state)
        if next_bits is None:
            first |= SHORTENED << 2
            next_bits = bits
        else:
            first |= ILLEGALS.index(bits) << 2
        first |= (next_bits & 0b01000000) >> 6
        second |= next_bits & 0b00111111
        encoded.append(first)
        encoded.append(second)

    return encoded.decode("utf-8")


def _code_units(text: str) -> Iterator[int]:
    for char in text:
        code_point = ord(char)
        if code_point > 0xFFFF:
            code_point -= 0x10000
            yield 0xD800 | (code_point >> 10)
            yield 0xDC00 | (code_point & 0x3FF)
        else:
            yield code_point


def decode(text: str) -> bytes:
    """
    Decode Base122 text.

    Args:
        text: Base122 text.

    Returns:
        Decoded bytes.
    """
    decoded = bytearray()
    state: PushState = (0, 0)
    for unit in _code_units(text):
        if unit & 0xFF80 == 0:
            state = push_7_bits(decoded, unit, state)
            continue
        illegal_index = (unit >> 8) & 0b111
        if illegal_index != SHORTENED:
            # index 6 only comes from malformed text
            if illegal_index < len(ILLEGALS):
                state = push_7_bits(decoded, ILLEGALS[illegal_index], state)
        state = push_7_bits(decoded, unit & 0x7F, state)
    return bytes(decoded)
