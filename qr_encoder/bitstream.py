"""
Bitstream construction: segments to padded data codewords.

References:
- https://www.thonky.com/qr-code-tutorial/data-encoding
"""

from typing import List, Sequence

from .segments import ALPHANUMERIC_TABLE, Segment, kanji_value
from .tables import ECCLevel, Mode, character_count_bits, data_codewords

# Pad codewords appended after the terminator, alternating
PAD_BYTES = (0b11101100, 0b00010001)  # 236, 17


class BitBuffer:
    """An appendable sequence of bits, most significant bit first."""

    def __init__(self):
        self.bits: List[int] = []

    def __len__(self) -> int:
        return len(self.bits)

    def append_bits(self, value: int, length: int) -> None:
        """Append the low `length` bits of value."""
        if length < 0 or value >> length != 0:
            raise ValueError(f"Value {value} does not fit in {length} bits")
        self.bits.extend((value >> i) & 1 for i in reversed(range(length)))

    def to_bytes(self) -> List[int]:
        """Pack into bytes; the length must be a multiple of 8."""
        if len(self.bits) % 8 != 0:
            raise ValueError("Bit buffer is not byte aligned")
        codewords = []
        for i in range(0, len(self.bits), 8):
            byte = 0
            for bit in self.bits[i:i + 8]:
                byte = (byte << 1) | bit
            codewords.append(byte)
        return codewords


def encode_numeric(buffer: BitBuffer, digits: bytes) -> None:
    """Groups of 3 digits -> 10 bits, trailing 2 -> 7 bits, trailing 1 -> 4 bits."""
    for i in range(0, len(digits), 3):
        group = digits[i:i + 3]
        buffer.append_bits(int(group), len(group) * 3 + 1)


def encode_alphanumeric(buffer: BitBuffer, text: bytes) -> None:
    """Pairs -> 11 bits (first * 45 + second), trailing single -> 6 bits."""
    values = [ALPHANUMERIC_TABLE[chr(c)] for c in text]
    for i in range(0, len(values) - 1, 2):
        buffer.append_bits(values[i] * 45 + values[i + 1], 11)
    if len(values) % 2:
        buffer.append_bits(values[-1], 6)


def encode_kanji(buffer: BitBuffer, pairs: bytes) -> None:
    """Each Shift-JIS double byte -> 13 bits."""
    for i in range(0, len(pairs), 2):
        buffer.append_bits(kanji_value((pairs[i] << 8) | pairs[i + 1]), 13)


def append_segment(buffer: BitBuffer, segment: Segment, version: int) -> None:
    """Mode indicator, character count indicator, then the payload."""
    buffer.append_bits(segment.mode.indicator, 4)
    buffer.append_bits(segment.num_chars, character_count_bits(version, segment.mode))
    if segment.mode is Mode.NUMERIC:
        encode_numeric(buffer, segment.data)
    elif segment.mode is Mode.ALPHANUMERIC:
        encode_alphanumeric(buffer, segment.data)
    elif segment.mode is Mode.KANJI:
        encode_kanji(buffer, segment.data)
    else:  # Byte mode and ECI designators are written verbatim
        for byte in segment.data:
            buffer.append_bits(byte, 8)


def build_data_codewords(segments: Sequence[Segment], version: int,
                         level: ECCLevel) -> List[int]:
    """
    Serialize segments into exactly data_codewords(version, level) bytes.

    Appends the terminator (up to 4 zero bits), zero bits to the next byte
    boundary, then alternating pad codewords.
    """
    buffer = BitBuffer()
    for segment in segments:
        append_segment(buffer, segment, version)

    capacity = data_codewords(version, level) * 8
    if len(buffer) > capacity:
        raise ValueError(f"{len(buffer)} data bits exceed capacity of {capacity}")

    # Add terminator (up to 4 bits)
    buffer.append_bits(0, min(4, capacity - len(buffer)))
    # Pad to byte boundary
    buffer.append_bits(0, -len(buffer) % 8)

    codewords = buffer.to_bytes()
    i = 0
    while len(codewords) < capacity // 8:
        codewords.append(PAD_BYTES[i % 2])
        i += 1
    return codewords
