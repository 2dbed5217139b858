"""
Data segmentation: splitting input into mode-homogeneous runs.

A segment is a run of characters that share one encoding mode. Input may be
a str (byte runs are written as UTF-8) or bytes (every byte is one character,
classified by its ASCII value).

Two strategies are provided:
- make_segments: maximal contiguous runs per character class. Always available.
- make_segments_optimally: a shortest-path search over per-character mode
  choices that minimises the encoded bit length at a given version.

References:
- https://www.thonky.com/qr-code-tutorial/data-analysis
- https://www.nayuki.io/page/optimal-text-segmentation-for-qr-codes
"""

import itertools
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from .errors import InvalidConfiguration, UnsupportedCharacter
from .tables import Mode, character_count_bits

# Alphanumeric character mapping
ALPHANUMERIC_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:"
ALPHANUMERIC_TABLE = {c: i for i, c in enumerate(ALPHANUMERIC_CHARSET)}

Data = Union[str, bytes]


#==============================================================================
# CHARACTER CLASSIFICATION
#==============================================================================

def is_numeric(char: str) -> bool:
    return '0' <= char <= '9'


def is_alphanumeric(char: str) -> bool:
    return char in ALPHANUMERIC_TABLE


def kanji_value(pair: int) -> Optional[int]:
    """
    Map a Shift-JIS double-byte code to its 13-bit kanji mode value.

    Returns None when the code lies outside 0x8140-0x9FFC and 0xE040-0xEBBF.
    """
    if 0x8140 <= pair <= 0x9FFC:
        pair -= 0x8140
    elif 0xE040 <= pair <= 0xEBBF:
        pair -= 0xC140
    else:
        return None
    lsb = pair & 0xFF
    if lsb > 0xFC - 0x40:
        return None
    return (pair >> 8) * 0xC0 + lsb


def _shift_jis(char: str) -> Optional[bytes]:
    """Shift-JIS bytes of char when it is a kanji mode character."""
    try:
        encoded = char.encode('shift_jis')
    except UnicodeEncodeError:
        return None
    if len(encoded) != 2 or kanji_value((encoded[0] << 8) | encoded[1]) is None:
        return None
    return encoded


def _units(data: Data) -> List[str]:
    """Split input into characters; bytes become one-character latin-1 strings."""
    if isinstance(data, (bytes, bytearray)):
        return [chr(b) for b in data]
    if isinstance(data, str):
        return list(data)
    raise TypeError(f"Expected str or bytes, got {type(data).__name__}")


def _classify(char: str, raw: bool, kanji: bool) -> Mode:
    if is_numeric(char):
        return Mode.NUMERIC
    if is_alphanumeric(char):
        return Mode.ALPHANUMERIC
    if kanji and not raw and _shift_jis(char) is not None:
        return Mode.KANJI
    return Mode.BYTE


def _byte_length(char: str, raw: bool) -> int:
    return 1 if raw else len(char.encode('utf-8'))


#==============================================================================
# SEGMENT
#==============================================================================

@dataclass(frozen=True)
class Segment:
    """
    An immutable run of data in one mode.

    data holds ASCII digits/characters for numeric and alphanumeric mode, the
    payload for byte mode, Shift-JIS byte pairs for kanji mode and the
    designator bytes for ECI. num_chars is the value of the character count
    indicator.
    """

    mode: Mode
    data: bytes
    num_chars: int

    @classmethod
    def make_numeric(cls, text: str) -> 'Segment':
        for i, c in enumerate(text):
            if not is_numeric(c):
                raise UnsupportedCharacter(c, i, Mode.NUMERIC)
        return cls(Mode.NUMERIC, text.encode('ascii'), len(text))

    @classmethod
    def make_alphanumeric(cls, text: str) -> 'Segment':
        for i, c in enumerate(text):
            if not is_alphanumeric(c):
                raise UnsupportedCharacter(c, i, Mode.ALPHANUMERIC)
        return cls(Mode.ALPHANUMERIC, text.encode('ascii'), len(text))

    @classmethod
    def make_bytes(cls, data: Data) -> 'Segment':
        payload = data.encode('utf-8') if isinstance(data, str) else bytes(data)
        return cls(Mode.BYTE, payload, len(payload))

    @classmethod
    def make_kanji(cls, data: Data) -> 'Segment':
        """Kanji segment from text, or from raw Shift-JIS byte pairs."""
        if isinstance(data, str):
            pairs = []
            for i, c in enumerate(data):
                encoded = _shift_jis(c)
                if encoded is None:
                    raise UnsupportedCharacter(c, i, Mode.KANJI)
                pairs.append(encoded)
            return cls(Mode.KANJI, b''.join(pairs), len(data))

        payload = bytes(data)
        for i in range(0, len(payload), 2):
            pair = payload[i:i + 2]
            if len(pair) != 2 or kanji_value((pair[0] << 8) | pair[1]) is None:
                raise UnsupportedCharacter(pair, i, Mode.KANJI)
        return cls(Mode.KANJI, payload, len(payload) // 2)

    @classmethod
    def make_eci(cls, assignment: int) -> 'Segment':
        """Extended Channel Interpretation designator."""
        if 0 <= assignment < (1 << 7):
            designator = assignment.to_bytes(1, 'big')
        elif assignment < (1 << 14):
            designator = (0x8000 | assignment).to_bytes(2, 'big')
        elif assignment < 1000000:
            designator = (0xC00000 | assignment).to_bytes(3, 'big')
        else:
            raise InvalidConfiguration(f"ECI assignment value out of range: {assignment}")
        return cls(Mode.ECI, designator, 0)

    @property
    def payload_bits(self) -> int:
        """Number of data bits after the character count indicator."""
        n = self.num_chars
        if self.mode is Mode.NUMERIC:
            return 10 * (n // 3) + (0, 4, 7)[n % 3]
        if self.mode is Mode.ALPHANUMERIC:
            return 11 * (n // 2) + 6 * (n % 2)
        if self.mode is Mode.KANJI:
            return 13 * n
        return 8 * len(self.data)

    def bit_length(self, version: int) -> Optional[int]:
        """
        Encoded size including mode indicator and character count.

        Returns None if num_chars does not fit the count field at version.
        """
        count_bits = character_count_bits(version, self.mode)
        if self.mode is not Mode.ECI and self.num_chars >= (1 << count_bits):
            return None
        return 4 + count_bits + self.payload_bits


def total_bits(segments: Sequence[Segment], version: int) -> Optional[int]:
    """Bits needed for all segments at version, or None if one overflows."""
    result = 0
    for seg in segments:
        length = seg.bit_length(version)
        if length is None:
            return None
        result += length
    return result


def _make_segment(mode: Mode, chars: Sequence[str], raw: bool) -> Segment:
    text = ''.join(chars)
    if mode is Mode.NUMERIC:
        return Segment.make_numeric(text)
    if mode is Mode.ALPHANUMERIC:
        return Segment.make_alphanumeric(text)
    if mode is Mode.KANJI:
        return Segment.make_kanji(text)
    return Segment.make_bytes(text.encode('latin-1') if raw else text)


#==============================================================================
# SEGMENTERS
#==============================================================================

def make_segments(data: Data, mode: Optional[Mode] = None,
                  kanji: bool = False) -> List[Segment]:
    """
    Split data into maximal contiguous runs of one mode.

    Args:
        data: Text or bytes to encode
        mode: Force a single segment in this mode
        kanji: Recognise Shift-JIS kanji characters in text input

    Returns:
        List of segments; empty for empty input
    """
    raw = isinstance(data, (bytes, bytearray))
    units = _units(data)
    if mode is not None:
        return [_forced_segment(data, units, mode, raw)]
    if not units:
        return []

    return [
        _make_segment(run_mode, list(run), raw)
        for run_mode, run in itertools.groupby(units, key=lambda c: _classify(c, raw, kanji))
    ]


def _forced_segment(data: Data, units: List[str], mode: Mode, raw: bool) -> Segment:
    if mode is Mode.ECI:
        raise InvalidConfiguration("ECI cannot be used as a data mode")
    if mode is Mode.BYTE:
        return Segment.make_bytes(data)
    if mode is Mode.KANJI:
        return Segment.make_kanji(data)
    return _make_segment(mode, units, raw)


def make_segments_optimally(data: Data, version: int,
                            kanji: bool = False) -> List[Segment]:
    """
    Split data into segments with the smallest total bit length at version.

    Dynamic programming over the mode each character is encoded in. Costs are
    counted in sixths of a bit so that numeric (10 bits per 3 digits) and
    alphanumeric (11 bits per 2 characters) runs stay integral; accumulated
    costs are rounded up to whole bits whenever a segment is closed.
    """
    raw = isinstance(data, (bytes, bytearray))
    units = _units(data)
    if not units:
        return []

    modes = [Mode.BYTE, Mode.ALPHANUMERIC, Mode.NUMERIC]
    if kanji and not raw:
        modes.append(Mode.KANJI)
    head_costs = [(4 + character_count_bits(version, m)) * 6 for m in modes]

    # char_modes[i][j]: mode of character i on the cheapest path that ends in modes[j]
    char_modes: List[List[Optional[Mode]]] = []
    prev_costs = list(head_costs)
    for c in units:
        cur_costs = [0] * len(modes)
        choice: List[Optional[Mode]] = [None] * len(modes)
        for j, m in enumerate(modes):
            if m is Mode.BYTE:
                cost = _byte_length(c, raw) * 8 * 6
            elif m is Mode.ALPHANUMERIC and is_alphanumeric(c):
                cost = 33
            elif m is Mode.NUMERIC and is_numeric(c):
                cost = 20
            elif m is Mode.KANJI and _shift_jis(c) is not None:
                cost = 78
            else:
                continue
            cur_costs[j] = prev_costs[j] + cost
            choice[j] = m

        # Close the segment after this character and open one in another mode
        for j in range(len(modes)):
            for k in range(len(modes)):
                if choice[k] is None:
                    continue
                new_cost = (cur_costs[k] + 5) // 6 * 6 + head_costs[j]
                if choice[j] is None or new_cost < cur_costs[j]:
                    cur_costs[j] = new_cost
                    choice[j] = modes[k]
        char_modes.append(choice)
        prev_costs = cur_costs

    best = None
    for j in range(len(modes)):
        if char_modes[-1][j] is not None and (best is None or prev_costs[j] < prev_costs[best]):
            best = j
    cur_mode = modes[best]

    # Trace back the mode of each character
    chosen: List[Mode] = [Mode.BYTE] * len(units)
    for i in range(len(units) - 1, -1, -1):
        cur_mode = char_modes[i][modes.index(cur_mode)]
        chosen[i] = cur_mode

    segments = []
    start = 0
    for run_mode, run in itertools.groupby(chosen):
        length = len(list(run))
        segments.append(_make_segment(run_mode, units[start:start + length], raw))
        start += length
    return segments
