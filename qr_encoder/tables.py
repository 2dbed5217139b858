"""
Capacity and layout tables for QR Code Model 2 (ISO/IEC 18004).

Every table here is a literal transcription of the standard, indexed by
version (1-40) and, where it matters, by error correction level in the order
L, M, Q, H. Nothing is computed from a formula at runtime.

References:
- ISO/IEC 18004:2015, tables 1, 7, 9 and annex E
- https://www.thonky.com/qr-code-tutorial/error-correction-table
"""

import enum
from typing import Dict, List, Tuple, Union

from .errors import InvalidConfiguration

MIN_VERSION = 1
MAX_VERSION = 40


class ECCLevel(enum.IntEnum):
    """Error correction level, ordered by increasing redundancy."""

    L = 0  # ~7% of codewords can be restored
    M = 1  # ~15%
    Q = 2  # ~25%
    H = 3  # ~30%

    @property
    def format_bits(self) -> int:
        """The 2-bit indicator written into the format information."""
        return EC_LEVEL_BITS[self.name]

    @classmethod
    def coerce(cls, value: Union["ECCLevel", str]) -> "ECCLevel":
        """Accept an ECCLevel or one of the strings 'L', 'M', 'Q', 'H'."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.upper() in cls.__members__:
            return cls[value.upper()]
        raise InvalidConfiguration(f"Invalid error correction level: {value!r}")


# Error correction level bits as they appear in the format string
EC_LEVEL_BITS = {
    'L': 0b01,
    'M': 0b00,
    'Q': 0b11,
    'H': 0b10
}


class Mode(enum.Enum):
    """Segment modes and their 4-bit mode indicators."""

    NUMERIC = 0b0001
    ALPHANUMERIC = 0b0010
    BYTE = 0b0100
    KANJI = 0b1000
    ECI = 0b0111

    @property
    def indicator(self) -> int:
        return self.value


# Character count indicator widths for versions 1-9, 10-26 and 27-40
CHARACTER_COUNT_BITS = {
    Mode.NUMERIC: (10, 12, 14),
    Mode.ALPHANUMERIC: (9, 11, 13),
    Mode.BYTE: (8, 16, 16),
    Mode.KANJI: (8, 10, 12),
    Mode.ECI: (0, 0, 0),
}

# Total codewords (data + error correction) per version
TOTAL_CODEWORDS: Dict[int, int] = {
    1: 26, 2: 44, 3: 70, 4: 100, 5: 134,
    6: 172, 7: 196, 8: 242, 9: 292, 10: 346,
    11: 404, 12: 466, 13: 532, 14: 581, 15: 655,
    16: 733, 17: 815, 18: 901, 19: 991, 20: 1085,
    21: 1156, 22: 1258, 23: 1364, 24: 1474, 25: 1588,
    26: 1706, 27: 1828, 28: 1921, 29: 2051, 30: 2185,
    31: 2323, 32: 2465, 33: 2611, 34: 2761, 35: 2876,
    36: 3034, 37: 3196, 38: 3362, 39: 3532, 40: 3706,
}

# Modules left over after the last whole codeword, always light before masking
REMAINDER_BITS: Tuple[int, ...] = (
    # index 0 is unused
    0,
    0, 7, 7, 7, 7, 7, 0, 0, 0, 0,
    0, 0, 0, 3, 3, 3, 3, 3, 3, 3,
    4, 4, 4, 4, 4, 4, 4, 3, 3, 3,
    3, 3, 3, 3, 0, 0, 0, 0, 0, 0,
)

# Data codewords per version for levels (L, M, Q, H)
DATA_CODEWORDS: Dict[int, Tuple[int, int, int, int]] = {
     1: (19, 16, 13, 9),
     2: (34, 28, 22, 16),
     3: (55, 44, 34, 26),
     4: (80, 64, 48, 36),
     5: (108, 86, 62, 46),
     6: (136, 108, 76, 60),
     7: (156, 124, 88, 66),
     8: (194, 154, 110, 86),
     9: (232, 182, 132, 100),
    10: (274, 216, 154, 122),
    11: (324, 254, 180, 140),
    12: (370, 290, 206, 158),
    13: (428, 334, 244, 180),
    14: (461, 365, 261, 197),
    15: (523, 415, 295, 223),
    16: (589, 453, 325, 253),
    17: (647, 507, 367, 283),
    18: (721, 563, 397, 313),
    19: (795, 627, 445, 341),
    20: (861, 669, 485, 385),
    21: (932, 714, 512, 406),
    22: (1006, 782, 568, 442),
    23: (1094, 860, 614, 464),
    24: (1174, 914, 664, 514),
    25: (1276, 1000, 718, 538),
    26: (1370, 1062, 754, 596),
    27: (1468, 1128, 808, 628),
    28: (1531, 1193, 871, 661),
    29: (1631, 1267, 911, 701),
    30: (1735, 1373, 985, 745),
    31: (1843, 1455, 1033, 793),
    32: (1955, 1541, 1115, 845),
    33: (2071, 1631, 1171, 901),
    34: (2191, 1725, 1231, 961),
    35: (2306, 1812, 1286, 986),
    36: (2434, 1914, 1354, 1054),
    37: (2566, 1992, 1426, 1096),
    38: (2702, 2102, 1502, 1142),
    39: (2812, 2216, 1582, 1222),
    40: (2956, 2334, 1666, 1276),
}

# Block structure per version for levels (L, M, Q, H). Each entry is
# (ec codewords per block, group 1 blocks, group 1 data codewords,
#  group 2 blocks, group 2 data codewords).
EC_BLOCKS: Dict[int, Tuple[Tuple[int, int, int, int, int], ...]] = {
     1: ((7, 1, 19, 0, 0), (10, 1, 16, 0, 0), (13, 1, 13, 0, 0), (17, 1, 9, 0, 0)),
     2: ((10, 1, 34, 0, 0), (16, 1, 28, 0, 0), (22, 1, 22, 0, 0), (28, 1, 16, 0, 0)),
     3: ((15, 1, 55, 0, 0), (26, 1, 44, 0, 0), (18, 2, 17, 0, 0), (22, 2, 13, 0, 0)),
     4: ((20, 1, 80, 0, 0), (18, 2, 32, 0, 0), (26, 2, 24, 0, 0), (16, 4, 9, 0, 0)),
     5: ((26, 1, 108, 0, 0), (24, 2, 43, 0, 0), (18, 2, 15, 2, 16), (22, 2, 11, 2, 12)),
     6: ((18, 2, 68, 0, 0), (16, 4, 27, 0, 0), (24, 4, 19, 0, 0), (28, 4, 15, 0, 0)),
     7: ((20, 2, 78, 0, 0), (18, 4, 31, 0, 0), (18, 2, 14, 4, 15), (26, 4, 13, 1, 14)),
     8: ((24, 2, 97, 0, 0), (22, 2, 38, 2, 39), (22, 4, 18, 2, 19), (26, 4, 14, 2, 15)),
     9: ((30, 2, 116, 0, 0), (22, 3, 36, 2, 37), (20, 4, 16, 4, 17), (24, 4, 12, 4, 13)),
    10: ((18, 2, 68, 2, 69), (26, 4, 43, 1, 44), (24, 6, 19, 2, 20), (28, 6, 15, 2, 16)),
    11: ((20, 4, 81, 0, 0), (30, 1, 50, 4, 51), (28, 4, 22, 4, 23), (24, 3, 12, 8, 13)),
    12: ((24, 2, 92, 2, 93), (22, 6, 36, 2, 37), (26, 4, 20, 6, 21), (28, 7, 14, 4, 15)),
    13: ((26, 4, 107, 0, 0), (22, 8, 37, 1, 38), (24, 8, 20, 4, 21), (22, 12, 11, 4, 12)),
    14: ((30, 3, 115, 1, 116), (24, 4, 40, 5, 41), (20, 11, 16, 5, 17), (24, 11, 12, 5, 13)),
    15: ((22, 5, 87, 1, 88), (24, 5, 41, 5, 42), (30, 5, 24, 7, 25), (24, 11, 12, 7, 13)),
    16: ((24, 5, 98, 1, 99), (28, 7, 45, 3, 46), (24, 15, 19, 2, 20), (30, 3, 15, 13, 16)),
    17: ((28, 1, 107, 5, 108), (28, 10, 46, 1, 47), (28, 1, 22, 15, 23), (28, 2, 14, 17, 15)),
    18: ((30, 5, 120, 1, 121), (26, 9, 43, 4, 44), (28, 17, 22, 1, 23), (28, 2, 14, 19, 15)),
    19: ((28, 3, 113, 4, 114), (26, 3, 44, 11, 45), (26, 17, 21, 4, 22), (26, 9, 13, 16, 14)),
    20: ((28, 3, 107, 5, 108), (26, 3, 41, 13, 42), (30, 15, 24, 5, 25), (28, 15, 15, 10, 16)),
    21: ((28, 4, 116, 4, 117), (26, 17, 42, 0, 0), (28, 17, 22, 6, 23), (30, 19, 16, 6, 17)),
    22: ((28, 2, 111, 7, 112), (28, 17, 46, 0, 0), (30, 7, 24, 16, 25), (24, 34, 13, 0, 0)),
    23: ((30, 4, 121, 5, 122), (28, 4, 47, 14, 48), (30, 11, 24, 14, 25), (30, 16, 15, 14, 16)),
    24: ((30, 6, 117, 4, 118), (28, 6, 45, 14, 46), (30, 11, 24, 16, 25), (30, 30, 16, 2, 17)),
    25: ((26, 8, 106, 4, 107), (28, 8, 47, 13, 48), (30, 7, 24, 22, 25), (30, 22, 15, 13, 16)),
    26: ((28, 10, 114, 2, 115), (28, 19, 46, 4, 47), (28, 28, 22, 6, 23), (30, 33, 16, 4, 17)),
    27: ((30, 8, 122, 4, 123), (28, 22, 45, 3, 46), (30, 8, 23, 26, 24), (30, 12, 15, 28, 16)),
    28: ((30, 3, 117, 10, 118), (28, 3, 45, 23, 46), (30, 4, 24, 31, 25), (30, 11, 15, 31, 16)),
    29: ((30, 7, 116, 7, 117), (28, 21, 45, 7, 46), (30, 1, 23, 37, 24), (30, 19, 15, 26, 16)),
    30: ((30, 5, 115, 10, 116), (28, 19, 47, 10, 48), (30, 15, 24, 25, 25), (30, 23, 15, 25, 16)),
    31: ((30, 13, 115, 3, 116), (28, 2, 46, 29, 47), (30, 42, 24, 1, 25), (30, 23, 15, 28, 16)),
    32: ((30, 17, 115, 0, 0), (28, 10, 46, 23, 47), (30, 10, 24, 35, 25), (30, 19, 15, 35, 16)),
    33: ((30, 17, 115, 1, 116), (28, 14, 46, 21, 47), (30, 29, 24, 19, 25), (30, 11, 15, 46, 16)),
    34: ((30, 13, 115, 6, 116), (28, 14, 46, 23, 47), (30, 44, 24, 7, 25), (30, 59, 16, 1, 17)),
    35: ((30, 12, 121, 7, 122), (28, 12, 47, 26, 48), (30, 39, 24, 14, 25), (30, 22, 15, 41, 16)),
    36: ((30, 6, 121, 14, 122), (28, 6, 47, 34, 48), (30, 46, 24, 10, 25), (30, 2, 15, 64, 16)),
    37: ((30, 17, 122, 4, 123), (28, 29, 46, 14, 47), (30, 49, 24, 10, 25), (30, 24, 15, 46, 16)),
    38: ((30, 4, 122, 18, 123), (28, 13, 46, 32, 47), (30, 48, 24, 14, 25), (30, 42, 15, 32, 16)),
    39: ((30, 20, 117, 4, 118), (28, 40, 47, 7, 48), (30, 43, 24, 22, 25), (30, 10, 15, 67, 16)),
    40: ((30, 19, 118, 6, 119), (28, 18, 47, 31, 48), (30, 34, 24, 34, 25), (30, 20, 15, 61, 16)),
}

# Alignment pattern centre coordinates, used on both axes
ALIGNMENT_POSITIONS: Dict[int, Tuple[int, ...]] = {
     1: (),
     2: (6, 18),
     3: (6, 22),
     4: (6, 26),
     5: (6, 30),
     6: (6, 34),
     7: (6, 22, 38),
     8: (6, 24, 42),
     9: (6, 26, 46),
    10: (6, 28, 50),
    11: (6, 30, 54),
    12: (6, 32, 58),
    13: (6, 34, 62),
    14: (6, 26, 46, 66),
    15: (6, 26, 48, 70),
    16: (6, 26, 50, 74),
    17: (6, 30, 54, 78),
    18: (6, 30, 56, 82),
    19: (6, 30, 58, 86),
    20: (6, 34, 62, 90),
    21: (6, 28, 50, 72, 94),
    22: (6, 26, 50, 74, 98),
    23: (6, 30, 54, 78, 102),
    24: (6, 28, 54, 80, 106),
    25: (6, 32, 58, 84, 110),
    26: (6, 30, 58, 86, 114),
    27: (6, 34, 62, 90, 118),
    28: (6, 26, 50, 74, 98, 122),
    29: (6, 30, 54, 78, 102, 126),
    30: (6, 26, 52, 78, 104, 130),
    31: (6, 30, 56, 82, 108, 134),
    32: (6, 34, 60, 86, 112, 138),
    33: (6, 30, 58, 86, 114, 142),
    34: (6, 34, 62, 90, 118, 146),
    35: (6, 30, 54, 78, 102, 126, 150),
    36: (6, 24, 50, 76, 102, 128, 154),
    37: (6, 28, 54, 80, 106, 132, 158),
    38: (6, 32, 58, 84, 110, 136, 162),
    39: (6, 26, 54, 82, 110, 138, 166),
    40: (6, 30, 58, 86, 114, 142, 170),
}


def check_version(version: int) -> int:
    """Return version unchanged, or raise if it is not 1-40."""
    if (not isinstance(version, int) or isinstance(version, bool)
            or not MIN_VERSION <= version <= MAX_VERSION):
        raise InvalidConfiguration(
            f"Version must be between {MIN_VERSION} and {MAX_VERSION}, got {version!r}")
    return version


def symbol_size(version: int) -> int:
    """Side length of the symbol in modules."""
    return 4 * version + 17


def total_codewords(version: int) -> int:
    return TOTAL_CODEWORDS[version]


def data_codewords(version: int, level: ECCLevel) -> int:
    return DATA_CODEWORDS[version][level]


def data_capacity_bits(version: int, level: ECCLevel) -> int:
    """Number of data bits available, terminator and padding included."""
    return DATA_CODEWORDS[version][level] * 8


def remainder_bits(version: int) -> int:
    return REMAINDER_BITS[version]


def alignment_positions(version: int) -> Tuple[int, ...]:
    return ALIGNMENT_POSITIONS[version]


def block_layout(version: int, level: ECCLevel) -> Tuple[List[int], int]:
    """
    Get the block structure for a version and level.

    Returns:
        (data codewords of each block in transmission order,
         error correction codewords per block)
    """
    ec_per_block, g1_blocks, g1_data, g2_blocks, g2_data = EC_BLOCKS[version][level]
    sizes = [g1_data] * g1_blocks + [g2_data] * g2_blocks
    return sizes, ec_per_block


def character_count_bits(version: int, mode: Mode) -> int:
    """Get the number of bits for the character count indicator."""
    if version <= 9:
        index = 0
    elif version <= 26:
        index = 1
    else:
        index = 2
    return CHARACTER_COUNT_BITS[mode][index]
