"""
QR Code matrix construction: function patterns and data placement.

Coordinates are (x, y) = (column, row) with the origin at the top-left
corner; the grid is stored row-major as matrix[y][x].

References:
- https://www.thonky.com/qr-code-tutorial/module-placement-matrix
- https://www.thonky.com/qr-code-tutorial/data-masking
"""

import enum
from typing import List, Sequence

from .tables import alignment_positions, check_version, remainder_bits, symbol_size


class ModuleKind(enum.Enum):
    """What a module holds; only DATA modules are masked."""

    DATA = 0
    FUNCTION = 1  # Finder, separator, timing, alignment and the dark module
    METADATA = 2  # Format and version information


class QRMatrix:
    """QR Code matrix construction and manipulation."""

    def __init__(self, version: int):
        self.version = check_version(version)
        self.size = symbol_size(version)

        # Matrix values: False=light, True=dark
        self.modules: List[List[bool]] = [[False] * self.size for _ in range(self.size)]
        self.kinds: List[List[ModuleKind]] = [
            [ModuleKind.DATA] * self.size for _ in range(self.size)]

        self._place_function_patterns()

    def _place_function_patterns(self):
        """Place all function patterns."""
        self._place_finder_patterns()
        self._place_separators()
        self._place_timing_patterns()
        self._place_alignment_patterns()
        self._place_dark_module()
        self._reserve_format_area()
        if self.version >= 7:
            self._reserve_version_area()

    def _place_finder_patterns(self):
        """Place the three finder patterns."""
        positions = [
            (0, 0),                          # Top-left
            (self.size - 7, 0),              # Top-right
            (0, self.size - 7)               # Bottom-left
        ]
        for (x, y) in positions:
            self._place_finder_pattern(x, y)

    def _place_finder_pattern(self, x: int, y: int):
        """Place a single 7x7 finder pattern with its top-left corner at (x, y)."""
        for dy in range(7):
            for dx in range(7):
                dark = (dy in (0, 6) or dx in (0, 6) or
                        (2 <= dx <= 4 and 2 <= dy <= 4))
                self.set_function(x + dx, y + dy, dark)

    def _place_separators(self):
        """Place light separators around finder patterns."""
        # Horizontal
        for x in range(8):
            self.set_function(x, 7, False)
            self.set_function(self.size - 8 + x, 7, False)
            self.set_function(x, self.size - 8, False)

        # Vertical
        for y in range(8):
            self.set_function(7, y, False)
            self.set_function(self.size - 8, y, False)
            self.set_function(7, self.size - 8 + y, False)

    def _place_timing_patterns(self):
        """Place timing patterns (row 6 and column 6)."""
        for i in range(8, self.size - 8):
            dark = i % 2 == 0
            self.set_function(i, 6, dark)
            self.set_function(6, i, dark)

    def _place_alignment_patterns(self):
        """Place alignment patterns for version 2+."""
        positions = alignment_positions(self.version)
        for row in positions:
            for col in positions:
                if self._overlaps_finder(row, col):
                    continue
                self._place_alignment_pattern(col, row)

    def _overlaps_finder(self, row: int, col: int) -> bool:
        """Check if alignment pattern would overlap finder patterns."""
        if row <= 8 and col <= 8:
            return True
        if row <= 8 and col >= self.size - 9:
            return True
        if row >= self.size - 9 and col <= 8:
            return True
        return False

    def _place_alignment_pattern(self, x: int, y: int):
        """Place a single 5x5 alignment pattern centered at (x, y)."""
        for dy in range(-2, 3):
            for dx in range(-2, 3):
                dark = abs(dy) == 2 or abs(dx) == 2 or (dy == 0 and dx == 0)
                self.set_function(x + dx, y + dy, dark)

    def _place_dark_module(self):
        """Place the dark module beside the bottom-left finder."""
        self.set_function(8, 4 * self.version + 9, True)

    def _reserve_format_area(self):
        """Reserve both copies of the 15 format information modules."""
        for i in range(9):
            if i != 6:
                self._reserve(8, i)
                self._reserve(i, 8)
        for i in range(8):
            self._reserve(self.size - 1 - i, 8)
        for i in range(7):
            self._reserve(8, self.size - 1 - i)

    def _reserve_version_area(self):
        """Reserve both 6x3 blocks of version information (version 7+)."""
        for i in range(6):
            for j in range(3):
                self._reserve(self.size - 11 + j, i)
                self._reserve(i, self.size - 11 + j)

    def _reserve(self, x: int, y: int):
        self.modules[y][x] = False
        self.kinds[y][x] = ModuleKind.METADATA

    def set_function(self, x: int, y: int, dark: bool):
        """Set a function pattern module."""
        self.modules[y][x] = dark
        self.kinds[y][x] = ModuleKind.FUNCTION

    def set_metadata(self, x: int, y: int, dark: bool):
        """Write a format or version information module."""
        if self.kinds[y][x] is not ModuleKind.METADATA:
            raise ValueError(f"Module ({x}, {y}) is not reserved for metadata")
        self.modules[y][x] = dark

    def is_data(self, x: int, y: int) -> bool:
        return self.kinds[y][x] is ModuleKind.DATA

    def place_data(self, codewords: Sequence[int]) -> int:
        """
        Place codeword bits in the zigzag pattern, MSB first.

        Two-column strips are walked from the right edge, alternately upward
        and downward, skipping the vertical timing column. Data modules left
        after the last codeword are the remainder bits and stay light.

        Returns:
            Number of codeword bits placed
        """
        total_bits = len(codewords) * 8
        bit_index = 0
        leftover = 0

        right = self.size - 1
        while right >= 1:
            if right == 6:
                right = 5
            upward = ((right + 1) & 2) == 0
            for vert in range(self.size):
                y = self.size - 1 - vert if upward else vert
                for x in (right, right - 1):
                    if not self.is_data(x, y):
                        continue
                    if bit_index < total_bits:
                        byte = codewords[bit_index >> 3]
                        self.modules[y][x] = ((byte >> (7 - (bit_index & 7))) & 1) == 1
                        bit_index += 1
                    else:
                        self.modules[y][x] = False
                        leftover += 1
            right -= 2

        if bit_index != total_bits:
            raise ValueError(f"Placed {bit_index} of {total_bits} codeword bits")
        if leftover != remainder_bits(self.version):
            raise ValueError(
                f"{leftover} remainder modules, expected {remainder_bits(self.version)}")
        return bit_index
