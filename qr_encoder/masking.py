"""
Data masking, penalty scoring and format/version information.

References:
- https://www.thonky.com/qr-code-tutorial/data-masking
- https://www.thonky.com/qr-code-tutorial/format-version-information
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from .errors import InvalidConfiguration
from .matrix import QRMatrix
from .tables import ECCLevel

logger = logging.getLogger(__name__)

MASK_PATTERNS: List[Callable[[int, int], bool]] = [
    lambda r, c: (r + c) % 2 == 0,
    lambda r, c: r % 2 == 0,
    lambda r, c: c % 3 == 0,
    lambda r, c: (r + c) % 3 == 0,
    lambda r, c: (r // 2 + c // 3) % 2 == 0,
    lambda r, c: (r * c) % 2 + (r * c) % 3 == 0,
    lambda r, c: ((r * c) % 2 + (r * c) % 3) % 2 == 0,
    lambda r, c: ((r + c) % 2 + (r * c) % 3) % 2 == 0,
]


def check_mask(mask: Optional[int]) -> Optional[int]:
    """Return mask unchanged if it is None or one of the 8 standard patterns."""
    if mask is not None and not (isinstance(mask, int) and not isinstance(mask, bool)
                                 and 0 <= mask < len(MASK_PATTERNS)):
        raise InvalidConfiguration(f"Mask must be between 0 and 7, got {mask!r}")
    return mask


# Penalty weights
PENALTY_N1 = 3
PENALTY_N2 = 3
PENALTY_N3 = 40
PENALTY_N4 = 10


#==============================================================================
# BCH CODE FOR FORMAT INFORMATION, GOLAY CODE FOR VERSION INFORMATION
#==============================================================================

# BCH generator polynomial: x^10 + x^8 + x^5 + x^4 + x^2 + x + 1
BCH_GENERATOR = 0b10100110111

# Format mask pattern
FORMAT_MASK = 0b101010000010010

# Golay generator polynomial: x^12 + x^11 + x^10 + x^9 + x^8 + x^5 + x^2 + 1
GOLAY_GENERATOR = 0b1111100100101


def bch_encode(data_5bits: int) -> int:
    """
    Encode 5 data bits using (15,5) BCH code.

    Args:
        data_5bits: 5-bit integer (EC level 2 bits + mask pattern 3 bits)

    Returns:
        15-bit encoded format information (before final XOR)
    """
    remainder = data_5bits << 10
    for i in range(14, 9, -1):
        if remainder & (1 << i):
            remainder ^= BCH_GENERATOR << (i - 10)
    return (data_5bits << 10) | remainder


def format_bits(level: ECCLevel, mask: int) -> int:
    """Generate the complete 15-bit format string."""
    return bch_encode((level.format_bits << 3) | mask) ^ FORMAT_MASK


def version_bits(version: int) -> int:
    """18-bit version information: 6 version bits and a 12-bit Golay remainder."""
    remainder = version << 12
    for i in range(17, 11, -1):
        if remainder & (1 << i):
            remainder ^= GOLAY_GENERATOR << (i - 12)
    return (version << 12) | remainder


def draw_format_info(matrix: QRMatrix, level: ECCLevel, mask: int) -> None:
    """Write both copies of the format information."""
    bits = format_bits(level, mask)
    size = matrix.size

    def bit(i: int) -> bool:
        return ((bits >> i) & 1) == 1

    # Around the top-left finder
    for i in range(6):
        matrix.set_metadata(8, i, bit(i))
    matrix.set_metadata(8, 7, bit(6))
    matrix.set_metadata(8, 8, bit(7))
    matrix.set_metadata(7, 8, bit(8))
    for i in range(9, 15):
        matrix.set_metadata(14 - i, 8, bit(i))

    # Split between the top-right and bottom-left finders
    for i in range(8):
        matrix.set_metadata(size - 1 - i, 8, bit(i))
    for i in range(8, 15):
        matrix.set_metadata(8, size - 15 + i, bit(i))


def draw_version_info(matrix: QRMatrix) -> None:
    """Write both 6x3 copies of the version information (version 7+)."""
    if matrix.version < 7:
        return
    bits = version_bits(matrix.version)
    for i in range(18):
        dark = ((bits >> i) & 1) == 1
        a = matrix.size - 11 + i % 3
        b = i // 3
        matrix.set_metadata(a, b, dark)
        matrix.set_metadata(b, a, dark)


#==============================================================================
# DATA MASKING
#==============================================================================

def apply_mask(matrix: QRMatrix, mask: int) -> None:
    """XOR the mask pattern onto data modules; applying it twice undoes it."""
    mask_func = MASK_PATTERNS[mask]
    for r in range(matrix.size):
        row = matrix.modules[r]
        for c in range(matrix.size):
            if matrix.is_data(c, r) and mask_func(r, c):
                row[c] = not row[c]


def calculate_penalty(grid: Sequence[Sequence[bool]]) -> int:
    """Calculate total penalty score for a masked matrix."""
    size = len(grid)
    columns = [[grid[r][c] for r in range(size)] for c in range(size)]
    lines = list(grid) + columns
    penalty = 0
    penalty += sum(_penalty_runs(line) for line in lines)
    penalty += _penalty_boxes(grid, size)
    penalty += sum(_penalty_finder_like(line) for line in lines) * PENALTY_N3
    penalty += _penalty_balance(grid, size)
    return penalty


def _penalty_runs(line: Sequence[bool]) -> int:
    """Penalty for runs of 5+ same-color modules."""
    penalty = 0
    run_length = 1
    for prev, curr in zip(line, line[1:]):
        if curr == prev:
            run_length += 1
        else:
            if run_length >= 5:
                penalty += PENALTY_N1 + (run_length - 5)
            run_length = 1
    if run_length >= 5:
        penalty += PENALTY_N1 + (run_length - 5)
    return penalty


def _penalty_boxes(grid: Sequence[Sequence[bool]], size: int) -> int:
    """Penalty for 2x2 same-color boxes."""
    penalty = 0
    for r in range(size - 1):
        for c in range(size - 1):
            color = grid[r][c]
            if grid[r][c + 1] == color and grid[r + 1][c] == color and grid[r + 1][c + 1] == color:
                penalty += PENALTY_N2
    return penalty


def _run_lengths(line: Sequence[bool]) -> List[int]:
    """
    Alternating light/dark run lengths, starting and ending with light.

    The light area outside the symbol is counted into the first and last runs.
    """
    runs = []
    color = False
    length = len(line)
    for module in line:
        if module == color:
            length += 1
        else:
            runs.append(length)
            color = module
            length = 1
    if color:
        runs.append(length)
        length = 0
    runs.append(length + len(line))
    return runs


def _penalty_finder_like(line: Sequence[bool]) -> int:
    """
    Count dark-light-dark-dark-dark-light-dark (1:1:3:1:1) patterns with a
    light run of at least four units on one side and at least one on the other.
    """
    runs = _run_lengths(line)
    count = 0
    # Dark runs sit at odd indices
    for i in range(3, len(runs) - 3, 2):
        n = runs[i - 2]
        if (n > 0 and runs[i - 1] == n and runs[i] == n * 3
                and runs[i + 1] == n and runs[i + 2] == n):
            if runs[i - 3] >= n * 4 and runs[i + 3] >= n:
                count += 1
            if runs[i + 3] >= n * 4 and runs[i - 3] >= n:
                count += 1
    return count


def _penalty_balance(grid: Sequence[Sequence[bool]], size: int) -> int:
    """Penalty based on dark/light module ratio, 10 per full 5% away from 50%."""
    dark = sum(sum(1 for module in row if module) for row in grid)
    total = size * size
    # Smallest k with (45 - 5k)% <= dark <= (55 + 5k)%
    k = max(0, (abs(dark * 20 - total * 10) + total - 1) // total - 1)
    return k * PENALTY_N4


def choose_best_mask(matrix: QRMatrix, level: ECCLevel) -> Tuple[int, int, List[int]]:
    """
    Score all 8 masks on one grid and return (mask, penalty, all penalties).

    Each trial applies the mask, draws its format bits, scores the grid and
    reverts the mask, so the grid is unmasked again on return.
    """
    penalties = []
    for mask in range(len(MASK_PATTERNS)):
        apply_mask(matrix, mask)
        draw_format_info(matrix, level, mask)
        penalties.append(calculate_penalty(matrix.modules))
        apply_mask(matrix, mask)  # Undoes the mask due to XOR
        logger.debug("Mask %d penalty %d", mask, penalties[-1])
    best = min(range(len(penalties)), key=lambda m: (penalties[m], m))
    return best, penalties[best], penalties


def apply_best_mask(matrix: QRMatrix, level: ECCLevel,
                    mask: Optional[int] = None) -> Tuple[int, Optional[int]]:
    """
    Mask the data region and write format and version information.

    Args:
        matrix: Matrix with data already placed
        level: Error correction level recorded in the format information
        mask: Force one of the 8 standard masks instead of choosing one,
            already checked with check_mask()

    Returns:
        (mask applied, its penalty or None when the mask was forced)
    """
    draw_version_info(matrix)
    penalty = None
    if mask is None:
        mask, penalty, _ = choose_best_mask(matrix, level)
        logger.debug("Applied mask pattern %d (penalty: %d)", mask, penalty)
    apply_mask(matrix, mask)
    draw_format_info(matrix, level, mask)
    return mask, penalty
