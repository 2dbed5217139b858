"""
Complete QR code encoding: version selection and the full pipeline.

    segments -> version/level -> data codewords -> blocks + EC codewords
             -> interleaved codewords -> matrix -> masked symbol

All parameters are validated and the version is chosen before the matrix is
allocated, so a failure never leaves a partly built symbol behind.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from .bitstream import build_data_codewords
from .ecc import add_ecc_and_interleave
from .errors import DataTooLong, InvalidConfiguration
from .masking import apply_best_mask, check_mask
from .matrix import ModuleKind, QRMatrix
from .segments import Data, Segment, make_segments, make_segments_optimally, total_bits
from .tables import (MAX_VERSION, MIN_VERSION, ECCLevel, Mode, check_version,
                     data_capacity_bits)

logger = logging.getLogger(__name__)

Level = Union[ECCLevel, str]


@dataclass(frozen=True)
class QRCode:
    """
    An encoded symbol, ready to be handed to a renderer.

    modules[y][x] is True for a dark module; kinds[y][x] tells whether the
    module is a function pattern, data, or format/version information.
    """

    version: int
    ecc: ECCLevel
    mask: int
    modules: Tuple[Tuple[bool, ...], ...]
    kinds: Tuple[Tuple[ModuleKind, ...], ...]
    segments: Tuple[Segment, ...]
    data_codewords: Tuple[int, ...]
    penalty: Optional[int] = None

    @property
    def size(self) -> int:
        return len(self.modules)

    def get_module(self, x: int, y: int) -> bool:
        """Color at (x, y); coordinates outside the symbol are light."""
        return 0 <= x < self.size and 0 <= y < self.size and self.modules[y][x]


#==============================================================================
# VERSION / ECC SELECTION
#==============================================================================

def _coerce_mode(mode: Union[Mode, str, None]) -> Optional[Mode]:
    if mode is None or isinstance(mode, Mode):
        return mode
    if isinstance(mode, str) and mode.upper() in Mode.__members__:
        return Mode[mode.upper()]
    raise InvalidConfiguration(f"Unknown mode: {mode!r}")


def _version_range(min_version: int, max_version: int) -> range:
    check_version(min_version)
    check_version(max_version)
    if min_version > max_version:
        raise InvalidConfiguration(
            f"min_version {min_version} is greater than max_version {max_version}")
    return range(min_version, max_version + 1)


def select_version(segments_at: Callable[[int], Sequence[Segment]], level: ECCLevel,
                   version: Optional[int] = None, min_version: int = MIN_VERSION,
                   max_version: int = MAX_VERSION) -> Tuple[int, Sequence[Segment], int]:
    """
    Find the smallest version whose data capacity holds the segments.

    Args:
        segments_at: Segments to use at a given version
        level: Error correction level the capacity is measured at
        version: Validate this single version instead of searching; it must
            lie within min_version..max_version
        min_version: First version to try
        max_version: Last version to try

    Returns:
        (version, segments, data bits used)
    """
    versions = _version_range(min_version, max_version)
    if version is not None:
        check_version(version)
        if version not in versions:
            raise InvalidConfiguration(
                f"Version {version} is outside {min_version}-{max_version}")
        segments = segments_at(version)
        used = total_bits(segments, version)
        capacity = data_capacity_bits(version, level)
        if used is None:
            raise InvalidConfiguration(
                f"A segment is too long for its character count field at version {version}")
        if used > capacity:
            raise InvalidConfiguration(
                f"Data needs {used} bits but version {version}-{level.name} holds {capacity}")
        return version, segments, used

    used = None
    capacity = 0
    for candidate in versions:
        segments = segments_at(candidate)
        used = total_bits(segments, candidate)
        capacity = data_capacity_bits(candidate, level)
        if used is not None and used <= capacity:
            return candidate, segments, used
    raise DataTooLong(used, capacity)


def boost_level(used_bits: int, version: int, level: ECCLevel) -> ECCLevel:
    """Raise level as far as the data still fits without a larger version."""
    for stronger in (ECCLevel.M, ECCLevel.Q, ECCLevel.H):
        if stronger > level and used_bits <= data_capacity_bits(version, stronger):
            level = stronger
    return level


#==============================================================================
# ENCODING
#==============================================================================

def _build(segments: Sequence[Segment], version: int, level: ECCLevel,
           mask: Optional[int]) -> QRCode:
    data_codewords = build_data_codewords(segments, version, level)
    final_message = add_ecc_and_interleave(data_codewords, version, level)

    qr = QRMatrix(version)
    bits_placed = qr.place_data(final_message)
    logger.debug("Placed %d bits in %dx%d matrix", bits_placed, qr.size, qr.size)

    mask, penalty = apply_best_mask(qr, level, mask)
    return QRCode(
        version=version,
        ecc=level,
        mask=mask,
        modules=tuple(tuple(row) for row in qr.modules),
        kinds=tuple(tuple(row) for row in qr.kinds),
        segments=tuple(segments),
        data_codewords=tuple(data_codewords),
        penalty=penalty,
    )


def _encode(segments_at: Callable[[int], Sequence[Segment]], ecc: Optional[Level],
            version: Optional[int], boost_ecc: bool, mask: Optional[int],
            min_version: int, max_version: int) -> QRCode:
    # No level requested means the minimum viable one
    level = ECCLevel.L if ecc is None else ECCLevel.coerce(ecc)
    check_mask(mask)

    version, segments, used = select_version(
        segments_at, level, version, min_version, max_version)
    if boost_ecc:
        level = boost_level(used, version, level)
    logger.debug("Generating Version %d QR Code with EC Level %s (%d of %d data bits)",
                 version, level.name, used, data_capacity_bits(version, level))
    logger.debug("Segments: %s", ", ".join(
        f"{seg.mode.name.lower()}({seg.num_chars})" for seg in segments))
    return _build(segments, version, level, mask)


def encode_segments(segments: Sequence[Segment], ecc: Optional[Level] = ECCLevel.M,
                    version: Optional[int] = None, boost_ecc: bool = False,
                    mask: Optional[int] = None, min_version: int = MIN_VERSION,
                    max_version: int = MAX_VERSION) -> QRCode:
    """Encode a caller-built list of segments."""
    segments = list(segments)
    return _encode(lambda v: segments, ecc, version, boost_ecc, mask,
                   min_version, max_version)


def _segment_strategy(data: Data, mode: Optional[Mode], optimize: bool,
                      kanji: bool) -> Callable[[int], List[Segment]]:
    greedy = make_segments(data, mode=mode, kanji=kanji)
    if mode is not None or not optimize:
        return lambda version: greedy

    # Count field widths, and so the optimal split, only change at versions 10 and 27
    cache: Dict[int, List[Segment]] = {}

    def segments_at(version: int) -> List[Segment]:
        key = (version + 7) // 17
        if key not in cache:
            optimal = make_segments_optimally(data, version, kanji=kanji)
            greedy_bits = total_bits(greedy, version)
            optimal_bits = total_bits(optimal, version)
            if optimal_bits is None or (greedy_bits is not None and greedy_bits <= optimal_bits):
                cache[key] = greedy
            else:
                cache[key] = optimal
        return cache[key]

    return segments_at


def encode(data: Data, ecc: Optional[Level] = ECCLevel.M, version: Optional[int] = None,
           mode: Union[Mode, str, None] = None, boost_ecc: bool = False,
           optimize: bool = True, kanji: bool = False, mask: Optional[int] = None,
           min_version: int = MIN_VERSION, max_version: int = MAX_VERSION) -> QRCode:
    """
    Encode text or bytes into a QR Code symbol.

    Args:
        data: Text (byte runs written as UTF-8) or raw bytes
        ecc: 'L', 'M', 'Q', 'H' or an ECCLevel; None for the minimum viable level
        version: Use exactly this version (1-40) instead of the smallest that fits
        mode: Force a single segment in this mode
        boost_ecc: Raise the level if the data still fits the chosen version
        optimize: Search for the segmentation with the fewest bits
        kanji: Encode Shift-JIS kanji characters in kanji mode
        mask: Force one of the 8 standard mask patterns
        min_version: Smallest version considered by the search
        max_version: Largest version considered by the search

    Returns:
        The encoded QRCode

    Raises:
        DataTooLong: No version in range holds the data
        InvalidConfiguration: Bad parameters, or the fixed version is too small
        UnsupportedCharacter: A character is not representable in the forced mode
    """
    mode = _coerce_mode(mode)
    segments_at = _segment_strategy(data, mode, optimize, kanji)
    return _encode(segments_at, ecc, version, boost_ecc, mask, min_version, max_version)


class QREncoder:
    """Reusable encoder configuration."""

    def __init__(self, ecc: Optional[Level] = ECCLevel.M, boost_ecc: bool = False,
                 mode: Union[Mode, str, None] = None, optimize: bool = True,
                 kanji: bool = False, mask: Optional[int] = None,
                 min_version: int = MIN_VERSION, max_version: int = MAX_VERSION):
        """
        Initialize encoder with its options.

        Args:
            ecc: 'L' (7%), 'M' (15%), 'Q' (25%), 'H' (30%), or None for minimum viable
            See encode() for the remaining options.
        """
        self.ecc = None if ecc is None else ECCLevel.coerce(ecc)
        self.boost_ecc = boost_ecc
        self.mode = _coerce_mode(mode)
        self.optimize = optimize
        self.kanji = kanji
        self.mask = check_mask(mask)
        _version_range(min_version, max_version)
        self.min_version = min_version
        self.max_version = max_version

    def encode(self, data: Data, version: Optional[int] = None) -> QRCode:
        """
        Generate a QR code for the given data.

        Args:
            data: String or bytes to encode
            version: QR version (1-40), or None to auto-detect
        """
        return encode(data, ecc=self.ecc, version=version, mode=self.mode,
                      boost_ecc=self.boost_ecc, optimize=self.optimize,
                      kanji=self.kanji, mask=self.mask,
                      min_version=self.min_version, max_version=self.max_version)
