"""
Reed-Solomon error correction and codeword interleaving.

References:
- https://en.wikipedia.org/wiki/Reed-Solomon_error_correction
- https://en.wikiversity.org/wiki/Reed-Solomon_codes_for_coders
- https://www.thonky.com/qr-code-tutorial/structure-final-message
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import List, Sequence, Tuple

from . import galois
from .tables import ECCLevel, block_layout, data_codewords, total_codewords


@lru_cache(maxsize=None)
def generator_polynomial(degree: int) -> Tuple[int, ...]:
    """
    Build generator polynomial for given number of EC codewords.

    g(x) = (x - alpha^0)(x - alpha^1)...(x - alpha^(n-1))
         = (x + alpha^0)(x + alpha^1)...(x + alpha^(n-1))

    In GF(256), subtraction equals addition. Coefficients are returned
    highest degree first; the leading coefficient is always 1.
    """
    if not 1 <= degree <= 255:
        raise ValueError(f"Degree out of range: {degree}")
    gen = [1]
    for i in range(degree):
        gen = galois.poly_multiply(gen, [1, galois.EXP_TABLE[i]])
    return tuple(gen)


def ec_codewords(data: Sequence[int], num_ec_codewords: int) -> List[int]:
    """
    Encode data bytes with Reed-Solomon error correction.

    Args:
        data: List of data bytes (integers 0-255)
        num_ec_codewords: Number of error correction codewords to generate

    Returns:
        List of error correction codewords
    """
    generator = generator_polynomial(num_ec_codewords)
    return galois.poly_remainder(list(data) + [0] * num_ec_codewords, generator)


@dataclass(frozen=True)
class Block:
    data: Tuple[int, ...]
    ec: Tuple[int, ...]


def split_blocks(codewords: Sequence[int], version: int, level: ECCLevel) -> List[Block]:
    """Split data codewords into blocks and compute each block's EC codewords."""
    expected = data_codewords(version, level)
    if len(codewords) != expected:
        raise ValueError(f"Expected {expected} data codewords, got {len(codewords)}")

    sizes, ec_per_block = block_layout(version, level)
    blocks = []
    offset = 0
    for size in sizes:
        data = tuple(codewords[offset:offset + size])
        offset += size
        blocks.append(Block(data, tuple(ec_codewords(data, ec_per_block))))
    return blocks


def interleave(blocks: Sequence[Block]) -> List[int]:
    """
    Read codeword i of every block in turn, data first, then EC.

    Blocks that run out of data codewords are skipped.
    """
    result = []
    for i in range(max(len(b.data) for b in blocks)):
        for block in blocks:
            if i < len(block.data):
                result.append(block.data[i])
    for i in range(max(len(b.ec) for b in blocks)):
        for block in blocks:
            if i < len(block.ec):
                result.append(block.ec[i])
    return result


def add_ecc_and_interleave(codewords: Sequence[int], version: int,
                           level: ECCLevel) -> List[int]:
    """Final codeword sequence for placement in the symbol."""
    result = interleave(split_blocks(codewords, version, level))
    if len(result) != total_codewords(version):
        raise ValueError(
            f"Interleaved {len(result)} codewords, expected {total_codewords(version)}")
    return result
