"""
Galois Field GF(256) arithmetic for QR codes.

Uses the primitive polynomial x^8 + x^4 + x^3 + x^2 + 1 (0x11d = 285) with
generator alpha = 2. The exp/log tables are built once at import time and
are never written afterwards, so they can be read from any thread.

References:
- https://en.wikipedia.org/wiki/Finite_field_arithmetic
- https://research.swtch.com/field
"""

from typing import List, Sequence

PRIMITIVE_POLY = 0x11d  # x^8 + x^4 + x^3 + x^2 + 1 = 285


def _multiply_no_table(a: int, b: int) -> int:
    """
    Multiply two GF(256) elements without using tables.
    Uses Russian peasant multiplication with polynomial reduction.
    """
    result = 0
    while b > 0:
        if b & 1:
            result ^= a
        b >>= 1
        a <<= 1
        if a & 0x100:  # If degree >= 8
            a ^= PRIMITIVE_POLY
    return result


def _build_tables():
    """Build exponential and logarithm lookup tables using alpha = 2."""
    exp_table = [0] * 512  # Extended so log sums never need a modulo
    log_table = [0] * 256
    x = 1
    for i in range(255):
        exp_table[i] = x
        exp_table[i + 255] = x
        log_table[x] = i
        x = _multiply_no_table(x, 2)
    exp_table[510] = exp_table[0]
    exp_table[511] = exp_table[1]
    return tuple(exp_table), tuple(log_table)


EXP_TABLE, LOG_TABLE = _build_tables()


def add(a: int, b: int) -> int:
    """Addition in GF(256) is XOR."""
    return a ^ b


# Subtraction in characteristic 2 is the same operation as addition
subtract = add


def multiply(a: int, b: int) -> int:
    """Multiply two GF(256) elements using log tables."""
    if a == 0 or b == 0:
        return 0
    return EXP_TABLE[LOG_TABLE[a] + LOG_TABLE[b]]


def divide(a: int, b: int) -> int:
    """Divide a by b in GF(256)."""
    if b == 0:
        raise ZeroDivisionError("Division by zero in GF(256)")
    if a == 0:
        return 0
    return EXP_TABLE[(LOG_TABLE[a] - LOG_TABLE[b]) % 255]


def power(a: int, n: int) -> int:
    """Raise a to the power n in GF(256)."""
    if a == 0:
        return 0 if n > 0 else 1
    return EXP_TABLE[(LOG_TABLE[a] * n) % 255]


def inverse(a: int) -> int:
    """Find multiplicative inverse of a in GF(256)."""
    if a == 0:
        raise ZeroDivisionError("No inverse for 0")
    # a^(-1) = a^254 since a^255 = 1
    return EXP_TABLE[255 - LOG_TABLE[a]]


#==============================================================================
# POLYNOMIAL OPERATIONS OVER GF(256)
#==============================================================================
# Polynomials are plain coefficient lists, highest degree first, which is the
# order codewords are transmitted in.

def poly_multiply(p: Sequence[int], q: Sequence[int]) -> List[int]:
    """Multiply two polynomials."""
    result = [0] * (len(p) + len(q) - 1)
    for i, a in enumerate(p):
        if a == 0:
            continue
        for j, b in enumerate(q):
            result[i + j] ^= multiply(a, b)
    return result


def poly_evaluate(poly: Sequence[int], x: int) -> int:
    """Evaluate polynomial at x using Horner's method."""
    result = 0
    for coeff in poly:
        result = multiply(result, x) ^ coeff
    return result


def poly_remainder(dividend: Sequence[int], divisor: Sequence[int]) -> List[int]:
    """
    Remainder of dividend / divisor, divisor monic (leading coefficient 1).

    The result always has len(divisor) - 1 coefficients.
    """
    result = list(dividend)
    degree = len(divisor) - 1
    for i in range(len(result) - degree):
        coeff = result[i]
        if coeff != 0:
            for j in range(1, len(divisor)):
                result[i + j] ^= multiply(divisor[j], coeff)
    return result[len(result) - degree:]
