"""
Exceptions raised while encoding a QR Code.

Every failure is detected before the symbol matrix is allocated, so callers
never see a partially built symbol. All of them derive from ValueError.
"""

from typing import Optional


class QREncodeError(ValueError):
    """Base class for all encoding failures."""


class DataTooLong(QREncodeError):
    """The data does not fit any allowed version at the requested level."""

    def __init__(self, required_bits: Optional[int], available_bits: int):
        self.required_bits = required_bits
        self.available_bits = available_bits
        if required_bits is None:
            message = "Segment too long for its character count field"
        else:
            message = (f"Data length = {required_bits} bits, "
                       f"max capacity = {available_bits} bits")
        super().__init__(message)


class InvalidConfiguration(QREncodeError):
    """Contradictory or out-of-range encoding parameters."""


class UnsupportedCharacter(QREncodeError):
    """A character cannot be represented in the required mode."""

    def __init__(self, char, position: int, mode):
        self.char = char
        self.position = position
        self.mode = mode
        super().__init__(
            f"Character {char!r} at position {position} "
            f"cannot be encoded in {mode.name.lower()} mode")
