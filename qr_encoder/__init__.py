"""
QR Code encoder following the ISO/IEC 18004 specification.

Turns text or bytes into the module matrix of a QR Code Model 2 symbol:
- Galois Field GF(256) arithmetic and Reed-Solomon error correction
- Data segmentation (numeric, alphanumeric, byte, kanji modes; ECI)
- Version and error correction level selection
- Function patterns, zigzag data placement, masking with penalty scoring
- BCH format information and Golay version information

Rendering the matrix is left to the caller.

Example:
    >>> from qr_encoder import encode
    >>> qr = encode("HELLO WORLD", ecc="Q")
    >>> qr.version, qr.size
    (1, 21)
"""

from .encoder import QRCode, QREncoder, encode, encode_segments
from .errors import DataTooLong, InvalidConfiguration, QREncodeError, UnsupportedCharacter
from .matrix import ModuleKind
from .segments import Segment, make_segments, make_segments_optimally
from .tables import ECCLevel, Mode

__version__ = "1.0.0"
__all__ = [
    'encode', 'encode_segments', 'QRCode', 'QREncoder',
    'Segment', 'make_segments', 'make_segments_optimally',
    'ECCLevel', 'Mode', 'ModuleKind',
    'QREncodeError', 'DataTooLong', 'InvalidConfiguration', 'UnsupportedCharacter',
]
