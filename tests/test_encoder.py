import pytest

from qr_encoder import (DataTooLong, ECCLevel, InvalidConfiguration, Mode, ModuleKind,
                        QREncoder, Segment, UnsupportedCharacter, encode, encode_segments)
from qr_encoder.ecc import add_ecc_and_interleave
from qr_encoder.encoder import select_version
from qr_encoder.masking import BCH_GENERATOR, FORMAT_MASK, MASK_PATTERNS, version_bits
from qr_encoder.segments import make_segments
from qr_encoder.tables import total_codewords


def read_format_info(qr):
    """Both 15-bit format information copies, as stored in the symbol."""
    size = qr.size
    first = [(8, i) for i in range(6)] + [(8, 7), (8, 8), (7, 8)] + \
        [(14 - i, 8) for i in range(9, 15)]
    second = [(size - 1 - i, 8) for i in range(8)] + \
        [(8, size - 15 + i) for i in range(8, 15)]
    copies = []
    for positions in (first, second):
        bits = 0
        for i, (x, y) in enumerate(positions):
            bits |= int(qr.modules[y][x]) << i
        copies.append(bits)
    return copies


def decode_format_info(bits):
    bits ^= FORMAT_MASK
    remainder = bits
    for i in range(14, 9, -1):
        if remainder & (1 << i):
            remainder ^= BCH_GENERATOR << (i - 10)
    assert remainder == 0
    level = {level.format_bits: level for level in ECCLevel}[bits >> 13]
    return level, (bits >> 10) & 7


def read_codewords(qr):
    """Unmask the data region and read it back in zigzag order."""
    mask = MASK_PATTERNS[qr.mask]
    bits = []
    right = qr.size - 1
    while right >= 1:
        if right == 6:
            right -= 1
        rows = range(qr.size - 1, -1, -1) if (right + 1) & 2 == 0 else range(qr.size)
        for y in rows:
            for x in (right, right - 1):
                if qr.kinds[y][x] is ModuleKind.DATA:
                    bits.append(qr.modules[y][x] != mask(y, x))
        right -= 2
    count = total_codewords(qr.version)
    codewords = [
        sum(int(bit) << (7 - j) for j, bit in enumerate(bits[i * 8:i * 8 + 8]))
        for i in range(count)
    ]
    return codewords, bits[count * 8:]


def assert_valid_symbol(qr):
    assert qr.size == 4 * qr.version + 17
    assert len(qr.modules) == qr.size
    assert all(len(row) == qr.size for row in qr.modules)
    # Finder centres and timing lines
    for x, y in ((3, 3), (qr.size - 4, 3), (3, qr.size - 4)):
        assert qr.modules[y][x]
    for i in range(8, qr.size - 8):
        assert qr.modules[6][i] == (i % 2 == 0)
        assert qr.modules[i][6] == (i % 2 == 0)

    first, second = read_format_info(qr)
    assert first == second
    assert decode_format_info(first) == (qr.ecc, qr.mask)

    codewords, remainder = read_codewords(qr)
    assert codewords == add_ecc_and_interleave(qr.data_codewords, qr.version, qr.ecc)
    assert not any(remainder)


# "HELLO WORLD" at 1-Q, mask 0; '#' is a dark module
HELLO_WORLD_Q = [
    "#######.##....#######",
    "#.....#.#..#..#.....#",
    "#.###.#.#..##.#.###.#",
    "#.###.#.#.....#.###.#",
    "#.###.#.#.#...#.###.#",
    "#.....#...#...#.....#",
    "#######.#.#.#.#######",
    "........#............",
    ".##.#.##....#.#.#####",
    ".#......####....#...#",
    "..##.###.##...#.##...",
    ".##.##.#..##.#.#.###.",
    "#...#.#.#.###.###.#.#",
    "........##.#..#...#.#",
    "#######.#.#....#.##..",
    "#.....#..#.##.##.#...",
    "#.###.#.#.#...#######",
    "#.###.#..#.#.#.#...#.",
    "#.###.#.#..#.###.#..#",
    "#.....#.#.####...#.##",
    "#######....#.###....#",
]


def render(qr):
    return ["".join("#" if dark else "." for dark in row) for row in qr.modules]


def test_hello_world_q():
    qr = encode("HELLO WORLD", ecc="Q")
    assert qr.version == 1
    assert qr.ecc is ECCLevel.Q
    assert qr.size == 21
    assert [seg.mode for seg in qr.segments] == [Mode.ALPHANUMERIC]
    assert list(qr.data_codewords) == \
        [32, 91, 11, 120, 209, 114, 220, 77, 67, 64, 236, 17, 236]
    assert qr.mask == 0
    assert render(qr) == HELLO_WORLD_Q
    assert_valid_symbol(qr)


def test_8675309_l():
    qr = encode("8675309", ecc=ECCLevel.L)
    assert qr.version == 1
    assert list(qr.data_codewords[:8]) == [16, 31, 99, 132, 164, 0, 236, 17]
    assert len(qr.data_codewords) == 19
    assert_valid_symbol(qr)


def test_empty_input():
    qr = encode("")
    assert qr.version == 1
    assert qr.segments == ()
    assert list(qr.data_codewords) == [0] + [236, 17] * 7 + [236]
    assert_valid_symbol(qr)


@pytest.mark.parametrize("data,ecc", [
    ("https://www.example.com/path?query=1", "M"),
    ("A" * 100 + "1234567890" * 10, "H"),
    (bytes(range(256)), "Q"),
    ("3.14159265358979323846264338327950288419716939937510" * 4, "L"),
])
def test_symbols_are_structurally_valid(data, ecc):
    assert_valid_symbol(encode(data, ecc=ecc))


def test_version_7_carries_version_info():
    qr = encode("X" * 150, ecc="M", version=7)
    bits = version_bits(7)
    for i in range(18):
        dark = ((bits >> i) & 1) == 1
        assert qr.modules[i // 3][qr.size - 11 + i % 3] == dark
        assert qr.modules[qr.size - 11 + i % 3][i // 3] == dark
    assert_valid_symbol(qr)


def test_maximum_byte_capacity():
    qr = encode(b"\xab" * 2953, ecc="L")
    assert qr.version == 40
    assert qr.size == 177
    with pytest.raises(DataTooLong) as info:
        encode(b"\xab" * 2954, ecc="L")
    assert info.value.required_bits == 4 + 16 + 2954 * 8
    assert info.value.available_bits == 2956 * 8


def test_fixed_version_too_small():
    with pytest.raises(InvalidConfiguration):
        encode("HELLO WORLD" * 3, ecc="H", version=1)
    assert encode("HELLO WORLD", ecc="Q", version=3).version == 3


def test_fixed_version_count_field_overflow():
    segment = Segment.make_bytes(b"a" * 256)
    with pytest.raises(InvalidConfiguration):
        encode_segments([segment], ecc="L", version=9)


def test_forced_mode():
    qr = encode("12345", mode="alphanumeric")
    assert [seg.mode for seg in qr.segments] == [Mode.ALPHANUMERIC]
    with pytest.raises(UnsupportedCharacter) as info:
        encode("123a5", mode=Mode.NUMERIC)
    assert info.value.char == "a"
    assert info.value.position == 3
    with pytest.raises(InvalidConfiguration):
        encode("123", mode="morse")


def test_version_selection_is_monotonic():
    for level in ECCLevel:
        previous = 0
        overflowed = False
        for length in range(0, 1500, 37):
            segments = make_segments("A1b" * length)
            if overflowed:
                # Once the data no longer fits, longer data never fits again
                with pytest.raises(DataTooLong):
                    select_version(lambda v: segments, level)
                continue
            try:
                version, _, _ = select_version(lambda v: segments, level)
            except DataTooLong:
                overflowed = True
                continue
            assert version >= previous
            previous = version
        assert overflowed


def test_version_range():
    qr = encode("HI", min_version=5)
    assert qr.version == 5
    with pytest.raises(DataTooLong):
        encode("HELLO WORLD" * 10, ecc="H", max_version=2)
    with pytest.raises(InvalidConfiguration):
        encode("HI", min_version=6, max_version=5)


def test_fixed_version_must_lie_in_range():
    assert encode("HI", version=4, min_version=2, max_version=6).version == 4
    with pytest.raises(InvalidConfiguration):
        encode("HI", version=1, min_version=2)
    with pytest.raises(InvalidConfiguration):
        encode("HI", version=7, max_version=6)
    with pytest.raises(InvalidConfiguration):
        encode("HI", version=4, min_version=0)
    with pytest.raises(InvalidConfiguration):
        encode("HI", version=4, min_version=6, max_version=5)


def test_boost_ecc():
    qr = encode("HELLO WORLD", ecc="L", boost_ecc=True)
    assert qr.version == 1
    assert qr.ecc is ECCLevel.Q
    assert_valid_symbol(qr)
    assert encode("HELLO WORLD", ecc="L").ecc is ECCLevel.L


def test_minimum_viable_level():
    qr = encode("HELLO WORLD", ecc=None)
    assert qr.ecc is ECCLevel.L


def test_invalid_parameters():
    with pytest.raises(InvalidConfiguration):
        encode("HI", ecc="Z")
    with pytest.raises(InvalidConfiguration):
        encode("HI", version=0)
    with pytest.raises(InvalidConfiguration):
        encode("HI", mask=8)
    # Booleans are not versions or mask indices
    with pytest.raises(InvalidConfiguration):
        encode("HI", version=True)
    with pytest.raises(InvalidConfiguration):
        encode("HI", mask=False)


def test_forced_mask():
    qr = encode("HELLO WORLD", mask=5)
    assert qr.mask == 5
    assert qr.penalty is None
    assert_valid_symbol(qr)


def test_automatic_mask_reports_penalty():
    qr = encode("HELLO WORLD")
    assert qr.penalty is not None
    for mask in range(8):
        assert encode("HELLO WORLD", mask=mask).penalty is None


def test_optimal_segmentation_is_not_longer():
    text = "abc" + "0123456789" * 3 + "xyz"
    greedy = encode(text, optimize=False, ecc="L")
    optimal = encode(text, ecc="L")
    assert optimal.version <= greedy.version
    assert [seg.mode for seg in optimal.segments] == [Mode.BYTE, Mode.NUMERIC, Mode.BYTE]


def test_kanji():
    qr = encode("漢字", kanji=True)
    assert [seg.mode for seg in qr.segments] == [Mode.KANJI]
    assert qr.segments[0].data == "漢字".encode("shift_jis")
    assert_valid_symbol(qr)
    # Without kanji detection the text is written as UTF-8 bytes
    qr = encode("漢字")
    assert [seg.mode for seg in qr.segments] == [Mode.BYTE]


def test_encode_segments_with_eci():
    segments = [Segment.make_eci(26), Segment.make_bytes("é")]
    qr = encode_segments(segments, ecc="M")
    assert qr.segments == tuple(segments)
    assert qr.data_codewords[0] == 0b01110001
    assert_valid_symbol(qr)


def test_get_module_outside_bounds_is_light():
    qr = encode("HI")
    assert qr.get_module(0, 0) is True
    assert qr.get_module(-1, 0) is False
    assert qr.get_module(qr.size, 3) is False


def test_encoder_object():
    encoder = QREncoder(ecc="H", mask=2)
    qr = encoder.encode("HELLO")
    assert qr.ecc is ECCLevel.H
    assert qr.mask == 2
    assert encoder.encode("HELLO", version=4).version == 4
    with pytest.raises(InvalidConfiguration):
        QREncoder(ecc="X")
    with pytest.raises(InvalidConfiguration):
        QREncoder(min_version=10, max_version=2)


def test_results_are_independent():
    first = encode("HELLO WORLD", ecc="Q")
    encode("something else entirely", ecc="H")
    second = encode("HELLO WORLD", ecc="Q")
    assert first == second
