import pytest

from qr_encoder.errors import InvalidConfiguration
from qr_encoder.matrix import ModuleKind, QRMatrix
from qr_encoder.tables import remainder_bits, total_codewords


def count_kind(qr, kind):
    return sum(row.count(kind) for row in qr.kinds)


@pytest.mark.parametrize("version", range(1, 41))
def test_data_modules_hold_every_codeword_bit(version):
    qr = QRMatrix(version)
    assert qr.size == 4 * version + 17
    assert count_kind(qr, ModuleKind.DATA) == \
        total_codewords(version) * 8 + remainder_bits(version)


def test_invalid_version():
    with pytest.raises(InvalidConfiguration):
        QRMatrix(41)


def test_finder_patterns_and_separators():
    qr = QRMatrix(1)
    size = qr.size
    for x0, y0 in ((0, 0), (size - 7, 0), (0, size - 7)):
        assert all(qr.modules[y0][x0 + i] for i in range(7))
        assert all(qr.modules[y0 + 6][x0 + i] for i in range(7))
        assert qr.modules[y0 + 1][x0 + 1] is False
        assert qr.modules[y0 + 3][x0 + 3] is True
        assert qr.kinds[y0 + 3][x0 + 3] is ModuleKind.FUNCTION
    # Separators
    assert not any(qr.modules[7][x] for x in range(8))
    assert not any(qr.modules[y][7] for y in range(8))
    assert not any(qr.modules[size - 8][x] for x in range(8))
    assert not any(qr.modules[y][size - 8] for y in range(8))


def test_timing_patterns_alternate():
    qr = QRMatrix(3)
    for i in range(8, qr.size - 8):
        assert qr.modules[6][i] == (i % 2 == 0)
        assert qr.modules[i][6] == (i % 2 == 0)
        assert qr.kinds[6][i] is ModuleKind.FUNCTION


def test_dark_module():
    for version in (1, 7, 40):
        qr = QRMatrix(version)
        assert qr.modules[4 * version + 9][8] is True
        assert qr.kinds[4 * version + 9][8] is ModuleKind.FUNCTION


def test_alignment_patterns():
    qr = QRMatrix(2)
    assert qr.modules[18][18] is True
    assert qr.modules[18][17] is False
    assert qr.modules[18][16] is True
    assert qr.kinds[16][16] is ModuleKind.FUNCTION

    qr = QRMatrix(7)
    # Centres at (6, 22) and (22, 6) sit on the timing lines, (22, 22) in the middle
    for x, y in ((22, 6), (6, 22), (22, 22), (38, 22), (22, 38), (38, 38)):
        assert qr.modules[y][x] is True
        assert qr.modules[y][x + 1] is False
        assert qr.kinds[y][x + 2] is ModuleKind.FUNCTION


def test_metadata_reservations():
    assert count_kind(QRMatrix(1), ModuleKind.METADATA) == 30
    assert count_kind(QRMatrix(6), ModuleKind.METADATA) == 30
    qr = QRMatrix(7)
    assert count_kind(qr, ModuleKind.METADATA) == 30 + 36
    assert qr.kinds[0][qr.size - 11] is ModuleKind.METADATA
    assert qr.kinds[qr.size - 9][5] is ModuleKind.METADATA


def test_set_metadata_only_on_reserved_modules():
    qr = QRMatrix(1)
    qr.set_metadata(8, 0, True)
    assert qr.modules[0][8] is True
    with pytest.raises(ValueError):
        qr.set_metadata(10, 10, True)


def test_zigzag_starts_bottom_right():
    qr = QRMatrix(1)
    assert qr.place_data([0b10100000] + [0] * 25) == 208
    assert qr.modules[20][20] is True
    assert qr.modules[20][19] is False
    assert qr.modules[19][20] is True
    assert qr.modules[19][19] is False


def test_zigzag_turns_at_top():
    qr = QRMatrix(1)
    # The first strip covers rows 9-20 in columns 20 and 19: 24 bits, then the
    # walk moves down columns 18 and 17 starting at row 9
    codewords = [0] * 26
    codewords[3] = 0b10000000
    qr.place_data(codewords)
    assert qr.modules[9][18] is True
    assert sum(row.count(True) for row in qr.modules) == \
        sum(row.count(True) for row in QRMatrix(1).modules) + 1


def test_remainder_modules_stay_light():
    qr = QRMatrix(2)
    qr.place_data([0xFF] * total_codewords(2))
    data = [(x, y) for y in range(qr.size) for x in range(qr.size) if qr.is_data(x, y)]
    light = [(x, y) for x, y in data if not qr.modules[y][x]]
    assert len(light) == remainder_bits(2) == 7


def test_wrong_codeword_count_is_rejected():
    with pytest.raises(ValueError):
        QRMatrix(1).place_data([0] * 25)
    with pytest.raises(ValueError):
        QRMatrix(1).place_data([0] * 27)
