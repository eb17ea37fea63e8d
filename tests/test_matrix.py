import pytest
import qrcode
import segno

from qrlogo.matrix import MatrixError, ModuleMatrix, check_matrix, encode

from conftest import SideOnlyMatrix


def test_matrix_must_be_square():
    with pytest.raises(MatrixError):
        ModuleMatrix([[True, False], [True]])


def test_empty_matrix_is_rejected():
    with pytest.raises(MatrixError):
        ModuleMatrix([])


@pytest.mark.parametrize("n", [0, -3])
def test_check_matrix_rejects_non_positive_side(n):
    with pytest.raises(MatrixError):
        check_matrix(SideOnlyMatrix(n))


def test_matrix_queries():
    m = ModuleMatrix([[1, 0], [0, 1]])
    assert m.side_length() == 2
    assert m.is_dark(0, 0) and not m.is_dark(0, 1)
    assert m.dark_cells() == {(0, 0), (1, 1)}


def test_qrcode_backend_matches_encoder_module_count():
    qr = qrcode.QRCode(error_correction=qrcode.constants.ERROR_CORRECT_M, border=0)
    qr.add_data("https://example.com")
    qr.make(fit=True)

    matrix = encode("https://example.com", "M")
    assert matrix.side_length() == qr.modules_count
    assert matrix.is_dark(0, 0)


def test_segno_backend_matches_encoder_symbol_size():
    expected = segno.make_qr("https://example.com", error="m", boost_error=False).symbol_size(border=0)[0]
    matrix = encode("https://example.com", "M", backend="segno")
    assert matrix.side_length() == expected


def test_higher_error_correction_never_shrinks_the_symbol():
    assert encode("https://example.com", "H").side_length() >= encode("https://example.com", "L").side_length()


def test_unknown_level_or_backend():
    with pytest.raises(ValueError):
        encode("x", "Z")
    with pytest.raises(ValueError):
        encode("x", "M", backend="zxing")
