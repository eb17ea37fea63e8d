"""Module matrix value type and the encoder boundary (qrcode / segno)."""

from enum import Enum
from typing import Protocol, Sequence

import qrcode
import qrcode.constants
import segno

from qrlogo.logging import audit, get_logger, trace

log = get_logger("matrix")


class ECCLevel(Enum):
    L = qrcode.constants.ERROR_CORRECT_L  # 7%
    M = qrcode.constants.ERROR_CORRECT_M  # 15%
    Q = qrcode.constants.ERROR_CORRECT_Q  # 25%
    H = qrcode.constants.ERROR_CORRECT_H  # 30%


ECC_NAMES = {"L": ECCLevel.L, "M": ECCLevel.M, "Q": ECCLevel.Q, "H": ECCLevel.H}

ENCODER_BACKENDS = ("qrcode", "segno")


class MatrixError(ValueError):
    """Raised for a module matrix the renderer cannot lay out."""


class MatrixLike(Protocol):
    def is_dark(self, row: int, col: int) -> bool: ...

    def side_length(self) -> int: ...


class ModuleMatrix:
    """Square grid of dark (True) / light (False) modules.

    Rows are copied on construction, so the matrix is read-only from the
    renderer's point of view.
    """

    __slots__ = ("_rows",)

    def __init__(self, rows: Sequence[Sequence[bool]]):
        self._rows = tuple(tuple(bool(v) for v in row) for row in rows)
        n = len(self._rows)
        if n <= 0:
            raise MatrixError("module matrix is empty")
        for r, row in enumerate(self._rows):
            if len(row) != n:
                raise MatrixError(f"module matrix is not square: row {r} has {len(row)} cells, expected {n}")

    def is_dark(self, row: int, col: int) -> bool:
        return self._rows[row][col]

    def side_length(self) -> int:
        return len(self._rows)

    @property
    def rows(self) -> tuple[tuple[bool, ...], ...]:
        return self._rows

    def dark_cells(self) -> set[tuple[int, int]]:
        n = len(self._rows)
        return {(r, c) for r in range(n) for c in range(n) if self._rows[r][c]}

    def __eq__(self, other):
        if not isinstance(other, ModuleMatrix):
            return NotImplemented
        return self._rows == other._rows

    def __hash__(self):
        return hash(self._rows)

    def __repr__(self):
        return f"ModuleMatrix({len(self._rows)}x{len(self._rows)})"


def check_matrix(matrix: MatrixLike) -> int:
    """Return the side length of *matrix*, raising MatrixError if it is unusable."""
    n = matrix.side_length()
    if not isinstance(n, int) or n <= 0:
        raise MatrixError(f"module matrix side length must be a positive integer, got {n!r}")
    return n


def _ecc_level(ec_level: str) -> ECCLevel:
    try:
        return ECC_NAMES[ec_level.upper()]
    except (KeyError, AttributeError):
        raise ValueError(f"Unknown error correction level {ec_level!r}; expected one of L/M/Q/H") from None


def _encode_qrcode(payload: str, level: ECCLevel) -> list[list[bool]]:
    qr = qrcode.QRCode(
        version=None,
        error_correction=level.value,
        box_size=1,
        border=0,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    return qr.modules


def _encode_segno(payload: str, level: ECCLevel) -> list[list[bool]]:
    qr = segno.make_qr(payload, error=level.name.lower(), boost_error=False)
    return [[bool(v) for v in row] for row in qr.matrix]


@trace
def encode(payload: str, ec_level: str = "M", backend: str = "qrcode") -> ModuleMatrix:
    """Encode *payload* into a module matrix.

    Args:
        payload: Text to encode; the encoder handles the byte conversion.
        ec_level: Error correction level L/M/Q/H.
        backend: ``"qrcode"`` (default) or ``"segno"``.

    Returns:
        ModuleMatrix without quiet zone.
    """
    level = _ecc_level(ec_level)
    if backend == "qrcode":
        rows = _encode_qrcode(payload, level)
    elif backend == "segno":
        rows = _encode_segno(payload, level)
    else:
        raise ValueError(f"Unknown encoder backend {backend!r}; expected one of {', '.join(ENCODER_BACKENDS)}")

    matrix = ModuleMatrix(rows)
    n = matrix.side_length()
    audit("qr.encoded", logger=log,
          data=payload[:80], backend=backend, ecc=level.name,
          version=(n - 17) // 4, size=f"{n}x{n}")
    return matrix
