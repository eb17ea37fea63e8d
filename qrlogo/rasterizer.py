"""Module rasterizer: one fill primitive per drawable dark module."""

import math
from dataclasses import dataclass
from typing import Sequence

from qrlogo.config import Color
from qrlogo.logging import audit, get_logger, trace
from qrlogo.matrix import MatrixLike, check_matrix
from qrlogo.zones import Anchor, LogoRect, is_in_finder_zone, is_in_logo_zone

log = get_logger("rasterizer")

DOT_SCALE = 0.75


@dataclass(frozen=True)
class FillRect:
    """Axis-aligned rectangle covering pixels ``[x0, x1) x [y0, y1)`` (unscaled)."""
    row: int
    col: int
    x0: float
    y0: float
    x1: float
    y1: float
    color: Color


@dataclass(frozen=True)
class FillCircle:
    row: int
    col: int
    cx: float
    cy: float
    radius: float
    color: Color


ModuleOp = FillRect | FillCircle


def square_span(index: int, cell_size: float) -> tuple[int, int]:
    """Pixel span of one module along an axis.

    Flooring the leading edge and ceiling the trailing edge means neighbours
    always meet or overlap by one pixel, never leave a gap.
    """
    return math.floor(index * cell_size), math.ceil((index + 1) * cell_size)


def _square(row: int, col: int, cell_size: float, offset: float, color: Color) -> FillRect:
    x0, x1 = square_span(col, cell_size)
    y0, y1 = square_span(row, cell_size)
    return FillRect(row, col, x0 + offset, y0 + offset, x1 + offset, y1 + offset, color)


def _dot(row: int, col: int, cell_size: float, offset: float, color: Color) -> FillCircle:
    half = cell_size / 2
    return FillCircle(
        row, col,
        cx=col * cell_size + half + offset,
        cy=row * cell_size + half + offset,
        radius=half * DOT_SCALE,
        color=color,
    )


@trace
def rasterize_modules(
    matrix: MatrixLike,
    cell_size: float,
    offset: float,
    zones: Sequence[Anchor],
    color: Color,
    style: str = "squares",
    logo_rect: LogoRect | None = None,
) -> list[ModuleOp]:
    """Emit fill primitives for every dark module outside the exclusion zones.

    Args:
        matrix: Module matrix to draw.
        cell_size: Pixel width of one module.
        offset: Quiet-zone padding added to every coordinate.
        zones: Finder anchors; their 8x8 boxes belong to the eye renderer.
        color: Foreground color.
        style: ``"squares"`` or ``"dots"``.
        logo_rect: Logo footprint to keep clear, or None to draw under the logo.

    Returns:
        FillRect (squares) or FillCircle (dots) primitives in row-major order.
    """
    n = check_matrix(matrix)
    make = _dot if style == "dots" else _square

    ops: list[ModuleOp] = []
    skipped_logo = 0
    for row in range(n):
        for col in range(n):
            if not matrix.is_dark(row, col) or is_in_finder_zone(row, col, zones):
                continue
            if is_in_logo_zone(row, col, logo_rect, cell_size):
                skipped_logo += 1
                continue
            ops.append(make(row, col, cell_size, offset, color))

    audit("modules.rasterized", logger=log,
          style=style, modules=len(ops), hidden_by_logo=skipped_logo,
          cell_size=round(cell_size, 3))
    return ops
