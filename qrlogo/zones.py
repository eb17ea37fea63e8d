"""Exclusion zones: finder patterns and the area behind the logo."""

from dataclasses import dataclass
from typing import Sequence

FINDER_SIZE = 7
LOGO_MARGIN_CELLS = 2


@dataclass(frozen=True)
class Anchor:
    """Top-left module of a finder pattern."""
    row: int
    col: int


@dataclass(frozen=True)
class LogoRect:
    """Logo footprint in body pixels (quiet zone not included)."""
    x: float
    y: float
    width: float
    height: float


def finder_zones(module_count: int) -> tuple[Anchor, Anchor, Anchor]:
    """Finder anchors in drawing order: top-left, top-right, bottom-left."""
    far = module_count - FINDER_SIZE
    return (Anchor(0, 0), Anchor(0, far), Anchor(far, 0))


def is_in_finder_zone(row: int, col: int, zones: Sequence[Anchor]) -> bool:
    # Inclusive upper bound: the tested box is 8x8, one module wider than the
    # pattern, so the separator row/column next to each eye is excluded too.
    return any(
        z.row <= row <= z.row + FINDER_SIZE and z.col <= col <= z.col + FINDER_SIZE
        for z in zones
    )


def logo_cell_bounds(rect: LogoRect, cell_size: float,
                     margin: int = LOGO_MARGIN_CELLS) -> tuple[float, float, float, float]:
    """(first_row, last_row, first_col, last_col) of the logo in cell space, margin included."""
    first_col = rect.x / cell_size
    first_row = rect.y / cell_size
    width_cells = rect.width / cell_size - 1
    height_cells = rect.height / cell_size - 1
    return (
        first_row - margin,
        first_row + height_cells + margin,
        first_col - margin,
        first_col + width_cells + margin,
    )


def is_in_logo_zone(row: int, col: int, rect: LogoRect | None, cell_size: float) -> bool:
    """True if module (row, col) lies under the logo or within its 2-cell margin."""
    if rect is None:
        return False
    top, bottom, left, right = logo_cell_bounds(rect, cell_size)
    return top <= row <= bottom and left <= col <= right
