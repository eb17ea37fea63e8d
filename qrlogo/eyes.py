"""Eye renderer: the three finder patterns as stroked/filled rounded squares.

A finder pattern is a dark 7x7 ring, a light 5x5 gap and a dark 3x3 core.
It is drawn as the stroked 7x7 outline plus the stroked and filled 3x3 core,
with a stroke one module wide, so the light gap is simply left unpainted.
"""

import math
from dataclasses import dataclass
from typing import Sequence

from qrlogo.config import Color, RenderConfig, resolve_eye_color, resolve_eye_radius
from qrlogo.geometry import Corners, PathCommand, normalize_radii, rounded_rect_path, stroke_inset
from qrlogo.logging import audit, get_logger, trace
from qrlogo.zones import FINDER_SIZE, Anchor

log = get_logger("eyes")

CORE_SIZE = 3
CORE_INSET = 2


@dataclass(frozen=True)
class EyeShape:
    """One rounded square of an eye, in unscaled canvas pixels."""
    eye: int
    part: str  # "outer" or "inner"
    x: float
    y: float
    size: float
    radii: Corners
    line_width: float
    color: Color
    fill: bool

    @property
    def path(self) -> list[PathCommand]:
        return rounded_rect_path(self.x, self.y, self.size, self.radii)


def _shape(eye: int, part: str, x: float, y: float, size: float, radii: Corners,
           line_width: float, color: Color, fill: bool) -> EyeShape:
    x, y, size = stroke_inset(x, y, size, line_width)
    return EyeShape(eye, part, x, y, size, normalize_radii(radii, size), line_width, color, fill)


def eye_shapes(eye: int, anchor: Anchor, cell_size: float, offset: float,
               config: RenderConfig) -> tuple[EyeShape, EyeShape]:
    """Outer ring and inner dot of one eye; depends on no other eye."""
    radius = resolve_eye_radius(config, eye)
    color = resolve_eye_color(config, eye)
    line_width = math.ceil(cell_size)

    x = anchor.col * cell_size + offset
    y = anchor.row * cell_size + offset
    outer = _shape(eye, "outer", x, y, FINDER_SIZE * cell_size,
                   radius.outer, line_width, color.outer, fill=False)

    inset = CORE_INSET * cell_size
    inner = _shape(eye, "inner", x + inset, y + inset, CORE_SIZE * cell_size,
                   radius.inner, line_width, color.inner, fill=True)
    return outer, inner


@trace
def render_eyes(anchors: Sequence[Anchor], cell_size: float, offset: float,
                config: RenderConfig) -> list[EyeShape]:
    """Shapes for every eye, in anchor order, outer ring before inner dot."""
    shapes: list[EyeShape] = []
    for eye, anchor in enumerate(anchors):
        shapes.extend(eye_shapes(eye, anchor, cell_size, offset, config))

    audit("eyes.rendered", logger=log, eyes=len(anchors),
          rounded=sum(1 for s in shapes if any(s.radii)))
    return shapes
