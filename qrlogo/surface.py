"""Pillow-backed output surface.

Callers work in unscaled canvas pixels; the surface multiplies every
coordinate by ``scale`` so the backing image is ``canvas_size * scale`` wide.
"""

import numpy as np
from PIL import Image, ImageColor, ImageDraw

from qrlogo.config import Color
from qrlogo.eyes import EyeShape
from qrlogo.geometry import flatten_path, stroke_outline
from qrlogo.rasterizer import FillCircle, FillRect, ModuleOp


def _rgb(color: Color) -> tuple[int, int, int]:
    if isinstance(color, tuple):
        return color[:3]
    return ImageColor.getcolor(color, "RGB")


class PilSurface:
    """Drawing surface over a single RGB image."""

    def __init__(self, canvas_size: float, scale: float = 1.0, background: Color = "#FFFFFF"):
        self.canvas_size = canvas_size
        self.scale = scale
        px = max(1, round(canvas_size * scale))
        self.image = Image.new("RGB", (px, px), _rgb(background))
        self._draw = ImageDraw.Draw(self.image)

    def _s(self, v: float) -> int:
        return round(v * self.scale)

    # -- primitives ----------------------------------------------------------

    def fill_rect(self, x0: float, y0: float, x1: float, y1: float, color: Color) -> None:
        """Fill pixels ``[x0, x1) x [y0, y1)``."""
        sx0, sy0, sx1, sy1 = self._s(x0), self._s(y0), self._s(x1), self._s(y1)
        if sx1 <= sx0 or sy1 <= sy0:
            return
        self._draw.rectangle([sx0, sy0, sx1 - 1, sy1 - 1], fill=_rgb(color))

    def fill_circle(self, cx: float, cy: float, radius: float, color: Color) -> None:
        s = self.scale
        self._draw.ellipse(
            [(cx - radius) * s, (cy - radius) * s, (cx + radius) * s, (cy + radius) * s],
            fill=_rgb(color),
        )

    def _polygon(self, path) -> list[tuple[float, float]]:
        s = self.scale
        return [(x * s, y * s) for x, y in flatten_path(path)]

    def draw_shape(self, shape: EyeShape) -> None:
        """Stroke the shape's path with a centred stroke, filling the interior if asked."""
        outer, inner = stroke_outline(shape.x, shape.y, shape.size, shape.radii, shape.line_width)
        outer_points = self._polygon(outer)
        if len(outer_points) < 3:
            return

        mask = Image.new("L", self.image.size, 0)
        mask_draw = ImageDraw.Draw(mask)
        mask_draw.polygon(outer_points, fill=255)
        if inner is not None and not shape.fill:
            inner_points = self._polygon(inner)
            if len(inner_points) >= 3:
                mask_draw.polygon(inner_points, fill=0)
        self.image.paste(_rgb(shape.color), mask=mask)

    def draw(self, ops: list[ModuleOp]) -> None:
        for op in ops:
            if isinstance(op, FillCircle):
                self.fill_circle(op.cx, op.cy, op.radius, op.color)
            elif isinstance(op, FillRect):
                self.fill_rect(op.x0, op.y0, op.x1, op.y1, op.color)

    # -- compositing ---------------------------------------------------------

    def composite(self, overlay: Image.Image, x: float, y: float,
                  width: float, height: float, opacity: float = 1.0) -> None:
        """Alpha-blend *overlay*, resized to width x height, at (x, y)."""
        w, h = max(1, self._s(width)), max(1, self._s(height))
        rgba = overlay.convert("RGBA").resize((w, h), Image.LANCZOS)
        if opacity < 1.0:
            arr = np.array(rgba)
            arr[..., 3] = (arr[..., 3].astype(np.float32) * opacity).round().astype(np.uint8)
            rgba = Image.fromarray(arr, "RGBA")
        self.image.paste(rgba, (self._s(x), self._s(y)), rgba)
