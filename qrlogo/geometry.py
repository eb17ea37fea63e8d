"""Corner-radius normalization and rounded-square paths."""

import math
from dataclasses import dataclass
from typing import Sequence

Point = tuple[float, float]
Corners = tuple[float, float, float, float]  # top-left, top-right, bottom-right, bottom-left


# ---------------------------------------------------------------------------
# Radii
# ---------------------------------------------------------------------------

def _as_radius(value) -> float:
    try:
        r = float(value)
    except (TypeError, ValueError):
        return 0.0
    return r if math.isfinite(r) else 0.0


def normalize_radii(spec: float | Sequence[float] | None, shape_size: float) -> Corners:
    """Resolve a radius spec to four corner radii within ``[0, shape_size / 2]``.

    A scalar applies to all four corners. A sequence is read as
    (top-left, top-right, bottom-right, bottom-left); missing or unusable
    entries count as 0. Nothing here raises: bad input is clamped.
    """
    if spec is None:
        values = [0.0] * 4
    elif isinstance(spec, (int, float)):
        values = [_as_radius(spec)] * 4
    else:
        values = [_as_radius(v) for v in list(spec)[:4]]
        values += [0.0] * (4 - len(values))

    limit = max(0.0, shape_size / 2)
    return tuple(max(0.0, min(r, limit)) for r in values)


def stroke_inset(x: float, y: float, size: float, line_width: float) -> tuple[float, float, float]:
    """Shift a square so a centered stroke's outer edge sits on the original boundary."""
    half = line_width / 2
    return x + half, y + half, size - line_width


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MoveTo:
    point: Point


@dataclass(frozen=True)
class LineTo:
    point: Point


@dataclass(frozen=True)
class QuadTo:
    control: Point
    point: Point


PathCommand = MoveTo | LineTo | QuadTo


def rounded_rect_path(x: float, y: float, size: float, radii: float | Sequence[float]) -> list[PathCommand]:
    """Closed rounded-square outline starting at the top edge, clockwise.

    Each corner with a nonzero radius gets one quadratic curve whose control
    point is the sharp corner. Zero-radius corners stay sharp.
    """
    tl, tr, br, bl = normalize_radii(radii, size)
    right, bottom = x + size, y + size

    path: list[PathCommand] = [MoveTo((x + tl, y)), LineTo((right - tr, y))]
    if tr:
        path.append(QuadTo((right, y), (right, y + tr)))
    path.append(LineTo((right, bottom - br)))
    if br:
        path.append(QuadTo((right, bottom), (right - br, bottom)))
    path.append(LineTo((x + bl, bottom)))
    if bl:
        path.append(QuadTo((x, bottom), (x, bottom - bl)))
    path.append(LineTo((x, y + tl)))
    if tl:
        path.append(QuadTo((x, y), (x + tl, y)))
    return path


def stroke_outline(x: float, y: float, size: float, radii: float | Sequence[float],
                   line_width: float) -> tuple[list[PathCommand], list[PathCommand] | None]:
    """Outer and inner boundary of a stroke centred on a rounded-square path.

    Sharp corners stay sharp on both sides (mitered). The inner boundary is
    None when the stroke is wide enough to close the square.
    """
    half = line_width / 2
    corners = normalize_radii(radii, size)
    outer = rounded_rect_path(x - half, y - half, size + line_width,
                              [r + half if r else 0.0 for r in corners])
    inner_size = size - line_width
    if inner_size <= 0:
        return outer, None
    inner = rounded_rect_path(x + half, y + half, inner_size,
                              [max(0.0, r - half) for r in corners])
    return outer, inner


def _quadratic_bezier(p0: Point, p1: Point, p2: Point, n: int) -> list[Point]:
    """*n* points along a quadratic Bezier curve, excluding *p0*."""
    pts = []
    for i in range(1, n + 1):
        t = i / n
        u = 1 - t
        x = u * u * p0[0] + 2 * u * t * p1[0] + t * t * p2[0]
        y = u * u * p0[1] + 2 * u * t * p1[1] + t * t * p2[1]
        pts.append((x, y))
    return pts


def flatten_path(path: Sequence[PathCommand], curve_steps: int = 12) -> list[Point]:
    """Convert a path to a polygon vertex list (the path is implicitly closed)."""
    points: list[Point] = []
    for cmd in path:
        if isinstance(cmd, QuadTo):
            points.extend(_quadratic_bezier(points[-1], cmd.control, cmd.point, curve_steps))
        else:
            points.append(cmd.point)

    # Drop consecutive duplicates (a zero-length edge between two full-radius corners)
    deduped = [points[0]] if points else []
    for p in points[1:]:
        if not (math.isclose(p[0], deduped[-1][0]) and math.isclose(p[1], deduped[-1][1])):
            deduped.append(p)
    if len(deduped) > 1 and deduped[0] == deduped[-1]:
        deduped.pop()
    return deduped
