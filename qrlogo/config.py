"""Render configuration: options, defaults and the eye radius/color unions.

Eye options accept a scalar or ``{inner, outer}`` value for all eyes, or a
sequence of per-eye values (each may also be four corners). They are parsed
once, when the config is built, into fixed per-eye ``EyeRadius`` /
``EyeColor`` values; the renderer then only indexes them through
``resolve_eye_radius`` / ``resolve_eye_color``.
"""

import dataclasses
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from PIL import Image, ImageColor

from qrlogo.geometry import Corners
from qrlogo.logging import get_logger

log = get_logger("config")

EYE_COUNT = 3
QR_STYLES = ("squares", "dots")
DEFAULT_OUTPUT_ID = "react-qrcode-logo"
DEFAULT_LOGO_FRACTION = 0.2

Color = str | tuple[int, ...]


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------

def _is_color_tuple(value) -> bool:
    return isinstance(value, tuple) and len(value) in (3, 4) and all(isinstance(v, int) for v in value)


def parse_color(value, fallback: Color) -> Color:
    """Return *value* if Pillow understands it as a color, else *fallback*."""
    if _is_color_tuple(value):
        return value
    if isinstance(value, str):
        try:
            ImageColor.getrgb(value)
            return value
        except ValueError:
            pass
    log.warning("Unrecognised color %r, using %r", value, fallback)
    return fallback


# ---------------------------------------------------------------------------
# Eye radius
# ---------------------------------------------------------------------------

def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _corners(value) -> Corners:
    """Scalar or corner sequence -> 4 corner values (clamping happens at draw time)."""
    if _is_number(value):
        v = float(value) if math.isfinite(value) else 0.0
        return (v, v, v, v)
    if isinstance(value, Sequence) and not isinstance(value, str):
        vals = [float(v) if _is_number(v) and math.isfinite(v) else 0.0 for v in list(value)[:4]]
        return tuple(vals + [0.0] * (4 - len(vals)))
    if value is not None:
        log.warning("Unrecognised corner radius %r, using 0", value)
    return (0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class EyeRadius:
    """Corner radii (tl, tr, br, bl) of one eye's outer ring and inner dot."""
    outer: Corners = (0.0, 0.0, 0.0, 0.0)
    inner: Corners = (0.0, 0.0, 0.0, 0.0)

    @classmethod
    def parse(cls, value) -> "EyeRadius":
        if isinstance(value, EyeRadius):
            return value
        if isinstance(value, Mapping):
            return cls(outer=_corners(value.get("outer", 0)), inner=_corners(value.get("inner", 0)))
        corners = _corners(value)
        return cls(outer=corners, inner=corners)


def parse_eye_radius(value) -> tuple[EyeRadius, EyeRadius, EyeRadius]:
    """Expand an eye radius option into one EyeRadius per eye.

    A sequence is always per eye (top-left, top-right, bottom-left); four
    corners for one eye go inside its own entry or an ``{inner, outer}`` value.
    """
    if isinstance(value, Sequence) and not isinstance(value, str):
        per_eye = [EyeRadius.parse(v) for v in list(value)[:EYE_COUNT]]
        per_eye += [EyeRadius()] * (EYE_COUNT - len(per_eye))
        return tuple(per_eye)
    return (EyeRadius.parse(value),) * EYE_COUNT


# ---------------------------------------------------------------------------
# Eye color
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EyeColor:
    """Colors of one eye's outer ring and inner dot."""
    outer: Color
    inner: Color

    @classmethod
    def parse(cls, value, fallback: Color) -> "EyeColor":
        if isinstance(value, EyeColor):
            return value
        if value is None:
            return cls(outer=fallback, inner=fallback)
        if isinstance(value, Mapping):
            return cls(
                outer=parse_color(value.get("outer", fallback), fallback),
                inner=parse_color(value.get("inner", fallback), fallback),
            )
        color = parse_color(value, fallback)
        return cls(outer=color, inner=color)


def parse_eye_color(value, fallback: Color) -> tuple[EyeColor, EyeColor, EyeColor]:
    """Expand an eye color option into one EyeColor per eye; unset eyes use *fallback*."""
    if isinstance(value, Sequence) and not isinstance(value, str) and not _is_color_tuple(value):
        per_eye = [EyeColor.parse(v, fallback) for v in list(value)[:EYE_COUNT]]
        per_eye += [EyeColor(fallback, fallback)] * (EYE_COUNT - len(per_eye))
        return tuple(per_eye)
    return (EyeColor.parse(value, fallback),) * EYE_COUNT


# ---------------------------------------------------------------------------
# Config objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LogoConfig:
    """Logo overlay options.

    ``source`` may be a PIL image, raw bytes, a file path or an http(s) URL.
    Width defaults to 20% of the body size and height to the width.
    """
    source: str | bytes | Image.Image
    width: float | None = None
    height: float | None = None
    opacity: float = 1.0
    enable_cors: bool = False
    remove_qr_behind_logo: bool = False

    def __post_init__(self):
        opacity = self.opacity if _is_number(self.opacity) and math.isfinite(self.opacity) else 1.0
        object.__setattr__(self, "opacity", min(1.0, max(0.0, float(opacity))))

    def footprint(self, body_size: float) -> tuple[float, float]:
        width = self.width or body_size * DEFAULT_LOGO_FRACTION
        height = self.height or width
        return width, height


@dataclass(frozen=True)
class RenderConfig:
    size: float = 150
    quiet_zone: float = 10
    bg_color: Color = "#FFFFFF"
    fg_color: Color = "#000000"
    qr_style: str = "squares"
    eye_radius: object = 0
    eye_color: object = None
    logo: LogoConfig | None = None
    ec_level: str = "M"
    scale: float = 1.0
    output_id: str = DEFAULT_OUTPUT_ID
    authenticated: bool = False
    eye_radii: tuple[EyeRadius, ...] = field(init=False, repr=False)
    eye_colors: tuple[EyeColor, ...] = field(init=False, repr=False)

    def __post_init__(self):
        if not _is_number(self.size) or self.size <= 0:
            raise ValueError(f"size must be a positive number, got {self.size!r}")
        if not _is_number(self.scale) or self.scale <= 0:
            raise ValueError(f"scale must be a positive number, got {self.scale!r}")
        if not _is_number(self.quiet_zone) or self.quiet_zone < 0:
            log.warning("Invalid quiet zone %r, using 0", self.quiet_zone)
            object.__setattr__(self, "quiet_zone", 0)

        object.__setattr__(self, "bg_color", parse_color(self.bg_color, "#FFFFFF"))
        object.__setattr__(self, "fg_color", parse_color(self.fg_color, "#000000"))
        if self.qr_style not in QR_STYLES:
            log.warning("Unknown qr_style %r, using 'squares'", self.qr_style)
            object.__setattr__(self, "qr_style", "squares")

        object.__setattr__(self, "eye_radii", parse_eye_radius(self.eye_radius))
        object.__setattr__(self, "eye_colors", parse_eye_color(self.eye_color, self.fg_color))

    @property
    def canvas_size(self) -> float:
        return self.size + 2 * self.quiet_zone

    def replace(self, **changes) -> "RenderConfig":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_mapping(cls, options: Mapping) -> "RenderConfig":
        """Build a config from snake_case or camelCase option names."""
        kwargs: dict = {}
        logo_kwargs: dict = {}
        for key, value in options.items():
            if key in _LOGO_ALIASES:
                logo_kwargs[_LOGO_ALIASES[key]] = value
            elif key == "logo" and isinstance(value, Mapping):
                logo_kwargs.update({_LOGO_ALIASES.get(k, k): v for k, v in value.items()})
            elif key == "logo":
                kwargs["logo"] = value
            elif key in _CONFIG_ALIASES:
                kwargs[_CONFIG_ALIASES[key]] = value
            elif key in _IGNORED_KEYS:
                continue
            else:
                log.warning("Ignoring unknown render option %r", key)

        if logo_kwargs.get("source"):
            kwargs["logo"] = LogoConfig(**logo_kwargs)
        return cls(**kwargs)


def resolve_eye_radius(config: RenderConfig, eye: int) -> EyeRadius:
    return config.eye_radii[eye]


def resolve_eye_color(config: RenderConfig, eye: int) -> EyeColor:
    return config.eye_colors[eye]


_CONFIG_ALIASES = {
    "size": "size",
    "quiet_zone": "quiet_zone", "quietZone": "quiet_zone",
    "bg_color": "bg_color", "bgColor": "bg_color",
    "fg_color": "fg_color", "fgColor": "fg_color",
    "qr_style": "qr_style", "qrStyle": "qr_style",
    "eye_radius": "eye_radius", "eyeRadius": "eye_radius",
    "eye_color": "eye_color", "eyeColor": "eye_color",
    "ec_level": "ec_level", "ecLevel": "ec_level",
    "scale": "scale",
    "output_id": "output_id", "id": "output_id",
    "authenticated": "authenticated",
}

_LOGO_ALIASES = {
    "logo_image": "source", "logoImage": "source", "source": "source",
    "logo_width": "width", "logoWidth": "width",
    "logo_height": "height", "logoHeight": "height",
    "logo_opacity": "opacity", "logoOpacity": "opacity",
    "enable_cors": "enable_cors", "enableCORS": "enable_cors",
    "remove_qr_behind_logo": "remove_qr_behind_logo",
    "removeQrCodeBehindLogo": "remove_qr_behind_logo",
}

# Payload and host-styling keys travel in the same files but are not render options
_IGNORED_KEYS = {"value", "style"}
