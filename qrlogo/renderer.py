"""Render orchestrator: layout, module sweep, eyes and the asynchronous logo overlay."""

import itertools
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field

from PIL import Image

from qrlogo.config import LogoConfig, RenderConfig
from qrlogo.eyes import EyeShape, render_eyes
from qrlogo.logging import audit, get_logger, trace
from qrlogo.logo import LOGO_ERRORS, load_logo
from qrlogo.matrix import MatrixLike, check_matrix, encode
from qrlogo.rasterizer import ModuleOp, rasterize_modules
from qrlogo.surface import PilSurface
from qrlogo.zones import LogoRect, finder_zones

log = get_logger("renderer")

WATERMARK_CELLS = 2


@dataclass(frozen=True)
class Layout:
    """Per-render geometry, in unscaled canvas pixels."""
    module_count: int
    body_size: float
    quiet_zone: float
    cell_size: float
    scale: float
    logo_rect: LogoRect | None = None

    @property
    def offset(self) -> float:
        return self.quiet_zone

    @property
    def canvas_size(self) -> float:
        return self.body_size + 2 * self.quiet_zone

    @property
    def pixel_size(self) -> int:
        return max(1, round(self.canvas_size * self.scale))


def compute_layout(module_count: int, config: RenderConfig) -> Layout:
    logo_rect = None
    if config.logo is not None:
        width, height = config.logo.footprint(config.size)
        logo_rect = LogoRect(
            x=(config.size - width) / 2,
            y=(config.size - height) / 2,
            width=width,
            height=height,
        )
    return Layout(
        module_count=module_count,
        body_size=config.size,
        quiet_zone=config.quiet_zone,
        cell_size=config.size / module_count,
        scale=config.scale,
        logo_rect=logo_rect,
    )


def generate_rgb_key(value: str) -> str:
    """Derive an ``rgb(r, g, b)`` key from the character codes of *value*."""
    total = sum(ord(ch) for ch in value)
    r = (total & 0xFF0000) >> 16
    g = (total & 0x00FF00) >> 8
    b = total & 0x0000FF
    return f"rgb({r}, {g}, {b})"


def _key_rgb(key: str) -> tuple[int, int, int]:
    return tuple(int(v) for v in key[4:-1].split(","))


@dataclass
class RenderResult:
    """Output of one render call.

    The logo overlay (if any) may still be pending when this is returned;
    call ``wait()`` before saving the image.
    """
    image: Image.Image
    layout: Layout
    modules: list[ModuleOp] = field(default_factory=list)
    eyes: list[EyeShape] = field(default_factory=list)
    rgb_key: str | None = None
    token: int = 0
    logo_task: Future | None = None

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the logo overlay settles. True if the logo was drawn."""
        if self.logo_task is None:
            return False
        return self.logo_task.result(timeout)


class QRRenderer:
    """Renders module matrices onto Pillow images.

    Each ``render`` call takes a new token. A logo decode that finishes after
    a newer render started on the same renderer is dropped instead of being
    pasted over the newer output.
    """

    def __init__(self, max_workers: int = 2):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="qrlogo-logo")
        self._lock = threading.Lock()
        self._tokens = itertools.count(1)
        self._latest = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        self._executor.shutdown(wait=True)

    def _issue_token(self) -> int:
        with self._lock:
            self._latest = next(self._tokens)
            return self._latest

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._latest

    @trace
    def render(self, matrix: MatrixLike, config: RenderConfig, payload: str | None = None) -> RenderResult:
        """Draw *matrix* styled by *config*.

        Args:
            matrix: Encoded symbol; must be square with a positive side.
            config: Styling options.
            payload: Encoded text, needed only for the authenticated watermark.

        Raises:
            MatrixError: if the matrix cannot be laid out.
        """
        n = check_matrix(matrix)
        token = self._issue_token()
        layout = compute_layout(n, config)
        cell = layout.cell_size

        surface = PilSurface(layout.canvas_size, layout.scale, config.bg_color)

        rgb_key = None
        if config.authenticated and payload and "uuid" in payload:
            rgb_key = generate_rgb_key(payload)
            box = cell * WATERMARK_CELLS
            x = layout.canvas_size - box - 1
            y = layout.quiet_zone + 1
            surface.fill_rect(x, y, x + box, y + box, _key_rgb(rgb_key))

        zones = finder_zones(n)
        hide_rect = layout.logo_rect if config.logo and config.logo.remove_qr_behind_logo else None
        modules = rasterize_modules(
            matrix, cell, layout.offset, zones, config.fg_color,
            style=config.qr_style, logo_rect=hide_rect,
        )
        surface.draw(modules)

        eyes = render_eyes(zones, cell, layout.offset, config)
        for shape in eyes:
            surface.draw_shape(shape)

        logo_task = None
        if config.logo is not None:
            logo_task = self._executor.submit(self._composite_logo, token, surface, config.logo, layout)

        audit("render.done", logger=log,
              output_id=config.output_id, modules=n, style=config.qr_style,
              canvas_px=f"{layout.pixel_size}x{layout.pixel_size}",
              cell_size=round(cell, 3), logo=config.logo is not None, token=token)
        return RenderResult(
            image=surface.image,
            layout=layout,
            modules=modules,
            eyes=eyes,
            rgb_key=rgb_key,
            token=token,
            logo_task=logo_task,
        )

    def _composite_logo(self, token: int, surface: PilSurface, logo: LogoConfig, layout: Layout) -> bool:
        try:
            image = load_logo(logo.source, enable_cors=logo.enable_cors)
        except LOGO_ERRORS as e:
            log.warning("Logo unavailable, rendering without it: %s", e)
            audit("logo.skipped", logger=log, token=token, reason=str(e)[:80])
            return False

        rect = layout.logo_rect
        with self._lock:
            if token != self._latest:
                audit("logo.discarded", logger=log, token=token, latest=self._latest)
                return False
            surface.composite(
                image,
                rect.x + layout.offset,
                rect.y + layout.offset,
                rect.width,
                rect.height,
                opacity=logo.opacity,
            )
        audit("logo.composited", logger=log, token=token,
              size=f"{rect.width:g}x{rect.height:g}", opacity=logo.opacity)
        return True


@trace
def render(matrix: MatrixLike, config: RenderConfig, payload: str | None = None) -> RenderResult:
    """Render on a private renderer and wait for the logo overlay."""
    with QRRenderer(max_workers=1) as renderer:
        result = renderer.render(matrix, config, payload=payload)
        result.wait()
    return result


@trace
def render_qr(value: str, config: RenderConfig | None = None, backend: str = "qrcode") -> RenderResult:
    """Encode *value* at the configured error correction level and render it."""
    config = config or RenderConfig()
    matrix = encode(value, config.ec_level, backend=backend)
    return render(matrix, config, payload=value)
