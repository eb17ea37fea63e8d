import base64
import io
import threading

import pytest
import qrcode
from PIL import Image

import qrlogo.logo as logo_mod
import qrlogo.renderer as renderer_mod
from qrlogo.config import LogoConfig, RenderConfig
from qrlogo.matrix import MatrixError, encode
from qrlogo.renderer import QRRenderer, compute_layout, generate_rgb_key, render, render_qr

from conftest import SideOnlyMatrix

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def close_to(pixel, expected, tolerance=2):
    return all(abs(a - b) <= tolerance for a, b in zip(pixel, expected))


def test_default_scenario_canvas_and_module_count():
    qr = qrcode.QRCode(error_correction=qrcode.constants.ERROR_CORRECT_M, border=0)
    qr.add_data("https://example.com")
    qr.make(fit=True)

    result = render_qr("https://example.com", RenderConfig(size=150, quiet_zone=10, ec_level="M"))
    assert result.layout.module_count == qr.modules_count
    assert result.layout.canvas_size == 170
    assert result.image.size == (170, 170)
    assert result.layout.cell_size == 150 / qr.modules_count


def test_scale_multiplies_backing_image():
    result = render_qr("https://example.com", RenderConfig(scale=2))
    assert result.image.size == (340, 340)
    assert result.layout.canvas_size == 170


def test_background_quiet_zone_and_finder_pixels():
    result = render_qr("https://example.com")
    img = result.image
    cell = result.layout.cell_size
    assert img.getpixel((0, 0)) == WHITE
    assert img.getpixel((5, 85)) == WHITE
    # Top-left eye: ring, light gap, dark core
    assert img.getpixel((11, 11)) == BLACK
    assert img.getpixel((round(10 + 1.5 * cell), round(10 + 3.5 * cell))) == WHITE
    assert img.getpixel((round(10 + 3.5 * cell), round(10 + 3.5 * cell))) == BLACK


def test_eye_colors_land_on_each_eye():
    config = RenderConfig(
        eye_radius=[0, [4, 4, 4, 4], {"inner": 2, "outer": 0}],
        eye_color=["#000", "#F00", "#00F"],
    )
    result = render_qr("https://example.com", config)
    img = result.image
    n = result.layout.module_count
    cell = result.layout.cell_size
    far = 10 + (n - 7) * cell

    middle = round(10 + 3.5 * cell)
    far_middle = round(far + 3.5 * cell)
    assert img.getpixel((middle, 12)) == BLACK
    assert img.getpixel((far_middle, 12)) == (255, 0, 0)
    assert img.getpixel((far_middle, middle)) == (255, 0, 0)
    assert img.getpixel((12, far_middle)) == (0, 0, 255)
    assert img.getpixel((middle, far_middle)) == (0, 0, 255)


def test_module_colour_is_foreground(example_matrix):
    config = RenderConfig(fg_color="#00FF00")
    result = render(example_matrix, config)
    op = result.modules[0]
    assert result.image.getpixel((int(op.x0), int(op.y0))) == (0, 255, 0)


def test_dots_and_squares_cover_same_cells(example_matrix):
    squares = render(example_matrix, RenderConfig(qr_style="squares")).modules
    dots = render(example_matrix, RenderConfig(qr_style="dots")).modules
    assert {(o.row, o.col) for o in squares} == {(o.row, o.col) for o in dots}


def test_logo_composited_after_modules(example_matrix, red_logo):
    config = RenderConfig(logo=LogoConfig(red_logo, remove_qr_behind_logo=True))
    with QRRenderer() as renderer:
        result = renderer.render(example_matrix, config)
        assert result.wait(timeout=10) is True
    rect = result.layout.logo_rect
    assert (rect.x, rect.y, rect.width, rect.height) == (60, 60, 30, 30)
    assert result.image.getpixel((85, 85)) == (255, 0, 0)
    assert result.image.getpixel((71, 71)) == (255, 0, 0)


def test_logo_opacity_blends_with_what_is_underneath(example_matrix, red_logo):
    config = RenderConfig(logo=LogoConfig(red_logo, opacity=0.5, remove_qr_behind_logo=True))
    result = render(example_matrix, config)
    assert close_to(result.image.getpixel((85, 85)), (255, 128, 128))


def test_modules_hidden_behind_logo_only_when_requested(example_matrix, red_logo):
    kept = render(example_matrix, RenderConfig(logo=LogoConfig(red_logo))).modules
    removed = render(example_matrix, RenderConfig(logo=LogoConfig(red_logo, remove_qr_behind_logo=True))).modules
    assert len(removed) < len(kept)
    layout = compute_layout(example_matrix.side_length(), RenderConfig(logo=LogoConfig(red_logo)))
    cell = layout.cell_size
    first = layout.logo_rect.x / cell
    last = first + layout.logo_rect.width / cell - 1
    for op in removed:
        assert not (first - 2 <= op.row <= last + 2 and first - 2 <= op.col <= last + 2)


def test_broken_logo_leaves_a_valid_code(example_matrix):
    plain = render(example_matrix, RenderConfig())
    result = render(example_matrix, RenderConfig(logo=LogoConfig(b"definitely not an image")))
    assert result.wait() is False
    assert list(result.image.getdata()) == list(plain.image.getdata())


def red_png():
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), (255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


class PngResponse:
    status_code = 200
    headers = {}

    def __init__(self, content):
        self.content = content

    def raise_for_status(self):
        pass


def test_remote_logo_drawn_without_cors(example_matrix, monkeypatch):
    monkeypatch.setattr(logo_mod.requests, "get", lambda url, timeout, headers: PngResponse(red_png()))
    config = RenderConfig(logo=LogoConfig("https://example.com/logo.png", remove_qr_behind_logo=True))
    result = render(example_matrix, config)
    assert result.wait() is True
    assert result.image.getpixel((85, 85)) == (255, 0, 0)


def test_cors_rejected_remote_logo_is_skipped(example_matrix, monkeypatch):
    monkeypatch.setattr(logo_mod.requests, "get", lambda url, timeout, headers: PngResponse(red_png()))
    config = RenderConfig(logo=LogoConfig("https://example.com/logo.png", enable_cors=True))
    result = render(example_matrix, config)
    assert result.wait() is False
    assert result.image.getpixel((85, 85)) != (255, 0, 0)


def test_data_uri_logo_drawn(example_matrix):
    uri = "data:image/png;base64," + base64.b64encode(red_png()).decode("ascii")
    result = render(example_matrix, RenderConfig(logo=LogoConfig(uri, remove_qr_behind_logo=True)))
    assert result.wait() is True
    assert result.image.getpixel((85, 85)) == (255, 0, 0)


def test_stale_logo_is_discarded(example_matrix, red_logo, monkeypatch):
    release = threading.Event()
    real_load = renderer_mod.load_logo

    def slow_load(source, enable_cors=False):
        release.wait(timeout=10)
        return real_load(source, enable_cors=enable_cors)

    monkeypatch.setattr(renderer_mod, "load_logo", slow_load)
    config = RenderConfig(logo=LogoConfig(red_logo, remove_qr_behind_logo=True))

    with QRRenderer() as renderer:
        first = renderer.render(example_matrix, config)
        second = renderer.render(example_matrix, config)
        assert second.token > first.token
        assert not renderer.is_current(first.token)
        release.set()
        assert first.wait(timeout=10) is False
        assert second.wait(timeout=10) is True

    assert first.image.getpixel((85, 85)) != (255, 0, 0)
    assert second.image.getpixel((85, 85)) == (255, 0, 0)


def test_rgb_key():
    assert generate_rgb_key("abc") == "rgb(0, 1, 38)"


def test_rgb_key_returned_not_shared():
    value = "https://example.com/?uuid=1234"
    config = RenderConfig(authenticated=True)
    a = render_qr(value, config)
    b = render_qr("https://example.com/?uuid=9", config)
    assert a.rgb_key == generate_rgb_key(value)
    assert b.rgb_key == generate_rgb_key("https://example.com/?uuid=9")
    assert a.rgb_key != b.rgb_key

    # Marker box sits just inside the top-right of the canvas
    r, g, bl = (int(v) for v in a.rgb_key[4:-1].split(","))
    cell = a.layout.cell_size
    assert a.image.getpixel((int(170 - cell - 1), 12)) == (r, g, bl)


def test_no_key_without_authentication_or_uuid():
    assert render_qr("https://example.com/?uuid=1").rgb_key is None
    assert render_qr("https://example.com", RenderConfig(authenticated=True)).rgb_key is None


def test_inconsistent_matrix_fails_loudly():
    with pytest.raises(MatrixError):
        render(SideOnlyMatrix(0), RenderConfig())


def test_without_logo_wait_returns_false(example_matrix):
    assert render(example_matrix, RenderConfig()).logo_task is None
    assert render(example_matrix, RenderConfig()).wait() is False


def test_image_is_rgb(example_matrix):
    assert isinstance(render(example_matrix, RenderConfig()).image, Image.Image)
    assert render(example_matrix, RenderConfig()).image.mode == "RGB"


def test_segno_backend_renders_same_canvas():
    result = render_qr("https://example.com", RenderConfig(), backend="segno")
    assert result.image.size == (170, 170)
    assert result.layout.module_count == encode("https://example.com", "M", backend="segno").side_length()
