import pytest

pytest.importorskip("cv2", exc_type=ImportError)
pytest.importorskip("pyzbar.pyzbar", exc_type=ImportError)

from PIL import Image  # noqa: E402

from qrlogo.config import LogoConfig, RenderConfig  # noqa: E402
from qrlogo.renderer import render_qr  # noqa: E402
from qrlogo.verify import scan, verify  # noqa: E402

URL = "https://example.com"


def test_plain_render_scans():
    result = render_qr(URL, RenderConfig(size=300, quiet_zone=48))
    results = verify(result.image, expected_data=URL)
    assert any(r.success for r in results)
    assert all(r.decoded_data in (None, URL) for r in results)


def test_logo_with_high_error_correction_still_scans():
    logo = Image.new("RGBA", (32, 32), (200, 30, 30, 255))
    config = RenderConfig(
        size=300, quiet_zone=48, ec_level="H",
        eye_radius=[6, 6, 6],
        logo=LogoConfig(logo, remove_qr_behind_logo=True),
    )
    result = render_qr(URL, config)
    assert any(r.success for r in verify(result.image, expected_data=URL))


def test_mismatch_is_a_failure():
    result = render_qr(URL, RenderConfig(size=300, quiet_zone=48))
    assert not any(r.success for r in verify(result.image, expected_data="something else"))


def test_blank_image_does_not_scan():
    r = scan(Image.new("RGB", (200, 200), "white"), "opencv")
    assert not r.success
    assert r.error
