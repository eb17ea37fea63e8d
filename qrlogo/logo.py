"""Logo loading: in-memory images, raw bytes, data URIs, files and remote URLs."""

import base64
import binascii
import io
from pathlib import Path
from urllib.parse import unquote_to_bytes

import requests
from PIL import Image, UnidentifiedImageError

from qrlogo.logging import audit, get_logger, trace

log = get_logger("logo")

FETCH_TIMEOUT = 15
CORS_ORIGIN = "null"

# Everything that can go wrong between a logo source and a decoded image
LOGO_ERRORS = (OSError, UnidentifiedImageError, Image.DecompressionBombError,
               requests.RequestException, ValueError)


class CorsRejected(ValueError):
    """An anonymous cross-origin fetch got no Access-Control-Allow-Origin header."""


def is_remote(source) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def is_data_uri(source) -> bool:
    return isinstance(source, str) and source[:5].lower() == "data:"


def _decode(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


def decode_data_uri(uri: str) -> bytes:
    """Payload of a ``data:[<mediatype>][;base64],<data>`` URI."""
    header, sep, payload = uri[5:].partition(",")
    if not sep:
        raise ValueError("data URI has no ',' separator")
    if header.lower().endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except binascii.Error as exc:
            raise ValueError(f"bad base64 in data URI: {exc}") from exc
    return unquote_to_bytes(payload)


@trace
def fetch_logo_bytes(url: str, enable_cors: bool = False) -> bytes:
    """Download a remote logo.

    With *enable_cors* the request is made the way an anonymous
    cross-origin image load is: an ``Origin`` header is sent and the
    response must allow it, otherwise CorsRejected is raised.
    """
    headers = {"Origin": CORS_ORIGIN} if enable_cors else {}
    resp = requests.get(url, timeout=FETCH_TIMEOUT, headers=headers)
    resp.raise_for_status()
    if enable_cors:
        allowed = resp.headers.get("Access-Control-Allow-Origin")
        if allowed not in ("*", CORS_ORIGIN):
            raise CorsRejected(f"{url[:80]!r} does not allow cross-origin use")
    audit("logo.fetched", logger=log, url=url[:80], bytes=len(resp.content), cors=enable_cors)
    return resp.content


@trace
def load_logo(source, enable_cors: bool = False) -> Image.Image:
    """Decode a logo source into an RGBA image.

    Args:
        source: PIL image, raw bytes, data URI, file path or http(s) URL.
        enable_cors: Fetch remote URLs in anonymous CORS mode.

    Raises:
        One of LOGO_ERRORS when the logo cannot be obtained.
    """
    if isinstance(source, Image.Image):
        img = source.copy()
    elif isinstance(source, (bytes, bytearray)):
        img = _decode(bytes(source))
    elif is_data_uri(source):
        img = _decode(decode_data_uri(source))
    elif is_remote(source):
        img = _decode(fetch_logo_bytes(source, enable_cors=enable_cors))
    elif isinstance(source, (str, Path)):
        with Image.open(source) as opened:
            img = opened.copy()
    else:
        raise ValueError(f"Unsupported logo source type {type(source).__name__}")

    rgba = img.convert("RGBA")
    audit("logo.loaded", logger=log, size=f"{rgba.size[0]}x{rgba.size[1]}", mode=img.mode)
    return rgba
