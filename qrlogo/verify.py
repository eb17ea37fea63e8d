"""Scan verification: decode a rendered symbol to confirm the styling kept it readable."""

import time
from dataclasses import dataclass

import cv2
import numpy as np
from PIL import Image
from pyzbar.pyzbar import decode as pyzbar_decode

from qrlogo.logging import audit, get_logger, trace

log = get_logger("verify")


@dataclass
class ScanResult:
    """Result of a single decode attempt."""
    success: bool
    decoded_data: str | None = None
    decode_time_ms: float = 0.0
    decoder: str = ""
    error: str | None = None


def _decode_pyzbar(image: Image.Image) -> str | None:
    results = pyzbar_decode(image.convert("RGB"))
    return results[0].data.decode("utf-8", errors="replace") if results else None


def _decode_opencv(image: Image.Image) -> str | None:
    gray = cv2.cvtColor(np.array(image.convert("RGB")), cv2.COLOR_RGB2GRAY)
    data, _, _ = cv2.QRCodeDetector().detectAndDecode(gray)
    return data or None


DECODERS = {
    "pyzbar/zbar": _decode_pyzbar,
    "opencv": _decode_opencv,
}


@trace
def scan(image: Image.Image, decoder: str = "pyzbar/zbar") -> ScanResult:
    """Decode *image* with one decoder. Decoder failures become unsuccessful results."""
    start = time.perf_counter()
    try:
        data = DECODERS[decoder](image)
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        audit("scan.error", logger=log, decoder=decoder, error=str(e), time_ms=round(elapsed, 1))
        return ScanResult(success=False, decode_time_ms=elapsed, decoder=decoder, error=str(e))

    elapsed = (time.perf_counter() - start) * 1000
    if data is None:
        audit("scan.verified", logger=log, decoder=decoder, success=False, time_ms=round(elapsed, 1))
        return ScanResult(success=False, decode_time_ms=elapsed, decoder=decoder, error="No QR code detected")

    audit("scan.verified", logger=log, decoder=decoder, success=True, time_ms=round(elapsed, 1), data=data[:80])
    return ScanResult(success=True, decoded_data=data, decode_time_ms=elapsed, decoder=decoder)


@trace
def verify(image: Image.Image, expected_data: str | None = None) -> list[ScanResult]:
    """Run every decoder on *image*.

    Args:
        image: Rendered QR image.
        expected_data: If given, a decode with different content is a failure.

    Returns:
        One ScanResult per decoder.
    """
    results = []
    for name in DECODERS:
        result = scan(image, name)
        if result.success and expected_data is not None and result.decoded_data != expected_data:
            result.success = False
            result.error = f"Data mismatch: got '{result.decoded_data}', expected '{expected_data}'"
        results.append(result)
    return results
