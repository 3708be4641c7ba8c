from __future__ import annotations

import base64
import io
import logging

import qrcode

logger = logging.getLogger(__name__)

_PLACEHOLDER_SVG = """<svg width="200" height="200" xmlns="http://www.w3.org/2000/svg">
  <rect width="200" height="200" fill="#f8f8f8"/>
  <text x="100" y="90" text-anchor="middle" font-size="14" fill="#666">QR Code</text>
  <text x="100" y="110" text-anchor="middle" font-size="14" fill="#666">Generation</text>
  <text x="100" y="130" text-anchor="middle" font-size="14" fill="#666">Error</text>
</svg>"""

PLACEHOLDER_DATA_URI = "data:image/svg+xml;base64," + base64.b64encode(_PLACEHOLDER_SVG.encode("utf-8")).decode("ascii")


def render_png(data: str, *, box_size: int = 10, border: int = 2) -> bytes:
    """Render ``data`` as a PNG QR code."""

    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def render_data_uri(data: str) -> str:
    """PNG data URI, or a visibly-marked placeholder if rendering fails.

    Never raises: scanning screens must stay usable when the image pipeline breaks.
    """

    try:
        png = render_png(data)
    except Exception:
        logger.warning("QR render failed, serving placeholder image", exc_info=True)
        return PLACEHOLDER_DATA_URI
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")
