from __future__ import annotations

import io
from typing import Optional

import qrcode
from PIL import Image
from pyzbar.pyzbar import decode as pyzbar_decode

from .model import Site


def render_site_qr(site: Site, *, box_size: int = 10, border: int = 4) -> bytes:
    """PNG bytes of the code a site displays at its entrance."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(site.name)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_token_from_image(stream) -> Optional[str]:
    """First QR payload found in an uploaded image, or None."""
    image = Image.open(stream).convert("RGB")
    results = pyzbar_decode(image)
    if not results:
        return None
    return results[0].data.decode("utf-8", errors="replace")
