from __future__ import annotations

import io
from typing import BinaryIO, List

import qrcode
from PIL import Image, UnidentifiedImageError

from ..core.exceptions import ValidationError


def render_png(payload: str, *, box_size: int = 10, border: int = 2) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=box_size,
        border=border,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_image(stream: BinaryIO) -> List[str]:
    """Text of every QR symbol found in an uploaded camera frame."""
    # needs the zbar shared library, only loaded when a frame is actually decoded
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except UnidentifiedImageError:
        raise ValidationError("Uploaded file is not an image")

    decoded = pyzbar_decode(img)
    return [d.data.decode("utf-8", errors="replace").strip() for d in decoded]
