from __future__ import annotations

import io

import qrcode

from .model import AttendanceToken


def render_qr_png(data: str, *, box_size: int = 10, border: int = 4) -> bytes:
    """Render ``data`` as a PNG QR symbol (error correction M)."""
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


def render_token_png(token: AttendanceToken, **kwargs) -> bytes:
    return render_qr_png(token.to_json(), **kwargs)
