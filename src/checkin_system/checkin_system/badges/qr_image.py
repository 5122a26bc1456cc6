from __future__ import annotations

from io import BytesIO

import qrcode
import qrcode.image.svg

from ..core.constants import QR_DEFAULT_MARGIN, QR_DEFAULT_SIZE_PX

# ~256px at the default size for a version-1..3 code
_MODULES_ESTIMATE = 29


def _build(data: str, *, size_px: int, margin: int) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=max(1, int(size_px) // (_MODULES_ESTIMATE + 2 * int(margin))),
        border=int(margin),
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr


def render_png(data: str, *, size_px: int = QR_DEFAULT_SIZE_PX, margin: int = QR_DEFAULT_MARGIN) -> BytesIO:
    """Render ``data`` as a black-on-white PNG; returns a rewound buffer."""
    qr = _build(data, size_px=size_px, margin=margin)
    img = qr.make_image(fill_color="black", back_color="white")
    if img.size[0] != size_px:
        img = img.resize((size_px, size_px))

    buf = BytesIO()
    img.save(buf, "PNG")
    buf.seek(0)
    return buf


def render_svg(data: str, *, size_px: int = QR_DEFAULT_SIZE_PX, margin: int = QR_DEFAULT_MARGIN) -> bytes:
    qr = _build(data, size_px=size_px, margin=margin)
    img = qr.make_image(image_factory=qrcode.image.svg.SvgPathImage)
    buf = BytesIO()
    img.save(buf)
    return buf.getvalue()
