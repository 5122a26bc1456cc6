from __future__ import annotations

from typing import BinaryIO, List

from PIL import Image, UnidentifiedImageError

from ..core.exceptions import QRDecodeInvalid


def read_codes(stream: BinaryIO) -> List[str]:
    """Decode every barcode/QR symbol found in an uploaded image."""
    # pyzbar loads the system zbar library on import; only needed on this path.
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream)
        img.load()
    except (UnidentifiedImageError, OSError):
        raise QRDecodeInvalid("Could not read the uploaded image") from None

    texts: List[str] = []
    for symbol in pyzbar_decode(img.convert("RGB")):
        try:
            texts.append(symbol.data.decode("utf-8").strip())
        except UnicodeDecodeError:
            continue
    return [t for t in texts if t]
