from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import cv2
import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedSymbol:
    data: str
    symbol_type: str = "QRCODE"


class Decoder(Protocol):
    def decode(self, raster: Any) -> Optional[DecodedSymbol]:
        raise NotImplementedError


def to_grayscale(raster: Any) -> np.ndarray:
    """Normalize a PIL image or an OpenCV frame (BGR, BGRA or gray) to 8-bit gray."""
    if isinstance(raster, Image.Image):
        return np.asarray(raster.convert("L"), dtype=np.uint8)

    img = np.asarray(raster)
    if img.ndim == 3 and img.shape[2] == 4:
        img = cv2.cvtColor(img, cv2.COLOR_BGRA2GRAY)
    elif img.ndim == 3:
        img = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    return np.ascontiguousarray(img, dtype=np.uint8)


class QRDecoder:
    """Decode primitive shared by the live scanner and the still-image path."""

    def decode(self, raster: Any) -> Optional[DecodedSymbol]:
        # zbar is a native library; importing it here keeps the rest of the
        # package importable on hosts that only issue tokens.
        from pyzbar.pyzbar import ZBarSymbol, decode as pyzbar_decode

        gray = to_grayscale(raster)
        if gray.size == 0:
            return None

        decoded = pyzbar_decode(gray, symbols=[ZBarSymbol.QRCODE])
        if not decoded:
            return None

        symbol = decoded[0]
        try:
            text = symbol.data.decode("utf-8").strip()
        except UnicodeDecodeError:
            logger.debug("discarding non-utf8 symbol")
            return None
        return DecodedSymbol(data=text, symbol_type=str(symbol.type))
