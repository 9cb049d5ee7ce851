from __future__ import annotations

import io
from typing import Any, Optional, Union

from PIL import Image, UnidentifiedImageError

from ..core.exceptions import InvalidImageError, NoCodeFoundError
from .decoder import DecodedSymbol, Decoder, QRDecoder

ImageInput = Union[bytes, bytearray, Image.Image, Any]


def load_image(image: ImageInput) -> Any:
    """Accept raw bytes, a file-like stream, a PIL image or an ndarray."""
    if isinstance(image, (bytes, bytearray)):
        image = io.BytesIO(image)
    if hasattr(image, "read"):
        try:
            return Image.open(image).convert("RGB")
        except (UnidentifiedImageError, OSError):
            raise InvalidImageError()
    return image


def decode_image(image: ImageInput, *, decoder: Optional[Decoder] = None) -> DecodedSymbol:
    """One-shot decode of a still image, for when the camera cannot be used."""
    raster = load_image(image)
    symbol = (decoder or QRDecoder()).decode(raster)
    if symbol is None or not symbol.data:
        raise NoCodeFoundError()
    return symbol
