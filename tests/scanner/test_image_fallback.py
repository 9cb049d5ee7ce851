from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from presence_attendance.core.exceptions import InvalidImageError, NoCodeFoundError
from presence_attendance.scanner.decoder import DecodedSymbol, to_grayscale
from presence_attendance.scanner.image_fallback import decode_image, load_image
from presence_attendance.tokens.qr_image import render_qr_png


class RecordingDecoder:
    def __init__(self, result=None):
        self.result = result
        self.rasters = []

    def decode(self, raster):
        self.rasters.append(raster)
        return self.result


def _png(color="white") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (32, 32), color).save(buf, format="PNG")
    return buf.getvalue()


def test_bytes_are_opened_as_rgb_image():
    decoder = RecordingDecoder(DecodedSymbol("2024-001"))

    symbol = decode_image(render_qr_png("2024-001"), decoder=decoder)

    assert symbol.data == "2024-001"
    assert isinstance(decoder.rasters[0], Image.Image)
    assert decoder.rasters[0].mode == "RGB"


def test_stream_input_is_accepted():
    decoder = RecordingDecoder(DecodedSymbol("x"))
    decode_image(io.BytesIO(_png()), decoder=decoder)
    assert decoder.rasters[0].size == (32, 32)


def test_not_an_image():
    with pytest.raises(InvalidImageError, match="Failed to load image"):
        load_image(b"definitely not a png")


def test_no_code_found():
    with pytest.raises(NoCodeFoundError, match="No QR code found in image"):
        decode_image(_png(), decoder=RecordingDecoder(None))


def test_empty_symbol_counts_as_no_code():
    with pytest.raises(NoCodeFoundError):
        decode_image(_png(), decoder=RecordingDecoder(DecodedSymbol("")))


def test_to_grayscale_handles_pil_and_opencv_frames():
    assert to_grayscale(Image.new("RGB", (8, 6))).shape == (6, 8)
    assert to_grayscale(np.zeros((6, 8, 3), dtype=np.uint8)).shape == (6, 8)
    assert to_grayscale(np.zeros((6, 8, 4), dtype=np.uint8)).shape == (6, 8)
    gray = to_grayscale(np.zeros((6, 8), dtype=np.uint8))
    assert gray.shape == (6, 8) and gray.dtype == np.uint8


def test_real_decoder_reads_rendered_symbol():
    pytest.importorskip("pyzbar.pyzbar")
    assert decode_image(render_qr_png("2024-001")).data == "2024-001"


def test_real_decoder_finds_nothing_in_blank_image():
    pytest.importorskip("pyzbar.pyzbar")
    with pytest.raises(NoCodeFoundError):
        decode_image(_png())
