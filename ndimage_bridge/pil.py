"""
Converters between ``PixelBuffer`` objects and Pillow images.

Pillow pads RGB and luma+alpha pixels to 4 bytes internally,
so its images can't share memory with a packed buffer.
All conversions in this module copy.
"""
from typing import Dict, Tuple

import numpy as np
from PIL import Image

from .bridge import array_from_buffer, buffer_from_array
from .buffer import PixelBuffer
from .errors import UnsupportedPixelFormat
from .formats import ColorLayout, PixelFormat

PIL_MODES: Dict[str, PixelFormat] = {
    "L": PixelFormat(ColorLayout.LUMA, np.uint8),
    "LA": PixelFormat(ColorLayout.LUMA_ALPHA, np.uint8),
    "RGB": PixelFormat(ColorLayout.RGB, np.uint8),
    "RGBA": PixelFormat(ColorLayout.RGBA, np.uint8),
    "I;16": PixelFormat(ColorLayout.LUMA, np.uint16),
    "I": PixelFormat(ColorLayout.LUMA, np.int32),
    "F": PixelFormat(ColorLayout.LUMA, np.float32),
}
"""Pixel format that the pixels of an image with a given Pillow mode are copied into."""


def _mode_of(pixel_format: PixelFormat) -> str:
    for mode, fmt in PIL_MODES.items():
        if fmt == pixel_format:
            return mode
    raise UnsupportedPixelFormat(f"Pillow has no image mode for {pixel_format!r}.")


def buffer_from_image(image: Image.Image) -> PixelBuffer:
    """Copies the pixels of a Pillow image into a new pixel buffer.

    Raises
    ------
    UnsupportedPixelFormat
        If the image mode is not one of ``PIL_MODES``.
    """
    if image.mode not in PIL_MODES:
        raise UnsupportedPixelFormat(
            f"Pillow images of mode {image.mode!r} are not supported. "
            f"Convert to one of {sorted(PIL_MODES)} first."
        )
    pixel_format = PIL_MODES[image.mode]
    # np.asarray would wrap Pillow's immutable bytes and give a read-only buffer
    arr = np.array(image, dtype=pixel_format.channel_type, order="C")
    return buffer_from_array(arr, pixel_format.layout)


def image_from_buffer(buffer: PixelBuffer) -> Image.Image:
    """Copies the pixels of a buffer into a new Pillow image.

    Raises
    ------
    UnsupportedPixelFormat
        If Pillow has no mode for the pixel format of ``buffer``,
        for example for BGR layouts or 64-bit channels.
    """
    mode = _mode_of(buffer.pixel_format)
    arr = array_from_buffer(buffer)
    if mode == "I;16":
        # Pillow reads this mode as little endian regardless of the platform
        arr = arr.astype("<u2")
    size: Tuple[int, int] = buffer.dimensions
    return Image.frombytes(mode, size, arr.tobytes())
