"""
This module contains the pixel format definitions shared by buffers and the bridge.
"""
import enum
from typing import Dict, Optional, Tuple

import numpy as np

from .errors import UnsupportedChannelCount, UnsupportedPixelFormat


class ColorLayout(enum.Enum):
    """Order and meaning of the channels of one pixel."""

    LUMA = ("luma", 1)
    LUMA_ALPHA = ("luma_alpha", 2)
    RGB = ("rgb", 3)
    RGBA = ("rgba", 4)
    BGR = ("bgr", 3)
    BGRA = ("bgra", 4)

    def __init__(self, label: str, channels: int) -> None:
        self.label = label
        self.channels = channels

    def __repr__(self) -> str:
        return f"ColorLayout.{self.name}"


DEFAULT_LAYOUTS: Dict[int, ColorLayout] = {
    1: ColorLayout.LUMA,
    2: ColorLayout.LUMA_ALPHA,
    3: ColorLayout.RGB,
    4: ColorLayout.RGBA,
}
"""
Layout picked for a channel count when the caller doesn't ask for one.
BGR and BGRA are never inferred.
"""

CHANNEL_TYPES: Tuple[np.dtype, ...] = tuple(
    np.dtype(t)
    for t in [
        np.uint8,
        np.uint16,
        np.uint32,
        np.uint64,
        np.int8,
        np.int16,
        np.int32,
        np.int64,
        np.float32,
        np.float64,
    ]
)
"""Scalar types a channel value may have, all in native byte order."""


def channel_type_of(dtype) -> np.dtype:
    """Resolves ``dtype`` to one of the supported ``CHANNEL_TYPES``.

    Parameters
    ----------
    dtype
        Anything ``numpy.dtype`` accepts.

    Returns
    -------
    channel_type
        The native byte order equivalent of ``dtype``.

    Raises
    ------
    UnsupportedPixelFormat
        If no supported channel type matches.
    """
    dtype = np.dtype(dtype)
    # Byte-swapped variants would be misread by consumers of the packed buffer
    if dtype in CHANNEL_TYPES and dtype.isnative:
        return CHANNEL_TYPES[CHANNEL_TYPES.index(dtype)]
    raise UnsupportedPixelFormat(f"No pixel channel type corresponds to dtype {dtype.str!r}.")


def layout_for_channels(channels: int, layout: Optional[ColorLayout] = None) -> ColorLayout:
    """Picks the color layout for a pixel with ``channels`` values.

    Raises ``UnsupportedChannelCount`` if the count is not 1-4,
    or if it differs from the channel count of an explicitly requested ``layout``.
    """
    if layout is None:
        if channels not in DEFAULT_LAYOUTS:
            raise UnsupportedChannelCount(
                f"Pixels with {channels} channels are not supported. Expected 1, 2, 3 or 4."
            )
        return DEFAULT_LAYOUTS[channels]
    if layout.channels != channels:
        raise UnsupportedChannelCount(
            f"{layout!r} pixels have {layout.channels} channels, but got {channels}."
        )
    return layout


class PixelFormat:
    """Color layout and channel scalar type of the pixels in a buffer."""

    __slots__ = ("_layout", "_channel_type")

    def __init__(self, layout: ColorLayout, channel_type=np.uint8) -> None:
        self._layout = ColorLayout(layout)
        self._channel_type = channel_type_of(channel_type)

    @classmethod
    def infer(
        cls, channels: int, dtype, layout: Optional[ColorLayout] = None
    ) -> "PixelFormat":
        """Determines the pixel format from a channel count and a sample dtype."""
        return cls(layout_for_channels(channels, layout), channel_type_of(dtype))

    @property
    def layout(self) -> ColorLayout:
        return self._layout

    @property
    def channel_type(self) -> np.dtype:
        return self._channel_type

    @property
    def channels(self) -> int:
        return self._layout.channels

    @property
    def sample_size(self) -> int:
        """Number of bytes of one channel value."""
        return self._channel_type.itemsize

    @property
    def pixel_size(self) -> int:
        """Number of bytes of one pixel."""
        return self.channels * self.sample_size

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelFormat):
            return NotImplemented
        return self._layout is other._layout and self._channel_type == other._channel_type

    def __hash__(self) -> int:
        return hash((self._layout, self._channel_type.str))

    def __repr__(self) -> str:
        return f"PixelFormat({self._layout!r}, {self._channel_type.name})"
