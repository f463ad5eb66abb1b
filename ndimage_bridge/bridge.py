"""
Converters between ``numpy.ndarray`` images and ``PixelBuffer`` objects.

The ``buffer_from_array`` and ``array_from_buffer`` functions reinterpret memory,
so the input and the result share their pixels.
The ``*_copy`` variants allocate new memory and work for any strides.
"""
import logging
from typing import Optional, Tuple

import numpy as np

from .buffer import PixelBuffer
from .errors import (
    NonContiguousLayout,
    ShapeMismatch,
    UnsupportedConversion,
    UnsupportedPixelFormat,
)
from .formats import ColorLayout, PixelFormat, channel_type_of, layout_for_channels

_log = logging.getLogger(__file__)


def _image_shape(arr: np.ndarray) -> Tuple[int, int, int]:
    """Height, width and channel count of a 2- or 3-dimensional image array."""
    if arr.ndim == 2:
        height, width = arr.shape
        return height, width, 1
    if arr.ndim == 3:
        return arr.shape
    raise ShapeMismatch(
        f"Images must have 2 or 3 dimensions (height, width[, channels]), but got shape {arr.shape}."
    )


def packed_strides(width: int, pixel_format: PixelFormat) -> Tuple[int, int, int]:
    """Byte strides of the height, width and channel axes in a packed pixel buffer."""
    return (
        width * pixel_format.pixel_size,
        pixel_format.pixel_size,
        pixel_format.sample_size,
    )


def _view_shape(buffer: PixelBuffer, keep_channel_axis: bool) -> Tuple[tuple, tuple]:
    strides = packed_strides(buffer.width, buffer.pixel_format)
    if buffer.channels == 1 and not keep_channel_axis:
        # The channel stride is dropped along with the channel axis
        return (buffer.height, buffer.width), strides[:2]
    return (buffer.height, buffer.width, buffer.channels), strides


def _check_lossless(source: np.dtype, target) -> np.dtype:
    """Raises ``UnsupportedConversion`` if ``source`` values would not survive a cast to ``target``."""
    target = np.dtype(target)
    # numpy calls int64 -> float64 safe, but the mantissa holds only 53 bits
    too_precise = (
        source.kind in "iu"
        and target.kind in "fc"
        and np.iinfo(source).bits > np.finfo(target).nmant + 1
    )
    if too_precise or not np.can_cast(source, target, casting="safe"):
        raise UnsupportedConversion(
            f"Converting {source.name} samples to {target.name} would change their values."
        )
    return target


def _copy_channel_type(source: np.dtype, channel_type) -> np.dtype:
    """Picks the channel type that copies of ``source`` samples are stored as."""
    if channel_type is None:
        channel_type = source.newbyteorder("=")
    target = _check_lossless(source, channel_type)
    try:
        return channel_type_of(target)
    except UnsupportedPixelFormat as ex:
        raise UnsupportedConversion(
            f"Samples of dtype {source.str!r} can't be stored as {target.str!r} in a pixel buffer."
        ) from ex


def buffer_from_array(arr: np.ndarray, layout: Optional[ColorLayout] = None) -> PixelBuffer:
    """Reinterprets an image array as a pixel buffer without copying.

    Parameters
    ----------
    arr
        Array of shape ``(height, width)`` or ``(height, width, channels)``.
        It must be C-contiguous, so that channels vary fastest and rows have no padding.
    layout
        Color layout of the pixels.
        Defaults to luma, luma+alpha, RGB or RGBA depending on the number of channels.

    Returns
    -------
    buffer
        A ``PixelBuffer`` sharing its memory with ``arr``.
        It is read-only if ``arr`` is.

    Raises
    ------
    ShapeMismatch
        If ``arr`` has neither 2 nor 3 dimensions.
    UnsupportedChannelCount
        If the number of channels doesn't match any (or the requested) layout.
    UnsupportedPixelFormat
        If the dtype of ``arr`` is not a supported channel type.
    NonContiguousLayout
        If ``arr`` would have to be copied. See ``buffer_from_array_copy``.
    """
    height, width, channels = _image_shape(arr)
    pixel_format = PixelFormat.infer(channels, arr.dtype, layout)
    if not arr.flags.c_contiguous:
        raise NonContiguousLayout(
            f"Array with shape {arr.shape} and strides {arr.strides} is not C-contiguous. "
            "Use buffer_from_array_copy to convert it."
        )
    return PixelBuffer.from_raw(width, height, arr, pixel_format)


def array_from_buffer(buffer: PixelBuffer, keep_channel_axis: bool = False) -> np.ndarray:
    """Views the pixels of a buffer as an array without copying.

    Parameters
    ----------
    buffer
        The pixel buffer.
    keep_channel_axis
        If ``True``, single-channel images get a channel axis of length 1.

    Returns
    -------
    arr
        Array of shape ``(height, width)`` for single-channel formats
        and ``(height, width, channels)`` otherwise.
        Writing to it writes to ``buffer``.
    """
    # PixelFormat already validates its channel type, this guards hand-built formats
    try:
        dtype = channel_type_of(buffer.channel_type)
    except UnsupportedPixelFormat as ex:
        raise UnsupportedPixelFormat(f"{buffer!r} has no array representation.") from ex
    shape, strides = _view_shape(buffer, keep_channel_axis)
    return np.ndarray(
        buffer=buffer.samples,
        shape=shape,
        dtype=dtype,
        strides=strides,
    )


def buffer_from_array_copy(
    arr: np.ndarray,
    layout: Optional[ColorLayout] = None,
    channel_type=None,
) -> PixelBuffer:
    """Copies an image array of any memory layout into a new pixel buffer.

    Parameters
    ----------
    arr
        Array of shape ``(height, width)`` or ``(height, width, channels)``.
    layout
        Color layout of the pixels. See ``buffer_from_array``.
    channel_type
        Channel type of the new buffer.
        Defaults to the dtype of ``arr`` in native byte order.

    Raises
    ------
    ShapeMismatch
        If ``arr`` has neither 2 nor 3 dimensions.
    UnsupportedChannelCount
        If the number of channels doesn't match any (or the requested) layout.
    UnsupportedConversion
        If the samples can't be stored as ``channel_type`` without changing their values.
    """
    height, width, channels = _image_shape(arr)
    layout = layout_for_channels(channels, layout)
    target = _copy_channel_type(arr.dtype, channel_type)
    pixel_format = PixelFormat(layout, target)
    _log.debug("Copying %s array of shape %s into a new %s buffer", arr.dtype, arr.shape, pixel_format)
    result = PixelBuffer.new(width, height, pixel_format)
    # Element-wise assignment walks the source in row-major order, channels fastest
    array_from_buffer(result, keep_channel_axis=arr.ndim == 3)[...] = arr
    return result


def array_from_buffer_copy(
    buffer: PixelBuffer, dtype=None, keep_channel_axis: bool = False
) -> np.ndarray:
    """Copies the pixels of a buffer into a new C-contiguous array.

    Parameters
    ----------
    buffer
        The pixel buffer.
    dtype
        dtype of the new array. Defaults to the channel type of ``buffer``.
    keep_channel_axis
        If ``True``, single-channel images get a channel axis of length 1.

    Raises
    ------
    UnsupportedPixelFormat
        If the channel type of ``buffer`` has no array representation.
    UnsupportedConversion
        If the samples can't be stored as ``dtype`` without changing their values.
    """
    view = array_from_buffer(buffer, keep_channel_axis)
    target = view.dtype if dtype is None else _check_lossless(view.dtype, dtype)
    _log.debug("Copying %r into a new %s array", buffer, target)
    result = np.empty(view.shape, dtype=target)
    result[...] = view
    return result
