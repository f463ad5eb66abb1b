"""
A packed, row-major pixel buffer over memory owned by someone else.
"""
from typing import Any, Optional, Sequence, Tuple

import numpy as np

from .errors import NonContiguousLayout, ShapeMismatch
from .formats import ColorLayout, PixelFormat


def _as_byte_view(data: Any) -> np.ndarray:
    """Returns a flat ``uint8`` view of the memory exported by ``data``."""
    if isinstance(data, np.ndarray):
        if not data.flags.c_contiguous:
            raise NonContiguousLayout(
                f"Array with shape {data.shape} and strides {data.strides} is not C-contiguous."
            )
        # reshape of a C-contiguous array never copies
        return data.reshape(-1).view(np.uint8)
    view = memoryview(data)
    if not view.c_contiguous:
        raise NonContiguousLayout(f"The buffer exported by {type(data).__name__} is not contiguous.")
    return np.frombuffer(view, dtype=np.uint8)


class PixelBuffer:
    """Pixels of one image, packed row by row with interleaved channels.

    The buffer has no row padding: a row occupies exactly
    ``width * channels * sample_size`` bytes and rows follow each other directly.

    A ``PixelBuffer`` never copies on construction.
    It borrows the memory of the object it was created from,
    and that object stays alive for as long as the buffer does.
    """

    __slots__ = ("_width", "_height", "_format", "_samples")

    def __init__(self, width: int, height: int, pixel_format: PixelFormat, samples: np.ndarray):
        # Use the from_raw or new constructors unless you already hold a validated byte view.
        self._width = width
        self._height = height
        self._format = pixel_format
        self._samples = samples

    @classmethod
    def from_raw(cls, width: int, height: int, data: Any, pixel_format: PixelFormat) -> "PixelBuffer":
        """Wraps existing memory as a pixel buffer without copying.

        Parameters
        ----------
        width, height
            Image dimensions in pixels.
        data
            Any object that exports a contiguous buffer,
            for example ``bytearray``, ``memoryview`` or a C-contiguous ``numpy.ndarray``.
            It may be larger than needed, the excess is ignored.
        pixel_format
            Layout and channel type of the pixels in ``data``.

        Returns
        -------
        buffer
            A buffer that is writeable if and only if ``data`` is.

        Raises
        ------
        ShapeMismatch
            If a dimension is negative or ``data`` is too small.
        NonContiguousLayout
            If ``data`` exports a non-contiguous buffer.
        """
        if width < 0 or height < 0:
            raise ShapeMismatch(f"Image dimensions must be >= 0, but got {width}x{height}.")
        nbytes = width * height * pixel_format.pixel_size
        raw = _as_byte_view(data)
        if raw.size < nbytes:
            raise ShapeMismatch(
                f"A {width}x{height} image of {pixel_format} needs {nbytes} bytes, "
                f"but the buffer has only {raw.size}."
            )
        return cls(width, height, pixel_format, raw[:nbytes])

    @classmethod
    def new(cls, width: int, height: int, pixel_format: PixelFormat) -> "PixelBuffer":
        """Allocates a zero-initialized buffer."""
        if width < 0 or height < 0:
            raise ShapeMismatch(f"Image dimensions must be >= 0, but got {width}x{height}.")
        return cls.from_raw(
            width, height, bytearray(width * height * pixel_format.pixel_size), pixel_format
        )

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def dimensions(self) -> Tuple[int, int]:
        """``(width, height)`` in pixels."""
        return self._width, self._height

    @property
    def pixel_format(self) -> PixelFormat:
        return self._format

    @property
    def layout(self) -> ColorLayout:
        return self._format.layout

    @property
    def channel_type(self) -> np.dtype:
        return self._format.channel_type

    @property
    def channels(self) -> int:
        return self._format.channels

    @property
    def row_stride(self) -> int:
        """Number of bytes from the start of one row to the start of the next."""
        return self._width * self._format.pixel_size

    @property
    def nbytes(self) -> int:
        return self._samples.size

    @property
    def readonly(self) -> bool:
        return not self._samples.flags.writeable

    @property
    def samples(self) -> np.ndarray:
        """Flat ``uint8`` view of the pixel memory."""
        return self._samples

    def _pixel_view(self, x: int, y: int) -> np.ndarray:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(
                f"Pixel ({x}, {y}) is out of bounds for a {self._width}x{self._height} image."
            )
        start = y * self.row_stride + x * self._format.pixel_size
        return self._samples[start : start + self._format.pixel_size].view(self.channel_type)

    def get_pixel(self, x: int, y: int) -> Tuple:
        """Channel values of the pixel in column ``x`` of row ``y``."""
        return tuple(self._pixel_view(x, y).tolist())

    def put_pixel(self, x: int, y: int, values: Sequence) -> None:
        """Overwrites the channel values of the pixel in column ``x`` of row ``y``."""
        pixel = self._pixel_view(x, y)
        if len(values) != pixel.size:
            raise ShapeMismatch(
                f"{self.layout!r} pixels have {pixel.size} channels, but got {len(values)} values."
            )
        pixel[:] = values

    def __array__(self, dtype=None, copy: Optional[bool] = None) -> np.ndarray:
        from .bridge import array_from_buffer

        arr = array_from_buffer(self)
        needs_cast = dtype is not None and np.dtype(dtype) != arr.dtype
        if needs_cast and copy is False:
            raise ValueError(
                f"Viewing {self!r} as {np.dtype(dtype).name} requires a copy, but copy=False."
            )
        if copy or needs_cast:
            return arr.astype(dtype if dtype is not None else arr.dtype)
        return arr

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self._format == other._format
            and self.dimensions == other.dimensions
            and np.array_equal(self._samples, other._samples)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"PixelBuffer({self._width}x{self._height}, {self._format!r})"
