from .bridge import (
    array_from_buffer,
    array_from_buffer_copy,
    buffer_from_array,
    buffer_from_array_copy,
)
from .buffer import PixelBuffer
from .errors import (
    BridgeError,
    NonContiguousLayout,
    ShapeMismatch,
    UnsupportedChannelCount,
    UnsupportedConversion,
    UnsupportedPixelFormat,
)
from .formats import ColorLayout, PixelFormat
from .pil import buffer_from_image, image_from_buffer

__version__ = "0.1.0"
