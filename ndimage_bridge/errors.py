"""
Exceptions raised when an array and a pixel buffer can't be bridged.
"""


class BridgeError(ValueError):
    """Base class of all conversion errors."""


class ShapeMismatch(BridgeError):
    """The array has neither 2 nor 3 axes, or a buffer is too small for its dimensions."""


class UnsupportedChannelCount(BridgeError):
    """The channel axis has a size that no pixel layout supports."""


class UnsupportedPixelFormat(BridgeError, TypeError):
    """There is no pixel format for a dtype, or no dtype for a pixel format."""


class NonContiguousLayout(BridgeError):
    """The memory can't be reinterpreted without copying.

    Use the ``*_copy`` variant of the conversion instead.
    """


class UnsupportedConversion(BridgeError, TypeError):
    """A copy would have to change sample values to fit the target type."""
