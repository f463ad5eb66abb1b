import numpy as np
import pytest

from ndimage_bridge import bridge
from ndimage_bridge.buffer import PixelBuffer
from ndimage_bridge.errors import (
    NonContiguousLayout,
    ShapeMismatch,
    UnsupportedChannelCount,
    UnsupportedConversion,
    UnsupportedPixelFormat,
)
from ndimage_bridge.formats import ColorLayout, PixelFormat


def random_image(shape, dtype=np.uint8) -> np.ndarray:
    rng = np.random.default_rng(seed=42)
    if np.dtype(dtype).kind == "f":
        return rng.uniform(size=shape).astype(dtype)
    info = np.iinfo(dtype)
    return rng.integers(info.min, info.max, size=shape, dtype=dtype, endpoint=True)


class TestZeroCopy:
    @pytest.mark.parametrize(
        "shape,dtype,layout",
        [
            ((2, 4), np.uint8, ColorLayout.LUMA),
            ((3, 5, 1), np.uint16, ColorLayout.LUMA),
            ((2, 4, 2), np.uint8, ColorLayout.LUMA_ALPHA),
            ((2, 4, 3), np.uint8, ColorLayout.RGB),
            ((7, 3, 4), np.float32, ColorLayout.RGBA),
            ((2, 2, 3), np.int64, ColorLayout.RGB),
            ((1, 6, 4), np.float64, ColorLayout.RGBA),
        ],
    )
    def test_round_trip(self, shape, dtype, layout):
        arr = random_image(shape, dtype)
        buf = bridge.buffer_from_array(arr)
        assert isinstance(buf, PixelBuffer)
        assert buf.layout is layout
        assert buf.channel_type == dtype
        assert buf.dimensions == (shape[1], shape[0])

        result = bridge.array_from_buffer(buf, keep_channel_axis=len(shape) == 3)
        assert result.shape == arr.shape
        assert result.strides == arr.strides
        assert result.dtype == arr.dtype
        np.testing.assert_array_equal(result, arr)
        assert np.shares_memory(result, arr)
        pass

    def test_array_writes_reach_buffer(self):
        arr = np.zeros((2, 4, 3), dtype=np.uint8)
        buf = bridge.buffer_from_array(arr)
        arr[1, 2] = (11, 22, 33)
        assert buf.get_pixel(2, 1) == (11, 22, 33)
        pass

    def test_buffer_writes_reach_array(self):
        arr = np.zeros((2, 4), dtype=np.uint16)
        buf = bridge.buffer_from_array(arr)
        buf.put_pixel(3, 0, (65535,))
        assert arr[0, 3] == 65535
        view = bridge.array_from_buffer(buf)
        view[1, 1] = 42
        assert arr[1, 1] == 42
        pass

    def test_explicit_layout(self):
        arr = random_image((2, 4, 4))
        buf = bridge.buffer_from_array(arr, ColorLayout.BGRA)
        assert buf.layout is ColorLayout.BGRA
        with pytest.raises(UnsupportedChannelCount):
            bridge.buffer_from_array(arr, ColorLayout.BGR)
        pass

    def test_readonly_is_preserved(self):
        arr = random_image((2, 4, 3))
        arr.flags.writeable = False
        buf = bridge.buffer_from_array(arr)
        assert buf.readonly
        assert not bridge.array_from_buffer(buf).flags.writeable
        pass

    def test_rgb_scenario(self):
        # 8-bit RGB, width=4, height=2, as 24 packed bytes
        data = bytearray(range(24))
        buf = PixelBuffer.from_raw(4, 2, data, PixelFormat(ColorLayout.RGB, np.uint8))
        arr = bridge.array_from_buffer(buf)
        assert arr.shape == (2, 4, 3)
        assert arr.strides == (12, 3, 1)
        # Red channel of row 1, column 2
        assert arr[1, 2, 0] == 1 * 12 + 2 * 3
        assert arr[1, 2, 0] == buf.get_pixel(2, 1)[0]
        pass

    def test_luma_channel_axis(self):
        buf = PixelBuffer.new(5, 3, PixelFormat(ColorLayout.LUMA, np.float32))
        assert bridge.array_from_buffer(buf).shape == (3, 5)
        assert bridge.array_from_buffer(buf).strides == (20, 4)
        arr = bridge.array_from_buffer(buf, keep_channel_axis=True)
        assert arr.shape == (3, 5, 1)
        assert arr.strides == (20, 4, 4)
        pass


class TestRejection:
    @pytest.mark.parametrize("shape", [(4,), (2, 3, 4, 1), ()])
    def test_dimensionality(self, shape):
        with pytest.raises(ShapeMismatch, match="2 or 3 dimensions"):
            bridge.buffer_from_array(np.zeros(shape, dtype=np.uint8))
        with pytest.raises(ShapeMismatch):
            bridge.buffer_from_array_copy(np.zeros(shape, dtype=np.uint8))
        pass

    def test_five_channels(self):
        with pytest.raises(UnsupportedChannelCount, match="5 channels"):
            bridge.buffer_from_array(np.zeros((2, 4, 5), dtype=np.uint8))
        with pytest.raises(UnsupportedChannelCount):
            bridge.buffer_from_array_copy(np.zeros((2, 4, 5), dtype=np.uint8))
        pass

    def test_unsupported_dtype(self):
        with pytest.raises(UnsupportedPixelFormat):
            bridge.buffer_from_array(np.zeros((2, 4, 3), dtype=np.complex64))
        with pytest.raises(UnsupportedPixelFormat):
            bridge.buffer_from_array(np.zeros((2, 4, 3), dtype=">u2"))
        pass

    def test_non_contiguous_channels(self):
        arr = random_image((2, 4, 3))
        # Reversing the channels (RGB -> BGR) gives a negative channel stride
        with pytest.raises(NonContiguousLayout, match="buffer_from_array_copy"):
            bridge.buffer_from_array(arr[:, :, ::-1])
        pass

    @pytest.mark.parametrize(
        "make_view",
        [
            lambda a: a[:, ::2],
            lambda a: a[:, 1:3],
            lambda a: a.transpose(1, 0, 2),
            lambda a: np.asfortranarray(a),
        ],
    )
    def test_non_contiguous_views(self, make_view):
        view = make_view(random_image((4, 6, 3)))
        with pytest.raises(NonContiguousLayout):
            bridge.buffer_from_array(view)
        pass


class TestCopy:
    def test_copy_of_slice(self):
        arr = random_image((4, 6, 3))
        view = arr[::2, 1:5, ::-1]
        buf = bridge.buffer_from_array_copy(view, ColorLayout.BGR)
        assert buf.layout is ColorLayout.BGR
        assert buf.dimensions == (4, 2)
        result = bridge.array_from_buffer(buf)
        assert result.flags.c_contiguous
        np.testing.assert_array_equal(result, view)
        assert not np.shares_memory(result, arr)
        pass

    def test_array_to_buffer_isolation(self):
        arr = random_image((2, 4, 3))
        buf = bridge.buffer_from_array_copy(arr)
        before = buf.get_pixel(0, 0)
        arr[0, 0] = (0, 0, 0) if before != (0, 0, 0) else (1, 1, 1)
        assert buf.get_pixel(0, 0) == before
        pass

    def test_buffer_to_array_isolation(self):
        buf = PixelBuffer.new(4, 2, PixelFormat(ColorLayout.RGB, np.uint8))
        arr = bridge.array_from_buffer_copy(buf)
        assert arr.shape == (2, 4, 3)
        assert arr.flags.c_contiguous
        buf.put_pixel(1, 1, (9, 9, 9))
        np.testing.assert_array_equal(arr[1, 1], [0, 0, 0])
        arr[0, 0] = 5
        assert buf.get_pixel(0, 0) == (0, 0, 0)
        pass

    def test_luma_copy_shapes(self):
        buf = PixelBuffer.new(4, 2, PixelFormat(ColorLayout.LUMA, np.uint8))
        assert bridge.array_from_buffer_copy(buf).shape == (2, 4)
        assert bridge.array_from_buffer_copy(buf, keep_channel_axis=True).shape == (2, 4, 1)
        pass

    def test_byte_order_is_normalized(self):
        arr = np.arange(8, dtype=">u2").reshape(2, 4)
        buf = bridge.buffer_from_array_copy(arr)
        assert buf.channel_type == np.dtype("=u2")
        np.testing.assert_array_equal(bridge.array_from_buffer(buf), arr)
        pass

    def test_widening(self):
        arr = random_image((2, 4, 3), np.uint8)
        buf = bridge.buffer_from_array_copy(arr, channel_type=np.uint16)
        assert buf.channel_type == np.uint16
        np.testing.assert_array_equal(bridge.array_from_buffer(buf), arr)

        wide = bridge.array_from_buffer_copy(bridge.buffer_from_array(arr), dtype=np.float64)
        assert wide.dtype == np.float64
        np.testing.assert_array_equal(wide, arr)
        pass

    @pytest.mark.parametrize(
        "source,target",
        [
            (np.uint16, np.uint8),
            (np.float32, np.uint8),
            (np.int8, np.uint8),
            (np.float64, np.float32),
            (np.int64, np.float64),
            (np.uint64, np.float64),
            (np.int32, np.float32),
        ],
    )
    def test_narrowing(self, source, target):
        arr = np.zeros((2, 4, 3), dtype=source)
        with pytest.raises(UnsupportedConversion, match="would change their values"):
            bridge.buffer_from_array_copy(arr, channel_type=target)
        with pytest.raises(UnsupportedConversion):
            bridge.array_from_buffer_copy(bridge.buffer_from_array(arr), dtype=target)
        pass

    def test_no_channel_type_for_source(self):
        with pytest.raises(UnsupportedConversion):
            bridge.buffer_from_array_copy(np.zeros((2, 4), dtype=bool))
        with pytest.raises(UnsupportedConversion, match="can't be stored"):
            bridge.buffer_from_array_copy(np.zeros((2, 4), dtype=np.uint8), channel_type=np.complex64)
        pass

    def test_large_integers_keep_their_values(self):
        arr = np.full((1, 1), 2**53 + 1, dtype=np.int64)
        with pytest.raises(UnsupportedConversion):
            bridge.buffer_from_array_copy(arr, channel_type=np.float64)
        buf = bridge.buffer_from_array(np.full((1, 1), 2**64 - 1, dtype=np.uint64))
        with pytest.raises(UnsupportedConversion):
            bridge.array_from_buffer_copy(buf, dtype=np.float64)
        # 32 bit integers fit into the float64 mantissa
        small = np.full((1, 2), 2**31 - 1, dtype=np.int32)
        wide = bridge.buffer_from_array_copy(small, channel_type=np.float64)
        np.testing.assert_array_equal(bridge.array_from_buffer(wide), small)
        pass

    def test_channel_count_is_checked_before_dtype(self):
        arr = np.zeros((2, 4, 5), dtype=np.complex64)
        with pytest.raises(UnsupportedChannelCount):
            bridge.buffer_from_array(arr)
        with pytest.raises(UnsupportedChannelCount):
            bridge.buffer_from_array_copy(arr)
        pass


def test_buffer_without_array_representation():
    pixel_format = PixelFormat(ColorLayout.LUMA, np.uint64)
    # Bypass the validation in PixelFormat to get a channel type numpy images don't use
    pixel_format._channel_type = np.dtype(np.complex64)
    buf = PixelBuffer(1, 1, pixel_format, np.zeros(8, dtype=np.uint8))
    with pytest.raises(UnsupportedPixelFormat, match="has no array representation"):
        bridge.array_from_buffer(buf)
    with pytest.raises(UnsupportedPixelFormat):
        bridge.array_from_buffer_copy(buf)
    pass
