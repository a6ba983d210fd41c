import io
import random
import zlib
from struct import unpack

import numpy as np
import pytest

from lib_png import PNG, ColorType
from png_errors import ComponentCountError, PngIOError


@pytest.mark.parametrize("colorType,code,bpp", [
    (ColorType.Grayscale, 0, 1),
    (ColorType.Rgb, 2, 3),
    (ColorType.Indexed, 3, 1),
    (ColorType.GrayscaleAlpha, 4, 2),
    (ColorType.Rgba, 6, 4),
])
def test_color_type_code_and_bytes_per_pixel(colorType, code, bpp):
    assert colorType.code == code
    assert colorType.bytesPerPixel == bpp
    assert ColorType.fromCode(code) is colorType


def test_color_type_from_unknown_code():
    with pytest.raises(ValueError):
        ColorType.fromCode(1)


@pytest.mark.parametrize("colorType", list(ColorType))
def test_validate_components_rejects_wrong_count(colorType):
    colorType.validateComponents([0]*colorType.bytesPerPixel)
    for count in sorted({0, colorType.bytesPerPixel - 1, colorType.bytesPerPixel + 1}):
        with pytest.raises(ComponentCountError) as e:
            colorType.validateComponents([7]*count)
        assert e.value.expected == colorType.bytesPerPixel
        assert e.value.actual == count
        assert e.value.colorType is colorType
        assert colorType.name in str(e.value)


def test_filter_single_rgb_row():
    data = bytes([255, 0, 0, 0, 255, 0])
    out = PNG.filterScanlines(data, 2, 3)
    # tag 1, first pixel verbatim, second pixel minus first mod 256
    assert out == bytes([1, 255, 0, 0, 1, 255, 0])


def test_filter_rows_are_independent():
    data = bytes([10, 20,
                  30, 5])
    out = PNG.filterScanlines(data, 2, 1)
    assert out == bytes([1, 10, 10,
                         1, 30, (5 - 30) % 256])


def test_filter_output_length():
    width, height, bpp = 5, 7, 4
    data = bytes(range(256))[:width*height*bpp]
    out = PNG.filterScanlines(data, width, bpp)
    assert len(out) == height*(1 + width*bpp)
    assert all(out[row*(1 + width*bpp)] == 1 for row in range(height))


@pytest.mark.parametrize("colorType", list(ColorType))
@pytest.mark.parametrize("width,height", [(1, 1), (1, 9), (13, 1), (17, 11)])
def test_filter_roundtrip(colorType, width, height):
    rng = random.Random(width*1000 + height*10 + colorType.code)
    data = bytes(rng.getrandbits(8) for _ in range(width*height*colorType.bytesPerPixel))
    filtered = PNG.filterScanlines(data, width, colorType.bytesPerPixel)
    assert PNG.unfilterScanlines(filtered, width, colorType.bytesPerPixel) == data


def test_filter_rejects_partial_row():
    with pytest.raises(ValueError):
        PNG.filterScanlines(bytes(5), 2, 3)


def test_unfilter_rejects_other_filter_types():
    with pytest.raises(ValueError) as e:
        PNG.unfilterScanlines(bytes([1, 0, 0, 2, 0, 0]), 2, 1)
    assert "filter type 2" in str(e.value)


def test_sub_filter_matches_numpy_cumsum_inverse():
    src = np.arange(24, dtype = np.uint8).reshape(2, 4, 3)*37
    dst = np.empty_like(src)
    PNG.Sub_F(dst, src)
    back = np.empty_like(src)
    PNG.Sub_I(back, dst)
    assert np.array_equal(back, src)


@pytest.mark.parametrize("chunkType,data", [
    (b"IHDR", bytes(13)),
    (b"IEND", b""),
    (b"tEST", bytes(range(256))*3),
])
def test_chunk_framing(chunkType, data):
    buf = io.BytesIO()
    written = PNG.writeChunk(buf, chunkType, data)
    raw = buf.getvalue()
    assert written == len(raw) == 12 + len(data)
    length = unpack(">I", raw[:4])[0]
    assert length == len(data)
    assert raw[4:8] == chunkType
    assert raw[8:8 + length] == data
    assert unpack(">I", raw[8 + length:])[0] == zlib.crc32(chunkType + data)


def test_chunk_crc_excludes_length():
    raw = PNG.chunkBytes(b"IEND", b"")
    # well known IEND crc
    assert raw == bytes.fromhex("0000000049454e44ae426082")


def test_chunk_type_must_be_four_bytes():
    with pytest.raises(ValueError):
        PNG.chunkBytes(b"IDA", b"")


class _BrokenSink:
    def write(self, data):
        raise OSError("disk full")


def test_chunk_write_failure_is_io_error():
    with pytest.raises(PngIOError) as e:
        PNG.writeChunk(_BrokenSink(), b"IDAT", b"x")
    assert isinstance(e.value.__cause__, OSError)
    assert "disk full" in str(e.value)
