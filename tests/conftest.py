import zlib
from struct import unpack

import pytest

from lib_png import PNG


def parse_png(raw):
    """split an encoded stream into [(type, data, crc)], checking the signature and each length field."""
    assert raw[:PNG._PNG_SIGNATURE_LENGTH] == PNG._PNG_SIGNATURE
    chunks = []
    pos = PNG._PNG_SIGNATURE_LENGTH
    while pos < len(raw):
        length = unpack(">I", raw[pos:pos + 4])[0]
        chunkType = raw[pos + 4:pos + 8]
        data = raw[pos + 8:pos + 8 + length]
        assert len(data) == length
        crc = unpack(">I", raw[pos + 8 + length:pos + 12 + length])[0]
        chunks.append((chunkType, data, crc))
        pos += 12 + length
    assert pos == len(raw)
    return chunks


def idat_pixels(chunks, width, bytesPerPixel):
    stream = b"".join(data for chunkType, data, _ in chunks if chunkType == b"IDAT")
    return PNG.unfilterScanlines(zlib.decompress(stream), width, bytesPerPixel)


@pytest.fixture
def png_chunks():
    return parse_png


@pytest.fixture
def decoded_pixels():
    return idat_pixels
