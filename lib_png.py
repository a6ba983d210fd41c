import numpy as np
import zlib
from enum import Enum
from struct import pack

from png_errors import ComponentCountError, PngIOError


class ColorType(Enum):
    """
    Pixel layouts supported by the encoder, all at bit depth 8.
    Each member carries (IHDR color type code, bytes per pixel).
    """
    Grayscale = (0, 1)
    Rgb = (2, 3)
    GrayscaleAlpha = (4, 2)
    Rgba = (6, 4)
    Indexed = (3, 1)

    def __init__(self, code, bytesPerPixel):
        self.code = code
        self.bytesPerPixel = bytesPerPixel

    @classmethod
    def fromCode(cls, code:int) -> "ColorType":
        for member in cls:
            if member.code == code:
                return member
        raise ValueError("unknown PNG color type code: %r" % (code,))

    def validateComponents(self, components) -> None:
        #only the count is checked, channel order is the caller's business
        actual = len(components)
        if actual != self.bytesPerPixel:
            raise ComponentCountError(self.bytesPerPixel, actual, self)


class PNG():
    #signature
    _PNG_SIGNATURE_LENGTH = 8
    _PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

    #IHDR chunk, header. packed (align=False) so tobytes() is the 13 byte payload
    _PNG_IHDR_LENGTH = 13
    _PNG_IHDR_ITEMS = ('width', 'height', 'bitdepth', 'colortype', 'compress', 'filter', 'interlace')
    _IHDR_type = np.dtype({'names'  : _PNG_IHDR_ITEMS,
                           'formats': ['>u4', '>u4', 'u1', 'u1', 'u1',  'u1', 'u1']}, align=False)

    #fixed header fields
    _BIT_DEPTH = 8
    _COMPRESSION_METHOD = 0 #deflate
    _FILTER_METHOD = 0      #per scanline filter type byte
    _INTERLACE_METHOD = 0   #no interlace
    _MAX_DIMENSION = 0x7FFF

    #filter type tags, only Sub is ever emitted
    _FILTER_SUB = 1

    #tools function
    writeBE32 = lambda x: pack(">I", x)
    crc32 = lambda x: zlib.crc32(x) & 0xFFFFFFFF

    def __init__(self, fstream) -> None:
        self.im = fstream
        self.IHDR = np.zeros(1, dtype = PNG._IHDR_type)

    @staticmethod
    def fwrite(foutput, data:bytes) -> int:
        try:
            foutput.write(data)
        except OSError as exc:
            raise PngIOError("write to output failed: %s" % exc) from exc
        return len(data)

    @staticmethod
    def chunkBytes(chunkType:bytes, data:bytes) -> bytes:
        """
        length(4, BE) | type(4) | payload | crc32(type + payload)(4, BE)
        """
        chunkType = bytes(chunkType)
        if len(chunkType) != 4:
            raise ValueError("chunk type must be 4 bytes, got %r" % (chunkType,))
        data = bytes(data)
        return PNG.writeBE32(len(data)) + chunkType + data + PNG.writeBE32(PNG.crc32(chunkType + data))

    @staticmethod
    def writeChunk(foutput, chunkType:bytes, data:bytes) -> int:
        return PNG.fwrite(foutput, PNG.chunkBytes(chunkType, data))

    """
    #filters work on the whole pixel buffer at once, viewed as (height, width, bands).
    #Sub is the only predictor: every row is tagged 1, no adaptive choice is made.
    #the same pixels always give the same filtered bytes.
    """
    @staticmethod
    def Sub_F(dst:np.ndarray, src:np.ndarray) -> int:
        dst[:, 0, :] = src[:, 0, :]
        dst[:, 1:, :] = src[:, 1:, :] - src[:, :-1, :] #uint8 wraps mod 256
        return 0

    @staticmethod
    def Sub_I(dst:np.ndarray, src:np.ndarray) -> int:
        dst[:] = np.cumsum(src, axis = 1, dtype = np.uint8) #must specify its uint8!
        return 0

    @staticmethod
    def filterScanlines(data:bytes, width:int, bytesPerPixel:int) -> bytes:
        rowLength = width*bytesPerPixel
        raw = np.frombuffer(bytes(data), dtype = np.uint8)
        if raw.size % rowLength != 0:
            raise ValueError("pixel buffer of %d bytes is not a whole number of %d byte rows" % (raw.size, rowLength))
        height = raw.size // rowLength
        src = raw.reshape(height, width, bytesPerPixel)
        dst = np.empty_like(src)
        PNG.Sub_F(dst, src)
        out = np.empty((height, rowLength + 1), dtype = np.uint8)
        out[:, 0] = PNG._FILTER_SUB
        out[:, 1:] = dst.reshape(height, rowLength)
        return out.tobytes()

    @staticmethod
    def unfilterScanlines(filtered:bytes, width:int, bytesPerPixel:int) -> bytes:
        rowLength = width*bytesPerPixel
        pre_data = np.frombuffer(bytes(filtered), dtype = np.uint8)
        if pre_data.size % (rowLength + 1) != 0:
            raise ValueError("filtered stream of %d bytes does not match scanline width %d" % (pre_data.size, rowLength + 1))
        pre_array = pre_data.reshape(-1, rowLength + 1)
        height = pre_array.shape[0]
        filter_list = pre_array[:, 0]
        if np.any(filter_list != PNG._FILTER_SUB):
            bad = int(filter_list[np.flatnonzero(filter_list != PNG._FILTER_SUB)[0]])
            raise ValueError("unsupported filter type %d, only Sub is produced" % bad)
        img = np.empty((height, width, bytesPerPixel), dtype = np.uint8)
        PNG.Sub_I(img, pre_array[:, 1:].reshape(height, width, bytesPerPixel))
        return img.tobytes()
