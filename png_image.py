from numbers import Integral

import numpy as np

from lib_png import PNG, ColorType
from png_errors import (ColorTypeError, ComponentValueError, InvalidDimensionsError, InvalidPaletteError,
                        InvalidPaletteEntryError, PixelCountError)


class PNG_image():
    """
    Append-only pixel buffer for one image, 8 bits per sample.
    Pixels are stored row-major in a single bytearray, each pixel taking colorType.bytesPerPixel bytes
    in the order the caller gives them (no channel reordering is done).
    An Indexed image may carry a palette of up to 256 RGB triplets; indices are only checked against it
    right before encoding, so palette and pixels can be set in either order.
    """
    _MAX_PALETTE_ENTRIES = 256

    def __init__(self, width:int, height:int, colorType:ColorType) -> None:
        if not PNG_image._validDimension(width) or not PNG_image._validDimension(height):
            raise InvalidDimensionsError(width, height)
        self._width = int(width)
        self._height = int(height)
        self._colorType = ColorType(colorType)
        self._data = bytearray()
        self._palette = None

    @staticmethod
    def _validDimension(value) -> bool:
        return isinstance(value, Integral) and not isinstance(value, bool) and 1 <= value <= PNG._MAX_DIMENSION

    def __repr__(self) -> str:
        return "PNG_image(%dx%d, %s, %d/%d pixels%s)" % (self._width, self._height, self._colorType.name,
                                                      self.pixelCount, self._width*self._height,
                                                      "" if self._palette is None else ", %d palette entries" % (len(self._palette)//3))

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def colorType(self) -> ColorType:
        return self._colorType

    @property
    def data(self) -> bytes:
        return bytes(self._data)

    @property
    def palette(self):
        return self._palette

    @property
    def pixelCount(self) -> int:
        return len(self._data) // self._colorType.bytesPerPixel

    @property
    def isComplete(self) -> bool:
        return self.pixelCount == self._width*self._height

    @staticmethod
    def _sampleBytes(values) -> bytes:
        #one byte per value, whatever the container or dtype (bytes() on an int64 array would copy its raw buffer)
        if isinstance(values, (bytes, bytearray)):
            return bytes(values)
        arr = np.asarray(values)
        if arr.size == 0:
            return b""
        if arr.ndim != 1 or arr.dtype.kind not in "iu":
            raise ComponentValueError("expected a flat sequence of integers, got %r" % (values,))
        if arr.min() < 0 or arr.max() > 255:
            raise ComponentValueError("values must be in 0..255, got %r" % (values,))
        return arr.astype(np.uint8).tobytes()

    def addPixel(self, components) -> None:
        pixel = PNG_image._sampleBytes(components)
        self._colorType.validateComponents(pixel)
        maxPixels = self._width*self._height
        current = self.pixelCount
        if current >= maxPixels:
            raise PixelCountError(maxPixels, current + 1, (self._width, self._height))
        self._data += pixel

    def setPalette(self, palette) -> None:
        if self._colorType is not ColorType.Indexed:
            raise ColorTypeError("palette can only be set on an Indexed image, not %s" % self._colorType.name)
        try:
            palette = PNG_image._sampleBytes(palette)
        except ComponentValueError as exc:
            raise InvalidPaletteError(exc.reason) from exc
        if len(palette) % 3 != 0:
            raise InvalidPaletteError("Palette must contain RGB triplets")
        if len(palette) > PNG_image._MAX_PALETTE_ENTRIES*3:
            raise InvalidPaletteError("Palette cannot exceed %d entries" % PNG_image._MAX_PALETTE_ENTRIES)
        self._palette = palette

    def validatePaletteIndices(self) -> None:
        #every Indexed pixel is one byte, the palette index
        if self._colorType is not ColorType.Indexed or self._palette is None:
            return
        entries = len(self._palette) // 3
        indices = np.frombuffer(bytes(self._data), dtype = np.uint8)
        bad = np.flatnonzero(indices >= entries)
        if bad.size:
            raise InvalidPaletteEntryError(int(indices[bad[0]]))
