import logging
import zlib

from lib_png import PNG, ColorType
from png_errors import CompressionError, InvalidPaletteError, PixelCountError, PngIOError

logger = logging.getLogger(__name__)


class PNG_encoder(PNG):
    """
    Writes a PNG_image to a binary output as signature, IHDR, [PLTE], IDAT, IEND.
    All image validation runs before the first byte is written. A failure while writing
    (sink or zlib) leaves a truncated stream behind, which the caller has to discard.
    """
    def __init__(self, foutput, compression:int = zlib.Z_DEFAULT_COMPRESSION) -> None:
        super().__init__(foutput)
        self.compression = compression

    def _checkImage(self, image) -> None:
        expected = image.width*image.height
        if image.pixelCount != expected:
            raise PixelCountError(expected, image.pixelCount, (image.width, image.height))
        if image.colorType is ColorType.Indexed:
            if image.palette is None:
                raise InvalidPaletteError("Palette required for indexed color")
            image.validatePaletteIndices()

    def _setHeader(self, image) -> bytes:
        self.IHDR["width"] = image.width
        self.IHDR["height"] = image.height
        self.IHDR["bitdepth"] = PNG._BIT_DEPTH
        self.IHDR["colortype"] = image.colorType.code
        self.IHDR["compress"] = PNG._COMPRESSION_METHOD
        self.IHDR["filter"] = PNG._FILTER_METHOD
        self.IHDR["interlace"] = PNG._INTERLACE_METHOD
        return self.IHDR.tobytes()

    def zipData(self, filtered:bytes) -> bytes:
        try:
            return zlib.compress(filtered, self.compression)
        except zlib.error as exc:
            raise CompressionError(str(exc)) from exc

    def encode(self, image) -> int:
        self._checkImage(image)
        foutput = self.im
        written = PNG.fwrite(foutput, PNG._PNG_SIGNATURE)
        written += PNG.writeChunk(foutput, b"IHDR", self._setHeader(image))
        logger.debug("IHDR %dx%d color type %s", image.width, image.height, image.colorType.name)
        if image.palette is not None:
            written += PNG.writeChunk(foutput, b"PLTE", image.palette)
            logger.debug("PLTE with %d entries", len(image.palette)//3)
        filtered = PNG.filterScanlines(image.data, image.width, image.colorType.bytesPerPixel)
        stream = self.zipData(filtered)
        written += PNG.writeChunk(foutput, b"IDAT", stream)
        logger.debug("IDAT %d filtered bytes compressed to %d", len(filtered), len(stream))
        written += PNG.writeChunk(foutput, b"IEND", b"")
        return written


def write_png(image, path, compression:int = zlib.Z_DEFAULT_COMPRESSION) -> int:
    try:
        foutput = open(path, 'wb')
    except OSError as exc:
        raise PngIOError("cannot open %s for writing: %s" % (path, exc)) from exc
    with foutput:
        written = PNG_encoder(foutput, compression).encode(image)
    logger.info("wrote %s (%d bytes)", path, written)
    return written


if __name__ == "__main__":
    import pathlib
    import os
    from png_image import PNG_image
    logging.basicConfig(level = logging.INFO)
    CUR_PATH = pathlib.Path(__file__).parent.resolve()

    #RGBA gradient, red along y and green along x
    img = PNG_image(256, 256, ColorType.Rgba)
    for y in range(256):
        for x in range(256):
            img.addPixel([int(255.999*y/255), int(255.999*x/255), 0, 255])
    write_png(img, os.path.join(CUR_PATH, "gradient.png"))

    img = PNG_image(128, 128, ColorType.Grayscale)
    for y in range(128):
        for x in range(128):
            img.addPixel([(x + y)//2])
    write_png(img, os.path.join(CUR_PATH, "grayscale.png"))

    img = PNG_image(64, 64, ColorType.GrayscaleAlpha)
    for y in range(64):
        for x in range(64):
            img.addPixel([(x + y) & 0xFF, (x*4) & 0xFF])
    write_png(img, os.path.join(CUR_PATH, "grayscale_alpha.png"))

    #3 color palette, red/green/blue diagonal stripes
    img = PNG_image(8, 8, ColorType.Indexed)
    img.setPalette([255, 0, 0,
                    0, 255, 0,
                    0, 0, 255])
    for y in range(8):
        for x in range(8):
            img.addPixel([(x + y) % 3])
    write_png(img, os.path.join(CUR_PATH, "palette.png"))
