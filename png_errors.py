"""
Exceptions raised while building or encoding a PNG image.
Every error is terminal for the call that raised it, nothing is retried.
"""


class PngError(Exception):
    pass


class InvalidDimensionsError(PngError):
    def __init__(self, width, height):
        self.width = width
        self.height = height
        super().__init__("Invalid image dimensions: %sx%s" % (width, height))


class PngIOError(PngError):
    #the OSError from the sink is kept as __cause__
    pass


class CompressionError(PngError):
    def __init__(self, message):
        self.message = str(message)
        super().__init__("Compression error: %s" % self.message)


class ColorTypeError(PngError):
    def __init__(self, message = "Invalid color type configuration"):
        super().__init__(message)


class ComponentCountError(PngError):
    def __init__(self, expected, actual, colorType):
        self.expected = expected
        self.actual = actual
        self.colorType = colorType
        name = getattr(colorType, "name", colorType)
        super().__init__("Invalid component count: expected %d for %s, got %d" % (expected, name, actual))


class PixelCountError(PngError):
    def __init__(self, expected, actual, dimensions):
        self.expected = expected
        self.actual = actual
        self.dimensions = tuple(dimensions)
        super().__init__("Invalid pixel count: expected %d (%dx%d), got %d" % (expected, self.dimensions[0], self.dimensions[1], actual))


class InvalidPaletteError(PngError):
    def __init__(self, reason):
        self.reason = reason
        super().__init__("Invalid palette: %s" % reason)


class InvalidPaletteEntryError(PngError):
    def __init__(self, index):
        self.index = index
        super().__init__("Invalid palette index: %d" % index)


class ComponentValueError(PngError, ValueError):
    #sample values have to be whole numbers in 0..255
    def __init__(self, reason):
        self.reason = reason
        super().__init__("Invalid component values: %s" % reason)
