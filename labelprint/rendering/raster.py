from __future__ import annotations

from dataclasses import dataclass

from PIL import Image

from ..errors import InvalidDimensions

DEFAULT_THRESHOLD = 128


@dataclass(frozen=True)
class RasterImage:
    """Row-major RGBA pixel buffer handed over by a renderer."""

    width: int
    height: int
    pixels: bytes

    def validate(self) -> None:
        """Validate dimensions against the pixel buffer."""
        if self.width <= 0 or self.height <= 0:
            raise InvalidDimensions(f"Raster size must be positive, got {self.width}x{self.height}")
        expected = self.width * self.height * 4
        if len(self.pixels) != expected:
            raise InvalidDimensions(
                f"Expected {expected} RGBA bytes for {self.width}x{self.height}, got {len(self.pixels)}"
            )

    @classmethod
    def from_image(cls, img: Image.Image) -> "RasterImage":
        """Build a raster from a Pillow image of any mode."""
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        return cls(img.width, img.height, img.tobytes())


@dataclass(frozen=True)
class PackedBitmap:
    """1-bit-per-pixel bitmap, MSB first, rows padded to whole bytes."""

    width_px: int
    height_px: int
    data: bytes

    def __post_init__(self) -> None:
        if self.width_px <= 0 or self.height_px <= 0:
            raise InvalidDimensions(f"Bitmap size must be positive, got {self.width_px}x{self.height_px}")
        if self.bytes_per_row * self.height_px != len(self.data):
            raise InvalidDimensions(
                f"Bitmap data is {len(self.data)} bytes, expected {self.bytes_per_row * self.height_px}"
            )

    @property
    def bytes_per_row(self) -> int:
        return (self.width_px + 7) // 8

    def row(self, index: int) -> bytes:
        start = index * self.bytes_per_row
        return self.data[start : start + self.bytes_per_row]


def pack_row(pixels: bytes, offset: int, width: int, threshold: int) -> bytes:
    """Pack one RGBA row into bytes, leftmost pixel in the high bit."""
    out = bytearray((width + 7) // 8)
    # Compare sums to avoid the division: (r + g + b) / 3 < t  <=>  r + g + b < 3t
    limit = threshold * 3
    for x in range(width):
        idx = offset + x * 4
        if pixels[idx] + pixels[idx + 1] + pixels[idx + 2] < limit:
            out[x >> 3] |= 0x80 >> (x & 7)
    return bytes(out)


def rasterize(image: RasterImage, threshold: int = DEFAULT_THRESHOLD) -> PackedBitmap:
    """Threshold an RGBA raster into a packed monochrome bitmap.

    A pixel is ink when the plain mean of its red, green and blue samples is
    below ``threshold``; alpha is ignored. Widths that are not a multiple of
    eight are padded with blank bits at the end of every row.
    """
    image.validate()
    if not 0 <= threshold <= 255:
        raise InvalidDimensions(f"Threshold must be within 0..255, got {threshold}")
    stride = image.width * 4
    data = bytearray()
    for y in range(image.height):
        data += pack_row(image.pixels, y * stride, image.width, threshold)
    return PackedBitmap(image.width, image.height, bytes(data))
