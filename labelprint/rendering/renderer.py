from __future__ import annotations

from typing import Tuple

from PIL import Image

from .raster import PackedBitmap, RasterImage, rasterize


def label_size_to_pixels(width_mm: float, height_mm: float, pixels_per_mm: float) -> Tuple[int, int]:
    """Convert a physical label size to pixels using a calibration factor."""
    width = max(1, int(round(width_mm * pixels_per_mm)))
    height = max(1, int(round(height_mm * pixels_per_mm)))
    return width, height


def align_to_byte(pixels: int) -> int:
    """Round a pixel count up to the next multiple of eight."""
    return (pixels + 7) // 8 * 8


def rotate_for_feed(img: Image.Image) -> Image.Image:
    """Rotate a landscape label 90 degrees clockwise so it runs along the feed."""
    return img.transpose(Image.Transpose.ROTATE_270)


def image_to_bitmap(img: Image.Image, threshold: int, rotate: bool) -> PackedBitmap:
    if rotate:
        img = rotate_for_feed(img)
    return rasterize(RasterImage.from_image(img), threshold)
