from .raster import DEFAULT_THRESHOLD, PackedBitmap, RasterImage, rasterize
from .renderer import align_to_byte, image_to_bitmap, label_size_to_pixels, rotate_for_feed

__all__ = [
    "DEFAULT_THRESHOLD",
    "PackedBitmap",
    "RasterImage",
    "align_to_byte",
    "image_to_bitmap",
    "label_size_to_pixels",
    "rasterize",
    "rotate_for_feed",
]
