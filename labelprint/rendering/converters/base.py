from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from PIL import Image, ImageOps

Size = Tuple[int, int]


@dataclass(frozen=True)
class Page:
    """A rendered label in its human-readable (landscape) orientation."""

    image: Image.Image


class PageConverter:
    def load(self, path: str, size: Size) -> Page:
        raise NotImplementedError


class RasterConverter(PageConverter):
    @staticmethod
    def _load_image(path: str) -> Image.Image:
        with Image.open(path) as img:
            img = ImageOps.exif_transpose(img)
            return img.copy()

    @staticmethod
    def _normalize_image(img: Image.Image) -> Image.Image:
        # Transparent areas become paper, not whatever colour hides under alpha 0
        if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
            rgba = img.convert("RGBA")
            background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
            return Image.alpha_composite(background, rgba).convert("RGB")
        if img.mode not in ("RGB", "L"):
            return img.convert("RGB")
        return img

    @staticmethod
    def _fit_to_label(img: Image.Image, size: Size) -> Image.Image:
        width, height = size
        ratio = min(width / float(img.width), height / float(img.height))
        fitted = (max(1, int(img.width * ratio)), max(1, int(img.height * ratio)))
        if fitted != img.size:
            img = img.resize(fitted, Image.LANCZOS)
        canvas = Image.new("RGB", size, (255, 255, 255))
        canvas.paste(img, ((width - img.width) // 2, (height - img.height) // 2))
        return canvas
