from __future__ import annotations

from .base import Page, RasterConverter, Size


class ImageConverter(RasterConverter):
    def load(self, path: str, size: Size) -> Page:
        img = self._load_image(path)
        return Page(self._fit_to_label(self._normalize_image(img), size))
