from __future__ import annotations

import os
from typing import Dict, Optional, Set

from .base import Page, PageConverter, Size
from .image import ImageConverter
from .text import TextConverter

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".bmp")


class PageLoader:
    def __init__(self, converters: Optional[Dict[str, PageConverter]] = None) -> None:
        if converters is None:
            converters = {}
            image_converter = ImageConverter()
            for ext in IMAGE_EXTENSIONS:
                converters[ext] = image_converter
            converters[".txt"] = TextConverter()
        self._converters = converters

    @property
    def supported_extensions(self) -> Set[str]:
        return set(self._converters.keys())

    def load(self, path: str, size: Size) -> Page:
        ext = os.path.splitext(path)[1].lower()
        converter = self._converters.get(ext)
        if not converter:
            raise ValueError(f"Unsupported file extension: {ext}")
        return converter.load(path, size)


__all__ = ["ImageConverter", "Page", "PageLoader", "TextConverter"]
