from __future__ import annotations

import os
from typing import Optional, Set

from .config import LabelSettings
from .rendering.converters import Page, PageLoader, TextConverter
from .rendering.raster import PackedBitmap
from .rendering.renderer import image_to_bitmap


class PrintJobBuilder:
    """Turns files or text into a packed bitmap sized for the label."""

    def __init__(self, settings: Optional[LabelSettings] = None, loader: Optional[PageLoader] = None) -> None:
        self.settings = settings or LabelSettings()
        self._loader = loader or PageLoader()

    def build_from_file(self, path: str) -> PackedBitmap:
        self._validate_input_path(path, self._loader.supported_extensions)
        page = self._loader.load(path, self.settings.pixel_size())
        return self.build_from_page(page)

    def build_from_text(self, text: str) -> PackedBitmap:
        page = TextConverter().render(text, self.settings.pixel_size())
        return self.build_from_page(page)

    def build_from_page(self, page: Page) -> PackedBitmap:
        return image_to_bitmap(page.image, self.settings.threshold, self.settings.rotate)

    @staticmethod
    def _validate_input_path(path: str, extensions: Set[str]) -> None:
        ext = os.path.splitext(path)[1].lower()
        if ext not in extensions:
            raise ValueError("Supported formats: " + ", ".join(sorted(extensions)))
        if not os.path.isfile(path):
            raise FileNotFoundError(f"File not found: {path}")
