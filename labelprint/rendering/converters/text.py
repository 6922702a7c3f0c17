from __future__ import annotations

import os
import shutil
import subprocess
from typing import List, Optional

from PIL import Image, ImageDraw, ImageFont

from .base import Page, PageConverter, Size

FONT_ENV_VAR = "LABELPRINT_FONT"
FONT_PATTERN = "sans:style=Bold"
FALLBACK_FONTS = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "/Library/Fonts/Arial Bold.ttf",
    "C:\\Windows\\Fonts\\arialbd.ttf",
)
MIN_FONT_SIZE = 6
MAX_FONT_SIZE = 200
LINE_SPACING = 1.15


class TextConverter(PageConverter):
    def __init__(self, font_path: Optional[str] = None) -> None:
        self._font_path = font_path

    def load(self, path: str, size: Size) -> Page:
        with open(path, "r", encoding="utf-8", errors="replace") as handle:
            text = handle.read()
        return self.render(text, size)

    def render(self, text: str, size: Size) -> Page:
        """Render text centred on the label at the largest size that fits."""
        text = text.replace("\t", "    ").rstrip("\n")
        lines = text.splitlines() or [""]
        font = self._fit_font(self.resolve_font(), lines, size)
        return Page(self._draw_lines(lines, font, size))

    def resolve_font(self) -> Optional[str]:
        """Font file to draw with, ``None`` for Pillow's built-in font.

        Tried in order: the path given to the converter, ``$LABELPRINT_FONT``,
        ``fc-match`` for a bold sans, then a few well-known install paths.
        """
        if self._font_path:
            return self._font_path
        override = os.environ.get(FONT_ENV_VAR)
        if override and os.path.isfile(override):
            return override
        return _fc_match(FONT_PATTERN) or next((p for p in FALLBACK_FONTS if os.path.isfile(p)), None)

    def _draw_lines(self, lines: List[str], font: ImageFont.ImageFont, size: Size) -> Image.Image:
        width, height = size
        img = Image.new("RGB", size, (255, 255, 255))
        draw = ImageDraw.Draw(img)
        line_height = self._line_height(font)
        block = self._block_height(font, len(lines))
        y = (height - block) // 2
        for line in lines:
            line_width = self._text_width(font, line)
            draw.text(((width - line_width) // 2, y), line, font=font, fill=(0, 0, 0))
            y += int(line_height * LINE_SPACING)
        return img

    def _fit_font(self, path: Optional[str], lines: List[str], size: Size) -> ImageFont.ImageFont:
        width, height = size
        low = MIN_FONT_SIZE
        high = MAX_FONT_SIZE
        best = None
        while low <= high:
            font_size = (low + high) // 2
            font = _load_font(path, font_size)
            widest = max(self._text_width(font, line) for line in lines)
            if widest <= width and self._block_height(font, len(lines)) <= height:
                best = font
                low = font_size + 1
            else:
                high = font_size - 1
        if best is None:
            return _load_font(path, MIN_FONT_SIZE)
        return best

    def _block_height(self, font: ImageFont.ImageFont, count: int) -> int:
        line_height = self._line_height(font)
        return int(line_height * LINE_SPACING) * (count - 1) + line_height

    @staticmethod
    def _text_width(font: ImageFont.ImageFont, text: str) -> int:
        return int(font.getlength(text))

    @staticmethod
    def _line_height(font: ImageFont.ImageFont) -> int:
        if hasattr(font, "getmetrics"):
            ascent, descent = font.getmetrics()
            return ascent + descent
        bbox = font.getbbox("Ag")
        return bbox[3] - bbox[1]


def _fc_match(pattern: str) -> Optional[str]:
    if not shutil.which("fc-match"):
        return None
    try:
        result = subprocess.run(
            ["fc-match", "-f", "%{file}\n", pattern],
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except OSError:
        return None
    path = (result.stdout or "").strip()
    return path if path and os.path.isfile(path) else None


def _load_font(path: Optional[str], size: int) -> ImageFont.ImageFont:
    if path:
        return ImageFont.truetype(path, size)
    return ImageFont.load_default(size)
