import pytest
from PIL import Image

from labelprint.config import LabelSettings
from labelprint.print_job import PrintJobBuilder
from labelprint.rendering.converters import ImageConverter, PageLoader, TextConverter
from labelprint.rendering.converters import text as text_module
from labelprint.rendering.renderer import rotate_for_feed


def _dark_pixels(img):
    gray = img.convert("L")
    return sum(1 for value in gray.getdata() if value < 128)


def test_image_converter_fits_and_centres(tmp_path):
    path = tmp_path / "square.png"
    Image.new("RGB", (50, 50), (0, 0, 0)).save(path)

    page = ImageConverter().load(str(path), (320, 96))

    assert page.image.size == (320, 96)
    assert page.image.getpixel((160, 48)) == (0, 0, 0)
    assert page.image.getpixel((0, 0)) == (255, 255, 255)


def test_transparent_areas_become_paper(tmp_path):
    path = tmp_path / "clear.png"
    Image.new("RGBA", (16, 16), (0, 0, 0, 0)).save(path)

    page = ImageConverter().load(str(path), (16, 16))

    assert _dark_pixels(page.image) == 0


def test_text_converter_draws_ink():
    page = TextConverter().render("Hello\nlabel", (320, 96))
    assert page.image.size == (320, 96)
    assert _dark_pixels(page.image) > 0


def test_page_loader_rejects_unknown_extension():
    with pytest.raises(ValueError):
        PageLoader().load("label.pdf", (8, 8))


def test_page_loader_extensions_match_converters():
    assert PageLoader().supported_extensions == {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".txt"}
    assert PageLoader({".txt": TextConverter()}).supported_extensions == {".txt"}


def test_explicit_font_path_wins(monkeypatch):
    monkeypatch.setenv("LABELPRINT_FONT", "/nowhere/env.ttf")
    assert TextConverter(font_path="/fonts/label.ttf").resolve_font() == "/fonts/label.ttf"


def test_font_from_environment(monkeypatch, tmp_path):
    font = tmp_path / "label.ttf"
    font.write_bytes(b"")
    monkeypatch.setenv("LABELPRINT_FONT", str(font))
    assert TextConverter().resolve_font() == str(font)


def test_missing_font_override_falls_back(monkeypatch):
    monkeypatch.setenv("LABELPRINT_FONT", "/nowhere/missing.ttf")
    monkeypatch.setattr(text_module, "_fc_match", lambda pattern: None)
    monkeypatch.setattr(text_module, "FALLBACK_FONTS", ())
    converter = TextConverter()
    assert converter.resolve_font() is None
    assert _dark_pixels(converter.render("OK", (96, 32)).image) > 0


def test_rotate_for_feed_turns_clockwise():
    img = Image.new("RGB", (16, 8), (255, 255, 255))
    img.putpixel((0, 0), (0, 0, 0))
    rotated = rotate_for_feed(img)
    assert rotated.size == (8, 16)
    assert rotated.getpixel((7, 0)) == (0, 0, 0)


def test_builder_renders_rotated_text_bitmap():
    bitmap = PrintJobBuilder(LabelSettings(width_mm=40, height_mm=12)).build_from_text("ABC")
    assert (bitmap.width_px, bitmap.height_px) == (96, 320)
    assert bitmap.bytes_per_row == 12
    assert any(bitmap.data)


def test_builder_without_rotation_keeps_orientation(tmp_path):
    path = tmp_path / "label.txt"
    path.write_text("Shelf 3", encoding="utf-8")
    settings = LabelSettings(width_mm=30, height_mm=10, rotate=False)

    bitmap = PrintJobBuilder(settings).build_from_file(str(path))

    assert (bitmap.width_px, bitmap.height_px) == (240, 80)


def test_builder_validates_path(tmp_path):
    builder = PrintJobBuilder()
    with pytest.raises(ValueError):
        builder.build_from_file(str(tmp_path / "label.pdf"))
    with pytest.raises(FileNotFoundError):
        builder.build_from_file(str(tmp_path / "missing.png"))
