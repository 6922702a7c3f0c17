from __future__ import annotations

from ..errors import InvalidDimensions

ESC = 0x1B
GS = 0x1D

RESET = bytes([ESC, 0x40])
RASTER_OPCODE = bytes([GS, 0x76, 0x30, 0x00])

MAX_FIELD = 0xFFFF


def _le16(value: int, name: str) -> bytes:
    if not 0 <= value <= MAX_FIELD:
        raise InvalidDimensions(f"{name} {value} does not fit the 16-bit raster header field")
    return value.to_bytes(2, "little")


def reset_cmd() -> bytes:
    """Build the initialize command (ESC @)."""
    return RESET


def raster_header_cmd(bytes_per_row: int, lines: int) -> bytes:
    """Build the GS v 0 raster header, normal mode.

    Width is sent in bytes and height in dot lines, both little-endian.
    """
    return RASTER_OPCODE + _le16(bytes_per_row, "Row byte count") + _le16(lines, "Line count")


def feed_cmd(lines: int = 0) -> bytes:
    """Build the feed-and-cut trailer (ESC d n)."""
    return bytes([ESC, 0x64, max(0, min(255, lines))])
