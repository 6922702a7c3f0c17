from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Tuple

from .rendering.raster import DEFAULT_THRESHOLD
from .rendering.renderer import align_to_byte, label_size_to_pixels

SERVICE_UUID = "0000ff00-0000-1000-8000-00805f9b34fb"
CHARACTERISTIC_UUID = "0000ff02-0000-1000-8000-00805f9b34fb"
DEFAULT_NAME_PREFIX = "D30"
DEFAULT_CHUNK_SIZE = 128
DEFAULT_WRITE_TIMEOUT = 10.0
DEFAULT_SCAN_TIMEOUT = 10.0
# 203 dpi head
DEFAULT_PIXELS_PER_MM = 8.0

DEVICE_ENV_VAR = "LABELPRINT_DEVICE"
CHUNK_SIZE_ENV_VAR = "LABELPRINT_CHUNK_SIZE"
WRITE_TIMEOUT_ENV_VAR = "LABELPRINT_WRITE_TIMEOUT"


@dataclass
class LabelSettings:
    """Per-request label geometry and rasterization options."""

    width_mm: float = 40.0
    height_mm: float = 12.0
    pixels_per_mm: float = DEFAULT_PIXELS_PER_MM
    threshold: int = DEFAULT_THRESHOLD
    rotate: bool = True
    feed_mm: float = 0.0

    def pixel_size(self) -> Tuple[int, int]:
        """Canvas size in the label's readable orientation.

        The edge that ends up across the print head is rounded up to a whole
        byte so no columns are lost when packing.
        """
        width, height = label_size_to_pixels(self.width_mm, self.height_mm, self.pixels_per_mm)
        if self.rotate:
            return width, align_to_byte(height)
        return align_to_byte(width), height

    @property
    def feed_lines(self) -> int:
        return max(0, min(255, int(round(self.feed_mm * self.pixels_per_mm))))


@dataclass
class SessionConfig:
    address: Optional[str] = None
    name_prefix: str = DEFAULT_NAME_PREFIX
    service_uuid: str = SERVICE_UUID
    characteristic_uuid: str = CHARACTERISTIC_UUID
    default_chunk_size: int = DEFAULT_CHUNK_SIZE
    chunk_size: Optional[int] = None
    write_timeout: Optional[float] = DEFAULT_WRITE_TIMEOUT
    scan_timeout: float = DEFAULT_SCAN_TIMEOUT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "SessionConfig":
        env = os.environ if environ is None else environ
        config = cls()
        address = env.get(DEVICE_ENV_VAR)
        if address:
            config.address = address.strip()
        chunk_size = env.get(CHUNK_SIZE_ENV_VAR)
        if chunk_size:
            config.chunk_size = _positive_int(CHUNK_SIZE_ENV_VAR, chunk_size)
        write_timeout = env.get(WRITE_TIMEOUT_ENV_VAR)
        if write_timeout:
            config.write_timeout = _timeout(WRITE_TIMEOUT_ENV_VAR, write_timeout)
        overrides = {key: value for key, value in overrides.items() if value is not None}
        return replace(config, **overrides)

    def resolve_chunk_size(self, max_payload: Optional[int]) -> int:
        """Pick the bytes per write; a configured size may shrink but never exceed the link's maximum."""
        limit = max_payload if max_payload and max_payload > 0 else None
        if self.chunk_size:
            return min(self.chunk_size, limit) if limit else self.chunk_size
        return limit or self.default_chunk_size


def _positive_int(name: str, value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got '{value}'") from exc
    if number <= 0:
        raise ValueError(f"{name} must be greater than zero")
    return number


def _timeout(name: str, value: str) -> Optional[float]:
    try:
        number = float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number of seconds, got '{value}'") from exc
    # Zero or negative disables the per-write timeout
    return number if number > 0 else None
