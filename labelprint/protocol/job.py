from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from ..rendering.raster import PackedBitmap
from .commands import feed_cmd, raster_header_cmd, reset_cmd


@dataclass(frozen=True)
class PrintJob:
    """Everything written to the printer for one bitmap, in order."""

    init: bytes
    header: bytes
    payload: bytes
    chunk_size: int
    trailer: bytes

    @property
    def total_bytes(self) -> int:
        return len(self.init) + len(self.header) + len(self.payload) + len(self.trailer)

    @property
    def chunk_count(self) -> int:
        return -(-len(self.payload) // self.chunk_size)

    def chunks(self) -> Iterator[bytes]:
        """Yield consecutive payload slices no larger than ``chunk_size``."""
        for offset in range(0, len(self.payload), self.chunk_size):
            yield self.payload[offset : offset + self.chunk_size]


def build_job(bitmap: PackedBitmap, chunk_size: int, feed_lines: int = 0) -> PrintJob:
    """Frame a packed bitmap for transfer in chunks of ``chunk_size`` bytes."""
    if chunk_size <= 0:
        raise ValueError("Chunk size must be greater than zero")
    return PrintJob(
        init=reset_cmd(),
        header=raster_header_cmd(bitmap.bytes_per_row, bitmap.height_px),
        payload=bitmap.data,
        chunk_size=chunk_size,
        trailer=feed_cmd(feed_lines),
    )
