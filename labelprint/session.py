from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from .config import SessionConfig
from .errors import Cancelled, LinkDropped, NotConnected, PrintFailed, SessionBusy, Timeout, TransportError
from .protocol import PrintJob, build_job
from .rendering.raster import PackedBitmap
from .transport.base import Transport

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class SessionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    PRINTING = "printing"


StatusCallback = Callable[[SessionState], None]


@dataclass(frozen=True)
class PrintResult:
    """What was sent for a completed job."""

    width_px: int
    height_px: int
    bytes_per_row: int
    payload_bytes: int
    total_bytes: int
    chunk_size: int
    chunks: int
    header: str
    trailer: str

    @classmethod
    def from_job(cls, bitmap: PackedBitmap, job: PrintJob) -> "PrintResult":
        return cls(
            width_px=bitmap.width_px,
            height_px=bitmap.height_px,
            bytes_per_row=bitmap.bytes_per_row,
            payload_bytes=len(job.payload),
            total_bytes=job.total_bytes,
            chunk_size=job.chunk_size,
            chunks=job.chunk_count,
            header=(job.init + job.header).hex(" "),
            trailer=job.trailer.hex(" "),
        )


class DeviceSession:
    """Owns the transport to one printer and streams raster jobs over it.

    Every write is awaited before the next one is issued, so at most one
    chunk is ever in flight. Only one ``print`` may run at a time.
    """

    def __init__(
        self,
        transport: Transport,
        config: Optional[SessionConfig] = None,
        on_status_change: Optional[StatusCallback] = None,
    ) -> None:
        self.config = config or SessionConfig()
        self.on_status_change = on_status_change
        self._transport = transport
        self._transport.on_disconnect = self._handle_link_drop
        self._state = SessionState.DISCONNECTED
        self._chunk_size: Optional[int] = None
        self._cancel_requested = False
        self._generation = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def chunk_size(self) -> Optional[int]:
        """Negotiated payload size per write, ``None`` while disconnected."""
        return self._chunk_size

    async def __aenter__(self) -> "DeviceSession":
        return await self.connect()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    async def connect(self) -> "DeviceSession":
        if self._state in (SessionState.CONNECTED, SessionState.PRINTING):
            return self
        if self._state is SessionState.CONNECTING:
            raise SessionBusy("A connection attempt is already in progress")
        generation = self._generation
        self._set_state(SessionState.CONNECTING)
        opened = False
        try:
            await self._transport.open(self.config.service_uuid, self.config.characteristic_uuid)
            opened = True
        finally:
            if not opened and generation == self._generation:
                self._set_state(SessionState.DISCONNECTED)
        if generation != self._generation:
            # disconnect() ran while the channel was opening
            await self._transport.close()
            raise TransportError("Connection attempt aborted by disconnect")
        max_payload = self._transport.max_payload
        self._chunk_size = self.config.resolve_chunk_size(max_payload)
        logger.info("Connected, max payload %s, using %d-byte chunks", max_payload or "unreported", self._chunk_size)
        self._set_state(SessionState.CONNECTED)
        return self

    async def disconnect(self) -> None:
        self._generation += 1
        if self._state is SessionState.PRINTING:
            self._cancel_requested = True
        try:
            await self._transport.close()
        finally:
            self._chunk_size = None
            self._set_state(SessionState.DISCONNECTED)

    def cancel(self) -> None:
        """Abort the active job; it fails with ``Cancelled`` even if its last write is in flight."""
        if self._state is SessionState.PRINTING:
            self._cancel_requested = True

    async def print(
        self,
        bitmap: PackedBitmap,
        on_progress: Optional[ProgressCallback] = None,
        feed_lines: int = 0,
    ) -> PrintResult:
        """Send one bitmap as a complete job: reset, header, chunks, trailer."""
        if self._state is SessionState.PRINTING:
            raise SessionBusy("Another print is already in progress on this session")
        if self._state is not SessionState.CONNECTED or self._chunk_size is None:
            raise NotConnected("Not connected to printer")
        job = build_job(bitmap, self._chunk_size, feed_lines)
        result = PrintResult.from_job(bitmap, job)
        logger.info(
            "Printing %dx%d px, %d bytes per row, %d payload bytes in %d chunks, header %s, trailer %s",
            result.width_px,
            result.height_px,
            result.bytes_per_row,
            result.payload_bytes,
            result.chunks,
            result.header,
            result.trailer,
        )
        self._cancel_requested = False
        self._set_state(SessionState.PRINTING)
        try:
            await self._run_job(job, on_progress)
        except LinkDropped as exc:
            await self._drop_link()
            if self._cancel_requested:
                logger.warning("Print cancelled by disconnect")
                raise Cancelled("Print cancelled by disconnect") from exc
            logger.warning("Print aborted, link dropped: %s", exc)
            raise
        except PrintFailed as exc:
            logger.warning("Print aborted: %s", exc)
            raise
        except asyncio.CancelledError:
            logger.warning("Print task cancelled, no further chunks sent")
            raise
        finally:
            self._cancel_requested = False
            if self._state is SessionState.PRINTING:
                self._set_state(SessionState.CONNECTED)
        logger.info("Print complete")
        return result

    async def _run_job(self, job: PrintJob, on_progress: Optional[ProgressCallback]) -> None:
        total = job.total_bytes
        sent = 0
        for index, part in enumerate(_job_writes(job)):
            await self._write(part)
            if self._cancel_requested:
                raise Cancelled("Print cancelled")
            sent += len(part)
            logger.debug("Write %d accepted, %d/%d bytes", index, sent, total)
            if on_progress is not None:
                on_progress(sent / total)

    async def _write(self, data: bytes) -> None:
        if self._cancel_requested:
            raise Cancelled("Print cancelled")
        if self._state is not SessionState.PRINTING:
            raise LinkDropped("Printer disconnected")
        timeout = self.config.write_timeout
        try:
            if timeout:
                await asyncio.wait_for(self._transport.write(data), timeout)
            else:
                await self._transport.write(data)
        except asyncio.TimeoutError as exc:
            raise Timeout(f"Printer did not acknowledge write within {timeout}s") from exc

    async def _drop_link(self) -> None:
        try:
            await self._transport.close()
        finally:
            self._chunk_size = None
            self._set_state(SessionState.DISCONNECTED)

    def _handle_link_drop(self) -> None:
        if self._state is SessionState.DISCONNECTED:
            return
        logger.warning("Transport reported link drop")
        self._chunk_size = None
        self._set_state(SessionState.DISCONNECTED)

    def _set_state(self, state: SessionState) -> None:
        if state is self._state:
            return
        logger.debug("Session %s -> %s", self._state.value, state.value)
        self._state = state
        if self.on_status_change is not None:
            self.on_status_change(state)


def _job_writes(job: PrintJob) -> Iterator[bytes]:
    yield job.init
    yield job.header
    yield from job.chunks()
    yield job.trailer
