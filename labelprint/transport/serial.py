from __future__ import annotations

import asyncio
import logging
from typing import Optional

import serial

from ..errors import LinkDropped, Timeout, TransportError
from .base import Transport

logger = logging.getLogger(__name__)

SERIAL_BAUD_RATE = 115200
DEFAULT_SERIAL_PORT = "/dev/rfcomm0"


class SerialTransport(Transport):
    """Bound RFCOMM serial port; service and characteristic do not apply."""

    def __init__(self, port: str = DEFAULT_SERIAL_PORT, baud_rate: int = SERIAL_BAUD_RATE) -> None:
        super().__init__()
        self._port = port
        self._baud_rate = baud_rate
        self._serial: Optional[serial.Serial] = None

    @property
    def is_connected(self) -> bool:
        return self._serial is not None and self._serial.is_open

    async def open(self, service_uuid: str, characteristic_uuid: str) -> None:
        loop = asyncio.get_running_loop()
        try:
            self._serial = await loop.run_in_executor(None, self._open_blocking)
        except (serial.SerialException, OSError) as exc:
            raise TransportError(f"Serial connection failed: {exc}") from exc
        logger.info("Opened serial port %s", self._port)

    async def write(self, data: bytes) -> None:
        port = self._serial
        if port is None or not port.is_open:
            raise LinkDropped("Serial port is not open")
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._write_blocking, port, data)
        except serial.SerialTimeoutException as exc:
            raise Timeout(f"Serial write timed out: {exc}") from exc
        except (serial.SerialException, OSError) as exc:
            self._serial = None
            self._notify_disconnect()
            raise LinkDropped(f"Serial link failed: {exc}") from exc

    async def close(self) -> None:
        port = self._serial
        self._serial = None
        if port is not None:
            port.close()

    def _open_blocking(self) -> serial.Serial:
        return serial.Serial(self._port, self._baud_rate, timeout=1, write_timeout=5)

    @staticmethod
    def _write_blocking(port: serial.Serial, data: bytes) -> None:
        port.write(data)
        port.flush()
