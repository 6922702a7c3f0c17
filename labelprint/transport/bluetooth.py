from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional

from bleak import BleakClient, BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError

from ..config import DEFAULT_NAME_PREFIX, DEFAULT_SCAN_TIMEOUT
from ..errors import ConnectionRejected, LinkDropped, ServiceUnavailable, TransportError, WriteRejected
from .base import Transport

logger = logging.getLogger(__name__)

_ADDRESS_RE = re.compile(r"^([0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}$")
# ATT header takes 3 bytes of every packet
ATT_OVERHEAD = 3
DEFAULT_ATT_MTU = 23


def looks_like_address(value: str) -> bool:
    return bool(_ADDRESS_RE.match(value.strip()))


def matches_printer(
    device: BLEDevice, adv: AdvertisementData, service_uuid: str, name_prefix: str
) -> bool:
    if service_uuid.lower() in [uuid.lower() for uuid in adv.service_uuids or []]:
        return True
    name = device.name or adv.local_name or ""
    return bool(name_prefix) and name.upper().startswith(name_prefix.upper())


class BleTransport(Transport):
    """GATT write-with-response channel to a single printer."""

    def __init__(
        self,
        address: Optional[str] = None,
        name_prefix: str = DEFAULT_NAME_PREFIX,
        scan_timeout: float = DEFAULT_SCAN_TIMEOUT,
    ) -> None:
        super().__init__()
        self._address = address
        self._name_prefix = name_prefix
        self._scan_timeout = scan_timeout
        self._client: Optional[BleakClient] = None
        self._characteristic = None
        self._closing = False

    @property
    def is_connected(self) -> bool:
        return self._client is not None and self._client.is_connected

    @property
    def max_payload(self) -> Optional[int]:
        if self._client is None:
            return None
        mtu = getattr(self._client, "mtu_size", None)
        if not mtu or mtu <= DEFAULT_ATT_MTU:
            return None
        return mtu - ATT_OVERHEAD

    async def open(self, service_uuid: str, characteristic_uuid: str) -> None:
        device = await self._find_device(service_uuid)
        if device is None:
            target = self._address or f"a printer advertising {service_uuid} or named {self._name_prefix}*"
            raise ConnectionRejected(f"No device found: {target}")
        logger.info("Connecting to %s (%s)", device.name or "unnamed", device.address)
        client = BleakClient(device, disconnected_callback=self._handle_disconnect)
        try:
            await client.connect()
        except (BleakError, asyncio.TimeoutError, OSError) as exc:
            raise TransportError(f"Bluetooth connection failed: {exc}") from exc
        service = client.services.get_service(service_uuid)
        characteristic = service.get_characteristic(characteristic_uuid) if service else None
        if characteristic is None:
            await self._disconnect_client(client)
            missing = "service" if service is None else "characteristic"
            uuid = service_uuid if service is None else characteristic_uuid
            raise ServiceUnavailable(f"Printer {missing} {uuid} not found on {device.address}")
        self._closing = False
        self._client = client
        self._characteristic = characteristic

    async def write(self, data: bytes) -> None:
        client = self._client
        if client is None or not client.is_connected:
            raise LinkDropped("Bluetooth link is not connected")
        try:
            await client.write_gatt_char(self._characteristic, data, response=True)
        except BleakError as exc:
            if not client.is_connected:
                raise LinkDropped(f"Bluetooth link dropped during write: {exc}") from exc
            raise WriteRejected(f"Printer rejected write: {exc}") from exc
        except (EOFError, OSError) as exc:
            raise LinkDropped(f"Bluetooth link dropped during write: {exc}") from exc

    async def close(self) -> None:
        client = self._client
        self._client = None
        self._characteristic = None
        if client is None:
            return
        self._closing = True
        await self._disconnect_client(client)

    async def _find_device(self, service_uuid: str) -> Optional[BLEDevice]:
        try:
            if self._address and looks_like_address(self._address):
                return await BleakScanner.find_device_by_address(self._address, timeout=self._scan_timeout)
            if self._address:
                return await BleakScanner.find_device_by_name(self._address, timeout=self._scan_timeout)
            return await BleakScanner.find_device_by_filter(
                lambda device, adv: matches_printer(device, adv, service_uuid, self._name_prefix),
                timeout=self._scan_timeout,
            )
        except (BleakError, OSError) as exc:
            raise TransportError(f"Bluetooth scan failed: {exc}") from exc

    @staticmethod
    async def _disconnect_client(client: BleakClient) -> None:
        try:
            await client.disconnect()
        except (BleakError, EOFError, OSError) as exc:
            logger.debug("Ignoring error while disconnecting: %s", exc)

    def _handle_disconnect(self, _client: BleakClient) -> None:
        if self._closing:
            return
        logger.warning("Printer disconnected")
        self._notify_disconnect()
