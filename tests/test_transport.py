import asyncio
from types import SimpleNamespace

import pytest
import serial

from labelprint.config import CHARACTERISTIC_UUID, SERVICE_UUID
from labelprint.errors import LinkDropped, Timeout, TransportError
from labelprint.transport import serial as serial_transport
from labelprint.transport.bluetooth import BleTransport, looks_like_address, matches_printer


class FakePort:
    def __init__(self, port, baud_rate, timeout=None, write_timeout=None):
        self.port = port
        self.baud_rate = baud_rate
        self.is_open = True
        self.written = []
        self.flushes = 0
        self.error = None

    def write(self, data):
        if self.error is not None:
            raise self.error
        self.written.append(bytes(data))

    def flush(self):
        self.flushes += 1

    def close(self):
        self.is_open = False


@pytest.fixture
def fake_serial(monkeypatch):
    ports = []

    def factory(*args, **kwargs):
        port = FakePort(*args, **kwargs)
        ports.append(port)
        return port

    monkeypatch.setattr(serial_transport.serial, "Serial", factory)
    return ports


def test_serial_transport_writes_and_flushes(fake_serial):
    transport = serial_transport.SerialTransport("/dev/rfcomm7")

    async def run():
        await transport.open(SERVICE_UUID, CHARACTERISTIC_UUID)
        await transport.write(b"\x1b\x40")
        await transport.close()

    asyncio.run(run())
    port = fake_serial[0]
    assert (port.port, port.baud_rate) == ("/dev/rfcomm7", 115200)
    assert port.written == [b"\x1b\x40"]
    assert port.flushes == 1
    assert not port.is_open
    assert transport.max_payload is None


def test_serial_open_failure(monkeypatch):
    def broken(*args, **kwargs):
        raise serial.SerialException("no such port")

    monkeypatch.setattr(serial_transport.serial, "Serial", broken)
    transport = serial_transport.SerialTransport("/dev/missing")
    with pytest.raises(TransportError):
        asyncio.run(transport.open(SERVICE_UUID, CHARACTERISTIC_UUID))


def test_serial_write_failure_reports_drop(fake_serial):
    transport = serial_transport.SerialTransport()
    dropped = []
    transport.on_disconnect = lambda: dropped.append(True)

    async def run():
        await transport.open(SERVICE_UUID, CHARACTERISTIC_UUID)
        fake_serial[0].error = serial.SerialException("device reports readiness but returned no data")
        await transport.write(b"\x00")

    with pytest.raises(LinkDropped):
        asyncio.run(run())
    assert dropped == [True]
    assert not transport.is_connected


def test_serial_write_timeout(fake_serial):
    transport = serial_transport.SerialTransport()

    async def run():
        await transport.open(SERVICE_UUID, CHARACTERISTIC_UUID)
        fake_serial[0].error = serial.SerialTimeoutException("Write timeout")
        await transport.write(b"\x00")

    with pytest.raises(Timeout):
        asyncio.run(run())


def test_write_before_open_is_link_drop():
    with pytest.raises(LinkDropped):
        asyncio.run(serial_transport.SerialTransport().write(b"\x00"))
    with pytest.raises(LinkDropped):
        asyncio.run(BleTransport().write(b"\x00"))


def test_looks_like_address():
    assert looks_like_address("AA:BB:CC:DD:EE:FF")
    assert looks_like_address("aa-bb-cc-dd-ee-ff")
    assert not looks_like_address("D30-1234")


def test_matches_printer_by_service_or_name():
    device = SimpleNamespace(name=None, address="AA:BB:CC:DD:EE:FF")
    by_service = SimpleNamespace(service_uuids=[SERVICE_UUID.upper()], local_name=None)
    by_name = SimpleNamespace(service_uuids=[], local_name="d30-1a2b")
    other = SimpleNamespace(service_uuids=["0000180f-0000-1000-8000-00805f9b34fb"], local_name="Speaker")

    assert matches_printer(device, by_service, SERVICE_UUID, "D30")
    assert matches_printer(device, by_name, SERVICE_UUID, "D30")
    assert not matches_printer(device, other, SERVICE_UUID, "D30")


def test_ble_transport_without_client_reports_nothing():
    transport = BleTransport()
    assert transport.max_payload is None
    assert not transport.is_connected
    asyncio.run(transport.close())
