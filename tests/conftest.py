import asyncio
from typing import List, Optional

import pytest

from labelprint.errors import LinkDropped
from labelprint.transport.base import Transport


class FakeTransport(Transport):
    """Records every write; can fail a chosen write or hold writes until released."""

    def __init__(
        self,
        max_payload: Optional[int] = None,
        fail_on: Optional[int] = None,
        error: Optional[Exception] = None,
        open_error: Optional[Exception] = None,
    ) -> None:
        super().__init__()
        self._max_payload = max_payload
        self.fail_on = fail_on
        self.error = error
        self.open_error = open_error
        self.attempts: List[bytes] = []
        self.writes: List[bytes] = []
        self.opened = 0
        self.closed = 0
        self.channel = None
        self.gate: Optional[asyncio.Event] = None
        # when set, only the write at this index waits on the gate
        self.hold_on: Optional[int] = None
        self.connected = False

    @property
    def max_payload(self) -> Optional[int]:
        return self._max_payload

    @property
    def is_connected(self) -> bool:
        return self.connected

    async def open(self, service_uuid: str, characteristic_uuid: str) -> None:
        if self.open_error is not None:
            raise self.open_error
        self.opened += 1
        self.channel = (service_uuid, characteristic_uuid)
        self.connected = True

    async def write(self, data: bytes) -> None:
        if not self.connected:
            raise LinkDropped("not connected")
        index = len(self.attempts)
        self.attempts.append(bytes(data))
        if self.gate is not None and self.hold_on in (None, index):
            await self.gate.wait()
        if self.fail_on == index:
            raise self.error
        self.writes.append(bytes(data))

    async def close(self) -> None:
        self.closed += 1
        self.connected = False

    def drop(self) -> None:
        self.connected = False
        self._notify_disconnect()


@pytest.fixture
def make_transport():
    return FakeTransport


async def wait_until(predicate, attempts: int = 200) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.fixture
def until():
    return wait_until
