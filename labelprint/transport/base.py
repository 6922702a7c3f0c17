from __future__ import annotations

from typing import Callable, Optional

DisconnectCallback = Callable[[], None]


class Transport:
    """A connection-oriented channel that acknowledges every write.

    ``write`` must not return before the device accepted the bytes; the
    session relies on this for ordering.
    """

    def __init__(self) -> None:
        self.on_disconnect: Optional[DisconnectCallback] = None

    @property
    def max_payload(self) -> Optional[int]:
        """Largest payload a single write may carry, if the link reports one."""
        return None

    @property
    def is_connected(self) -> bool:
        raise NotImplementedError

    async def open(self, service_uuid: str, characteristic_uuid: str) -> None:
        raise NotImplementedError

    async def write(self, data: bytes) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError

    def _notify_disconnect(self) -> None:
        callback = self.on_disconnect
        if callback is not None:
            callback()
