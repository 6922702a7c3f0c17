from __future__ import annotations


class LabelPrintError(Exception):
    """Base class for every error raised by labelprint."""


class InvalidDimensions(LabelPrintError, ValueError):
    """Raster or bitmap shape does not match its declared dimensions."""


class ConnectionFailed(LabelPrintError):
    pass


class ConnectionRejected(ConnectionFailed):
    """No device was chosen or found."""


class ServiceUnavailable(ConnectionFailed):
    """The printer service or write characteristic is missing."""


class TransportError(ConnectionFailed):
    """Link-level failure while opening the channel."""


class SessionStateError(LabelPrintError):
    pass


class NotConnected(SessionStateError):
    pass


class SessionBusy(SessionStateError):
    pass


class PrintFailed(LabelPrintError):
    """A print job was aborted; nothing after the failing write was sent."""


class WriteRejected(PrintFailed):
    pass


class LinkDropped(PrintFailed):
    pass


class Timeout(PrintFailed):
    pass


class Cancelled(PrintFailed):
    pass
