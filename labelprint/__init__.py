from .config import LabelSettings, SessionConfig
from .errors import (
    Cancelled,
    ConnectionRejected,
    InvalidDimensions,
    LabelPrintError,
    LinkDropped,
    NotConnected,
    ServiceUnavailable,
    SessionBusy,
    Timeout,
    TransportError,
    WriteRejected,
)
from .print_job import PrintJobBuilder
from .rendering import PackedBitmap, RasterImage, rasterize
from .session import DeviceSession, PrintResult, SessionState

__version__ = "0.1.0"

__all__ = [
    "Cancelled",
    "ConnectionRejected",
    "DeviceSession",
    "InvalidDimensions",
    "LabelPrintError",
    "LabelSettings",
    "LinkDropped",
    "NotConnected",
    "PackedBitmap",
    "PrintJobBuilder",
    "PrintResult",
    "RasterImage",
    "ServiceUnavailable",
    "SessionBusy",
    "SessionConfig",
    "SessionState",
    "Timeout",
    "TransportError",
    "WriteRejected",
    "rasterize",
]
