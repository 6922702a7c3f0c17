from .commands import RASTER_OPCODE, RESET, feed_cmd, raster_header_cmd, reset_cmd
from .job import PrintJob, build_job

__all__ = [
    "PrintJob",
    "RASTER_OPCODE",
    "RESET",
    "build_job",
    "feed_cmd",
    "raster_header_cmd",
    "reset_cmd",
]
