from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .config import LabelSettings, SessionConfig
from .errors import LabelPrintError
from .print_job import PrintJobBuilder
from .rendering.raster import PackedBitmap
from .session import DeviceSession
from .transport.base import Transport
from .transport.bluetooth import BleTransport
from .transport.serial import SerialTransport

_DEFAULTS = LabelSettings()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="labelprint",
        description="Print images or text to a D30-style thermal label printer over Bluetooth LE.",
    )
    parser.add_argument("path", nargs="?", help="File to print (.png/.jpg/.gif/.bmp/.txt)")
    parser.add_argument("--text", metavar="TEXT", help="Print text instead of a file")
    link_group = parser.add_mutually_exclusive_group()
    link_group.add_argument("--address", help="Bluetooth address or name (default: $LABELPRINT_DEVICE or first printer found)")
    link_group.add_argument("--serial", metavar="PATH", help="Serial port to use instead of Bluetooth LE (e.g. /dev/rfcomm0)")
    parser.add_argument("--width-mm", type=float, default=_DEFAULTS.width_mm, help="Label width in mm")
    parser.add_argument("--height-mm", type=float, default=_DEFAULTS.height_mm, help="Label height in mm")
    parser.add_argument("--pixels-per-mm", type=float, default=_DEFAULTS.pixels_per_mm, help="Calibration factor")
    parser.add_argument("--threshold", type=int, default=_DEFAULTS.threshold, help="Ink threshold (0-255)")
    parser.add_argument("--no-rotate", action="store_true", help="Do not rotate the label for vertical feed")
    parser.add_argument("--feed-mm", type=float, default=_DEFAULTS.feed_mm, help="Extra feed after the label in mm")
    parser.add_argument("--chunk-size", type=int, help="Bytes per write (default: negotiated MTU or 128)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def label_settings(args: argparse.Namespace) -> LabelSettings:
    if not 0 <= args.threshold <= 255:
        raise ValueError("--threshold must be within 0..255")
    return LabelSettings(
        width_mm=args.width_mm,
        height_mm=args.height_mm,
        pixels_per_mm=args.pixels_per_mm,
        threshold=args.threshold,
        rotate=not args.no_rotate,
        feed_mm=args.feed_mm,
    )


def build_bitmap(args: argparse.Namespace, settings: LabelSettings) -> PackedBitmap:
    builder = PrintJobBuilder(settings)
    if args.text is not None:
        return builder.build_from_text(args.text)
    return builder.build_from_file(args.path)


def build_transport(args: argparse.Namespace, config: SessionConfig) -> Transport:
    if args.serial:
        return SerialTransport(args.serial)
    return BleTransport(config.address, config.name_prefix, config.scan_timeout)


def _show_progress(fraction: float) -> None:
    print(f"\rPrinting... {int(fraction * 100)}%", end="", file=sys.stderr, flush=True)


async def print_bitmap(
    bitmap: PackedBitmap, transport: Transport, config: SessionConfig, feed_lines: int
) -> None:
    async with DeviceSession(transport, config) as session:
        await session.print(bitmap, on_progress=_show_progress, feed_lines=feed_lines)
    print(file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    if args.path and args.text is not None:
        print("Provide either a file path or --text, not both. Use --help for usage.", file=sys.stderr)
        return 2
    if not args.path and args.text is None:
        print("Missing file path or --text. Use --help for usage.", file=sys.stderr)
        return 2
    try:
        settings = label_settings(args)
        config = SessionConfig.from_env(address=args.address, chunk_size=args.chunk_size)
        bitmap = build_bitmap(args, settings)
        transport = build_transport(args, config)
        asyncio.run(print_bitmap(bitmap, transport, config, settings.feed_lines))
    except (LabelPrintError, ValueError, OSError) as exc:
        print(str(exc), file=sys.stderr)
        return 2
    print("Print complete!", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
