"""
Read the VXE Dragonfly R1 Pro Max battery without launching vendor software.

The tool opens HID interface #1 of the wireless dongle, writes the vendor
battery report (ID 0x08, command 0x04), waits for the mouse to settle, reads
the 17-byte answer and prints level, charge state and voltage.
"""

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from .codec import PRODUCT_ID, TARGET_INTERFACE, VENDOR_ID
from .errors import BatteryError
from .reader import POLL_INTERVAL, SelectionPolicy, monitor_battery, read_battery
from .session import READ_TIMEOUT_MS, SETTLE_DELAY, enumerate_devices

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s,%(msecs)03d %(levelname)8s %(name)s: %(message)s"


def _to_int(value: str) -> int:
    """Parse decimal or hexadecimal CLI integers (0x1234 / 1234 / 1234h)."""
    cleaned = value.strip().lower()
    base = 10
    if cleaned.startswith("0x"):
        cleaned = cleaned[2:]
        base = 16
    elif cleaned.endswith("h"):
        cleaned = cleaned[:-1]
        base = 16
    try:
        return int(cleaned, base)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="read-vxe-battery",
        description="Read VXE Dragonfly R1 Pro Max battery level via its vendor HID report.",
    )
    parser.add_argument("--vid", type=_to_int, default=VENDOR_ID, help="USB vendor ID of the target device.")
    parser.add_argument(
        "--pid",
        type=_to_int,
        default=PRODUCT_ID,
        help="USB product ID of the target device (0xf58a dongle, 0xf58c wired).",
    )
    parser.add_argument(
        "--interface",
        type=_to_int,
        default=TARGET_INTERFACE,
        help="HID interface number that answers the battery query.",
    )
    parser.add_argument(
        "--path",
        default=None,
        help="Raw HID path string. Skips enumeration when given.",
    )
    parser.add_argument(
        "--try-all",
        action="store_true",
        help="Try every matching interface instead of only the first one.",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=SETTLE_DELAY,
        help="Delay in seconds between the request and the read.",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=READ_TIMEOUT_MS,
        help="Read timeout in milliseconds.",
    )
    parser.add_argument(
        "--verify-checksum",
        action="store_true",
        help="Reject responses whose trailer byte does not match the checksum.",
    )
    parser.add_argument(
        "--poll",
        type=float,
        nargs="?",
        const=POLL_INTERVAL,
        default=0.0,
        help=f"Polling interval in seconds (default {POLL_INTERVAL:g} when given without a value; "
        "omit for a single read).",
    )
    parser.add_argument("--json", action="store_true", help="Print readings as JSON objects.")
    parser.add_argument(
        "--list",
        action="store_true",
        help="List the HID interfaces of the device and exit.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress error messages; only exit code indicates failure.",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="count",
        default=0,
        help="Print logging messages (may be repeated for extra verbosity).",
    )

    args = parser.parse_args(argv)
    if args.delay < 0:
        parser.error("--delay cannot be negative.")
    if args.poll < 0:
        parser.error("--poll cannot be negative.")
    return args


def setup_logging(debug: int, quiet: bool) -> None:
    log_level = logging.WARNING - 10 * debug
    if quiet:
        log_level = logging.CRITICAL
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger("")
    root.addHandler(handler)
    root.setLevel(max(log_level, logging.DEBUG))


def list_devices(vid: int, pid: int) -> None:
    devices = enumerate_devices(vid, pid)
    if not devices:
        print(f"No HID devices found with VID=0x{vid:04X} PID=0x{pid:04X}.")
        return
    print(f"Found {len(devices)} HID interface(s):")
    for idx, dev in enumerate(devices, start=1):
        print(f"[{idx:02d}] {dev}")


def _printer(as_json: bool):
    def _print(battery) -> None:
        if as_json:
            print(json.dumps(battery.as_dict()), flush=True)
        else:
            print(battery, flush=True)

    return _print


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.debug, args.quiet)

    if args.list:
        list_devices(args.vid, args.pid)
        return 0

    read_kwargs = dict(
        vendor_id=args.vid,
        product_id=args.pid,
        interface_number=args.interface,
        policy=SelectionPolicy.ALL if args.try_all else SelectionPolicy.FIRST,
        settle_delay=args.delay,
        read_timeout_ms=args.timeout,
        verify_checksum=args.verify_checksum,
        path=args.path,
    )
    output = _printer(args.json)

    if args.poll > 0:
        monitor_battery(args.poll, output, **read_kwargs)
        return 0

    try:
        battery = read_battery(**read_kwargs)
    except BatteryError as exc:
        logger.error("Battery read failed: %s", exc)
        return 1
    output(battery)
    return 0


if __name__ == "__main__":
    sys.exit(main())
