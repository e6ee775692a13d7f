"""
HID transport for the battery query: enumeration, open/close and the
write -> settle delay -> read exchange.
"""

import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

try:
    import hid  # type: ignore
except ImportError as exc:  # pragma: no cover - dependency check only
    print("This package needs the 'hidapi' package. Install it via 'pip install hidapi'.")
    raise SystemExit(1) from exc

from .codec import PACKET_SIZE, format_bytes
from .errors import NoDeviceFound, OpenFailed, ReadFailed, WriteFailed

logger = logging.getLogger(__name__)

# The mouse needs a moment to prepare its answer after the request.
SETTLE_DELAY = 0.05
READ_TIMEOUT_MS = 1000


@dataclass(frozen=True)
class DeviceCandidate:
    path: str
    vendor_id: int
    product_id: int
    interface_number: int = -1
    manufacturer: str = ""
    product: str = ""

    def __str__(self) -> str:
        name = f"{self.manufacturer} {self.product}".strip() or "unknown device"
        return (
            f"{name} VID:PID=0x{self.vendor_id:04X}:0x{self.product_id:04X} "
            f"interface={self.interface_number} path={self.path}"
        )


def _decode_path(raw_path: object) -> Optional[str]:
    if raw_path is None:
        return None
    if isinstance(raw_path, bytes):
        try:
            return raw_path.decode("utf-8")
        except UnicodeDecodeError:
            return raw_path.decode("latin-1")
    if isinstance(raw_path, str):
        return raw_path
    return None


def enumerate_devices(vendor_id: int, product_id: int) -> List[DeviceCandidate]:
    """List every HID interface exposed by the given VID/PID, in enumeration order."""
    devices: List[DeviceCandidate] = []
    for dev_info in hid.enumerate(vendor_id, product_id):
        path = _decode_path(dev_info.get("path"))
        if not path:
            continue
        interface_no = dev_info.get("interface_number")
        devices.append(
            DeviceCandidate(
                path=path,
                vendor_id=dev_info.get("vendor_id", vendor_id),
                product_id=dev_info.get("product_id", product_id),
                interface_number=interface_no if interface_no is not None else -1,
                manufacturer=dev_info.get("manufacturer_string") or "",
                product=dev_info.get("product_string") or "",
            )
        )
    return devices


def find_candidates(vendor_id: int, product_id: int, interface_number: int) -> List[DeviceCandidate]:
    """
    Return the interfaces of the VID/PID pair whose index is `interface_number`.

    Raises NoDeviceFound when nothing matches the id pair, or when the device
    is present but does not expose the requested interface.
    """
    devices = enumerate_devices(vendor_id, product_id)
    if not devices:
        raise NoDeviceFound(f"No HID devices found with VID=0x{vendor_id:04X} PID=0x{product_id:04X}.")

    logger.info(
        "found %d HID interface(s) for %s %s",
        len(devices),
        devices[0].manufacturer or "unknown",
        devices[0].product or "device",
    )
    matches = [dev for dev in devices if dev.interface_number == interface_number]
    if not matches:
        raise NoDeviceFound(
            f"VID=0x{vendor_id:04X} PID=0x{product_id:04X} has no interface #{interface_number}."
        )
    return matches


class DeviceSession:
    """An open handle on one HID interface, used for a single battery exchange."""

    def __init__(
        self,
        candidate: DeviceCandidate,
        settle_delay: float = SETTLE_DELAY,
        read_timeout_ms: int = READ_TIMEOUT_MS,
    ):
        self.candidate = candidate
        self.settle_delay = settle_delay
        self.read_timeout_ms = read_timeout_ms
        self._dev = None

    @property
    def is_open(self) -> bool:
        return self._dev is not None

    def open(self) -> "DeviceSession":
        if self._dev is not None:
            return self
        logger.info("opening device at %s", self.candidate.path)
        dev = hid.device()
        try:
            dev.open_path(self.candidate.path.encode("utf-8"))
        except (OSError, ValueError) as exc:
            raise OpenFailed(f"Unable to open {self.candidate.path}: {exc}") from exc
        self._dev = dev
        return self

    def close(self) -> None:
        if self._dev is None:
            return
        dev, self._dev = self._dev, None
        try:
            dev.close()
        except OSError as exc:
            logger.warning("error closing %s: %s", self.candidate.path, exc)

    def __enter__(self) -> "DeviceSession":
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _handle(self):
        if self._dev is None:
            raise OpenFailed(f"Device {self.candidate.path} is not open.")
        return self._dev

    def write(self, data: Sequence[int]) -> int:
        dev = self._handle()
        try:
            written = dev.write(bytes(data))
        except (OSError, ValueError) as exc:
            raise WriteFailed(f"Failed to send request: {exc}") from exc
        if written is None or written < 0:
            raise WriteFailed(f"Failed to send request {format_bytes(data)} (result {written}).")
        logger.debug("sent %d bytes: %s", written, format_bytes(data))
        return written

    def read(self, size: int = PACKET_SIZE) -> bytes:
        dev = self._handle()
        try:
            data = dev.read(size, self.read_timeout_ms)
        except (OSError, ValueError) as exc:
            raise ReadFailed(f"Failed to read response: {exc}") from exc
        data = bytes(data or b"")
        logger.debug("received %d bytes: %s", len(data), format_bytes(data))
        return data

    def exchange(self, request: Sequence[int], response_size: int = PACKET_SIZE) -> bytes:
        """Write `request`, wait the settle delay, then read one report. No retries."""
        self.write(request)
        if self.settle_delay > 0:
            time.sleep(self.settle_delay)
        return self.read(response_size)
