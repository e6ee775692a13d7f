"""
Battery report codec for the VXE Dragonfly R1 Pro Max mouse.

The mouse answers a vendor report (ID 0x08, command 0x04) with a fixed 17-byte
record holding the battery level, a charge flag and the cell voltage. Nothing
here touches the device; see `vxe_battery.session` for the transport.
"""

from dataclasses import asdict, dataclass
from typing import Sequence

from .errors import InvalidResponse

VENDOR_ID = 0x3554
PRODUCT_ID = 0xF58A  # wireless dongle
WIRED_PRODUCT_ID = 0xF58C
# Only this interface of the composite device answers the battery query.
TARGET_INTERFACE = 1

REPORT_ID = 0x08
BATTERY_COMMAND = 0x04
PACKET_SIZE = 17

# All 17 bytes of a well-formed report add up to this value (mod 256).
CHECKSUM_TARGET = 0x55

# Report ID, command, 14 bytes of padding, trailer. Captured from the vendor
# software; the trailer already satisfies the checksum rule.
BATTERY_REQUEST = bytes([REPORT_ID, BATTERY_COMMAND] + [0x00] * 14 + [0x49])

LEVEL_OFFSET = 6
CHARGE_OFFSET = 7
VOLTAGE_OFFSET = 8
CHECKSUM_OFFSET = 16


@dataclass(frozen=True)
class ParsedBattery:
    level: int
    charging: bool
    voltage_mv: int

    @property
    def status(self) -> str:
        return "Charging" if self.charging else "Discharging"

    @property
    def voltage_uv(self) -> int:
        return self.voltage_mv * 1000

    def as_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status
        return data

    def __str__(self) -> str:
        return f"{self.level}% {self.status} {self.voltage_mv} mV"


def format_bytes(buf: Sequence[int]) -> str:
    return " ".join(f"{b:02X}" for b in buf)


def compute_checksum(payload: Sequence[int]) -> int:
    """Trailer byte that brings the sum of the whole report to 0x55."""
    return (CHECKSUM_TARGET - sum(payload)) & 0xFF


def build_request() -> bytes:
    """Return the battery query report, trailer included."""
    return BATTERY_REQUEST


def parse_response(buffer: Sequence[int], verify_checksum: bool = False) -> ParsedBattery:
    """
    Decode a battery response report.

    Any deviation from the expected shape raises `InvalidResponse`; there is
    no partial decoding. The length check runs before any content check.
    The checksum is only compared when `verify_checksum` is set.
    """
    data = bytes(buffer)
    if len(data) != PACKET_SIZE:
        raise InvalidResponse("unexpected length", data)
    if data[0] != REPORT_ID:
        raise InvalidResponse("unexpected report id", data)
    if verify_checksum and data[CHECKSUM_OFFSET] != compute_checksum(data[:CHECKSUM_OFFSET]):
        raise InvalidResponse("checksum mismatch", data)

    voltage = (data[VOLTAGE_OFFSET] << 8) | data[VOLTAGE_OFFSET + 1]
    return ParsedBattery(
        level=data[LEVEL_OFFSET],
        charging=data[CHARGE_OFFSET] != 0,
        voltage_mv=voltage,
    )
