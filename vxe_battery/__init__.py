"""Battery reader for the VXE Dragonfly R1 Pro Max wireless mouse."""

from .codec import (
    BATTERY_REQUEST,
    PACKET_SIZE,
    PRODUCT_ID,
    REPORT_ID,
    TARGET_INTERFACE,
    VENDOR_ID,
    WIRED_PRODUCT_ID,
    ParsedBattery,
    build_request,
    compute_checksum,
    parse_response,
)
from .errors import BatteryError, InvalidResponse, NoDeviceFound, OpenFailed, ReadFailed, WriteFailed

__version__ = "0.1.0"
