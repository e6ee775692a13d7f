"""Exceptions raised while querying the mouse battery."""

from typing import Optional, Sequence


class BatteryError(Exception):
    """Base class for every failure of a battery poll."""


class NoDeviceFound(BatteryError):
    """No HID interface matches the vendor/product id pair and interface index."""


class OpenFailed(BatteryError):
    """A matching interface was found but could not be opened."""


class WriteFailed(BatteryError):
    """Sending the battery request to the device failed."""


class ReadFailed(BatteryError):
    """Reading the battery response from the device failed."""


class InvalidResponse(BatteryError):
    """The device answered with a report the codec does not accept."""

    def __init__(self, reason: str, raw: Optional[Sequence[int]] = None):
        self.reason = reason
        self.raw = bytes(raw) if raw is not None else b""
        super().__init__(reason)

    def __str__(self) -> str:
        if not self.raw:
            return f"{self.reason} (no data)"
        payload_hex = " ".join(f"{b:02X}" for b in self.raw)
        return f"{self.reason} ({len(self.raw)}B: {payload_hex})"
