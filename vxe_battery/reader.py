"""
One battery poll cycle: pick an interface, run the exchange, decode.
"""

import enum
import logging
import time
from typing import Callable, List, Optional

from .codec import PRODUCT_ID, TARGET_INTERFACE, VENDOR_ID, build_request, format_bytes, parse_response
from .errors import BatteryError, InvalidResponse, NoDeviceFound
from .session import READ_TIMEOUT_MS, SETTLE_DELAY, DeviceCandidate, DeviceSession, find_candidates

logger = logging.getLogger(__name__)

# Interval used by the periodic monitor when no other value is given.
POLL_INTERVAL = 120.0


class SelectionPolicy(enum.Enum):
    FIRST = "first"  # first matching interface, tried once
    ALL = "all"  # every matching interface until one answers


def query_battery(session: DeviceSession, verify_checksum: bool = False):
    """Send the battery request over an open session and decode the answer."""
    response = session.exchange(build_request())
    try:
        return parse_response(response, verify_checksum=verify_checksum)
    except InvalidResponse:
        logger.debug("rejected response: %s", format_bytes(response))
        raise


def _candidates(vendor_id, product_id, interface_number, path) -> List[DeviceCandidate]:
    if path:
        return [DeviceCandidate(path=path, vendor_id=vendor_id, product_id=product_id, interface_number=interface_number)]
    return find_candidates(vendor_id, product_id, interface_number)


def read_battery(
    vendor_id: int = VENDOR_ID,
    product_id: int = PRODUCT_ID,
    interface_number: int = TARGET_INTERFACE,
    policy: SelectionPolicy = SelectionPolicy.FIRST,
    settle_delay: float = SETTLE_DELAY,
    read_timeout_ms: int = READ_TIMEOUT_MS,
    verify_checksum: bool = False,
    path: Optional[str] = None,
):
    """
    Run a full poll cycle and return the decoded reading.

    With SelectionPolicy.FIRST only the first matching interface is tried,
    whatever the outcome. With SelectionPolicy.ALL the next candidate is tried
    after a failure and the last error is raised if none answers. Each tried
    session is closed before moving on.
    """
    candidates = _candidates(vendor_id, product_id, interface_number, path)
    if policy is SelectionPolicy.FIRST:
        candidates = candidates[:1]

    last_error: Optional[BatteryError] = None
    for candidate in candidates:
        session = DeviceSession(candidate, settle_delay=settle_delay, read_timeout_ms=read_timeout_ms)
        try:
            with session:
                battery = query_battery(session, verify_checksum=verify_checksum)
        except BatteryError as exc:
            logger.info("battery query on %s failed: %s", candidate.path, exc)
            last_error = exc
            continue
        logger.info(
            "battery level %d%%, %s, %d mV", battery.level, battery.status.lower(), battery.voltage_mv
        )
        return battery

    if last_error is None:
        raise NoDeviceFound("No candidate interface to query.")
    raise last_error


def monitor_battery(interval: float, callback: Callable, **read_kwargs) -> None:
    """
    Poll every `interval` seconds until interrupted.

    Failed cycles are logged and the loop waits for the next interval.
    """
    logger.info("polling battery every %s second(s)", interval)
    try:
        while True:
            try:
                callback(read_battery(**read_kwargs))
            except BatteryError as exc:
                logger.error("battery read failed: %s", exc)
            time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("polling stopped by user")
