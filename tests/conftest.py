from dataclasses import dataclass
from dataclasses import field
from typing import List

import pytest

SAMPLE_RESPONSE = bytes(
    [0x08, 0x04, 0x00, 0x00, 0x00, 0x02, 0x41, 0x00, 0x0F, 0x83, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x74]
)


@dataclass
class FakeHidDevice:
    """Stands in for hid.device(); answers every read from a queue of responses."""

    responses: List[bytes] = field(default_factory=list)
    fail_open: bool = False
    fail_write: bool = False
    write_result: int = None
    fail_read: bool = False
    opened_path: bytes = None
    closed: int = 0
    written: List[bytes] = field(default_factory=list)
    reads: List[tuple] = field(default_factory=list)

    def open_path(self, path):
        if self.fail_open:
            raise OSError("open failed")
        self.opened_path = path

    def write(self, data):
        if self.fail_write:
            raise OSError("write error")
        self.written.append(bytes(data))
        return len(data) if self.write_result is None else self.write_result

    def read(self, max_length, timeout_ms=0):
        self.reads.append((max_length, timeout_ms))
        if self.fail_read:
            raise OSError("read error")
        if not self.responses:
            return []
        return list(self.responses.pop(0))

    def close(self):
        self.closed += 1


class FakeHid:
    """Minimal replacement for the hidapi module: enumerate() and device()."""

    def __init__(self):
        self.infos = []
        self.devices = []
        self.queued = []

    def add_interface(self, interface_number, path=None, vendor_id=0x3554, product_id=0xF58A):
        self.infos.append(
            {
                "path": path or f"/dev/hidraw{len(self.infos)}".encode(),
                "vendor_id": vendor_id,
                "product_id": product_id,
                "interface_number": interface_number,
                "manufacturer_string": "VXE",
                "product_string": "Dragonfly R1 Pro Max",
            }
        )

    def queue_device(self, device):
        self.queued.append(device)
        return device

    def enumerate(self, vendor_id=0, product_id=0):
        return [
            info
            for info in self.infos
            if (not vendor_id or info["vendor_id"] == vendor_id) and (not product_id or info["product_id"] == product_id)
        ]

    def device(self):
        dev = self.queued.pop(0) if self.queued else FakeHidDevice()
        self.devices.append(dev)
        return dev


@pytest.fixture
def sample_response():
    return SAMPLE_RESPONSE


@pytest.fixture
def fake_hid(mocker):
    fake = FakeHid()
    mocker.patch("vxe_battery.session.hid", fake)
    mocker.patch("vxe_battery.session.time.sleep")
    yield fake
