"""Shared fixtures and BLE test doubles."""

import pytest

from bleprinter.printer.errors import LinkError
from bleprinter.printer.link import DeviceSelector, GattCharacteristic, GattService, PrinterLink
from bleprinter.printer.negotiator import PROFILE_A, PROFILE_B
from bleprinter.printer.order import LineItem, OrderSummary

DROP = "drop"


class FakeLink(PrinterLink):
    """In-memory printer link.

    ``write_plan`` is consumed one entry per write: None succeeds, an
    exception is raised, and DROP closes the link (firing the disconnect
    callback) before raising LinkError. An empty plan always succeeds.
    """

    def __init__(self, address="AA:BB:CC:DD:EE:FF", name="PT-210", services=None):
        self._address = address
        self._name = name
        self.services = [] if services is None else list(services)
        self.services_errors = 0
        self.open_failures = 0
        self.write_plan = []
        self.writes = []
        self.open_calls = 0
        self.close_calls = 0
        self._open = False
        self._callback = None

    @property
    def address(self):
        return self._address

    @property
    def name(self):
        return self._name

    @property
    def is_open(self):
        return self._open

    async def open(self):
        self.open_calls += 1
        if self.open_failures > 0:
            self.open_failures -= 1
            raise LinkError("open failed")
        self._open = True

    async def close(self):
        self.close_calls += 1
        self._open = False

    async def get_services(self):
        if self.services_errors > 0:
            self.services_errors -= 1
            raise LinkError("discovery failed")
        return list(self.services)

    async def write(self, endpoint, data):
        if not self._open:
            raise LinkError("Not connected")
        step = self.write_plan.pop(0) if self.write_plan else None
        if step == DROP:
            self.simulate_drop()
            raise LinkError("link lost")
        if step is not None:
            raise step
        self.writes.append(bytes(data))

    def set_disconnect_callback(self, callback):
        self._callback = callback

    def simulate_drop(self):
        self._open = False
        if self._callback:
            self._callback(self)

    @property
    def written(self):
        return b"".join(self.writes)


class FakeSelector(DeviceSelector):
    """Selector returning a fixed link (or raising a fixed error)."""

    def __init__(self, link=None, error=None):
        self.link = link
        self.error = error
        self.requested = []

    async def select(self, service_uuids):
        self.requested.append(tuple(service_uuids))
        if self.error:
            raise self.error
        return self.link


class SleepRecorder:
    """Replacement for asyncio.sleep that records delays."""

    def __init__(self):
        self.calls = []

    async def __call__(self, delay):
        self.calls.append(delay)


def profile_a_service():
    return GattService(PROFILE_A.service_uuid,
                       (GattCharacteristic(PROFILE_A.characteristic_uuid, 42),))


def profile_b_service():
    return GattService(PROFILE_B.service_uuid,
                       (GattCharacteristic(PROFILE_B.characteristic_uuid, 7),))


@pytest.fixture
def link():
    return FakeLink(services=[profile_a_service()])


@pytest.fixture
def selector(link):
    return FakeSelector(link)


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def usd_order():
    return OrderSummary(
        order_number="A-1001",
        date="Jan 15, 2025 12:30 PM",
        currency="USD",
        items=(
            LineItem(name="Burger", quantity=1, unit_price=12.00),
            LineItem(name="Fries", quantity=2, unit_price=4.00),
        ),
        subtotal=20.00,
        tax=2.00,
        total=22.00,
        branch_name="Main Street",
    )
