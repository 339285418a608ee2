"""Locates the writable characteristic of a connected printer.

Consumer thermal printers expose inconsistent GATT profiles, so negotiation
tries the known printer profiles first and then falls back to the first
characteristic found. The order is a plain list of strategies.
"""
from typing import Optional, Sequence

from bleprinter.logging_config import get_logger
from bleprinter.printer.errors import ErrorKind, Result
from bleprinter.printer.link import PrinterLink, WriteEndpoint

logger = get_logger(__name__)

# Generic Access (0x1800) and Generic Attribute (0x1801)
STANDARD_SERVICE_UUIDS = (
    "00001800-0000-1000-8000-00805f9b34fb",
    "00001801-0000-1000-8000-00805f9b34fb",
)


class KnownProfile:
    """Strategy for one known service/characteristic pair."""

    def __init__(self, name: str, service_uuid: str, characteristic_uuid: str):
        self.name = name
        self.service_uuid = service_uuid.lower()
        self.characteristic_uuid = characteristic_uuid.lower()

    async def resolve(self, link: PrinterLink) -> Result:
        services = await link.get_services()
        service = next((s for s in services if s.uuid.lower() == self.service_uuid), None)
        if service is None:
            return Result.fail(ErrorKind.NO_WRITABLE_ENDPOINT,
                               f"Service {self.service_uuid} not found")
        char = service.get_characteristic(self.characteristic_uuid)
        if char is None:
            return Result.fail(ErrorKind.NO_WRITABLE_ENDPOINT,
                               f"Characteristic {self.characteristic_uuid} not found")
        return Result.ok(WriteEndpoint(service.uuid, char.uuid, char.handle))

    def __repr__(self):
        return f"KnownProfile({self.name})"


class FirstAvailable:
    """Fallback strategy: first writable characteristic in service order.

    The standard Generic Access and Generic Attribute services are skipped.
    """

    name = "fallback"

    async def resolve(self, link: PrinterLink) -> Result:
        services = await link.get_services()
        if not services:
            return Result.fail(ErrorKind.NO_WRITABLE_ENDPOINT, "No services found on device")
        for service in services:
            if service.uuid.lower() in STANDARD_SERVICE_UUIDS:
                continue
            char = next((c for c in service.characteristics if c.writable), None)
            if char is not None:
                return Result.ok(WriteEndpoint(service.uuid, char.uuid, char.handle))
        return Result.fail(ErrorKind.NO_WRITABLE_ENDPOINT, "No writable characteristics found")

    def __repr__(self):
        return "FirstAvailable()"


PROFILE_A = KnownProfile(
    "profile-a",
    "000018f0-0000-1000-8000-00805f9b34fb",
    "00002af1-0000-1000-8000-00805f9b34fb",
)
PROFILE_B = KnownProfile(
    "profile-b",
    "e7810a71-73ae-499d-8c15-faa9aef0c3f2",
    "bef8d6c9-9c21-4c9e-b632-bd58c1009f9f",
)

DEFAULT_STRATEGIES = (PROFILE_A, PROFILE_B, FirstAvailable())

# Services offered to device selection
PRINTER_SERVICE_UUIDS = (PROFILE_A.service_uuid, PROFILE_B.service_uuid)


class Negotiator:
    """Runs negotiation strategies in order and returns the first endpoint."""

    def __init__(self, strategies: Optional[Sequence] = None):
        self.strategies = tuple(strategies) if strategies is not None else DEFAULT_STRATEGIES

    async def negotiate(self, link: PrinterLink) -> Result:
        last_error = None
        for strategy in self.strategies:
            try:
                result = await strategy.resolve(link)
            except Exception as e:
                logger.debug("Strategy %r raised: %s", strategy, e)
                last_error = str(e)
                continue

            if result.success:
                logger.info("Negotiated endpoint %s via %s", result.value, strategy.name)
                return result
            logger.debug("Strategy %r failed: %s", strategy, result.error)
            last_error = result.error.message

        message = "No writable characteristic found"
        if last_error:
            message = f"{message} ({last_error})"
        return Result.fail(ErrorKind.NO_WRITABLE_ENDPOINT, message)
