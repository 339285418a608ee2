"""BLE link and device selection for thermal printers."""
import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple

from bleak import BleakClient, BleakScanner
from bleak.exc import BleakError

from bleprinter.logging_config import get_logger
from bleprinter.printer.errors import LinkError

logger = get_logger(__name__)

# Exceptions bleak surfaces for radio, adapter and GATT failures
BLE_ERRORS = (BleakError, OSError, asyncio.TimeoutError)


class TransportUnavailableError(LinkError):
    """Raised when the host has no usable Bluetooth adapter."""


@dataclass(frozen=True)
class GattCharacteristic:
    uuid: str
    handle: Optional[int] = None
    properties: Tuple[str, ...] = ()

    @property
    def writable(self) -> bool:
        """True unless the reported properties rule out writes."""
        if not self.properties:
            return True
        return "write" in self.properties or "write-without-response" in self.properties


@dataclass(frozen=True)
class GattService:
    uuid: str
    characteristics: Sequence[GattCharacteristic] = ()

    def get_characteristic(self, uuid: str) -> Optional[GattCharacteristic]:
        uuid = uuid.lower()
        for char in self.characteristics:
            if char.uuid.lower() == uuid:
                return char
        return None


@dataclass(frozen=True)
class WriteEndpoint:
    """The negotiated service/characteristic pair that accepts printer bytes."""
    service_uuid: str
    characteristic_uuid: str
    handle: Optional[int] = None

    def __str__(self):
        return f"{self.service_uuid}/{self.characteristic_uuid}"


class PrinterLink(ABC):
    """Abstract low-level link to one remote printer."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Stable identifier of the remote device."""

    @property
    @abstractmethod
    def name(self) -> Optional[str]:
        """Advertised name of the remote device, if any."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Check if the link is currently open."""

    @abstractmethod
    async def open(self) -> None:
        """Open (or reopen) the link. Raises LinkError on failure."""

    @abstractmethod
    async def close(self) -> None:
        """Close the link."""

    @abstractmethod
    async def get_services(self) -> List[GattService]:
        """Enumerate the primary services of the open link."""

    @abstractmethod
    async def write(self, endpoint: WriteEndpoint, data: bytes) -> None:
        """Write one payload to the endpoint. Raises LinkError on failure."""

    @abstractmethod
    def set_disconnect_callback(self, callback: Optional[Callable[["PrinterLink"], None]]) -> None:
        """Register the callback invoked when the remote side drops the link."""


class BleakLink(PrinterLink):
    """PrinterLink backed by a bleak GATT client."""

    def __init__(self, device: Any, name: Optional[str] = None):
        """Initialize link.

        Args:
            device: bleak BLEDevice or a device address string
            name: Advertised name (taken from the BLEDevice when omitted)
        """
        self._device = device
        self._address = device if isinstance(device, str) else device.address
        self._name = name if name is not None else getattr(device, "name", None)
        self._on_disconnect: Optional[Callable[[PrinterLink], None]] = None
        self._client = BleakClient(device, disconnected_callback=self._handle_disconnect)

    @property
    def address(self) -> str:
        return self._address

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def is_open(self) -> bool:
        return self._client.is_connected

    async def open(self) -> None:
        try:
            await self._client.connect()
        except BLE_ERRORS as e:
            raise LinkError(f"Failed to open link to {self._address}: {e}") from e

    async def close(self) -> None:
        try:
            await self._client.disconnect()
        except BLE_ERRORS as e:
            logger.warning("Error while closing link to %s: %s", self._address, e)

    async def get_services(self) -> List[GattService]:
        if not self._client.is_connected:
            raise LinkError("Not connected")
        try:
            collection = self._client.services
        except BLE_ERRORS as e:
            raise LinkError(f"Service discovery failed: {e}") from e

        services = []
        for service in collection:
            chars = tuple(
                GattCharacteristic(uuid=char.uuid, handle=char.handle,
                                   properties=tuple(char.properties))
                for char in service.characteristics
            )
            services.append(GattService(uuid=service.uuid, characteristics=chars))
        return services

    async def write(self, endpoint: WriteEndpoint, data: bytes) -> None:
        if not self._client.is_connected:
            raise LinkError("Not connected")
        target = endpoint.handle if endpoint.handle is not None else endpoint.characteristic_uuid
        try:
            await self._client.write_gatt_char(target, data, response=True)
        except BLE_ERRORS as e:
            raise LinkError(f"Failed to write to {endpoint}: {e}") from e

    def set_disconnect_callback(self, callback):
        self._on_disconnect = callback

    def _handle_disconnect(self, _client: BleakClient) -> None:
        if self._on_disconnect:
            self._on_disconnect(self)

    def __repr__(self):
        return f"BleakLink({self._name or 'unnamed'}@{self._address})"


@dataclass(frozen=True)
class DiscoveredDevice:
    """A printer found while scanning."""
    address: str
    name: Optional[str]
    rssi: int
    device: Any = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{self.name or 'Unknown'} [{self.address}] RSSI: {self.rssi} dB"


Chooser = Callable[[List[DiscoveredDevice]], Optional[DiscoveredDevice]]


class DeviceSelector(ABC):
    """Abstract device selection step of a connection."""

    @abstractmethod
    async def select(self, service_uuids: Sequence[str]) -> Optional[PrinterLink]:
        """Pick a device advertising one of ``service_uuids``.

        Returns:
            An unopened PrinterLink, or None if no device was selected.

        Raises:
            TransportUnavailableError: if the host has no Bluetooth capability.
        """


class BleakDeviceSelector(DeviceSelector):
    """Selects a printer by scanning with bleak.

    The ``chooser`` callback stands in for the user's choice; by default the
    preferred address wins, otherwise the strongest signal.
    """

    def __init__(self, scan_timeout: float = 10.0, preferred_address: Optional[str] = None,
                 chooser: Optional[Chooser] = None):
        self.scan_timeout = scan_timeout
        self.preferred_address = preferred_address
        self.chooser = chooser or self._default_choice

    async def scan(self, service_uuids: Sequence[str]) -> List[DiscoveredDevice]:
        """Scan for devices advertising any of the given services."""
        try:
            found = await BleakScanner.discover(
                timeout=self.scan_timeout,
                service_uuids=list(service_uuids),
                return_adv=True,
            )
        except BLE_ERRORS as e:
            raise TransportUnavailableError(f"Bluetooth is not available: {e}") from e

        devices = [
            DiscoveredDevice(address=device.address, name=device.name or adv.local_name,
                             rssi=adv.rssi, device=device)
            for device, adv in found.values()
        ]
        return sorted(devices, key=lambda d: d.rssi, reverse=True)

    async def select(self, service_uuids):
        devices = await self.scan(service_uuids)
        logger.info("Scan found %d candidate printer(s)", len(devices))
        choice = self.chooser(devices)
        if choice is None:
            return None
        return BleakLink(choice.device, name=choice.name)

    def _default_choice(self, devices: List[DiscoveredDevice]) -> Optional[DiscoveredDevice]:
        if self.preferred_address:
            wanted = self.preferred_address.lower()
            return next((d for d in devices if d.address.lower() == wanted), None)
        return devices[0] if devices else None
