"""Connection lifecycle for a BLE thermal printer.

State machine::

    DISCONNECTED --connect()--> CONNECTING --ok--> CONNECTED
    CONNECTED --disconnect() / unexpected drop--> DISCONNECTED
    CONNECTED | DISCONNECTED --reconnect()--> RECONNECTING --ok--> CONNECTED
    RECONNECTING --failure--> DISCONNECTED

CONNECTING and RECONNECTING never overlap: connect, reconnect and disconnect
are serialized on one lock.
"""
import asyncio
from enum import Enum
from typing import Callable, List, Optional, Sequence

from bleprinter.logging_config import get_logger
from bleprinter.printer.errors import ErrorKind, LinkError, Result
from bleprinter.printer.link import DeviceSelector, PrinterLink, TransportUnavailableError, WriteEndpoint
from bleprinter.printer.negotiator import PRINTER_SERVICE_UUIDS, Negotiator
from bleprinter.printer.storage import DeviceStore, MemoryDeviceStore, PrinterHandle

logger = get_logger(__name__)

DEFAULT_DEVICE_NAME = "Bluetooth Printer"
UNKNOWN_DEVICE_NAME = "Unknown Device"

ConnectionListener = Callable[[bool], None]


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


class ConnectionManager:
    """Owns the printer session, its state and the connection listeners.

    The persisted identity (``store``) and the active session (link plus
    endpoint) are independent: a saved device never makes the manager
    connected.
    """

    def __init__(self, selector: DeviceSelector, negotiator: Optional[Negotiator] = None,
                 store: Optional[DeviceStore] = None,
                 service_uuids: Sequence[str] = PRINTER_SERVICE_UUIDS):
        self.selector = selector
        self.negotiator = negotiator or Negotiator()
        self.store = store or MemoryDeviceStore()
        self.service_uuids = tuple(service_uuids)

        self._state = ConnectionState.DISCONNECTED
        self._link: Optional[PrinterLink] = None
        self._endpoint: Optional[WriteEndpoint] = None
        self._listeners: List[ConnectionListener] = []
        self._connected = False
        self._lock = asyncio.Lock()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def link(self) -> Optional[PrinterLink]:
        return self._link

    @property
    def endpoint(self) -> Optional[WriteEndpoint]:
        return self._endpoint

    # Public contract

    async def connect(self) -> Result:
        """Select a printer, open the link and negotiate the write endpoint.

        Returns:
            Result holding the PrinterHandle on success.
        """
        async with self._lock:
            return await self._connect()

    async def disconnect(self) -> None:
        """Close the session and forget the saved device. Idempotent."""
        async with self._lock:
            link = self._link
            self._link = None
            self._endpoint = None
            if link is not None:
                link.set_disconnect_callback(None)
                if link.is_open:
                    await link.close()
            self.store.clear()
            self._set_state(ConnectionState.DISCONNECTED)

    async def reconnect(self) -> Result:
        """Reopen the current device's link and renegotiate.

        Returns:
            Result holding the new WriteEndpoint on success.
        """
        async with self._lock:
            return await self._reconnect()

    def is_actively_connected(self) -> bool:
        return (
            self._link is not None
            and self._endpoint is not None
            and self._link.is_open
        )

    def get_device_name(self) -> str:
        if self._link is not None:
            return self._link.name or UNKNOWN_DEVICE_NAME
        return UNKNOWN_DEVICE_NAME

    def has_saved_device(self) -> bool:
        return self.store.load() is not None

    def get_saved_device_name(self) -> Optional[str]:
        handle = self.store.load()
        return handle.name if handle else None

    def on_connection_change(self, listener: ConnectionListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def off_connection_change(self, listener: ConnectionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # Transitions

    async def _connect(self) -> Result:
        if self._link is not None:
            await self._drop_session()

        self._set_state(ConnectionState.CONNECTING)
        try:
            link = await self.selector.select(self.service_uuids)
        except TransportUnavailableError as e:
            return self._fail(ErrorKind.TRANSPORT_UNAVAILABLE, str(e))

        if link is None:
            return self._fail(ErrorKind.NO_DEVICE_SELECTED, "No printer selected")

        try:
            await link.open()
        except LinkError as e:
            return self._fail(ErrorKind.LINK_OPEN_FAILED, str(e))

        result = await self.negotiator.negotiate(link)
        if not result.success:
            await link.close()
            return self._fail(result.error.kind, result.error.message)

        self._link = link
        self._endpoint = result.value
        link.set_disconnect_callback(self._handle_drop)

        handle = PrinterHandle(id=link.address, name=link.name or DEFAULT_DEVICE_NAME)
        self.store.save(handle)
        self._set_state(ConnectionState.CONNECTED)
        logger.info("Connected to %s (%s)", handle.name, handle.id)
        return Result.ok(handle)

    async def _reconnect(self) -> Result:
        if self.is_actively_connected():
            return Result.ok(self._endpoint)

        link = self._link
        if link is None:
            return Result.fail(ErrorKind.NOT_CONNECTED, "Printer not connected")

        self._endpoint = None
        self._set_state(ConnectionState.RECONNECTING)
        logger.info("Reconnecting to %s", link.address)
        try:
            if not link.is_open:
                await link.open()
        except LinkError as e:
            self._set_state(ConnectionState.DISCONNECTED)
            logger.warning("Reconnect failed: %s", e)
            return Result.fail(ErrorKind.LINK_OPEN_FAILED, str(e))

        result = await self.negotiator.negotiate(link)
        if not result.success:
            await link.close()
            self._set_state(ConnectionState.DISCONNECTED)
            logger.warning("Reconnect failed: %s", result.error)
            return result

        self._endpoint = result.value
        self._set_state(ConnectionState.CONNECTED)
        return Result.ok(self._endpoint)

    async def _drop_session(self) -> None:
        link, self._link, self._endpoint = self._link, None, None
        link.set_disconnect_callback(None)
        if link.is_open:
            await link.close()

    def _handle_drop(self, link: PrinterLink) -> None:
        """Called by the link when the remote side goes away."""
        if link is not self._link:
            return
        if self._state in (ConnectionState.CONNECTING, ConnectionState.RECONNECTING):
            return
        logger.warning("Printer %s disconnected unexpectedly", link.address)
        self._endpoint = None
        self._set_state(ConnectionState.DISCONNECTED)

    def _fail(self, kind: ErrorKind, message: str) -> Result:
        logger.warning("Connect failed (%s): %s", kind.value, message)
        self._link = None
        self._endpoint = None
        self._set_state(ConnectionState.DISCONNECTED)
        return Result.fail(kind, message)

    def _set_state(self, state: ConnectionState) -> None:
        if state is not self._state:
            logger.debug("Connection state %s -> %s", self._state.value, state.value)
        self._state = state

        if state in (ConnectionState.CONNECTED, ConnectionState.DISCONNECTED):
            connected = state is ConnectionState.CONNECTED
            if connected != self._connected:
                self._connected = connected
                self._notify(connected)

    def _notify(self, connected: bool) -> None:
        for listener in list(self._listeners):
            try:
                listener(connected)
            except Exception:
                logger.exception("Connection listener %r failed", listener)
