"""Public entry point for printing receipts."""
import asyncio
from typing import Optional

from bleprinter.logging_config import get_logger
from bleprinter.printer.composer import ReceiptComposer
from bleprinter.printer.connection import ConnectionManager
from bleprinter.printer.errors import ErrorKind, Result
from bleprinter.printer.order import OrderSummary
from bleprinter.printer.transport import ChunkTransport

logger = get_logger(__name__)


class PrintService:
    """Ensures a live session, composes the receipt and sends it.

    Prints are serialized: the transport has no queue of its own and
    interleaved chunk streams would corrupt the printer's buffer.
    """

    def __init__(self, manager: ConnectionManager, composer: Optional[ReceiptComposer] = None,
                 transport: Optional[ChunkTransport] = None):
        self.manager = manager
        self.composer = composer or ReceiptComposer()
        self.transport = transport or ChunkTransport(manager)
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def print_receipt(self, order: OrderSummary) -> Result:
        async with self._lock:
            logger.info("Printing receipt for order %s", order.order_number)

            if self.manager.is_actively_connected():
                endpoint = self.manager.endpoint
            else:
                reconnected = await self.manager.reconnect()
                if not reconnected.success:
                    logger.error("Printer not connected: %s", reconnected.error)
                    return Result.fail(
                        ErrorKind.NOT_CONNECTED,
                        "Printer not connected. Please reconnect from the Printer page.",
                    )
                endpoint = reconnected.value

            data = self.composer.compose(order)
            result = await self.transport.write(endpoint, data)

            if result.success:
                logger.info("Receipt printed for order %s", order.order_number)
            else:
                logger.error("Failed to print order %s: %s", order.order_number, result.error)
            return result


def create_print_service(settings=None, store=None, selector=None, formatter=None) -> PrintService:
    """Factory function wiring a PrintService from PrinterSettings.

    Args:
        settings: PrinterSettings (defaults when omitted)
        store: DeviceStore for the persisted printer identity
        selector: DeviceSelector (a bleak scanner selector by default)
        formatter: Currency formatter ``(amount, currency_code) -> str``

    Returns:
        PrintService whose ``manager`` exposes the connection contract.
    """
    from bleprinter.config import PrinterSettings
    from bleprinter.printer.link import BleakDeviceSelector

    settings = settings or PrinterSettings()
    if selector is None:
        selector = BleakDeviceSelector(
            scan_timeout=settings.scan_timeout,
            preferred_address=settings.device_address,
        )
    manager = ConnectionManager(selector, store=store)
    transport = ChunkTransport(
        manager,
        chunk_size=settings.chunk_size,
        chunk_delay=settings.chunk_delay,
        attempts=settings.write_attempts,
        backoff_base=settings.backoff_base,
        max_reconnects=settings.max_reconnects,
    )
    composer = ReceiptComposer(formatter, width=settings.line_width, encoding=settings.encoding)
    return PrintService(manager, composer=composer, transport=transport)
