"""BLE thermal printer client: connection, receipt composition and transport."""
from bleprinter.printer.composer import ReceiptComposer
from bleprinter.printer.connection import ConnectionManager, ConnectionState
from bleprinter.printer.currency import format_currency
from bleprinter.printer.errors import ErrorKind, LinkError, PrinterError, Result
from bleprinter.printer.link import (
    BleakDeviceSelector,
    BleakLink,
    DeviceSelector,
    PrinterLink,
    WriteEndpoint,
)
from bleprinter.printer.negotiator import Negotiator
from bleprinter.printer.order import OrderSummary, order_summary_from_payload
from bleprinter.printer.runtime import PrinterRuntime
from bleprinter.printer.service import PrintService, create_print_service
from bleprinter.printer.storage import (
    MemoryDeviceStore,
    PrinterHandle,
    SettingsDeviceStore,
)
from bleprinter.printer.transport import ChunkTransport, split_chunks

__all__ = [
    "ReceiptComposer",
    "ConnectionManager",
    "ConnectionState",
    "format_currency",
    "ErrorKind",
    "LinkError",
    "PrinterError",
    "Result",
    "BleakDeviceSelector",
    "BleakLink",
    "DeviceSelector",
    "PrinterLink",
    "WriteEndpoint",
    "Negotiator",
    "OrderSummary",
    "order_summary_from_payload",
    "PrinterRuntime",
    "PrintService",
    "create_print_service",
    "MemoryDeviceStore",
    "PrinterHandle",
    "SettingsDeviceStore",
    "ChunkTransport",
    "split_chunks",
]
