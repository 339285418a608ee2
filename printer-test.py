#!/usr/bin/env python3
"""
BLE Thermal Receipt Printer Connectivity Tester
Scans for printers, negotiates the write endpoint and prints a test receipt
"""

import asyncio
import logging
import sys

from bleprinter.logging_config import setup_logging
from bleprinter.printer import BleakDeviceSelector, OrderSummary, create_print_service
from bleprinter.printer.link import TransportUnavailableError
from bleprinter.printer.negotiator import PRINTER_SERVICE_UUIDS
from bleprinter.printer.order import LineItem


def prompt_choice(devices):
    """Let the user pick a printer from the scan results."""
    if not devices:
        print("✗ No printers found")
        return None

    for i, device in enumerate(devices, start=1):
        print(f"  {i}. {device}")
    answer = input(f"Select printer [1-{len(devices)}, blank to cancel]: ").strip()
    if not answer:
        return None
    try:
        return devices[int(answer) - 1]
    except (ValueError, IndexError):
        print("✗ Invalid selection")
        return None


def sample_order() -> OrderSummary:
    return OrderSummary(
        order_number="TEST-0001",
        date="Printer test",
        branch_name="PRINTER TEST",
        items=(LineItem(name="Test item", quantity=1, unit_price=1.00),),
        subtotal=1.00,
        total=1.00,
    )


async def scan(timeout: float) -> bool:
    """List printers advertising a known printer service."""
    print(f"Scanning for {timeout:.0f}s...")
    selector = BleakDeviceSelector(scan_timeout=timeout)
    try:
        devices = await selector.scan(PRINTER_SERVICE_UUIDS)
    except TransportUnavailableError as e:
        print(f"✗ {e}")
        return False
    if not devices:
        print("  No printers found")
        return False
    for device in devices:
        print(f"  Found: {device}")
    return True


async def connect(address, timeout: float, print_test: bool) -> bool:
    """Connect, report the negotiated endpoint and optionally print."""
    selector = BleakDeviceSelector(
        scan_timeout=timeout,
        preferred_address=address,
        chooser=None if address else prompt_choice,
    )
    service = create_print_service(selector=selector)
    manager = service.manager

    result = await manager.connect()
    if not result.success:
        print(f"✗ {result.error}")
        return False

    print(f"✓ Connected to {result.value.name} [{result.value.id}]")
    print(f"✓ Write endpoint: {manager.endpoint}")

    try:
        if print_test:
            printed = await service.print_receipt(sample_order())
            if not printed.success:
                print(f"✗ {printed.error}")
                return False
            print("✓ Test receipt sent")
        return True
    finally:
        await manager.disconnect()


def main():
    import argparse

    parser = argparse.ArgumentParser(
        description="BLE Thermal Receipt Printer Connectivity Tester",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python printer-test.py scan
  python printer-test.py connect
  python printer-test.py connect AA:BB:CC:DD:EE:FF --no-print
        """
    )

    parser.add_argument("--no-print", action="store_true",
                        help="Skip printing test receipt (connection test only)")
    parser.add_argument("--timeout", type=float, default=10.0,
                        help="Scan timeout in seconds (default: 10)")
    parser.add_argument("--verbose", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="mode", required=True)
    subparsers.add_parser("scan", help="List nearby printers")
    connect_parser = subparsers.add_parser("connect", help="Connect and print a test receipt")
    connect_parser.add_argument("address", nargs="?", help="Printer address (prompts if omitted)")

    args = parser.parse_args()

    setup_logging(log_level=logging.DEBUG if args.verbose else logging.WARNING)

    print("=" * 40)
    print("BLE Printer Connectivity Tester")
    print("=" * 40 + "\n")

    if args.mode == "scan":
        ok = asyncio.run(scan(args.timeout))
    else:
        ok = asyncio.run(connect(args.address, args.timeout, print_test=not args.no_print))

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
