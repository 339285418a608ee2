"""Receipt layout for order summaries."""
from typing import List, Optional

from bleprinter.printer.currency import CurrencyFormatter, currency_formatter
from bleprinter.printer.escpos import ESCPOSBuilder, justify
from bleprinter.printer.order import OrderSummary

DEFAULT_HEADER = "RESTAURANT"
FOOTER_LINES = ("Thank you for your order!", "Please come again")


class PreviewBuilder:
    """Plain-text stand-in for ESCPOSBuilder.

    Supports the same calls as the receipt layout uses; print modes are
    dropped and centering is applied to the text.
    """

    def __init__(self, width: int = 32):
        self.width = width
        self._lines: List[str] = []
        self._alignment = "left"
        self._current = ""

    def text(self, content: str) -> "PreviewBuilder":
        self._current += content
        return self

    def textln(self, content: str = "") -> "PreviewBuilder":
        self._current += content
        self._lines.append(self._align(self._current))
        self._current = ""
        return self

    def newline(self, count: int = 1) -> "PreviewBuilder":
        for _ in range(count):
            self.textln()
        return self

    def line(self, char: str = "-") -> "PreviewBuilder":
        return self.textln(char * self.width)

    def columns(self, left: str, right: str) -> "PreviewBuilder":
        return self.textln(justify(left, right, self.width))

    def align_left(self) -> "PreviewBuilder":
        self._alignment = "left"
        return self

    def align_center(self) -> "PreviewBuilder":
        self._alignment = "center"
        return self

    def mode(self, flags: int) -> "PreviewBuilder":
        return self

    def bold(self, on: bool = True) -> "PreviewBuilder":
        return self

    def large(self, on: bool = True) -> "PreviewBuilder":
        return self

    def tall(self, on: bool = True) -> "PreviewBuilder":
        return self

    def normal(self) -> "PreviewBuilder":
        return self

    def cut(self, partial: bool = False) -> "PreviewBuilder":
        self._lines.append("--- CUT ---")
        return self

    def build(self) -> str:
        return "\n".join(self._lines)

    def _align(self, text: str) -> str:
        if self._alignment == "center" and text:
            return text.center(self.width).rstrip()
        return text


class ReceiptComposer:
    """Turns an OrderSummary into ESC/POS bytes.

    Money is always rendered through ``formatter(amount, currency_code)``;
    the composer never hardcodes a currency symbol and never recomputes the
    totals it is given.
    """

    def __init__(self, formatter: Optional[CurrencyFormatter] = None, width: int = 32,
                 encoding: str = "cp437"):
        self.formatter = formatter or currency_formatter(encoding)
        self.width = width
        self.encoding = encoding

    def compose(self, order: OrderSummary) -> bytes:
        """Render the receipt to printer bytes."""
        builder = ESCPOSBuilder(width=self.width, encoding=self.encoding)
        self._layout(order, builder)
        return builder.build()

    def preview(self, order: OrderSummary) -> str:
        """Render the receipt as plain text."""
        builder = PreviewBuilder(width=self.width)
        self._layout(order, builder)
        return builder.build()

    def _layout(self, order: OrderSummary, b) -> None:
        def money(amount):
            return self.formatter(amount, order.currency)

        # Header
        b.align_center()
        b.large().textln(order.branch_name or DEFAULT_HEADER).normal()
        b.line("=")

        # Order metadata
        b.align_left()
        b.bold().textln(f"Order: {order.order_number}").bold(False)
        b.textln(f"Date: {order.date}")
        if order.order_type:
            b.textln(f"Type: {order.order_type}")
        if order.location_name:
            b.textln(f"Location: {order.location_name}")
        b.line("=")
        b.newline()

        # Items
        b.textln("ITEMS:")
        b.line("-")
        for item in order.items:
            b.columns(f"{item.quantity}x {item.name}", money(item.unit_price))
            for modifier in item.modifiers:
                label = f"  + {modifier.name}"
                if modifier.quantity > 1:
                    label += f" (x{modifier.quantity})"
                b.columns(label, money(modifier.price * modifier.quantity))
            for custom in item.customizations:
                b.textln(f"  * {custom.name}: {custom.option}")

        # Totals
        b.line("=")
        b.columns("Subtotal:", money(order.subtotal))
        if order.delivery_charges > 0:
            b.columns("Delivery:", money(order.delivery_charges))
        if order.service_charges > 0:
            b.columns("Service:", money(order.service_charges))
        if order.tax > 0:
            b.columns("Tax:", money(order.tax))
        if order.tip > 0:
            b.columns("Tip:", money(order.tip))
        if order.discount > 0:
            b.columns("Discount:", "-" + money(order.discount))
        b.line("-")
        b.tall().columns("TOTAL:", money(order.total)).normal()
        b.line("=")

        if order.allergens:
            b.bold().textln("ALLERGENS:").bold(False)
            b.textln(", ".join(order.allergens))
            b.line("-")

        if order.special_instruction and order.special_instruction.strip():
            b.bold().textln("SPECIAL INSTRUCTIONS:").bold(False)
            b.textln(order.special_instruction)
            b.line("-")

        # Footer
        b.newline()
        b.align_center()
        for text in FOOTER_LINES:
            b.textln(text)
        b.newline()
        b.align_left()
        b.cut()
