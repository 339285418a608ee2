"""Order summary value objects consumed by the receipt composer."""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple


@dataclass(frozen=True)
class Modifier:
    name: str
    price: float = 0.0
    quantity: int = 1


@dataclass(frozen=True)
class Customization:
    name: str
    option: str


@dataclass(frozen=True)
class LineItem:
    name: str
    quantity: int
    unit_price: float
    modifiers: Tuple[Modifier, ...] = ()
    customizations: Tuple[Customization, ...] = ()


@dataclass(frozen=True)
class OrderSummary:
    """A fully resolved order, ready to print.

    Totals are supplied by the caller; nothing here recomputes them.
    """
    order_number: str
    date: str
    total: float
    subtotal: float = 0.0
    currency: str = "USD"
    items: Tuple[LineItem, ...] = ()
    delivery_charges: float = 0.0
    service_charges: float = 0.0
    tax: float = 0.0
    tip: float = 0.0
    discount: float = 0.0
    allergens: Tuple[str, ...] = ()
    special_instruction: Optional[str] = None
    branch_name: Optional[str] = None
    location_name: Optional[str] = None
    order_type: Optional[str] = None


def format_receipt_datetime(value: Optional[str]) -> str:
    """Format an ISO timestamp as ``Jan 5, 2025 3:07 PM``.

    Timestamps without an offset are taken as UTC. Unparseable values are
    returned unchanged.
    """
    if not value:
        return ""
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return text
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    hour = parsed.hour % 12 or 12
    return f"{parsed:%b} {parsed.day}, {parsed.year} {hour}:{parsed:%M} {parsed:%p}"


def _amount(value) -> float:
    if value is None or value == "":
        return 0.0
    return float(value)


def _text(value) -> Optional[str]:
    return None if value is None else str(value)


def _item_from_payload(item: dict) -> LineItem:
    name = str(item.get("itemName") or item.get("name") or "")
    variant = item.get("variantName")
    if variant:
        name = f"{name} ({variant})"

    modifiers = tuple(
        Modifier(
            name=m.get("modifierName") or m.get("name") or "",
            price=_amount(m.get("price")),
            quantity=int(m.get("quantity") or 1),
        )
        for m in item.get("orderItemModifiers") or item.get("modifiers") or []
    )
    customizations = tuple(
        Customization(
            name=c.get("customizationName") or c.get("name") or "",
            option=c.get("optionName") or c.get("option") or "",
        )
        for c in item.get("orderItemCustomizations") or item.get("customizations") or []
    )
    return LineItem(
        name=name,
        quantity=int(item.get("quantity") or 0),
        unit_price=_amount(item.get("unitPrice", item.get("unit_price", item.get("price")))),
        modifiers=modifiers,
        customizations=customizations,
    )


def _package_from_payload(package: dict) -> LineItem:
    quantity = int(package.get("quantity") or 0)
    total_price = _amount(package.get("totalPrice"))
    return LineItem(
        name=f"[DEAL] {package.get('packageName', '')}",
        quantity=quantity,
        unit_price=total_price / (quantity or 1),
    )


def order_summary_from_payload(data: dict, default_currency: str = "USD") -> OrderSummary:
    """Build an OrderSummary from the order backend's detailed-order JSON.

    Accepts both the camelCase payload (``orderNumber``, ``orderItems``...)
    and snake_case field names matching OrderSummary.

    Raises:
        ValueError: if the order number or total is missing or a field has
            the wrong type.
    """
    if not isinstance(data, dict):
        raise ValueError("Order payload must be an object")

    order_number = data.get("orderNumber", data.get("order_number"))
    if order_number in (None, ""):
        raise ValueError("orderNumber is required")

    total = data.get("totalAmount", data.get("total"))
    if total is None:
        raise ValueError("totalAmount is required")

    try:
        return _build_summary(data, str(order_number), total, default_currency)
    except (AttributeError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid order payload: {e}") from e


def _build_summary(data: dict, order_number: str, total, default_currency: str) -> OrderSummary:
    raw_items = data.get("orderItems", data.get("items")) or []
    raw_packages = data.get("orderPackages") or []
    items = tuple(_item_from_payload(i) for i in raw_items)
    items += tuple(_package_from_payload(p) for p in raw_packages)

    subtotal = data.get("subTotal", data.get("subtotal"))
    if subtotal is None:
        subtotal = (
            sum(_amount(i.get("totalPrice")) for i in raw_items)
            + sum(_amount(p.get("totalPrice")) for p in raw_packages)
        )

    date = _text(data.get("date"))
    if date is None:
        date = format_receipt_datetime(_text(data.get("createdAt") or data.get("created_at")))

    return OrderSummary(
        order_number=order_number,
        date=date,
        total=_amount(total),
        subtotal=_amount(subtotal),
        currency=_text(data.get("currency")) or default_currency,
        items=items,
        delivery_charges=_amount(data.get("deliveryCharges", data.get("delivery_charges"))),
        service_charges=_amount(data.get("serviceCharges", data.get("service_charges"))),
        tax=_amount(data.get("taxAmount", data.get("tax"))),
        tip=_amount(data.get("tipAmount", data.get("tip"))),
        discount=_amount(data.get("discountAmount", data.get("discount"))),
        allergens=tuple(str(a) for a in data.get("allergens") or ()),
        special_instruction=_text(data.get("specialInstruction", data.get("special_instruction"))),
        branch_name=_text(data.get("branchName", data.get("branch_name"))),
        location_name=_text(data.get("locationName", data.get("location_name"))),
        order_type=_text(data.get("orderType", data.get("order_type"))),
    )
