"""Tests for order payload parsing and default formatting."""

import math

import pytest

from bleprinter.printer.composer import ReceiptComposer
from bleprinter.printer.currency import format_currency
from bleprinter.printer.order import (
    Customization,
    LineItem,
    Modifier,
    format_receipt_datetime,
    order_summary_from_payload,
)


@pytest.fixture
def payload():
    return {
        "orderNumber": "A-1001",
        "createdAt": "2025-01-15T12:30:00Z",
        "currency": "PKR",
        "branchName": "Main Street",
        "orderType": "Dine In",
        "orderItems": [
            {
                "itemName": "Burger",
                "variantName": "Large",
                "quantity": 1,
                "unitPrice": 12.0,
                "totalPrice": 15.0,
                "orderItemModifiers": [{"modifierName": "Cheese", "price": 1.5, "quantity": 2}],
                "orderItemCustomizations": [{"customizationName": "Bun", "optionName": "Brioche"}],
            },
        ],
        "orderPackages": [
            {"packageName": "Family Deal", "quantity": 2, "totalPrice": 30.0},
        ],
        "subTotal": 45.0,
        "taxAmount": 4.5,
        "deliveryCharges": 2.0,
        "totalAmount": 51.5,
        "allergens": ["Peanuts"],
        "specialInstruction": "Ring the bell",
    }


class TestOrderSummaryFromPayload:

    def test_camel_case_payload(self, payload):
        order = order_summary_from_payload(payload)

        assert order.order_number == "A-1001"
        assert order.date == "Jan 15, 2025 12:30 PM"
        assert order.currency == "PKR"
        assert order.branch_name == "Main Street"
        assert order.order_type == "Dine In"
        assert order.subtotal == 45.0
        assert order.tax == 4.5
        assert order.delivery_charges == 2.0
        assert order.total == 51.5
        assert order.allergens == ("Peanuts",)
        assert order.special_instruction == "Ring the bell"

    def test_items_and_packages(self, payload):
        burger, deal = order_summary_from_payload(payload).items

        assert burger == LineItem(
            name="Burger (Large)",
            quantity=1,
            unit_price=12.0,
            modifiers=(Modifier("Cheese", 1.5, 2),),
            customizations=(Customization("Bun", "Brioche"),),
        )
        assert deal.name == "[DEAL] Family Deal"
        assert deal.quantity == 2
        assert deal.unit_price == 15.0

    def test_snake_case_payload(self):
        order = order_summary_from_payload({
            "order_number": 7,
            "date": "today",
            "total": "9.50",
            "items": [{"name": "Tea", "quantity": 2, "unit_price": 4.75}],
        })

        assert order.order_number == "7"
        assert order.date == "today"
        assert order.total == 9.5
        assert order.items == (LineItem("Tea", 2, 4.75),)

    def test_default_currency(self, payload):
        del payload["currency"]
        assert order_summary_from_payload(payload, default_currency="EUR").currency == "EUR"

    def test_subtotal_computed_when_missing(self, payload):
        del payload["subTotal"]
        assert order_summary_from_payload(payload).subtotal == 45.0

    @pytest.mark.parametrize("missing", ["orderNumber", "totalAmount"])
    def test_required_fields(self, payload, missing):
        del payload[missing]
        with pytest.raises(ValueError):
            order_summary_from_payload(payload)

    def test_malformed_item_raises_value_error(self, payload):
        payload["orderItems"] = ["not an item"]
        with pytest.raises(ValueError):
            order_summary_from_payload(payload)

    def test_free_text_fields_are_coerced_to_strings(self, payload):
        payload.update(specialInstruction=5, branchName=7, locationName=12,
                       orderType=3, currency=None)
        order = order_summary_from_payload(payload)

        assert order.special_instruction == "5"
        assert order.branch_name == "7"
        assert order.location_name == "12"
        assert order.order_type == "3"
        assert order.currency == "USD"

    def test_numeric_fields_render(self, payload):
        payload.update(specialInstruction=5, branchName=7)
        order = order_summary_from_payload(payload)
        composer = ReceiptComposer()

        assert b"7\n" in composer.compose(order)
        assert "SPECIAL INSTRUCTIONS:" in composer.preview(order)

    def test_non_object_payload(self):
        with pytest.raises(ValueError):
            order_summary_from_payload(["A-1001"])


class TestFormatReceiptDatetime:

    @pytest.mark.parametrize("value,expected", [
        ("2025-01-15T12:30:00Z", "Jan 15, 2025 12:30 PM"),
        ("2025-01-05T15:07:00+00:00", "Jan 5, 2025 3:07 PM"),
        ("2025-03-01T00:05:00", "Mar 1, 2025 12:05 AM"),
    ])
    def test_formats_iso_timestamps(self, value, expected):
        assert format_receipt_datetime(value) == expected

    def test_unparseable_value_is_returned(self):
        assert format_receipt_datetime("yesterday") == "yesterday"

    def test_empty(self):
        assert format_receipt_datetime(None) == ""


class TestFormatCurrency:

    @pytest.mark.parametrize("code,expected", [
        ("USD", "$12.50"),
        ("EUR", "€12.50"),
        ("GBP", "£12.50"),
        ("usd", "$12.50"),
        ("XYZ", "$12.50"),
    ])
    def test_symbols(self, code, expected):
        assert format_currency(12.5, code) == expected

    @pytest.mark.parametrize("code,expected", [
        ("GBP", "£12.50"),
        ("EUR", "EUR 12.50"),
        ("INR", "INR 12.50"),
    ])
    def test_unprintable_symbol_falls_back_to_code(self, code, expected):
        assert format_currency(12.5, code, encoding="cp437") == expected

    def test_utf8_keeps_symbols(self):
        assert format_currency(12.5, "EUR", encoding="utf-8") == "€12.50"

    def test_missing_amount(self):
        assert format_currency(None) == "$0.00"
        assert format_currency(math.nan) == "$0.00"
