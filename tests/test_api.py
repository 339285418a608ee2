"""Tests for the REST API."""

import warnings

import pytest
from sqlalchemy.exc import LegacyAPIWarning

from bleprinter import create_app
from bleprinter.printer import ReceiptComposer, order_summary_from_payload
from bleprinter.printer.storage import PrinterHandle, SettingsDeviceStore

from conftest import FakeLink, FakeSelector, profile_a_service

ORDER = {
    "orderNumber": "A-1001",
    "createdAt": "2025-01-15T12:30:00Z",
    "branchName": "Main Street",
    "orderItems": [
        {"itemName": "Burger", "quantity": 1, "unitPrice": 12.0},
        {"itemName": "Fries", "quantity": 2, "unitPrice": 4.0},
    ],
    "subTotal": 20.0,
    "taxAmount": 2.0,
    "totalAmount": 22.0,
}


@pytest.fixture
def link():
    return FakeLink(services=[profile_a_service()])


@pytest.fixture
def app(link):
    app = create_app("testing", selector=FakeSelector(link))
    yield app
    app.extensions["printer"]["runtime"].stop()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def connected(client):
    response = client.post("/api/printer/connect")
    assert response.status_code == 200
    return response


class TestPrinterApi:

    def test_status_before_connect(self, client):
        data = client.get("/api/printer/status").get_json()

        assert data["connected"] is False
        assert data["state"] == "disconnected"
        assert data["has_saved_device"] is False
        assert data["busy"] is False

    def test_connect(self, client, connected, link):
        assert connected.get_json() == {
            "success": True,
            "device": {"id": link.address, "name": "PT-210"},
        }

        data = client.get("/api/printer/status").get_json()
        assert data["connected"] is True
        assert data["state"] == "connected"
        assert data["device_name"] == "PT-210"
        assert data["saved_device_name"] == "PT-210"

    def test_connect_failure(self, client, link):
        link.open_failures = 1
        response = client.post("/api/printer/connect")

        assert response.status_code == 502
        assert response.get_json()["error_kind"] == "link_open_failed"

    def test_disconnect_forgets_device(self, client, connected):
        response = client.post("/api/printer/disconnect")
        assert response.get_json() == {"success": True}

        data = client.get("/api/printer/status").get_json()
        assert data["connected"] is False
        assert data["has_saved_device"] is False


class TestPrintApi:

    def test_print(self, client, connected, link):
        response = client.post("/api/print", json=ORDER)

        assert response.status_code == 200
        data = response.get_json()
        assert data["success"] is True
        assert data["message"] == "Receipt printed successfully"
        expected = ReceiptComposer().compose(order_summary_from_payload(ORDER))
        assert link.written == expected

    def test_print_wrapped_order(self, client, connected):
        response = client.post("/api/print", json={"order": ORDER})
        assert response.status_code == 200

    def test_print_without_connection(self, client, link):
        response = client.post("/api/print", json=ORDER)

        assert response.status_code == 503
        data = response.get_json()
        assert data["success"] is False
        assert data["error_kind"] == "not_connected"
        assert link.writes == []

    def test_print_after_disconnect(self, client, connected):
        client.post("/api/printer/disconnect")
        response = client.post("/api/print", json=ORDER)
        assert response.status_code == 503

    @pytest.mark.parametrize("body", [
        None,
        {},
        {"orderNumber": "A-1"},
        {**ORDER, "orderItems": "Burger"},
    ])
    def test_invalid_payload(self, client, body):
        response = client.post("/api/print", json=body)
        assert response.status_code == 400
        assert "error" in response.get_json()

    def test_preview(self, client):
        response = client.post("/api/preview", json=ORDER)

        preview = response.get_json()["preview"]
        assert "Order: A-1001" in preview
        assert "TOTAL:" in preview
        assert "$22.00" in preview

    def test_numeric_free_text_fields(self, client, connected, link):
        order = {**ORDER, "branchName": 7, "specialInstruction": 5}

        preview = client.post("/api/preview", json=order).get_json()["preview"]
        assert "SPECIAL INSTRUCTIONS:" in preview

        response = client.post("/api/print", json=order)
        assert response.status_code == 200
        assert b"7\n" in link.written


class TestHistoryApi:

    def test_history_records_success_and_failure(self, client, link):
        failed = client.post("/api/print", json=ORDER).get_json()
        client.post("/api/printer/connect")
        printed = client.post("/api/print", json=ORDER).get_json()

        data = client.get("/api/history").get_json()
        assert data["total"] == 2
        statuses = {h["id"]: h["status"] for h in data["history"]}
        assert statuses == {failed["history_id"]: "failed", printed["history_id"]: "success"}

        record = client.get(f"/api/history/{failed['history_id']}").get_json()
        assert record["error_kind"] == "not_connected"
        assert "Order: A-1001" in record["rendered_preview"]

    def test_history_filter(self, client, connected):
        client.post("/api/print", json=ORDER)
        client.post("/api/print", json={**ORDER, "orderNumber": "B-2"})

        data = client.get("/api/history?order_number=B-2").get_json()
        assert [h["order_number"] for h in data["history"]] == ["B-2"]

        data = client.get("/api/history?status=failed").get_json()
        assert data["total"] == 0

    def test_missing_history_record(self, client):
        assert client.get("/api/history/999").status_code == 404


class TestSettingsDeviceStore:

    def test_round_trip(self, app):
        store = SettingsDeviceStore(app)

        with warnings.catch_warnings():
            warnings.simplefilter("error", LegacyAPIWarning)
            assert store.load() is None

            store.save(PrinterHandle("AA:BB", "Kitchen"))
            assert store.load() == PrinterHandle("AA:BB", "Kitchen")

            store.save(PrinterHandle("CC:DD", "Bar"))
            assert store.load() == PrinterHandle("CC:DD", "Bar")

            store.clear()
            assert store.load() is None
