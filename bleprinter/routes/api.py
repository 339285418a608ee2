"""REST API endpoints for the BLE printer."""
from flask import Blueprint, current_app, request, jsonify
from bleprinter import db
from bleprinter.models import PrintHistory
from bleprinter.printer import ErrorKind, order_summary_from_payload

api_bp = Blueprint("api", __name__)

# HTTP status per failure kind
ERROR_STATUS = {
    ErrorKind.TRANSPORT_UNAVAILABLE: 503,
    ErrorKind.NO_DEVICE_SELECTED: 404,
    ErrorKind.LINK_OPEN_FAILED: 502,
    ErrorKind.NO_WRITABLE_ENDPOINT: 502,
    ErrorKind.CHUNK_WRITE_FAILED: 502,
    ErrorKind.NOT_CONNECTED: 503,
}


def _printer():
    ext = current_app.extensions["printer"]
    return ext["runtime"], ext["service"]


def _parse_order(data):
    settings = current_app.extensions["printer"]["settings"]
    payload = data.get("order", data)
    return order_summary_from_payload(payload, default_currency=settings.default_currency)


# Printer API

@api_bp.route("/printer/status", methods=["GET"])
def printer_status():
    """Get connection status and the saved printer."""
    _, service = _printer()
    manager = service.manager
    saved_name = manager.get_saved_device_name()
    return jsonify({
        "state": manager.state.value,
        "connected": manager.is_actively_connected(),
        "device_name": manager.get_device_name(),
        "has_saved_device": saved_name is not None,
        "saved_device_name": saved_name,
        "busy": service.busy,
    })


@api_bp.route("/printer/connect", methods=["POST"])
def connect_printer():
    """Select and connect to a printer."""
    runtime, service = _printer()
    result = runtime.run(service.manager.connect())

    if not result.success:
        return jsonify(result.to_dict()), ERROR_STATUS[result.error.kind]

    return jsonify({
        "success": True,
        "device": result.value.to_dict(),
    })


@api_bp.route("/printer/disconnect", methods=["POST"])
def disconnect_printer():
    """Disconnect and forget the saved printer."""
    runtime, service = _printer()
    runtime.run(service.manager.disconnect())
    return jsonify({"success": True})


# Print API

@api_bp.route("/print", methods=["POST"])
def print_receipt():
    """Print an order receipt.

    Request body: the detailed order JSON, either bare or as
    ``{"order": {...}}``:
    {
        "orderNumber": "A-1001",
        "createdAt": "2025-01-15T12:30:00Z",
        "currency": "USD",
        "orderItems": [{"itemName": "Burger", "quantity": 2, "unitPrice": 9.5}],
        "subTotal": 19.0,
        "taxAmount": 1.5,
        "totalAmount": 20.5
    }
    """
    data = request.get_json(silent=True)
    if not data:
        return jsonify({"error": "Order payload is required"}), 400

    try:
        order = _parse_order(data)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    runtime, service = _printer()
    preview = service.composer.preview(order)
    result = runtime.run(service.print_receipt(order))

    # Log to history
    history = PrintHistory(
        order_number=order.order_number,
        rendered_preview=preview,
        device_name=service.manager.get_device_name(),
        status="success" if result.success else "failed",
    )
    if not result.success:
        history.error_kind = result.error.kind.value
        history.error_message = result.error.message
    db.session.add(history)
    db.session.commit()

    response = result.to_dict()
    response["history_id"] = history.id
    if result.success:
        response["message"] = "Receipt printed successfully"
        return jsonify(response)
    return jsonify(response), ERROR_STATUS[result.error.kind]


@api_bp.route("/preview", methods=["POST"])
def preview_receipt():
    """Preview a receipt without printing."""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({"error": "Order payload is required"}), 400

    try:
        order = _parse_order(data)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    _, service = _printer()
    return jsonify({"preview": service.composer.preview(order)})


# History API

@api_bp.route("/history", methods=["GET"])
def list_history():
    """List print history.

    Query params:
    - page: Page number (default: 1)
    - per_page: Items per page (default: 20, max: 100)
    - status: Filter by status (success/failed)
    - order_number: Filter by order number
    """
    page = request.args.get("page", 1, type=int)
    per_page = min(request.args.get("per_page", 20, type=int), 100)

    query = PrintHistory.query.order_by(PrintHistory.printed_at.desc(), PrintHistory.id.desc())

    status = request.args.get("status")
    if status:
        query = query.filter_by(status=status)

    order_number = request.args.get("order_number")
    if order_number:
        query = query.filter_by(order_number=order_number)

    pagination = query.paginate(page=page, per_page=per_page, error_out=False)

    return jsonify({
        "history": [h.to_dict() for h in pagination.items],
        "page": pagination.page,
        "pages": pagination.pages,
        "total": pagination.total,
        "has_next": pagination.has_next,
        "has_prev": pagination.has_prev
    })


@api_bp.route("/history/<int:history_id>", methods=["GET"])
def get_history(history_id):
    """Get a specific history record."""
    record = db.get_or_404(PrintHistory, history_id)
    return jsonify(record.to_dict())
