# ticketeer/routes/orders.py
import json

from flask import Blueprint, jsonify, request

from ticketeer.errors import ValidationError
from ticketeer.orders.statuses import PaymentMethod
from ticketeer.pipeline import get_pipeline

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")

SCREENSHOT_CREATED_MESSAGE = "Order created successfully. Payment verification in progress."


def _json_field(name):
    raw = request.form.get(name)
    if raw is None:
        raise ValidationError(f"Missing required field: {name}")
    try:
        return json.loads(raw)
    except ValueError:
        raise ValidationError(f"{name} must be valid JSON")


@orders_bp.route("", methods=["POST"])
def create_order():
    """Card and WhatsApp-relay orders."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    missing = [f for f in ("eventId", "customerInfo", "tickets") if not data.get(f)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    method = data.get("paymentMethod", PaymentMethod.CARD.value)
    if method in {m.value for m in PaymentMethod} and PaymentMethod(method).requires_screenshot:
        raise ValidationError("Screenshot payments must be submitted to /api/orders/screenshot")

    order = get_pipeline().orders.create_order(
        event_id=data["eventId"],
        customer_info=data["customerInfo"],
        tickets=data["tickets"],
        payment_method=method,
        payment_reference=data.get("paymentReference"),
        organizer_whatsapp=data.get("organizerWhatsApp"),
    )

    return jsonify({
        "orderId": order.id,
        "orderNumber": order.order_number,
        "status": order.payment_status,
        "totalAmount": float(order.total_amount),
        "message": order.verification_notes,
    }), 201


@orders_bp.route("/screenshot", methods=["POST"])
def create_screenshot_order():
    """Manual transfer with proof of payment; verified in the background."""
    pipeline = get_pipeline()

    event_id = request.form.get("eventId", type=int)
    if event_id is None:
        raise ValidationError("Missing required field: eventId")
    customer_info = _json_field("customerInfo")
    tickets = _json_field("tickets")

    method = request.form.get("paymentMethod") or PaymentMethod.MCB_JUICE.value
    if method not in {m.value for m in PaymentMethod} or not PaymentMethod(method).requires_screenshot:
        raise ValidationError("Only screenshot payment methods may be submitted with a transfer screenshot")

    path, original_name = pipeline.storage.save(request.files.get("transferScreenshot"))
    try:
        order = pipeline.orders.create_order(
            event_id=event_id,
            customer_info=customer_info,
            tickets=tickets,
            payment_method=method,
            payment_reference=request.form.get("paymentReference"),
            screenshot_path=path,
            screenshot_original_name=original_name,
        )
    except Exception:
        pipeline.storage.remove(path)
        raise

    return jsonify({
        "orderId": order.id,
        "orderNumber": order.order_number,
        "status": order.payment_status,
        "message": SCREENSHOT_CREATED_MESSAGE,
    }), 201


@orders_bp.route("/<int:order_id>", methods=["GET"])
def get_order(order_id):
    order = get_pipeline().orders.get_order(order_id)
    payload = order.to_dict()
    payload["event"] = order.event.to_dict() if order.event else None
    return jsonify(payload)
