# ticketeer/routes/admin.py
from flask import Blueprint, jsonify, request, send_file

from ticketeer.errors import NotFoundError, ValidationError
from ticketeer.pipeline import get_pipeline
from ticketeer.security import admin_required, current_admin_id

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.route("/orders/pending", methods=["GET"])
@admin_required
def pending_orders():
    """Orders awaiting a decision, high priority first"""
    event_id = request.args.get("eventId", type=int)
    orders = get_pipeline().orders.pending_orders(event_id=event_id)

    return jsonify({
        "orders": [order.to_dict() for order in orders],
        "count": len(orders),
    })


@admin_bp.route("/orders/stats", methods=["GET"])
@admin_required
def order_stats():
    stats = get_pipeline().orders.stats()
    return jsonify({
        "byStatus": stats["by_status"],
        "totalOrders": stats["total_orders"],
        "recentOrders": [order.to_dict() for order in stats["recent_orders"]],
    })


@admin_bp.route("/orders/<int:order_id>/screenshot", methods=["GET"])
@admin_required
def order_screenshot(order_id):
    pipeline = get_pipeline()
    order = pipeline.orders.get_order(order_id)

    path = pipeline.storage.resolve(order.transfer_screenshot)
    if path is None:
        raise NotFoundError("Screenshot not found", payload={"order_id": order_id})

    return send_file(path, download_name=order.screenshot_original_name or path.name)


@admin_bp.route("/orders/<int:order_id>/verify", methods=["POST"])
@admin_required
def verify_order(order_id):
    """Approve or reject a pending payment"""
    data = request.get_json(silent=True) or {}
    action = data.get("action")
    if not action:
        raise ValidationError('Missing action. Must be "approve" or "reject"')

    order = get_pipeline().orders.verify(
        order_id,
        action,
        admin_id=current_admin_id(),
        notes=data.get("notes"),
    )

    return jsonify({
        "success": True,
        "order": order.to_dict(),
        "message": f"Order {'approved' if action == 'approve' else 'rejected'} successfully",
    })
