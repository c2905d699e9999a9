"""
Order creation, lookup and admin review.

Creation reserves inventory, prices the order from ticket-type prices and
puts it in the initial status for its payment method. Card orders are
fulfilled inside the creation transaction; screenshot orders are handed to
the background verifier once committed.
"""

import logging
from collections import OrderedDict

from sqlalchemy import case, func

from ticketeer.errors import (
    EventNotFoundError,
    FulfillmentError,
    FulfillmentInProgressError,
    InvalidStateTransition,
    ValidationError,
)
from ticketeer.extensions import db
from ticketeer.models import Event, Order, OrderTicket, TicketType
from ticketeer.orders import inventory
from ticketeer.orders.statuses import (
    REVIEWABLE_STATUSES,
    OrderStatus,
    PaymentMethod,
    ReviewPriority,
    can_transition,
)
from ticketeer.utils.time import utcnow

logger = logging.getLogger(__name__)

WHATSAPP_PENDING_NOTE = "Payment details sent via WhatsApp. Awaiting organizer verification."
CARD_PAYMENT_NOTE = "Card payment captured at checkout"

APPROVE = "approve"
REJECT = "reject"
ADMIN_ACTIONS = (APPROVE, REJECT)


def _parse_payment_method(value):
    try:
        return PaymentMethod(value)
    except ValueError:
        allowed = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError(f"Invalid payment method. Must be one of: {allowed}")


def _validate_customer(customer_info):
    if not isinstance(customer_info, dict):
        raise ValidationError("customerInfo must be an object")

    missing = [f for f in ("firstName", "lastName", "email") if not customer_info.get(f)]
    if missing:
        raise ValidationError(f"Missing customer fields: {', '.join(missing)}")

    email = str(customer_info["email"]).strip()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("Invalid customer email")
    return email


def _collect_quantities(tickets):
    """Sum requested quantities per ticket type, keeping first-seen order."""
    if not isinstance(tickets, list) or not tickets:
        raise ValidationError("At least one ticket is required")

    quantities = OrderedDict()
    for line in tickets:
        if not isinstance(line, dict):
            raise ValidationError("Each ticket must be an object")
        ticket_type_id = line.get("ticketTypeId", line.get("ticket_type_id"))
        quantity = line.get("quantity")
        if ticket_type_id is None:
            raise ValidationError("Each ticket needs a ticketTypeId")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError("Ticket quantity must be a positive integer")
        try:
            ticket_type_id = int(ticket_type_id)
        except (TypeError, ValueError):
            raise ValidationError("ticketTypeId must be an integer")
        quantities[ticket_type_id] = quantities.get(ticket_type_id, 0) + quantity
    return quantities


class OrderService:

    def __init__(self, state_machine, fulfillment, dispatcher):
        self.state_machine = state_machine
        self.fulfillment = fulfillment
        self.dispatcher = dispatcher

    def create_order(
        self,
        event_id,
        customer_info,
        tickets,
        payment_method,
        payment_reference=None,
        screenshot_path=None,
        screenshot_original_name=None,
        organizer_whatsapp=None,
    ):
        method = _parse_payment_method(payment_method)
        email = _validate_customer(customer_info)
        quantities = _collect_quantities(tickets)

        if method.requires_screenshot and not screenshot_path:
            raise ValidationError("Transfer screenshot is required for this payment method")
        if method is not PaymentMethod.CARD and not payment_reference:
            raise ValidationError("paymentReference is required for this payment method")

        try:
            event_id = int(event_id)
        except (TypeError, ValueError):
            raise ValidationError("eventId must be an integer")
        event = db.session.get(Event, event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        status = method.initial_status
        order = Order(
            event_id=event.id,
            customer_first_name=customer_info["firstName"].strip(),
            customer_last_name=customer_info["lastName"].strip(),
            customer_email=email,
            customer_phone=customer_info.get("phone"),
            customer_address=customer_info.get("address"),
            payment_method=method.value,
            payment_status=status.value,
            payment_reference=payment_reference,
            transfer_screenshot=screenshot_path,
            screenshot_original_name=screenshot_original_name,
            organizer_whatsapp=organizer_whatsapp or event.organizer_whatsapp,
        )

        if status is OrderStatus.PENDING_WHATSAPP_VERIFICATION:
            order.verification_notes = WHATSAPP_PENDING_NOTE
        elif status is OrderStatus.COMPLETED:
            order.verification_notes = CARD_PAYMENT_NOTE
            order.verified_at = utcnow()
            order.fulfillment_claimed_at = order.verified_at

        try:
            total = 0
            for ticket_type_id, quantity in quantities.items():
                inventory.reserve(event.id, ticket_type_id, quantity)
                ticket_type = db.session.get(TicketType, ticket_type_id)
                order.tickets.append(
                    OrderTicket(
                        ticket_type_id=ticket_type.id,
                        name=ticket_type.name,
                        quantity=quantity,
                        price=ticket_type.price,
                    )
                )
                total += ticket_type.price * quantity
            order.total_amount = total

            db.session.add(order)
            db.session.flush()

            if status is OrderStatus.COMPLETED:
                self.fulfillment.fulfill(order, event)

            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(
            "Order created",
            extra={
                "order_id": order.id,
                "order_number": order.order_number,
                "payment_method": method.value,
                "status": status.value,
            },
        )
        self.state_machine.publish(order.id)

        if method.requires_screenshot:
            self._dispatch_verification(order.id)

        return order

    def _dispatch_verification(self, order_id):
        try:
            self.dispatcher.dispatch_verification(order_id)
        except Exception:
            # The order stays pending_verification and remains in the admin queue.
            logger.exception("Could not enqueue payment verification", extra={"order_id": order_id})

    def get_order(self, order_id):
        return self.state_machine.get(order_id)

    def verify(self, order_id, action, admin_id, notes=None):
        """Admin approve/reject of an order still awaiting a decision."""
        if action not in ADMIN_ACTIONS:
            raise ValidationError('Invalid action. Must be "approve" or "reject"')

        order = self.state_machine.get(order_id)
        current = order.status
        target = OrderStatus.COMPLETED if action == APPROVE else OrderStatus.FAILED
        self.state_machine.ensure_can_transition(current, target)

        if action == APPROVE:
            # Tickets go out first; a delivery failure leaves the order pending.
            if not self.state_machine.claim_fulfillment(order.id, expected=current):
                self._raise_conflict(order_id, target)
            try:
                self.fulfillment.fulfill(order, order.event)
            except FulfillmentError:
                self.state_machine.release_fulfillment_claim(order.id)
                raise
            applied = self.state_machine.transition(
                order.id,
                expected=current,
                target=target,
                note=notes or "Manually approved by admin",
                verified_by=admin_id,
                claimed=True,
            )
        else:
            applied = self.state_machine.transition(
                order.id,
                expected=current,
                target=target,
                note=notes or "Rejected by admin",
                verified_by=admin_id,
                on_applied=lambda: inventory.release_order(order),
            )

        if not applied:
            self._raise_conflict(order_id, target)

        logger.info(
            "Order reviewed by admin",
            extra={"order_id": order_id, "action": action, "admin_id": admin_id},
        )
        return self.state_machine.get(order_id)

    def _raise_conflict(self, order_id, target):
        status = self.state_machine.current_status(order_id)
        if can_transition(status, target):
            raise FulfillmentInProgressError(order_id)
        raise InvalidStateTransition(status, target)

    def pending_orders(self, event_id=None):
        priority_first = case((Order.review_priority == ReviewPriority.HIGH.value, 0), else_=1)
        query = (
            db.select(Order)
            .where(Order.payment_status.in_([s.value for s in REVIEWABLE_STATUSES]))
            .order_by(priority_first, Order.created_at.desc(), Order.id.desc())
        )
        if event_id is not None:
            query = query.where(Order.event_id == event_id)
        return db.session.execute(query).scalars().all()

    def stats(self, recent_limit=10):
        rows = db.session.execute(
            db.select(
                Order.payment_status,
                func.count(Order.id),
                func.coalesce(func.sum(Order.total_amount), 0),
            ).group_by(Order.payment_status)
        ).all()

        by_status = {
            status: {"count": count, "total_amount": float(total)}
            for status, count, total in rows
        }
        recent = db.session.execute(
            db.select(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(recent_limit)
        ).scalars().all()

        return {
            "by_status": by_status,
            "total_orders": sum(s["count"] for s in by_status.values()),
            "recent_orders": recent,
        }
