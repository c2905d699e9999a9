import secrets
import string
import time

from ticketeer.extensions import db
from ticketeer.orders.statuses import OrderStatus, ReviewPriority
from ticketeer.utils.time import utcnow

_ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number():
    suffix = "".join(secrets.choice(_ORDER_SUFFIX_ALPHABET) for _ in range(6))
    return f"TKT-{int(time.time() * 1000)}-{suffix}"


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(
        db.String(40), unique=True, nullable=False, index=True, default=generate_order_number
    )
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False, index=True)

    # Customer
    customer_first_name = db.Column(db.String(100), nullable=False)
    customer_last_name = db.Column(db.String(100), nullable=False)
    customer_email = db.Column(db.String(255), nullable=False, index=True)
    customer_phone = db.Column(db.String(32), nullable=True)
    customer_address = db.Column(db.String(255), nullable=True)

    # Payment
    payment_method = db.Column(db.String(30), nullable=False)
    payment_status = db.Column(
        db.String(40), nullable=False, default=OrderStatus.PENDING.value, index=True
    )
    total_amount = db.Column(db.Numeric(10, 2), nullable=False)
    payment_reference = db.Column(db.String(64), nullable=True, index=True)
    transfer_screenshot = db.Column(db.String(500), nullable=True)
    screenshot_original_name = db.Column(db.String(255), nullable=True)

    # Verification audit trail
    verification_notes = db.Column(db.Text, nullable=True)
    verified_by = db.Column(db.String(64), nullable=True)
    verified_at = db.Column(db.DateTime, nullable=True)
    auto_approval_at = db.Column(db.DateTime, nullable=True, index=True)
    # Set by whoever is issuing tickets; only that writer may complete the order.
    fulfillment_claimed_at = db.Column(db.DateTime, nullable=True)
    review_priority = db.Column(
        db.String(10), nullable=False, default=ReviewPriority.STANDARD.value
    )
    organizer_whatsapp = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    event = db.relationship("Event", lazy="joined")
    tickets = db.relationship(
        "OrderTicket",
        backref="order",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="OrderTicket.id",
    )

    @property
    def status(self):
        return OrderStatus(self.payment_status)

    @property
    def customer_name(self):
        return f"{self.customer_first_name} {self.customer_last_name}"

    @property
    def note_lines(self):
        return (self.verification_notes or "").splitlines()

    def to_dict(self):
        return {
            "id": self.id,
            "order_number": self.order_number,
            "event_id": self.event_id,
            "customer": {
                "first_name": self.customer_first_name,
                "last_name": self.customer_last_name,
                "email": self.customer_email,
                "phone": self.customer_phone,
            },
            "tickets": [t.to_dict() for t in self.tickets],
            "total_amount": float(self.total_amount),
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "payment_reference": self.payment_reference,
            "has_screenshot": bool(self.transfer_screenshot),
            "verification_notes": self.verification_notes,
            "verified_by": self.verified_by,
            "verified_at": self.verified_at.isoformat() if self.verified_at else None,
            "auto_approval_at": self.auto_approval_at.isoformat() if self.auto_approval_at else None,
            "review_priority": self.review_priority,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Order {self.order_number} {self.payment_status}>"


class OrderTicket(db.Model):
    __tablename__ = "order_tickets"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(
        db.Integer, db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ticket_type_id = db.Column(db.Integer, db.ForeignKey("ticket_types.id"), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)

    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_order_tickets_quantity_positive"),
    )

    @property
    def subtotal(self):
        return self.price * self.quantity

    def to_dict(self):
        return {
            "ticket_type_id": self.ticket_type_id,
            "name": self.name,
            "quantity": self.quantity,
            "price": float(self.price),
            "subtotal": float(self.subtotal),
        }
