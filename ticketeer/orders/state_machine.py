"""
Authoritative order payment-status state machine.

This module is the ONLY place where an order's payment_status changes.
Every write is a conditional UPDATE guarded on the status the caller last
observed, so a delayed auto-approval and an admin decision racing on the same
order can never both apply: the loser sees a zero row count and backs off.

Issuing tickets is guarded the same way. A writer first claims the order
(status still as expected, no live claim), sends tickets, then completes it.
While a claim is held every other transition on the order is refused.
"""

import logging
from datetime import timedelta

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from ticketeer.errors import InvalidStateTransition, OrderNotFoundError
from ticketeer.extensions import db
from ticketeer.models import Order
from ticketeer.observability import metrics
from ticketeer.orders.statuses import OrderStatus, can_transition
from ticketeer.utils.time import utcnow

logger = logging.getLogger(__name__)

# A claim older than this belongs to a writer that died mid-delivery.
DEFAULT_CLAIM_TIMEOUT = timedelta(minutes=15)


def _appended_notes(note):
    return func.coalesce(Order.verification_notes + "\n", "") + note


class OrderStateMachine:

    def __init__(self, publisher=None, claim_timeout=DEFAULT_CLAIM_TIMEOUT):
        self.publisher = publisher
        self.claim_timeout = claim_timeout

    def _unclaimed(self, now):
        return or_(
            Order.fulfillment_claimed_at.is_(None),
            Order.fulfillment_claimed_at < now - self.claim_timeout,
        )

    @staticmethod
    def get(order_id):
        order = db.session.get(Order, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    @staticmethod
    def current_status(order_id):
        """Re-read the persisted status, bypassing any cached instance."""
        status = db.session.execute(
            db.select(Order.payment_status).where(Order.id == order_id)
        ).scalar_one_or_none()
        if status is None:
            raise OrderNotFoundError(order_id)
        return OrderStatus(status)

    @staticmethod
    def ensure_can_transition(current, target):
        if not can_transition(current, target):
            raise InvalidStateTransition(OrderStatus(current), OrderStatus(target))

    def transition(
        self,
        order_id,
        *,
        expected,
        target,
        note,
        verified_by=None,
        auto_approval_at=None,
        review_priority=None,
        on_applied=None,
        claimed=False,
    ):
        """
        Move an order from ``expected`` to ``target`` if it is still in ``expected``.

        ``on_applied`` runs inside the same transaction, only when the update
        matched, so dependent writes (inventory restores) commit or roll back
        together with the status change.

        ``claimed=True`` is for the writer holding the fulfillment claim;
        every other caller is refused while a live claim exists.

        Returns True when this call applied the transition, False when the
        order had already left ``expected`` or is being fulfilled elsewhere.
        """
        expected = OrderStatus(expected)
        target = OrderStatus(target)
        self.ensure_can_transition(expected, target)

        if target is OrderStatus.PENDING_AUTO_APPROVAL and auto_approval_at is None:
            raise ValueError("auto_approval_at is required when entering pending_auto_approval")

        now = utcnow()
        values = {
            Order.payment_status: target.value,
            Order.verification_notes: _appended_notes(note),
            Order.auto_approval_at: auto_approval_at,
            Order.updated_at: now,
        }
        if target.is_terminal:
            values[Order.verified_at] = now
            values[Order.verified_by] = verified_by
        if review_priority is not None:
            values[Order.review_priority] = str(review_priority)

        try:
            matched = (
                db.session.query(Order)
                .filter(
                    Order.id == order_id,
                    Order.payment_status == expected.value,
                    Order.fulfillment_claimed_at.isnot(None) if claimed else self._unclaimed(now),
                )
                .update(values, synchronize_session=False)
            )
            if matched and on_applied is not None:
                on_applied()
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        if not matched:
            logger.info(
                "Order status changed underneath transition; skipping",
                extra={"order_id": order_id, "expected": expected.value, "target": target.value},
            )
            return False

        metrics.record_transition(expected.value, target.value)
        logger.info(
            "Order transitioned",
            extra={"order_id": order_id, "from_status": expected.value, "to_status": target.value},
        )
        self.publish(order_id)
        return True

    def claim_fulfillment(self, order_id, *, expected):
        """
        Take the right to issue tickets for an order still in ``expected``.

        At most one writer holds a live claim. Returns False when the order
        has moved on or someone else is already fulfilling it.
        """
        expected = OrderStatus(expected)
        now = utcnow()
        try:
            matched = (
                db.session.query(Order)
                .filter(
                    Order.id == order_id,
                    Order.payment_status == expected.value,
                    self._unclaimed(now),
                )
                .update({Order.fulfillment_claimed_at: now}, synchronize_session=False)
            )
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

        if not matched:
            logger.info(
                "Order already decided or being fulfilled; not claiming",
                extra={"order_id": order_id, "expected": expected.value},
            )
        return bool(matched)

    def release_fulfillment_claim(self, order_id, *, note=None, review_priority=None):
        """Give up a claim after failed delivery, optionally recording why."""
        values = {Order.fulfillment_claimed_at: None, Order.updated_at: utcnow()}
        if note is not None:
            values[Order.verification_notes] = _appended_notes(note)
        if review_priority is not None:
            values[Order.review_priority] = str(review_priority)

        try:
            db.session.query(Order).filter(
                Order.id == order_id,
                Order.payment_status != OrderStatus.COMPLETED.value,
            ).update(values, synchronize_session=False)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

        if note is not None:
            self.publish(order_id)

    def publish(self, order_id):
        if self.publisher is None:
            return
        order = db.session.get(Order, order_id)
        payload = {
            "order_id": order.id,
            "order_number": order.order_number,
            "payment_status": order.payment_status,
            "review_priority": order.review_priority,
        }
        self.publisher.publish(f"orders:{order.order_number}", payload)
        self.publisher.publish("admin:orders", payload)
