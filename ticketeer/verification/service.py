"""
Payment screenshot verification.

Runs the receipt pipeline for a submitted order and moves the order along the
tier the score lands in. Ticket fulfillment always runs before the order is
marked completed, so a completed order has always had its tickets sent.
"""

import logging
from datetime import timedelta

from ticketeer.errors import FulfillmentError
from ticketeer.extensions import db
from ticketeer.models import Order
from ticketeer.observability import metrics
from ticketeer.orders.statuses import OrderStatus, ReviewPriority
from ticketeer.receipts import verify_receipt
from ticketeer.utils.time import utcnow
from ticketeer.verification.policy import (
    DEFAULT_AUTO_APPROVE_THRESHOLD,
    DEFAULT_GRACE_PERIOD_THRESHOLD,
    Tier,
    decide_tier,
)

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD_SECONDS = 5 * 60

# The sweep leaves just-expired orders to their own scheduled task.
SWEEP_LAG = timedelta(minutes=1)


class VerificationService:

    def __init__(
        self,
        extractor,
        state_machine,
        fulfillment,
        scheduler,
        *,
        auto_threshold=DEFAULT_AUTO_APPROVE_THRESHOLD,
        grace_threshold=DEFAULT_GRACE_PERIOD_THRESHOLD,
        grace_period_seconds=DEFAULT_GRACE_PERIOD_SECONDS,
        default_recipient=None,
    ):
        self.extractor = extractor
        self.state_machine = state_machine
        self.fulfillment = fulfillment
        self.scheduler = scheduler
        self.auto_threshold = auto_threshold
        self.grace_threshold = grace_threshold
        self.grace_period_seconds = grace_period_seconds
        self.default_recipient = default_recipient

    @property
    def grace_minutes(self):
        return max(1, self.grace_period_seconds // 60)

    def process_submission(self, order_id):
        """
        Score the order's screenshot and route it.

        Returns the Tier the receipt landed in, or None when the order had
        already left pending_verification (duplicate or late task delivery).
        """
        order = self.state_machine.get(order_id)
        if order.status is not OrderStatus.PENDING_VERIFICATION:
            logger.info(
                "Order no longer awaiting verification; skipping",
                extra={"order_id": order_id, "status": order.payment_status},
            )
            return None

        event = order.event
        result = verify_receipt(
            self.extractor,
            order.transfer_screenshot,
            order.total_amount,
            order.payment_reference,
            event.juice_number or self.default_recipient,
        )
        tier = decide_tier(result, self.auto_threshold, self.grace_threshold)
        metrics.record_verification(tier.value)

        logger.info(
            "Receipt scored",
            extra={
                "order_id": order_id,
                "confidence": result.confidence,
                "tier": tier.value,
                "issues": result.issues,
            },
        )

        if tier is Tier.FAIL_OPEN:
            self._approve_now(
                order,
                f"{result.summary()} [Automatic verification failed: {result.error}]",
                "[Auto-approved despite OCR failure]",
            )
        elif tier is Tier.IMMEDIATE:
            self._approve_now(order, result.summary(), None)
        elif tier is Tier.GRACE_PERIOD:
            self._start_grace_period(order, result)
        else:
            self.state_machine.transition(
                order.id,
                expected=OrderStatus.PENDING_VERIFICATION,
                target=OrderStatus.PENDING_QUICK_REVIEW,
                note=f"{result.summary()} [Quick review needed - confidence: {result.confidence}%]",
                review_priority=ReviewPriority.HIGH,
            )

        return tier

    def _approve_now(self, order, note, approval_suffix):
        if not self.state_machine.claim_fulfillment(
            order.id, expected=OrderStatus.PENDING_VERIFICATION
        ):
            return False

        try:
            self.fulfillment.fulfill(order, order.event)
        except FulfillmentError as e:
            # Order stays pending_verification and surfaces at the top of the review queue.
            logger.error(
                "Ticket fulfillment failed during automatic approval",
                extra={"order_id": order.id, "stage": e.stage, "error": e.message},
            )
            self.state_machine.release_fulfillment_claim(
                order.id,
                note=f"{note} [Ticket fulfillment failed: {e.message} - awaiting manual review]",
                review_priority=ReviewPriority.HIGH,
            )
            return False

        if approval_suffix:
            note = f"{note} {approval_suffix}"
        return self.state_machine.transition(
            order.id,
            expected=OrderStatus.PENDING_VERIFICATION,
            target=OrderStatus.COMPLETED,
            note=note,
            claimed=True,
        )

    def _start_grace_period(self, order, result):
        auto_approval_at = utcnow() + timedelta(seconds=self.grace_period_seconds)
        applied = self.state_machine.transition(
            order.id,
            expected=OrderStatus.PENDING_VERIFICATION,
            target=OrderStatus.PENDING_AUTO_APPROVAL,
            note=(
                f"{result.summary()} [Auto-approval in {self.grace_minutes} minutes "
                f"unless corrected - confidence: {result.confidence}%]"
            ),
            auto_approval_at=auto_approval_at,
        )
        if applied:
            self.scheduler.schedule_grace_approval(order.id, self.grace_period_seconds)
        return applied

    def apply_grace_period_approval(self, order_id):
        """
        Grace-period timer body. Safe to run any number of times, concurrently
        with itself, the sweep or an admin decision: only the writer holding
        the fulfillment claim sends tickets.

        Raises FulfillmentError when tickets could not be sent so the caller
        can retry; the order stays pending_auto_approval in that case.
        """
        if not self.state_machine.claim_fulfillment(
            order_id, expected=OrderStatus.PENDING_AUTO_APPROVAL
        ):
            logger.info(
                "Grace period elapsed but order already decided; nothing to do",
                extra={"order_id": order_id},
            )
            return False

        order = self.state_machine.get(order_id)
        try:
            self.fulfillment.fulfill(order, order.event)
        except FulfillmentError:
            self.state_machine.release_fulfillment_claim(order_id)
            raise

        applied = self.state_machine.transition(
            order_id,
            expected=OrderStatus.PENDING_AUTO_APPROVAL,
            target=OrderStatus.COMPLETED,
            note=f"[Auto-approved after {self.grace_minutes}-minute grace period]",
            claimed=True,
        )
        if not applied:
            logger.warning(
                "Order was decided while grace-period tickets were being issued",
                extra={"order_id": order_id},
            )
        return applied

    def overdue_auto_approvals(self, now=None):
        now = now or utcnow() - SWEEP_LAG
        return db.session.execute(
            db.select(Order.id)
            .where(
                Order.payment_status == OrderStatus.PENDING_AUTO_APPROVAL.value,
                Order.auto_approval_at <= now,
            )
            .order_by(Order.auto_approval_at)
        ).scalars().all()

    def sweep_overdue_auto_approvals(self, now=None):
        """Approve every order whose grace period has run out. Returns how many were applied."""
        approved = 0
        for order_id in self.overdue_auto_approvals(now):
            try:
                if self.apply_grace_period_approval(order_id):
                    approved += 1
            except FulfillmentError as e:
                logger.error(
                    "Overdue auto-approval could not be fulfilled; will retry on next sweep",
                    extra={"order_id": order_id, "stage": e.stage, "error": e.message},
                )
        if approved:
            logger.info("Overdue auto-approvals applied", extra={"count": approved})
        return approved
