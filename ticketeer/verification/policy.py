"""Routing of a scored receipt to a resolution tier.

Routing leans toward approval: an OCR outage approves, anything scoring at
least the auto-approve threshold approves now, and only the weakest
receipts wait for a human.
"""

from enum import Enum

from ticketeer.orders.statuses import OrderStatus

DEFAULT_AUTO_APPROVE_THRESHOLD = 40
DEFAULT_GRACE_PERIOD_THRESHOLD = 20


class Tier(str, Enum):
    FAIL_OPEN = "fail_open"
    IMMEDIATE = "immediate"
    GRACE_PERIOD = "grace_period"
    QUICK_REVIEW = "quick_review"

    def __str__(self):
        return self.value

    @property
    def target_status(self):
        return _TARGET_STATUS[self]


_TARGET_STATUS = {
    Tier.FAIL_OPEN: OrderStatus.COMPLETED,
    Tier.IMMEDIATE: OrderStatus.COMPLETED,
    Tier.GRACE_PERIOD: OrderStatus.PENDING_AUTO_APPROVAL,
    Tier.QUICK_REVIEW: OrderStatus.PENDING_QUICK_REVIEW,
}


def decide_tier(
    result,
    auto_threshold=DEFAULT_AUTO_APPROVE_THRESHOLD,
    grace_threshold=DEFAULT_GRACE_PERIOD_THRESHOLD,
):
    if result.error is not None:
        return Tier.FAIL_OPEN
    if result.confidence >= auto_threshold and result.is_valid:
        return Tier.IMMEDIATE
    if result.confidence >= grace_threshold:
        return Tier.GRACE_PERIOD
    return Tier.QUICK_REVIEW
