"""Order payment statuses, payment methods and the legal transitions between statuses."""

from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PENDING_VERIFICATION = "pending_verification"
    PENDING_WHATSAPP_VERIFICATION = "pending_whatsapp_verification"
    PENDING_AUTO_APPROVAL = "pending_auto_approval"
    PENDING_QUICK_REVIEW = "pending_quick_review"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"

    def __str__(self):
        return self.value

    @property
    def is_terminal(self):
        return self in TERMINAL_STATUSES


class PaymentMethod(str, Enum):
    CARD = "card"
    MCB_JUICE = "mcb-juice"
    MCB_JUICE_MANUAL = "mcb-juice-manual"
    MCB_JUICE_WHATSAPP = "mcb-juice-whatsapp"
    BANK_TRANSFER = "bank_transfer"
    BANK_TRANSFER_WHATSAPP = "bank-transfer-whatsapp"

    def __str__(self):
        return self.value

    @property
    def requires_screenshot(self):
        return self in SCREENSHOT_METHODS

    @property
    def initial_status(self):
        if self in SCREENSHOT_METHODS:
            return OrderStatus.PENDING_VERIFICATION
        if self in WHATSAPP_METHODS:
            return OrderStatus.PENDING_WHATSAPP_VERIFICATION
        return OrderStatus.COMPLETED


class ReviewPriority(str, Enum):
    HIGH = "high"
    STANDARD = "standard"

    def __str__(self):
        return self.value


SCREENSHOT_METHODS = frozenset({
    PaymentMethod.MCB_JUICE,
    PaymentMethod.MCB_JUICE_MANUAL,
    PaymentMethod.BANK_TRANSFER,
})

WHATSAPP_METHODS = frozenset({
    PaymentMethod.MCB_JUICE_WHATSAPP,
    PaymentMethod.BANK_TRANSFER_WHATSAPP,
})

TERMINAL_STATUSES = frozenset({
    OrderStatus.COMPLETED,
    OrderStatus.FAILED,
    OrderStatus.REFUNDED,
})

_DECIDED = frozenset({OrderStatus.COMPLETED, OrderStatus.FAILED})

TRANSITIONS = {
    # Model default only; no payment flow in this service leaves it.
    OrderStatus.PENDING: frozenset(),
    OrderStatus.PENDING_VERIFICATION: _DECIDED | {
        OrderStatus.PENDING_AUTO_APPROVAL,
        OrderStatus.PENDING_QUICK_REVIEW,
    },
    OrderStatus.PENDING_WHATSAPP_VERIFICATION: _DECIDED,
    OrderStatus.PENDING_AUTO_APPROVAL: _DECIDED,
    OrderStatus.PENDING_QUICK_REVIEW: _DECIDED,
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.FAILED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

# Statuses an admin may approve or reject from: exactly those that can still be decided.
REVIEWABLE_STATUSES = frozenset(
    status for status, targets in TRANSITIONS.items() if _DECIDED <= targets
)


def can_transition(current, target):
    return OrderStatus(target) in TRANSITIONS[OrderStatus(current)]
